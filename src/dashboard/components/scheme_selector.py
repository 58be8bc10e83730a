"""Scheme search panel and single-selection into the form draft."""

from __future__ import annotations

from typing import Protocol

import requests
import streamlit as st

from src.dashboard.submission import SubmissionController
from src.models.calculation import SchemeRef
from src.utils.logging import get_logger

LOGGER = get_logger(__name__)

SEARCH_FAILED_MESSAGE = 'Could not load schemes. Try searching again.'


class SchemeLookup(Protocol):
    def search_schemes(self, term: str = '') -> list[SchemeRef]: ...


class SchemeSelector:
    """Search/select rules over the shared UI state.

    Selection goes through the controller's `update_field`, so picking a
    scheme invalidates a displayed result like any other edit.
    """

    def __init__(self, lookup: SchemeLookup, controller: SubmissionController):
        self.lookup = lookup
        self.controller = controller

    @property
    def state(self):
        return self.controller.state

    def search(self, term: str | None = None) -> list[SchemeRef]:
        term = self.state.search_term if term is None else term
        try:
            schemes = self.lookup.search_schemes(term)
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning('Scheme search for %r failed: %s', term, exc)
            self.state.search_error = SEARCH_FAILED_MESSAGE
            return self.state.scheme_list
        self.state.search_error = None
        self.state.scheme_list = schemes
        return schemes

    def set_search_term(self, term: str) -> None:
        self.state.search_term = term or ''
        if self.state.schemes_panel_open:
            self.search()

    def open_panel(self) -> None:
        self.state.schemes_panel_open = True
        self.search()

    def close_panel(self) -> None:
        self.state.schemes_panel_open = False

    def select(self, ref: SchemeRef) -> None:
        self.controller.update_field('scheme_code', ref.code)
        self.state.search_term = ref.name
        self.state.schemes_panel_open = False

    @property
    def visible_schemes(self) -> list[SchemeRef]:
        if not self.state.schemes_panel_open:
            return []
        return self.state.scheme_list


def render_scheme_selector(selector: SchemeSelector, key_prefix: str = 'scheme') -> None:
    """Render the search box, trigger button and clickable result list."""
    st.subheader('Find Your Scheme')
    term_key = f'{key_prefix}_search_term'
    if st.session_state.get(term_key) != selector.state.search_term:
        st.session_state[term_key] = selector.state.search_term

    c1, c2 = st.columns([4, 1])
    with c1:
        st.text_input(
            'Search for mutual fund schemes',
            key=term_key,
            on_change=lambda: selector.set_search_term(st.session_state[term_key]),
            label_visibility='collapsed',
            placeholder='Search for mutual fund schemes...',
        )
    with c2:
        st.button('Search Schemes', key=f'{key_prefix}_search_button', on_click=selector.open_panel)

    if selector.state.search_error:
        st.caption(selector.state.search_error)

    schemes = selector.visible_schemes
    if not schemes:
        return
    with st.container(height=320):
        for ref in schemes:
            st.button(
                f'{ref.code}  {ref.name}',
                key=f'{key_prefix}_pick_{ref.code}',
                on_click=selector.select,
                args=(ref,),
                use_container_width=True,
            )
