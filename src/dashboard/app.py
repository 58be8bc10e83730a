"""Streamlit app entrypoint for the mutual fund returns calculator."""

from __future__ import annotations

from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import streamlit as st

from src.dashboard.components.controls import render_calculator_form
from src.dashboard.components.scheme_selector import SchemeSelector, render_scheme_selector
from src.dashboard.components.summary_cards import render_summary_cards
from src.dashboard.plots.series_plots import render_series_charts
from src.dashboard.submission import SubmissionController
from src.data.api_client import ReturnsApiClient
from src.utils.config import Settings, load_settings
from src.utils.logging import get_logger

LOGGER = get_logger(__name__)

CONTROLLER_KEY = 'submission_controller'
ERROR_POLL_SECONDS = 1.0


@st.cache_resource
def _settings() -> Settings:
    settings = load_settings()
    LOGGER.info('Using calculation service at %s', settings.api_base_url)
    return settings


@st.cache_resource
def _client() -> ReturnsApiClient:
    return ReturnsApiClient(_settings())


def _session_controller(client: ReturnsApiClient, settings: Settings) -> SubmissionController:
    controller = st.session_state.get(CONTROLLER_KEY)
    if controller is None:
        controller = SubmissionController(client, clear_after_seconds=settings.rate_limit_clear_seconds)
        st.session_state[CONTROLLER_KEY] = controller
    return controller


@st.fragment(run_every=ERROR_POLL_SECONDS)
def _render_error_banner(controller: SubmissionController) -> None:
    if controller.poll_timers():
        st.rerun()
    error = controller.error
    if error is None:
        return
    st.error(error.message)
    remaining = controller.seconds_until_clear()
    if remaining is not None:
        st.caption(f'This message clears in {remaining:.0f}s.')


def main() -> None:
    st.set_page_config(page_title='Mutual Fund Returns Calculator', layout='wide')
    st.title('Indian Mutual Fund Returns Calculator')

    settings = _settings()
    client = _client()
    controller = _session_controller(client, settings)
    selector = SchemeSelector(client, controller)

    render_scheme_selector(selector)
    st.divider()

    if render_calculator_form(controller):
        if controller.begin_submit() is not None:
            st.rerun()

    # The form above is drawn with its submit button disabled before the call starts.
    if controller.is_pending:
        with st.spinner('Calculating...'):
            controller.complete_pending()
        st.rerun()

    for message in controller.state.validation_errors:
        st.warning(message)
    _render_error_banner(controller)

    result = controller.result
    if result is None:
        return
    st.divider()
    render_summary_cards(result)
    if controller.should_render_series():
        render_series_charts(result.day_wise_series)


if __name__ == '__main__':
    main()
