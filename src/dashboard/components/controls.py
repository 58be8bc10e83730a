"""Calculator form controls bound to the submission controller."""

from __future__ import annotations

from datetime import date
from typing import Any

import pandas as pd
import streamlit as st

from src.dashboard.submission import FORM_FIELDS, SubmissionController
from src.models.calculation import DEFAULT_FREQUENCY, FREQUENCY_OPTIONS

FORM_KEY_PREFIX = 'form_'
GRAPH_TOGGLE_KEY = 'form_graph_requested'

# Streamlit otherwise limits date widgets to today +/- 10 years.
DATE_INPUT_MIN = date(1990, 1, 1)
# End dates past today are allowed so the predicted series can extend forward.
DATE_INPUT_FUTURE_YEARS = 10


def coerce_option(current: Any, options: list[Any], default: Any) -> Any:
    """Return a stable option value that is guaranteed to be in options."""
    if not options:
        return default
    if current in options:
        return current
    if default in options:
        return default
    return options[0]


def date_input_bounds(today: date | None = None) -> tuple[date, date]:
    """Selectable range for the start and end date widgets."""
    today = today or date.today()
    latest = (pd.Timestamp(today) + pd.DateOffset(years=DATE_INPUT_FUTURE_YEARS)).date()
    return DATE_INPUT_MIN, latest


def widget_key(field_name: str) -> str:
    return f'{FORM_KEY_PREFIX}{field_name}'


def sync_widget_state(controller: SubmissionController) -> None:
    """Push draft values into widget keys so programmatic edits (scheme pick) show up."""
    form = controller.state.form
    for name in FORM_FIELDS:
        key = widget_key(name)
        value = form.get(name)
        if name == 'frequency':
            value = coerce_option(value, FREQUENCY_OPTIONS, DEFAULT_FREQUENCY)
        if name in ('scheme_code', 'amount'):
            value = '' if value is None else str(value)
        if st.session_state.get(key) != value:
            st.session_state[key] = value
    st.session_state[GRAPH_TOGGLE_KEY] = controller.state.graph_requested


def _on_field_change(controller: SubmissionController, name: str) -> None:
    controller.update_field(name, st.session_state[widget_key(name)])


def render_calculator_form(controller: SubmissionController) -> bool:
    """Render the input widgets and submit button. Returns True when submit was clicked."""
    sync_widget_state(controller)
    st.subheader('Calculate Returns')
    min_date, max_date = date_input_bounds()
    c1, c2 = st.columns(2)
    with c1:
        st.text_input(
            'Scheme Code',
            key=widget_key('scheme_code'),
            on_change=_on_field_change,
            args=(controller, 'scheme_code'),
        )
        st.date_input(
            'Start Date',
            key=widget_key('start_date'),
            on_change=_on_field_change,
            args=(controller, 'start_date'),
            min_value=min_date,
            max_value=max_date,
            format='YYYY-MM-DD',
        )
        st.date_input(
            'End Date',
            key=widget_key('end_date'),
            on_change=_on_field_change,
            args=(controller, 'end_date'),
            min_value=min_date,
            max_value=max_date,
            format='YYYY-MM-DD',
        )
    with c2:
        st.text_input(
            'Investment Amount',
            key=widget_key('amount'),
            on_change=_on_field_change,
            args=(controller, 'amount'),
        )
        st.selectbox(
            'Investment Frequency',
            FREQUENCY_OPTIONS,
            key=widget_key('frequency'),
            format_func=str.capitalize,
            on_change=_on_field_change,
            args=(controller, 'frequency'),
        )
        st.checkbox(
            'Show day-wise graph',
            key=GRAPH_TOGGLE_KEY,
            on_change=lambda: controller.set_graph_requested(st.session_state[GRAPH_TOGGLE_KEY]),
            help='Includes the actual and predicted day-wise series in the next calculation.',
        )

    pending = controller.is_pending
    return st.button(
        'Calculating...' if pending else 'Calculate Returns',
        key='form_submit',
        disabled=pending,
        type='primary',
    )
