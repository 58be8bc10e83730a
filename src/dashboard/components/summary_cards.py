"""Summary card renderer for the calculation result."""

from __future__ import annotations

import streamlit as st

from src.dashboard.components.formatting import format_currency, format_nav, format_percent
from src.models.calculation import CalculationResult


def result_card_values(result: CalculationResult) -> list[tuple[str, str]]:
    """Label/value pairs in display order."""
    return [
        ('Scheme Name', result.scheme_name),
        ('Total Investment', format_currency(result.total_investment)),
        ('Current Value', format_currency(result.current_value)),
        ('Absolute Returns', format_currency(result.absolute_returns)),
        ('Returns (%)', format_percent(result.percentage_returns)),
        ('Number of Installments', f'{result.number_of_installments:,d}'),
        ('Average NAV', format_nav(result.average_nav)),
        ('Highest NAV', format_nav(result.highest_nav)),
        ('Lowest NAV', format_nav(result.lowest_nav)),
    ]


def render_summary_cards(result: CalculationResult, title: str = 'Investment Results') -> None:
    """Render result KPIs three per row."""
    st.subheader(title)
    cards = result_card_values(result)
    scheme_label, scheme_name = cards[0]
    st.caption(scheme_label)
    st.markdown(f'**{scheme_name}**')
    metrics = cards[1:]
    for start in range(0, len(metrics), 3):
        cols = st.columns(3)
        for col, (label, value) in zip(cols, metrics[start:start + 3]):
            col.metric(label, value)
