"""Shared dashboard formatting helpers."""

from __future__ import annotations

import plotly.graph_objects as go

RUPEE = '₹'

# (threshold, divisor, suffix), largest first. Indian grouping: lakh = 1e5, crore = 1e7.
CURRENCY_ABBREVIATIONS = [
    (10_000_000.0, 10_000_000.0, 'Cr'),
    (100_000.0, 100_000.0, 'L'),
    (1_000.0, 1_000.0, 'K'),
]


def format_currency_compact(value: float, *, symbol: bool = True) -> str:
    """Abbreviate at thousand, lakh and crore, e.g. 1234567 -> `₹12.35L`."""
    value = float(value)
    prefix = RUPEE if symbol else ''
    for threshold, divisor, suffix in CURRENCY_ABBREVIATIONS:
        if value >= threshold:
            return f'{prefix}{value / divisor:.2f}{suffix}'
    return f'{prefix}{value:.2f}'


def format_currency(value: float) -> str:
    return f'{RUPEE}{float(value):,.2f}'


def format_nav(value: float) -> str:
    return f'{RUPEE}{float(value):,.4f}'.rstrip('0').rstrip('.')


def format_units(value: float) -> str:
    return f'{float(value):.4f}'


def format_percent(value: float) -> str:
    return f'{float(value):.2f}%'


def apply_plot_layout_hygiene(fig: go.Figure, *, height: int = 300) -> go.Figure:
    """Apply consistent spacing for the stacked series charts."""
    fig.update_layout(
        height=height,
        margin=dict(t=48, r=32, b=64, l=72),
        showlegend=False,
        plot_bgcolor='rgba(0,0,0,0)',
    )
    fig.update_xaxes(automargin=True, showgrid=True, gridcolor='#eee', griddash='dash')
    fig.update_yaxes(automargin=True, showgrid=True, gridcolor='#eee', griddash='dash')
    return fig
