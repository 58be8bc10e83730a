"""Plotly charts for the day-wise NAV, value and units series."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Sequence

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from src.calculations.series_partition import boundary_date, split_series
from src.dashboard.components.formatting import (
    RUPEE,
    apply_plot_layout_hygiene,
    format_currency_compact,
    format_units,
)
from src.data.api_client import series_to_frame
from src.models.calculation import TimeSeriesPoint
from src.utils.date_utils import MONTH_YEAR_FORMAT, format_full_date

BOUNDARY_COLOR = '#ff6b6b'
PREDICTED_FLAG = '⚡ Predicted value'

LEGEND_ENTRIES = [
    ('solid', 'Data before red line: Actual historical data'),
    ('dashed', 'Data after red line: AI predicted values'),
    ('dotted', 'Red dotted line: Prediction start date'),
]


@dataclass(frozen=True)
class SeriesMetric:
    column: str
    title: str
    name: str
    color: str
    value_format: Callable[[float], str]
    tick_prefix: str = ''
    tick_format: str = ',.2f'


SERIES_METRICS = [
    SeriesMetric('nav', 'Net Asset Value (NAV)', 'NAV', '#8884d8', format_currency_compact, tick_prefix=RUPEE),
    SeriesMetric('current_value', 'Current Value', 'Current Value', '#82ca9d', format_currency_compact),
    SeriesMetric('units_till_date', 'Units', 'Units', '#ffc658', format_units),
]


def _hover_customdata(df: pd.DataFrame, metric: SeriesMetric) -> list[list[str]]:
    return [
        [
            format_full_date(row_date),
            metric.value_format(value),
            PREDICTED_FLAG if predicted else '',
        ]
        for row_date, value, predicted in zip(df['date'], df[metric.column], df['is_predicted'])
    ]


def _hovertemplate(metric: SeriesMetric) -> str:
    return '%{customdata[0]}<br>' + metric.name + ': %{customdata[1]}<br>%{customdata[2]}<extra></extra>'


def _segment_trace(df: pd.DataFrame, metric: SeriesMetric, *, predicted: bool) -> go.Scatter:
    return go.Scatter(
        x=df['date'],
        y=df[metric.column],
        mode='lines',
        name=f'{metric.name} (Predicted)' if predicted else metric.name,
        line=dict(color=metric.color, width=2, dash='dash' if predicted else 'solid', shape='spline'),
        customdata=_hover_customdata(df, metric),
        hovertemplate=_hovertemplate(metric),
    )


def _current_value_tick_labels(df: pd.DataFrame) -> tuple[list[float], list[str]] | None:
    """Abbreviated tick labels (K/L/Cr without the rupee sign) for the value axis."""
    values = df['current_value'].astype(float)
    if values.empty:
        return None
    lo, hi = float(values.min()), float(values.max())
    if lo == hi:
        ticks = [lo]
    else:
        ticks = [lo + (hi - lo) * k / 4 for k in range(5)]
    return ticks, [format_currency_compact(t, symbol=False) for t in ticks]


def build_metric_figure(df: pd.DataFrame, metric: SeriesMetric, boundary: date | None) -> go.Figure:
    """One chart: solid observed segment, dashed predicted segment, boundary marker."""
    observed, predicted = split_series(df)
    fig = go.Figure()
    if not observed.empty:
        fig.add_trace(_segment_trace(observed, metric, predicted=False))
    if not predicted.empty:
        fig.add_trace(_segment_trace(predicted, metric, predicted=True))
    if boundary is not None:
        fig.add_shape(
            type='line',
            xref='x',
            yref='paper',
            x0=pd.Timestamp(boundary),
            x1=pd.Timestamp(boundary),
            y0=0,
            y1=1,
            line=dict(color=BOUNDARY_COLOR, width=2, dash='dot'),
        )
    fig.update_layout(title=metric.title, hovermode='closest')
    fig.update_xaxes(type='date', tickformat=MONTH_YEAR_FORMAT, tickangle=-30)
    if metric.column == 'current_value':
        ticks = _current_value_tick_labels(df)
        if ticks is not None:
            fig.update_yaxes(tickvals=ticks[0], ticktext=ticks[1])
    else:
        fig.update_yaxes(tickprefix=metric.tick_prefix, tickformat=metric.tick_format)
    return apply_plot_layout_hygiene(fig)


def build_series_figures(points: Sequence[TimeSeriesPoint] | None) -> list[go.Figure]:
    """Return the NAV, current value and units charts. Empty input gives no charts."""
    if not points:
        return []
    df = series_to_frame(points)
    boundary = boundary_date(points)
    return [build_metric_figure(df, metric, boundary) for metric in SERIES_METRICS]


def legend_markdown() -> str:
    glyphs = {'solid': '━━', 'dashed': '╌╌', 'dotted': f'<span style="color:{BOUNDARY_COLOR}">┆</span>'}
    return '  \n'.join(f'{glyphs[style]} {text}' for style, text in LEGEND_ENTRIES)


def render_series_charts(points: Sequence[TimeSeriesPoint] | None) -> None:
    """Render the shared legend once, then the three charts."""
    figures = build_series_figures(points)
    if not figures:
        return
    st.subheader('Investment Progress Over Time')
    st.markdown(legend_markdown(), unsafe_allow_html=True)
    for fig in figures:
        st.plotly_chart(fig, use_container_width=True)
