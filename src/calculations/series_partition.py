"""Observed/predicted partitioning of the day-wise series."""

from __future__ import annotations

from datetime import date
from typing import Sequence

import numpy as np
import pandas as pd

from src.models.calculation import TimeSeriesPoint


def partition(points: Sequence[TimeSeriesPoint] | None) -> int | None:
    """Return the index of the first predicted point, or None if every point is observed.

    Assumes all observed points precede all predicted ones and does not
    re-order `points`. With interleaved flags the first predicted index is
    still returned, but what it means is undefined.
    """
    if not points:
        return None
    flags = np.fromiter((bool(p.is_predicted) for p in points), dtype=bool, count=len(points))
    hits = np.flatnonzero(flags)
    if hits.size == 0:
        return None
    return int(hits[0])


def boundary_date(points: Sequence[TimeSeriesPoint] | None) -> date | None:
    idx = partition(points)
    if idx is None:
        return None
    return points[idx].date


def frame_boundary_index(df: pd.DataFrame) -> int | None:
    """Positional boundary for a frame produced by `series_to_frame`."""
    if df.empty:
        return None
    hits = np.flatnonzero(df['is_predicted'].to_numpy(dtype=bool))
    if hits.size == 0:
        return None
    return int(hits[0])


def split_series(df: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Split a series frame into observed and predicted parts.

    The predicted part is prefixed with the last observed row so a dashed
    line drawn from it starts where the solid line ends.
    """
    idx = frame_boundary_index(df)
    if idx is None:
        return df.copy(), df.iloc[0:0].copy()
    observed = df.iloc[:idx].copy()
    start = idx - 1 if idx > 0 else idx
    predicted = df.iloc[start:].copy()
    return observed, predicted
