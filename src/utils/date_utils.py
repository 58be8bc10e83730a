"""Date helpers shared across the data and dashboard layers."""

from __future__ import annotations

from datetime import date, datetime

import pandas as pd

MONTH_YEAR_FORMAT = '%b %Y'
FULL_DATE_FORMAT = '%d %B %Y'


def to_timestamp(value: pd.Timestamp | datetime | date | str) -> pd.Timestamp:
    """Convert an input value to a timezone-naive pandas Timestamp."""
    ts = pd.Timestamp(value)
    if ts.tz is not None:
        ts = ts.tz_convert(None)
    return ts


def parse_input_date(value: pd.Timestamp | datetime | date | str | None) -> date | None:
    """Parse a form value into a calendar date. Blank or unparseable input returns None."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        ts = to_timestamp(value)
    except (ValueError, TypeError):
        return None
    if pd.isna(ts):
        return None
    return ts.date()


def format_full_date(value: pd.Timestamp | datetime | date | str) -> str:
    """Tooltip form, e.g. `05 January 2023`."""
    return to_timestamp(value).strftime(FULL_DATE_FORMAT)
