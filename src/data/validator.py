"""Validation for request drafts and service response payloads."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd

from src.models.calculation import FREQUENCY_OPTIONS, CalculationRequest, TimeSeriesPoint
from src.models.submission import MalformedResponseError, RequestValidationError
from src.utils.date_utils import parse_input_date

DRAFT_REQUIRED_FIELDS = ['scheme_code', 'start_date', 'end_date', 'amount', 'frequency']

FIELD_LABELS = {
    'scheme_code': 'Scheme Code',
    'start_date': 'Start Date',
    'end_date': 'End Date',
    'amount': 'Investment Amount',
    'frequency': 'Investment Frequency',
}

RESULT_REQUIRED_FIELDS = [
    'scheme_name',
    'total_investment',
    'current_value',
    'absolute_returns',
    'percentage_returns',
    'number_of_installments',
    'average_nav',
    'highest_nav',
    'lowest_nav',
]

POINT_REQUIRED_FIELDS = ['date', 'nav', 'current_value', 'units_till_date', 'is_predicted']


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def parse_amount(value: Any) -> float | None:
    """Return the amount as a positive finite float, or None when it is not one."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    amount = pd.to_numeric(value, errors='coerce')
    if pd.isna(amount) or not np.isfinite(float(amount)):
        return None
    amount = float(amount)
    if amount <= 0.0:
        return None
    return amount


def validate_request_draft(draft: Mapping[str, Any]) -> list[str]:
    """Return blocking validation messages for a form draft. Empty means valid."""
    errors: list[str] = []
    missing = [name for name in DRAFT_REQUIRED_FIELDS if _is_blank(draft.get(name))]
    if missing:
        labels = ', '.join(FIELD_LABELS.get(name, name) for name in missing)
        errors.append(f'Missing required fields: {labels}.')

    if not _is_blank(draft.get('amount')) and parse_amount(draft.get('amount')) is None:
        errors.append('Investment amount must be a positive number.')

    frequency = draft.get('frequency')
    if not _is_blank(frequency) and str(frequency) not in FREQUENCY_OPTIONS:
        errors.append(f'Investment frequency must be one of: {", ".join(FREQUENCY_OPTIONS)}.')

    start = parse_input_date(draft.get('start_date'))
    end = parse_input_date(draft.get('end_date'))
    if not _is_blank(draft.get('start_date')) and start is None:
        errors.append('Start date is not a valid date.')
    if not _is_blank(draft.get('end_date')) and end is None:
        errors.append('End date is not a valid date.')
    if start is not None and end is not None and end < start:
        errors.append('End date must be on or after start date.')
    return errors


def build_request(draft: Mapping[str, Any], want_series: bool) -> CalculationRequest:
    """Validate a draft and coerce it into a request. Raises RequestValidationError."""
    errors = validate_request_draft(draft)
    if errors:
        raise RequestValidationError(errors)
    return CalculationRequest(
        scheme_code=str(draft['scheme_code']).strip(),
        start_date=parse_input_date(draft['start_date']),
        end_date=parse_input_date(draft['end_date']),
        amount=parse_amount(draft['amount']),
        frequency=str(draft['frequency']),
        want_series=bool(want_series),
    )


def _missing_fields(payload: Mapping[str, Any], required: list[str]) -> list[str]:
    return [name for name in required if name not in payload or payload[name] is None]


def require_number(payload: Mapping[str, Any], name: str) -> float:
    value = payload[name]
    if isinstance(value, (bool, list, dict)):
        raise MalformedResponseError(f'Field {name} must be numeric, got {value!r}.')
    number = pd.to_numeric(value, errors='coerce')
    if pd.isna(number) or not np.isfinite(float(number)):
        raise MalformedResponseError(f'Field {name} must be numeric, got {value!r}.')
    return float(number)


def validate_result_payload(payload: Any) -> None:
    """Raise MalformedResponseError unless the payload carries every scalar result field."""
    if not isinstance(payload, Mapping):
        raise MalformedResponseError(f'Expected a JSON object, got {type(payload).__name__}.')
    missing = _missing_fields(payload, RESULT_REQUIRED_FIELDS)
    if missing:
        raise MalformedResponseError(f'Missing required result fields: {missing}')
    for name in RESULT_REQUIRED_FIELDS[1:]:
        require_number(payload, name)
    installments = require_number(payload, 'number_of_installments')
    if installments < 0 or installments != int(installments):
        raise MalformedResponseError('number_of_installments must be a non-negative integer.')


def parse_flag(value: Any) -> bool | None:
    """JSON booleans, or 0/1, as bool. Anything else (strings included) is None."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    return None


def validate_point_payload(row: Any, position: int) -> None:
    if not isinstance(row, Mapping):
        raise MalformedResponseError(f'Series entry {position} is not an object.')
    missing = _missing_fields(row, POINT_REQUIRED_FIELDS)
    if missing:
        raise MalformedResponseError(f'Series entry {position} is missing fields: {missing}')
    if parse_input_date(row['date']) is None:
        raise MalformedResponseError(f'Series entry {position} has an invalid date {row["date"]!r}.')
    if parse_flag(row['is_predicted']) is None:
        raise MalformedResponseError(
            f'Series entry {position} has a non-boolean is_predicted {row["is_predicted"]!r}.'
        )


def check_series_order(points: Sequence[TimeSeriesPoint]) -> list[str]:
    """Return non-fatal warnings when the series breaks ordering assumptions.

    The series is expected to be chronological with every observed point ahead
    of every predicted one. Nothing here re-sorts or repairs the data.
    """
    warnings: list[str] = []
    if len(points) < 2:
        return warnings

    dates = pd.Series([pd.Timestamp(p.date) for p in points])
    backwards = int((dates.diff().dropna() < pd.Timedelta(0)).sum())
    if backwards:
        warnings.append(f'{backwards} series points are earlier than their predecessor.')

    flags = np.array([bool(p.is_predicted) for p in points], dtype=int)
    # Any 1 -> 0 step puts an observed point after a predicted one.
    if (np.diff(flags) < 0).any():
        warnings.append('Observed points appear after predicted points; boundary is not contiguous.')
    return warnings
