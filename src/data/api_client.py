"""HTTP client for the calculation and scheme lookup service."""

from __future__ import annotations

from typing import Any, Mapping

import pandas as pd
import requests

from src.data.validator import (
    check_series_order,
    parse_flag,
    require_number,
    validate_point_payload,
    validate_result_payload,
)
from src.models.calculation import (
    SERIES_RESPONSE_FIELD,
    CalculationRequest,
    CalculationResult,
    SchemeRef,
    TimeSeriesPoint,
)
from src.models.submission import MalformedResponseError
from src.utils.config import CALCULATE_RETURNS_ENDPOINT, SCHEMES_ENDPOINT, Settings
from src.utils.date_utils import parse_input_date
from src.utils.logging import get_logger

LOGGER = get_logger(__name__)

SERIES_COLUMNS = ['date', 'nav', 'current_value', 'units_till_date', 'is_predicted']


def _json_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponseError(f'Response body is not valid JSON: {exc}') from exc


def parse_series(rows: Any) -> tuple[TimeSeriesPoint, ...]:
    if not isinstance(rows, list):
        raise MalformedResponseError(f'{SERIES_RESPONSE_FIELD} must be a list.')
    points = []
    for position, row in enumerate(rows):
        validate_point_payload(row, position)
        points.append(
            TimeSeriesPoint(
                date=parse_input_date(row['date']),
                nav=require_number(row, 'nav'),
                current_value=require_number(row, 'current_value'),
                units_till_date=require_number(row, 'units_till_date'),
                is_predicted=parse_flag(row['is_predicted']),
            )
        )
    return tuple(points)


def parse_calculation_result(payload: Any) -> CalculationResult:
    """Turn a success payload into a CalculationResult. Raises MalformedResponseError."""
    validate_result_payload(payload)
    series = None
    raw_series = payload.get(SERIES_RESPONSE_FIELD)
    if raw_series is not None:
        series = parse_series(raw_series)
        for warning in check_series_order(series):
            LOGGER.warning(warning)
    return CalculationResult(
        scheme_name=str(payload['scheme_name']),
        total_investment=require_number(payload, 'total_investment'),
        current_value=require_number(payload, 'current_value'),
        absolute_returns=require_number(payload, 'absolute_returns'),
        percentage_returns=require_number(payload, 'percentage_returns'),
        number_of_installments=int(require_number(payload, 'number_of_installments')),
        average_nav=require_number(payload, 'average_nav'),
        highest_nav=require_number(payload, 'highest_nav'),
        lowest_nav=require_number(payload, 'lowest_nav'),
        day_wise_series=series,
    )


def parse_scheme_list(payload: Any) -> list[SchemeRef]:
    """Map a code -> name object to SchemeRefs in response order."""
    if not isinstance(payload, Mapping):
        raise MalformedResponseError(f'Expected a scheme mapping, got {type(payload).__name__}.')
    return [SchemeRef(code=str(code), name=str(name)) for code, name in payload.items()]


def series_to_frame(points: tuple[TimeSeriesPoint, ...] | list[TimeSeriesPoint] | None) -> pd.DataFrame:
    """Tabular view of the series, in the received order."""
    if not points:
        return pd.DataFrame(columns=SERIES_COLUMNS)
    df = pd.DataFrame(
        {
            'date': pd.to_datetime([p.date for p in points]),
            'nav': [float(p.nav) for p in points],
            'current_value': [float(p.current_value) for p in points],
            'units_till_date': [float(p.units_till_date) for p in points],
            'is_predicted': [bool(p.is_predicted) for p in points],
        }
    )
    return df


class ReturnsApiClient:
    """Thin wrapper over a requests session. HTTP errors propagate as requests.HTTPError."""

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session if session is not None else requests.Session()

    def calculate_returns(self, request: CalculationRequest) -> CalculationResult:
        url = self.settings.endpoint_url(CALCULATE_RETURNS_ENDPOINT)
        LOGGER.info('POST %s scheme=%s frequency=%s series=%s', url, request.scheme_code, request.frequency, request.want_series)
        response = self.session.post(
            url,
            json=request.to_payload(),
            timeout=self.settings.request_timeout_seconds,
        )
        response.raise_for_status()
        return parse_calculation_result(_json_body(response))

    def search_schemes(self, term: str = '') -> list[SchemeRef]:
        url = self.settings.endpoint_url(SCHEMES_ENDPOINT)
        term = (term or '').strip()
        params = {'search': term} if term else None
        response = self.session.get(url, params=params, timeout=self.settings.request_timeout_seconds)
        response.raise_for_status()
        return parse_scheme_list(_json_body(response))
