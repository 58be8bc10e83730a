"""Request and response contracts for the return-calculation service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

FREQUENCY_OPTIONS = ['daily', 'weekly', 'monthly', 'yearly', 'lumpsum']
DEFAULT_FREQUENCY = 'monthly'

SERIES_FLAG_FIELD = 'include_day_wise_data'
SERIES_RESPONSE_FIELD = 'day_wise_data'


@dataclass(frozen=True)
class CalculationRequest:
    """A validated request, ready to be sent."""

    scheme_code: str
    start_date: date
    end_date: date
    amount: float
    frequency: str
    want_series: bool = False

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {
            'scheme_code': self.scheme_code,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'amount': float(self.amount),
            'frequency': self.frequency,
        }
        if self.want_series:
            payload[SERIES_FLAG_FIELD] = True
        return payload


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One day of the day-wise breakdown, observed or predicted."""

    date: date
    nav: float
    current_value: float
    units_till_date: float
    is_predicted: bool = False


@dataclass(frozen=True)
class CalculationResult:
    """Parsed success response. `day_wise_series` is None when not requested."""

    scheme_name: str
    total_investment: float
    current_value: float
    absolute_returns: float
    percentage_returns: float
    number_of_installments: int
    average_nav: float
    highest_nav: float
    lowest_nav: float
    day_wise_series: tuple[TimeSeriesPoint, ...] | None = None

    @property
    def has_series(self) -> bool:
        return bool(self.day_wise_series)


@dataclass(frozen=True)
class SchemeRef:
    code: str
    name: str
