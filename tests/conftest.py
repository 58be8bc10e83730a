from __future__ import annotations

import json
from typing import Any

import pytest
import requests

from src.utils.config import Settings

BASE_URL = 'http://calc.test'


def make_response(status_code: int, body: Any = None, *, raw: bytes | None = None, url: str = BASE_URL) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    if raw is not None:
        response._content = raw
    elif body is not None:
        response._content = json.dumps(body).encode('utf-8')
        response.headers['Content-Type'] = 'application/json'
    else:
        response._content = b''
    return response


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self) -> None:
        self.queue: list[requests.Response | Exception] = []
        self.calls: list[dict[str, Any]] = []

    def enqueue(self, item: requests.Response | Exception) -> None:
        self.queue.append(item)

    def _next(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({'method': method, 'url': url, **kwargs})
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self._next('POST', url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self._next('GET', url, **kwargs)


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=BASE_URL, request_timeout_seconds=5.0, rate_limit_clear_seconds=10.0)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(100.0)


@pytest.fixture
def result_payload() -> dict[str, Any]:
    return {
        'scheme_name': 'Aditya Birla Sun Life Large Cap Fund - Growth',
        'total_investment': 180000.0,
        'current_value': 221456.78,
        'absolute_returns': 41456.78,
        'percentage_returns': 23.031544,
        'number_of_installments': 36,
        'average_nav': 389.1234,
        'highest_nav': 455.61,
        'lowest_nav': 301.02,
    }


@pytest.fixture
def series_rows() -> list[dict[str, Any]]:
    return [
        {'date': '2023-01-02', 'nav': 410.5, 'current_value': 5000.0, 'units_till_date': 12.1803, 'is_predicted': False},
        {'date': '2023-01-03', 'nav': 412.0, 'current_value': 5018.27, 'units_till_date': 12.1803, 'is_predicted': False},
        {'date': '2023-01-04', 'nav': 413.2, 'current_value': 5032.89, 'units_till_date': 12.1803, 'is_predicted': True},
        {'date': '2023-01-05', 'nav': 414.9, 'current_value': 5053.6, 'units_till_date': 12.1803, 'is_predicted': True},
    ]


@pytest.fixture
def valid_form() -> dict[str, Any]:
    return {
        'scheme_code': '100033',
        'start_date': '2020-01-01',
        'end_date': '2023-01-01',
        'amount': '5000',
        'frequency': 'monthly',
    }
