"""Submission lifecycle and UI state for the returns calculator.

The controller is the only place where requests are issued and failures are
classified. Every state change happens in one of its methods:

- `update_field` invalidates whatever result or error is displayed.
- `begin_submit` validates the draft and moves to Pending.
- `complete_pending` calls the service and stores Succeeded or Failed.
- `poll_timers` fires the rate-limit auto-clear once its deadline passes.

A single `ClearTimer` handle exists at most. Every superseding event replaces
or drops it, so an old timer can never clear a newer error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import time
from typing import Any, Callable, Protocol

import requests

from src.data.validator import build_request
from src.models.calculation import DEFAULT_FREQUENCY, CalculationRequest, CalculationResult, SchemeRef
from src.models.submission import (
    RATE_LIMITED_MESSAGE,
    UNKNOWN_ERROR_MESSAGE,
    ErrorKind,
    Failed,
    Idle,
    Pending,
    RequestValidationError,
    Succeeded,
    SubmissionError,
    SubmissionStatus,
)
from src.utils.config import DEFAULT_RATE_LIMIT_CLEAR_SECONDS
from src.utils.logging import get_logger

LOGGER = get_logger(__name__)

FORM_FIELDS = ['scheme_code', 'start_date', 'end_date', 'amount', 'frequency']
ERROR_MESSAGE_KEYS = ['detail', 'error', 'message']


class CalculationService(Protocol):
    def calculate_returns(self, request: CalculationRequest) -> CalculationResult: ...


def empty_form() -> dict[str, Any]:
    return {
        'scheme_code': '',
        'start_date': None,
        'end_date': None,
        'amount': '',
        'frequency': DEFAULT_FREQUENCY,
    }


@dataclass
class UIState:
    """Session-local state. Re-created per session, never persisted."""

    form: dict[str, Any] = field(default_factory=empty_form)
    submission: SubmissionStatus = field(default_factory=Idle)
    scheme_list: list[SchemeRef] = field(default_factory=list)
    search_term: str = ''
    schemes_panel_open: bool = False
    graph_requested: bool = False
    validation_errors: list[str] = field(default_factory=list)
    search_error: str | None = None


@dataclass(frozen=True)
class ClearTimer:
    """Scheduled auto-clear for one specific error."""

    deadline: float
    error: SubmissionError

    def due(self, now: float) -> bool:
        return now >= self.deadline


def _rejection_message(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    for key in ERROR_MESSAGE_KEYS:
        value = body.get(key)
        if value is None or value == '':
            continue
        if isinstance(value, str):
            return value
        if isinstance(value, list):
            # FastAPI validation errors: [{'loc': [...], 'msg': '...', ...}, ...]
            parts = [str(item.get('msg', item)) if isinstance(item, dict) else str(item) for item in value]
            return '; '.join(parts)
        return str(value)
    return None


def classify_failure(exc: Exception) -> SubmissionError:
    """Map a failed call to RATE_LIMITED, REJECTED or UNKNOWN."""
    response = getattr(exc, 'response', None)
    if isinstance(exc, requests.HTTPError) and response is not None:
        if response.status_code == 429:
            return SubmissionError(ErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE)
        try:
            body = response.json()
        except ValueError:
            body = None
        message = _rejection_message(body)
        if message is not None:
            return SubmissionError(ErrorKind.REJECTED, message)
    return SubmissionError(ErrorKind.UNKNOWN, UNKNOWN_ERROR_MESSAGE)


class SubmissionController:
    """Owns the request lifecycle and the auto-clear timer."""

    def __init__(
        self,
        service: CalculationService,
        *,
        state: UIState | None = None,
        clear_after_seconds: float = DEFAULT_RATE_LIMIT_CLEAR_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.service = service
        self.state = state if state is not None else UIState()
        self.clear_after_seconds = float(clear_after_seconds)
        self.clock = clock
        self.timer: ClearTimer | None = None

    @property
    def submission(self) -> SubmissionStatus:
        return self.state.submission

    @property
    def is_pending(self) -> bool:
        return isinstance(self.state.submission, Pending)

    @property
    def result(self) -> CalculationResult | None:
        status = self.state.submission
        return status.result if isinstance(status, Succeeded) else None

    @property
    def error(self) -> SubmissionError | None:
        status = self.state.submission
        return status.error if isinstance(status, Failed) else None

    def _cancel_timer(self) -> None:
        self.timer = None

    def update_field(self, name: str, value: Any) -> None:
        """Merge one field into the draft and hide any displayed outcome."""
        if name not in FORM_FIELDS:
            raise KeyError(f'Unknown form field: {name}')
        self.state.form[name] = value
        self.state.validation_errors = []
        if isinstance(self.state.submission, (Succeeded, Failed)):
            LOGGER.info('Form field %s changed; clearing displayed outcome.', name)
            self.state.submission = Idle()
            self._cancel_timer()

    def set_graph_requested(self, flag: bool) -> None:
        # Bound to the next request only; a displayed result keeps its own flag.
        self.state.graph_requested = bool(flag)

    def begin_submit(self) -> CalculationRequest | None:
        """Validate the draft and move to Pending. Returns the request to send."""
        if self.is_pending:
            LOGGER.warning('Submit ignored: a calculation request is already in flight.')
            return None
        try:
            request = build_request(self.state.form, want_series=self.state.graph_requested)
        except RequestValidationError as exc:
            self.state.validation_errors = exc.errors
            LOGGER.info('Submit blocked by validation: %s', exc)
            return None
        self.state.validation_errors = []
        self._cancel_timer()
        self.state.submission = Pending(request)
        return request

    def complete_pending(self) -> SubmissionStatus:
        """Issue the pending request and store the classified outcome."""
        status = self.state.submission
        if not isinstance(status, Pending):
            return status
        request = status.request
        try:
            result = self.service.calculate_returns(request)
        except (requests.RequestException, ValueError) as exc:
            self.apply_failure(request, exc)
        except Exception as exc:
            LOGGER.exception('Unexpected error while calculating returns.')
            self.apply_failure(request, exc)
        else:
            self.apply_success(request, result)
        return self.state.submission

    def submit(self) -> SubmissionStatus:
        if self.begin_submit() is None:
            return self.state.submission
        return self.complete_pending()

    def apply_success(self, request: CalculationRequest, result: CalculationResult) -> None:
        self._cancel_timer()
        self.state.submission = Succeeded(request, result)
        LOGGER.info('Calculation succeeded for scheme %s.', request.scheme_code)

    def apply_failure(self, request: CalculationRequest, exc: Exception) -> None:
        error = classify_failure(exc)
        self._cancel_timer()
        self.state.submission = Failed(request, error)
        if error.auto_clears:
            self.timer = ClearTimer(deadline=self.clock() + self.clear_after_seconds, error=error)
        LOGGER.info('Calculation failed (%s): %s', error.kind.value, exc)

    def poll_timers(self, now: float | None = None) -> bool:
        """Fire the auto-clear timer if due. Returns True when an error was cleared."""
        timer = self.timer
        if timer is None:
            return False
        now = self.clock() if now is None else now
        if not timer.due(now):
            return False
        self.timer = None
        status = self.state.submission
        if isinstance(status, Failed) and status.error == timer.error:
            self.state.submission = Idle()
            LOGGER.info('Rate-limit message cleared after %.0fs.', self.clear_after_seconds)
            return True
        return False

    def seconds_until_clear(self, now: float | None = None) -> float | None:
        if self.timer is None:
            return None
        now = self.clock() if now is None else now
        return max(0.0, self.timer.deadline - now)

    def should_render_series(self) -> bool:
        """Charts need a success whose request asked for the series and got one back."""
        status = self.state.submission
        if not isinstance(status, Succeeded):
            return False
        return bool(status.request.want_series) and status.result.has_series
