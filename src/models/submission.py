"""Submission status variants and the error taxonomy surfaced to the user."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from src.models.calculation import CalculationRequest, CalculationResult

RATE_LIMITED_MESSAGE = 'Too many requests. Please wait a moment before trying again.'
UNKNOWN_ERROR_MESSAGE = 'An error occurred'


class ErrorKind(str, Enum):
    RATE_LIMITED = 'rate_limited'
    REJECTED = 'rejected'
    UNKNOWN = 'unknown'


@dataclass(frozen=True)
class SubmissionError:
    """A classified failure. Only rate limiting clears itself."""

    kind: ErrorKind
    message: str

    @property
    def auto_clears(self) -> bool:
        return self.kind is ErrorKind.RATE_LIMITED


@dataclass(frozen=True)
class Idle:
    """Nothing in flight and nothing displayed."""


@dataclass(frozen=True)
class Pending:
    request: CalculationRequest


@dataclass(frozen=True)
class Succeeded:
    request: CalculationRequest
    result: CalculationResult


@dataclass(frozen=True)
class Failed:
    request: CalculationRequest
    error: SubmissionError


SubmissionStatus = Union[Idle, Pending, Succeeded, Failed]


class RequestValidationError(ValueError):
    """Local validation failure. The request is never sent."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__('; '.join(self.errors))


class MalformedResponseError(ValueError):
    """The service answered with a payload that does not match the contract."""
