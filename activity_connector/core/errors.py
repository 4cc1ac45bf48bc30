"""Application-level exception types.

This module defines domain errors raised by the auth and rate limit layers,
enabling consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Details are logged, never returned to clients.
    """

    username: str
    limit: int
    count: int


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when the Authorization header or the PAT is rejected."""


class DataNotFoundAppError(AppError):
    """Raised when a specifically requested resource does not exist.

    An empty page is not an error and never raises this.
    """


@dataclass
class RateLimitAppError(AppError):
    """Raised when a user exhausts the requests of the current window."""

    retry_after_seconds: int = 0
