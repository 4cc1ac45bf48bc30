"""Rate limiter interfaces.

The API depends on this abstraction (not the concrete implementation) so the
counter backend can change without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        count: Counter value after this request's increment (None when the
            counter store was unavailable).
        retry_after_seconds: Suggested wait time in seconds when blocked.
        degraded: True when the decision was made without the counter store
            (fail open).
    """

    allowed: bool
    limit: int
    remaining: int
    count: int | None = None
    retry_after_seconds: int | None = None
    degraded: bool = False


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    async def check_limit(
        self,
        username: str,
        max_requests: int,
        window_seconds: int = 60,
    ) -> RateLimitResult:
        """Charge one request to ``username`` and decide allow/deny.

        Args:
            username: Identity being throttled.
            max_requests: Max requests allowed per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError
