"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Rate limiting strategy:
- Fixed-window limit per username, counted in the shared store.
- Runs after authentication, so only verified users consume budget.
- Fails open when the counter store is unavailable.
"""

from __future__ import annotations

import logging

from fastapi import Depends

from activity_connector.adapters.rate_limit.base import AbstractRateLimiter
from activity_connector.adapters.rate_limit.redis_fixed_window import RedisFixedWindowRateLimiter
from activity_connector.adapters.store.base import AbstractActivityStore
from activity_connector.adapters.store.factory import get_store
from activity_connector.core.config import settings
from activity_connector.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)


def get_rate_limiter(store: AbstractActivityStore = Depends(get_store)) -> AbstractRateLimiter:
    """Return a rate limiter bound to the shared store.

    The limiter holds no counters itself, so building one per request is cheap.
    """

    return RedisFixedWindowRateLimiter(store)


async def enforce_rate_limit(
    username: str,
    limiter: AbstractRateLimiter = Depends(get_rate_limiter),
) -> None:
    """FastAPI dependency enforcing the per-user rate limit.

    When enabled, charges one request to ``username`` (from the route path).

    Raises:
        RateLimitAppError: Rendered as 429 with Retry-After by the handlers.
    """

    if not settings.app.rate_limit_enabled:
        return

    max_requests = settings.app.rate_limit_requests
    window_seconds = settings.app.rate_limit_window_seconds

    result = await limiter.check_limit(username, max_requests, window_seconds)
    if result.allowed:
        return

    retry_after = result.retry_after_seconds or window_seconds
    raise RateLimitAppError(
        code="rate_limit_exceeded",
        message=f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds allowed.",
        details={"username": username, "limit": max_requests, "count": result.count or 0},
        retry_after_seconds=retry_after,
    )
