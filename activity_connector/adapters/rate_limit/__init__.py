"""Rate limiting adapters.

This package provides a small abstraction layer over the per-user window
counters kept in the shared activity store.
"""

from activity_connector.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from activity_connector.adapters.rate_limit.redis_fixed_window import RedisFixedWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "RateLimitResult",
    "RedisFixedWindowRateLimiter",
]
