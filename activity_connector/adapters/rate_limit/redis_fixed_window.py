"""Store-backed fixed-window rate limiter.

Notes:
- Shared across processes: the counter lives in Redis, so every worker and
  instance charges the same per-user budget.
- One INCR per request; the window is armed by EXPIRE on the first request
  only, so the TTL of an in-progress window is never extended.
- If INCR succeeds but EXPIRE fails, the counter stays without a TTL until
  an operator removes it. Known limitation, logged at error level.
- Fails open: when the counter store is unreachable the request is allowed.
"""

from __future__ import annotations

import logging

from activity_connector.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from activity_connector.adapters.store.base import AbstractActivityStore
from activity_connector.adapters.store.keys import rate_limit_key
from activity_connector.core.config import RedisSettings

logger = logging.getLogger(__name__)


class RedisFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per username.

    Bursts of up to ``2 * max_requests`` are possible across a window edge;
    that is the accepted cost of O(1) state per user.
    """

    def __init__(
        self,
        store: AbstractActivityStore,
        *,
        redis_settings: RedisSettings | None = None,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Store providing atomic increment, expire and ttl.
            redis_settings: Optional key layout; defaults to global settings.
        """
        self._store = store
        self._redis_settings = redis_settings

    def _allowed(self, *, max_requests: int, count: int | None, degraded: bool = False) -> RateLimitResult:
        remaining = max_requests if count is None else max(0, max_requests - count)
        return RateLimitResult(
            allowed=True,
            limit=max_requests,
            remaining=remaining,
            count=count,
            degraded=degraded,
        )

    async def _retry_after(self, key: str, window_seconds: int) -> int:
        ttl = await self._store.ttl(key)
        if ttl.degraded or ttl.value is None or ttl.value <= 0:
            return window_seconds
        return int(ttl.value)

    async def check_limit(
        self,
        username: str,
        max_requests: int,
        window_seconds: int = 60,
    ) -> RateLimitResult:
        """Charge one request for ``username`` against the current window.

        Args:
            username: Identity being throttled.
            max_requests: Max requests allowed per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If username is empty or limits are invalid.
        """
        if not username:
            raise ValueError("username must be a non-empty string")
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        key = rate_limit_key(username, self._redis_settings)

        incremented = await self._store.increment(key)
        if incremented.degraded or incremented.value is None:
            logger.error(
                "rate_limit.store_unavailable",
                extra={"username": username, "error_msg": incremented.error, "decision": "allow"},
            )
            return self._allowed(max_requests=max_requests, count=None, degraded=True)

        count = int(incremented.value)

        if count == 1:
            armed = await self._store.expire(key, window_seconds)
            if armed.degraded or not armed.value:
                logger.error(
                    "rate_limit.expiry_not_set",
                    extra={"username": username, "window_s": window_seconds, "error_msg": armed.error},
                )

        if count > max_requests:
            retry_after = await self._retry_after(key, window_seconds)
            logger.warning(
                "rate_limit.exceeded",
                extra={
                    "username": username,
                    "count": count,
                    "limit": max_requests,
                    "retry_after_s": retry_after,
                },
            )
            return RateLimitResult(
                allowed=False,
                limit=max_requests,
                remaining=0,
                count=count,
                retry_after_seconds=retry_after,
            )

        logger.debug(
            "rate_limit.allowed",
            extra={"username": username, "count": count, "limit": max_requests},
        )
        return self._allowed(max_requests=max_requests, count=count)
