"""Redis-backed activity store.

Every command is wrapped so that Redis/transport failures and values that
do not decode as UTF-8 surface as a degraded StoreResult rather than an exception. Callers choose what a
degraded result means for them (fail open, fail closed, or empty data).
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from redis.asyncio import Redis
from redis.exceptions import RedisError

from activity_connector.adapters.store.base import AbstractActivityStore, StoreResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RedisActivityStore(AbstractActivityStore):
    """Store adapter over an asyncio Redis client.

    The client must be created with ``decode_responses=True`` so that reads
    return ``str`` rather than ``bytes``.
    """

    def __init__(self, client: Redis) -> None:
        self.client = client

    async def _run(
        self,
        operation: str,
        key: str,
        call: Callable[[], Awaitable[T]],
        fallback: T,
    ) -> StoreResult[T]:
        try:
            value = await call()
        except (RedisError, OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "store.command_failed",
                extra={
                    "operation": operation,
                    "key": key,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return StoreResult.failed(fallback, f"{type(exc).__name__}: {exc}")
        return StoreResult.ok(value)

    async def get_value(self, key: str) -> StoreResult[str | None]:
        return await self._run("get", key, lambda: self.client.get(key), None)

    async def increment(self, key: str) -> StoreResult[int | None]:
        return await self._run("incr", key, lambda: self.client.incr(key), None)

    async def expire(self, key: str, seconds: int) -> StoreResult[bool]:
        async def _expire() -> bool:
            return bool(await self.client.expire(key, seconds))

        return await self._run("expire", key, _expire, False)

    async def ttl(self, key: str) -> StoreResult[int | None]:
        return await self._run("ttl", key, lambda: self.client.ttl(key), None)

    async def hash_values(self, key: str) -> StoreResult[dict[str, str]]:
        return await self._run("hgetall", key, lambda: self.client.hgetall(key), {})

    async def list_length(self, key: str) -> StoreResult[int]:
        return await self._run("llen", key, lambda: self.client.llen(key), 0)

    async def list_range(self, key: str, start: int, end: int) -> StoreResult[list[str]]:
        return await self._run(
            "lrange", key, lambda: self.client.lrange(key, start, end), []
        )

    async def list_ranges(
        self, keys: list[str], start: int, end: int
    ) -> StoreResult[list[list[str]]]:
        if not keys:
            return StoreResult.ok([])

        async def _pipelined() -> list[list[str]]:
            async with self.client.pipeline(transaction=False) as pipe:
                for key in keys:
                    pipe.lrange(key, start, end)
                return list(await pipe.execute())

        return await self._run("pipeline_lrange", keys[0], _pipelined, [[] for _ in keys])

    async def ping(self) -> StoreResult[bool]:
        async def _ping() -> bool:
            return bool(await self.client.ping())

        return await self._run("ping", "", _ping, False)

    async def close(self) -> None:
        await self.client.aclose()
