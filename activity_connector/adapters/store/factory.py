"""Factory for the process-wide activity store."""

from __future__ import annotations

import logging

from redis.asyncio import Redis

from activity_connector.adapters.store.base import AbstractActivityStore
from activity_connector.adapters.store.redis_store import RedisActivityStore
from activity_connector.core.config import RedisSettings, settings

logger = logging.getLogger(__name__)

_store: AbstractActivityStore | None = None


def create_store(redis_settings: RedisSettings | None = None) -> AbstractActivityStore:
    """Build a Redis-backed store from configuration.

    The client connects lazily, so creating the store never touches the network.

    Args:
        redis_settings: Optional Redis settings; defaults to global settings.

    Returns:
        AbstractActivityStore: Configured store instance.
    """
    cfg = redis_settings or settings.redis
    client = Redis.from_url(
        cfg.url,
        decode_responses=True,
        socket_timeout=cfg.socket_timeout_seconds,
        socket_connect_timeout=cfg.socket_timeout_seconds,
    )
    return RedisActivityStore(client)


def get_store() -> AbstractActivityStore:
    """FastAPI dependency returning the shared store (created on first use)."""

    global _store

    if _store is None:
        _store = create_store()
        logger.info("store.created", extra={"backend": "redis"})
    return _store


async def close_store() -> None:
    """Close the shared store if it was created."""

    global _store

    if _store is not None:
        await _store.close()
        _store = None
        logger.info("store.closed")
