"""Redis key builders for the activity store layout."""

from __future__ import annotations

from activity_connector.core.config import RedisSettings, settings


def _cfg(redis_settings: RedisSettings | None) -> RedisSettings:
    return redis_settings or settings.redis


def credential_key(username: str, redis_settings: RedisSettings | None = None) -> str:
    return f"{_cfg(redis_settings).credential_prefix}{username}"


def repos_key(username: str, redis_settings: RedisSettings | None = None) -> str:
    return f"{_cfg(redis_settings).repos_prefix}{username}"


def commits_key(
    username: str, repo_name: str, redis_settings: RedisSettings | None = None
) -> str:
    return f"{_cfg(redis_settings).commits_prefix}{username}:{repo_name}"


def rate_limit_key(username: str, redis_settings: RedisSettings | None = None) -> str:
    return f"{_cfg(redis_settings).rate_limit_prefix}{username}"
