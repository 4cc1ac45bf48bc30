"""Pytest configuration and fixtures shared across all test modules.

Redis is replaced by fakeredis. A single FakeServer backs both a synchronous
client (used to seed data and inspect keys) and the asynchronous client the
application reads through, so both see the same data.
"""

import json
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator
from unittest.mock import AsyncMock, MagicMock

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "5")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_SECONDS", "60")
os.environ.setdefault("APP_PAGE_SIZE", "20")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import fakeredis
import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from activity_connector.adapters.store.factory import get_store
from activity_connector.adapters.store.redis_store import RedisActivityStore
from activity_connector.core.app_factory import create_app
from activity_connector.services.credential_service import hash_token

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class Seeder:
    """Write records in the layout the ingestion side produces."""

    def __init__(self, client: fakeredis.FakeRedis) -> None:
        self.client = client

    def credential(self, username: str, token: str) -> None:
        self.client.set(f"credential:{username}", hash_token(token))

    def repository(self, username: str, name: str, description: str | None = None, **extra: Any) -> None:
        record = {"name": name, "description": description, **extra}
        self.client.hset(f"repos:{username}", name, json.dumps(record))

    def raw_repository(self, username: str, field: str, raw: str) -> None:
        self.client.hset(f"repos:{username}", field, raw)

    def commits(self, username: str, repo: str, count: int, *, author: str = "octocat") -> list[str]:
        """Push ``count`` commits, newest first; return their messages in order."""
        messages = [f"{repo} commit {i}" for i in range(count)]
        for i, message in enumerate(messages):
            record = {
                "message": message,
                "author": author,
                "timestamp": (BASE_TIME - timedelta(minutes=i)).isoformat(),
            }
            self.client.rpush(f"commits:{username}:{repo}", json.dumps(record))
        return messages

    def raw_commit(self, username: str, repo: str, raw: str) -> None:
        self.client.rpush(f"commits:{username}:{repo}", raw)


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture
def sync_redis(redis_server: fakeredis.FakeServer) -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def seeder(sync_redis: fakeredis.FakeRedis) -> Seeder:
    return Seeder(sync_redis)


@pytest.fixture
def store(redis_server: fakeredis.FakeServer) -> RedisActivityStore:
    """Store over an async fakeredis client (connects lazily in the test's loop)."""
    return RedisActivityStore(fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True))


@pytest.fixture
def failing_store() -> RedisActivityStore:
    """Store whose every Redis command raises ConnectionError."""
    client = MagicMock()
    error = RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")
    for command in ("get", "incr", "expire", "ttl", "hgetall", "llen", "lrange", "ping", "aclose"):
        setattr(client, command, AsyncMock(side_effect=error))
    client.pipeline.side_effect = error
    return RedisActivityStore(client)


def _client_for(store: RedisActivityStore) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def client(store: RedisActivityStore) -> Iterator[TestClient]:
    """Test client whose requests read from the fakeredis-backed store."""
    yield from _client_for(store)


@pytest.fixture
def failing_client(failing_store: RedisActivityStore) -> Iterator[TestClient]:
    yield from _client_for(failing_store)
