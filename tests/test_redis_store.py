"""Tests for the Redis store adapter and its degraded results."""

import pytest

from activity_connector.adapters.store.base import StoreResult
from activity_connector.adapters.store.factory import create_store
from activity_connector.adapters.store.keys import commits_key, credential_key, rate_limit_key, repos_key
from activity_connector.adapters.store.redis_store import RedisActivityStore
from activity_connector.core.config import RedisSettings


def test_default_key_layout() -> None:
    assert credential_key("alice") == "credential:alice"
    assert repos_key("alice") == "repos:alice"
    assert commits_key("alice", "api") == "commits:alice:api"
    assert rate_limit_key("alice") == "rate_limit:alice"


def test_key_prefixes_are_configurable() -> None:
    cfg = RedisSettings(credential_prefix="PAT:", commits_prefix="c:")

    assert credential_key("alice", cfg) == "PAT:alice"
    assert commits_key("alice", "api", cfg) == "c:alice:api"


def test_create_store_builds_redis_store_without_connecting() -> None:
    store = create_store(RedisSettings(url="redis://127.0.0.1:1/0"))

    assert isinstance(store, RedisActivityStore)


@pytest.mark.asyncio
async def test_commands_return_ok_results(store, sync_redis) -> None:
    sync_redis.set("k", "v")
    sync_redis.hset("h", mapping={"a": "1", "b": "2"})
    sync_redis.rpush("l", "x", "y", "z")

    assert await store.get_value("k") == StoreResult.ok("v")
    assert (await store.get_value("absent")).value is None
    assert (await store.hash_values("h")).value == {"a": "1", "b": "2"}
    assert (await store.list_length("l")).value == 3
    assert (await store.list_range("l", 1, 5)).value == ["y", "z"]
    assert (await store.ping()).value is True


@pytest.mark.asyncio
async def test_counter_primitives(store) -> None:
    assert (await store.increment("c")).value == 1
    assert (await store.increment("c")).value == 2
    assert (await store.ttl("c")).value == -1
    assert (await store.expire("c", 30)).value is True
    assert 0 < (await store.ttl("c")).value <= 30
    assert (await store.expire("missing", 30)).value is False


@pytest.mark.asyncio
async def test_list_ranges_reads_in_one_pipeline(store, sync_redis) -> None:
    sync_redis.rpush("a", "1", "2", "3")
    sync_redis.rpush("b", "4")

    result = await store.list_ranges(["a", "b", "missing"], 0, 1)

    assert result.degraded is False
    assert result.value == [["1", "2"], ["4"], []]
    assert (await store.list_ranges([], 0, 1)).value == []


@pytest.mark.asyncio
async def test_failures_degrade_to_fallbacks(failing_store) -> None:
    results = {
        "get": await failing_store.get_value("k"),
        "incr": await failing_store.increment("k"),
        "expire": await failing_store.expire("k", 10),
        "ttl": await failing_store.ttl("k"),
        "hgetall": await failing_store.hash_values("k"),
        "llen": await failing_store.list_length("k"),
        "lrange": await failing_store.list_range("k", 0, 1),
        "pipeline": await failing_store.list_ranges(["a", "b"], 0, 1),
        "ping": await failing_store.ping(),
    }

    assert all(r.degraded for r in results.values())
    assert all("ConnectionError" in r.error for r in results.values())
    assert results["get"].value is None
    assert results["incr"].value is None
    assert results["hgetall"].value == {}
    assert results["llen"].value == 0
    assert results["pipeline"].value == [[], []]
    assert results["ping"].value is False


@pytest.mark.asyncio
async def test_undecodable_value_is_degraded(store, sync_redis) -> None:
    sync_redis.set("k", b"\xff\xfe")

    result = await store.get_value("k")

    assert result.degraded is True
    assert result.value is None
    assert "UnicodeDecodeError" in result.error
