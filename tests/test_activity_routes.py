"""HTTP tests for the activity and commits endpoints.

Covers the request pipeline end to end: Authorization header parsing, PAT
verification, per-user rate limiting, pagination and the error body shape.
"""

from unittest.mock import AsyncMock

import pytest

from activity_connector.adapters.store.base import StoreResult

TOKEN = "ghp_alice_secret"


@pytest.fixture
def bearer() -> dict[str, str]:
    return {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture
def alice(seeder):
    seeder.credential("alice", TOKEN)
    return seeder


class TestAuthentication:
    def test_missing_header_returns_401(self, client, alice) -> None:
        resp = client.get("/api/v1/activity/alice")

        assert resp.status_code == 401
        body = resp.json()
        assert body["error"] == "Authentication Failed"
        assert body["message"] == "Missing or invalid Authorization header"
        assert body["status"] == 401

    @pytest.mark.parametrize("header", ["Basic dXNlcjpwYXNz", "Bearer", "Bearer    ", TOKEN])
    def test_malformed_header_returns_401(self, client, alice, header: str) -> None:
        resp = client.get("/api/v1/activity/alice", headers={"Authorization": header})

        assert resp.status_code == 401
        assert resp.json()["message"] == "Missing or invalid Authorization header"

    def test_unknown_user_and_wrong_token_are_indistinguishable(self, client, alice, bearer) -> None:
        unknown = client.get("/api/v1/activity/mallory", headers=bearer)
        wrong = client.get("/api/v1/activity/alice", headers={"Authorization": "Bearer nope"})

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json()["message"] == wrong.json()["message"] == "Invalid Personal Access Token"

    def test_token_scheme_is_accepted(self, client, alice) -> None:
        resp = client.get("/api/v1/activity/alice", headers={"Authorization": f"token {TOKEN}"})

        assert resp.status_code == 200

    def test_store_outage_fails_closed(self, failing_client) -> None:
        resp = failing_client.get("/api/v1/activity/alice", headers={"Authorization": f"Bearer {TOKEN}"})

        assert resp.status_code == 401


class TestRateLimiting:
    def test_sixth_request_is_throttled(self, client, alice, bearer) -> None:
        statuses = [client.get("/api/v1/activity/alice", headers=bearer).status_code for _ in range(5)]
        throttled = client.get("/api/v1/activity/alice", headers=bearer)

        assert statuses == [200] * 5
        assert throttled.status_code == 429
        body = throttled.json()
        assert body["error"] == "Rate Limit Exceeded"
        assert body["status"] == 429
        assert 0 < body["retryAfterSeconds"] <= 60
        assert throttled.headers["Retry-After"] == str(body["retryAfterSeconds"])
        assert throttled.headers["X-RateLimit-Limit"] == "5"
        assert throttled.headers["X-RateLimit-Remaining"] == "0"

    def test_both_endpoints_share_one_budget(self, client, alice, bearer) -> None:
        for _ in range(3):
            assert client.get("/api/v1/activity/alice", headers=bearer).status_code == 200
        for _ in range(2):
            assert client.get("/api/v1/commits/alice/api", headers=bearer).status_code == 200

        assert client.get("/api/v1/commits/alice/api", headers=bearer).status_code == 429

    def test_failed_authentication_does_not_consume_budget(self, client, alice, bearer, sync_redis) -> None:
        for _ in range(10):
            client.get("/api/v1/activity/alice", headers={"Authorization": "Bearer nope"})

        assert sync_redis.get("rate_limit:alice") is None
        assert client.get("/api/v1/activity/alice", headers=bearer).status_code == 200

    def test_counter_outage_fails_open(self, client, store, alice, bearer) -> None:
        store.increment = AsyncMock(return_value=StoreResult.failed(None, "timeout"))

        statuses = {client.get("/api/v1/activity/alice", headers=bearer).status_code for _ in range(8)}

        assert statuses == {200}


class TestActivityEndpoint:
    def test_returns_repositories_with_commits(self, client, alice, bearer) -> None:
        alice.repository("alice", "api", description="REST API")
        alice.repository("alice", "web")
        alice.commits("alice", "api", 3)

        resp = client.get("/api/v1/activity/alice", headers=bearer)

        assert resp.status_code == 200
        body = resp.json()
        assert body["page"] == 0
        assert body["size"] == 20
        assert body["totalElements"] == 2
        assert body["totalPages"] == 1
        assert body["hasNext"] is False
        api = body["items"][0]
        assert api["name"] == "api"
        assert api["description"] == "REST API"
        assert len(api["recentCommits"]) == 3
        assert set(api["recentCommits"][0]) == {"message", "author", "timestamp"}

    def test_page_past_end_is_empty(self, client, alice, bearer) -> None:
        alice.repository("alice", "api")

        body = client.get("/api/v1/activity/alice", params={"page": 1}, headers=bearer).json()

        assert body["items"] == []
        assert body["totalElements"] == 1

    def test_non_integer_page_returns_422(self, client, alice, bearer) -> None:
        resp = client.get("/api/v1/activity/alice", params={"page": "two"}, headers=bearer)

        assert resp.status_code == 422
        body = resp.json()
        assert body["status"] == 422
        assert "page" in body["message"]


class TestCommitsEndpoint:
    def test_third_page_of_forty_five(self, client, alice, bearer) -> None:
        messages = alice.commits("alice", "api", 45)

        body = client.get("/api/v1/commits/alice/api", params={"page": 2}, headers=bearer).json()

        assert [c["message"] for c in body["items"]] == messages[40:]
        assert body["totalElements"] == 45
        assert body["hasPrevious"] is True

    def test_read_failure_returns_empty_page(self, client, store, alice, bearer) -> None:
        store.list_length = AsyncMock(return_value=StoreResult.failed(0, "timeout"))

        resp = client.get("/api/v1/commits/alice/api", headers=bearer)

        assert resp.status_code == 200
        assert resp.json()["items"] == []
        assert resp.json()["totalElements"] == 0


class TestHealth:
    def test_liveness(self, client) -> None:
        assert client.get("/health").json() == {"status": "ok"}

    def test_readiness_up(self, client) -> None:
        resp = client.get("/health/ready")

        assert resp.status_code == 200
        assert resp.json()["store"] == "up"

    def test_readiness_down(self, failing_client) -> None:
        resp = failing_client.get("/health/ready")

        assert resp.status_code == 503
        assert resp.json()["store"] == "down"

    def test_unknown_route_uses_error_shape(self, client) -> None:
        resp = client.get("/api/v1/nope")

        assert resp.status_code == 404
        assert resp.json()["status"] == 404
        assert "error" in resp.json()
