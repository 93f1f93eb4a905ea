import time

import pytest
from starlette.requests import Request

from main import app
from routers import rate_limit


def _request(peer, forwarded=None) -> Request:
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    return Request({"type": "http", "headers": headers, "client": peer})


@pytest.fixture
def local_quotas(monkeypatch):
    async def redis_down(key, window_seconds):
        raise ConnectionError("redis unavailable")

    monkeypatch.setattr(rate_limit, "_consume_redis_quota", redis_down)
    app.state.disable_rate_limits = False


def test_client_identifier_prefers_socket_peer():
    assert rate_limit._client_identifier(_request(("198.51.100.9", 5000), "10.0.0.1")) == "198.51.100.9"
    assert rate_limit._client_identifier(_request(None, "10.0.0.1, 10.0.0.2")) == "10.0.0.1"
    assert rate_limit._client_identifier(_request(None)) == "unknown"


@pytest.mark.asyncio
async def test_rotating_forwarded_for_does_not_reset_auth_sync_quota(api_client, local_quotas):
    client, _ = api_client

    statuses = []
    for i in range(61):
        response = await client.post(
            "/auth/sync",
            json={"identity_token": "garbage"},
            headers={"x-forwarded-for": f"10.0.0.{i}"},
        )
        statuses.append(response.status_code)

    assert 429 not in statuses[:60]
    assert statuses[60] == 429
    assert response.json()["detail"] == "Rate limit exceeded for auth_sync. Try again later."


@pytest.mark.asyncio
async def test_local_quota_evicts_expired_counters():
    rate_limit._local_counters["vw:rate:cta_click:203.0.113.5"] = (3, time.time() - 1)
    rate_limit._local_counters["vw:rate:cta_click:203.0.113.6"] = (2, time.time() + 60)

    assert await rate_limit._consume_local_quota("vw:rate:cta_click:203.0.113.7", limit=1, window_seconds=60)

    assert "vw:rate:cta_click:203.0.113.5" not in rate_limit._local_counters
    assert rate_limit._local_counters["vw:rate:cta_click:203.0.113.6"][0] == 2
    assert rate_limit._local_counters["vw:rate:cta_click:203.0.113.7"][0] == 1


@pytest.mark.asyncio
async def test_local_quota_restarts_after_window():
    key = "vw:rate:workspace_invite:203.0.113.8"
    rate_limit._local_counters[key] = (50, time.time() - 1)

    assert await rate_limit._consume_local_quota(key, limit=50, window_seconds=3600)
    assert rate_limit._local_counters[key][0] == 1
