# tests/integration/external_apis/test_observium_client.py
from __future__ import annotations

import httpx
import pytest
import respx

from netwatch_api.domain.exceptions.monitoring import (
    UpstreamAuthError,
    UpstreamUnavailable,
    UpstreamValidationError,
)
from netwatch_api.infrastructure.external_apis.observium.client import ObserviumClient
from netwatch_api.infrastructure.external_apis.observium.settings import ObserviumSettings
from netwatch_api.infrastructure.resilience.circuit_breaker import CircuitBreaker, CircuitOpenError
from netwatch_api.infrastructure.resilience.retry import RetryPolicy

API = "https://observium.test/api/v0"


def _client(*, retries: int = 2, breaker: CircuitBreaker | None = None) -> ObserviumClient:
    settings = ObserviumSettings(
        api_url=API, username="ops", password="s3cret", max_retries=retries
    )
    return ObserviumClient(
        settings,
        retry_policy=RetryPolicy(total=retries, base=0.0, cap=0.0, jitter=False),
        breaker=breaker,
    )


@pytest.mark.asyncio
async def test_get_sends_basic_auth_and_drops_none_params() -> None:
    client = _client()
    with respx.mock:
        route = respx.get(f"{API}/devices").mock(
            return_value=httpx.Response(200, json={"status": "ok", "devices": {}})
        )
        body = await client.get("devices", {"pagesize": 10, "location": None})
    await client.aclose()

    assert body["status"] == "ok"
    request = route.calls.last.request
    assert request.url.params["pagesize"] == "10"
    assert "location" not in request.url.params
    assert request.headers["authorization"].startswith("Basic ")
    assert request.headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_retries_transient_errors_then_succeeds() -> None:
    client = _client(retries=2)
    with respx.mock:
        route = respx.get(f"{API}/ports").mock(
            side_effect=[
                httpx.Response(503),
                httpx.ConnectError("refused"),
                httpx.Response(200, json={"ports": []}),
            ]
        )
        assert await client.get("ports") == {"ports": []}
        assert route.call_count == 3
    await client.aclose()


@pytest.mark.asyncio
async def test_exhausted_retries_raise_unavailable() -> None:
    client = _client(retries=1)
    with respx.mock:
        respx.get(f"{API}/alerts").mock(return_value=httpx.Response(500))
        with pytest.raises(UpstreamUnavailable) as info:
            await client.get("alerts")
    assert info.value.details == {"resource": "alerts", "status": 500}
    await client.aclose()


@pytest.mark.asyncio
async def test_auth_errors_are_not_retried() -> None:
    client = _client(retries=3)
    with respx.mock:
        route = respx.get(f"{API}/devices").mock(return_value=httpx.Response(401))
        with pytest.raises(UpstreamAuthError):
            await client.get("devices")
        assert route.call_count == 1
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "kwargs"),
    [
        (200, {"text": "<html>"}),
        (200, {"json": [1, 2]}),
        (200, {"json": {"status": "failed", "message": "bad query"}}),
        (404, {}),
    ],
)
async def test_shape_errors(status: int, kwargs: dict) -> None:
    client = _client()
    with respx.mock:
        respx.get(f"{API}/bills").mock(return_value=httpx.Response(status, **kwargs))
        with pytest.raises(UpstreamValidationError):
            await client.get("bills")
    await client.aclose()


@pytest.mark.asyncio
async def test_open_breaker_fails_fast() -> None:
    breaker = CircuitBreaker(failure_threshold=1, recovery_timeout_s=60)
    client = _client(retries=0, breaker=breaker)
    with respx.mock:
        route = respx.get(f"{API}/devices").mock(return_value=httpx.Response(502))
        with pytest.raises(UpstreamUnavailable):
            await client.get("devices")
        with pytest.raises(CircuitOpenError):
            await client.get("devices")
        assert route.call_count == 1
    await client.aclose()


@pytest.mark.asyncio
async def test_ping_uses_one_row_query() -> None:
    client = _client()
    with respx.mock:
        route = respx.get(f"{API}/devices").mock(
            return_value=httpx.Response(200, json={"devices": []})
        )
        assert await client.ping() is True
        assert route.calls.last.request.url.params["pagesize"] == "1"
    await client.aclose()
