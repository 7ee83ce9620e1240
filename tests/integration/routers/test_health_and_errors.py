# tests/integration/routers/test_health_and_errors.py
from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.main import create_app


@pytest.mark.asyncio
async def test_liveness(client: httpx.AsyncClient) -> None:
    r = await client.get("/health/z")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_readiness_ok_and_degraded(client: httpx.AsyncClient, probe) -> None:
    ok = await client.get("/health/readiness")
    assert ok.status_code == 200
    assert ok.json()["status"] == "ok"
    assert [c["name"] for c in ok.json()["checks"]] == ["cache", "upstream"]

    probe.upstream_ok = False
    degraded = await client.get("/health/readiness")
    assert degraded.status_code == 503
    body = degraded.json()
    assert body["status"] == "degraded"
    assert body["checks"][1]["status"] == "down"


@pytest.mark.asyncio
async def test_metrics_exposition(client: httpx.AsyncClient) -> None:
    await client.get("/v1/plazas")
    r = await client.get("/metrics")
    assert r.status_code == 200
    assert "netwatch_resolutions" in r.text


@pytest.mark.asyncio
@pytest.mark.parametrize("dashboard_config", [DashboardConfig(demo_data_enabled=False)])
async def test_no_fallback_is_configuration_error(client: httpx.AsyncClient, gateway) -> None:
    gateway.fail = True
    r = await client.get("/v1/monitoring", headers={"X-Request-ID": "req-7"})
    assert r.status_code == 500
    error = r.json()["error"]
    assert error["code"] == "CONFIGURATION_ERROR"
    assert error["details"] == {"cache_key": "monitoring-data:all"}
    assert error["trace_id"] == "req-7"


@pytest.mark.asyncio
async def test_missing_container_is_configuration_error() -> None:
    app: FastAPI = create_app(lifespan=False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/v1/plazas")
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "CONFIGURATION_ERROR"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/nope")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "HTTP_ERROR"
