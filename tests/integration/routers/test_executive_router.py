# tests/integration/routers/test_executive_router.py
from __future__ import annotations

import httpx
import pytest


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("path", "params"),
    [
        ("/v1/executive/capacity-utilization", {"plazas": "Saltillo, Monterrey"}),
        ("/v1/executive/infrastructure-health", {"include_details": "true"}),
        ("/v1/executive/critical-sites", {"limit": 5, "threshold": 40}),
        ("/v1/executive/growth-trends", {"period": "1y", "metric": "traffic"}),
        ("/v1/executive/network-consumption", {}),
    ],
)
async def test_views_answer_live(client: httpx.AsyncClient, path: str, params: dict) -> None:
    r = await client.get(path, params=params)
    assert r.status_code == 200, r.text
    assert r.headers["X-Data-Source"] == "live"
    assert r.json()["data"]["source_kind"] == "live"


@pytest.mark.asyncio
async def test_capacity_fallback_when_upstream_down(client: httpx.AsyncClient, gateway) -> None:
    gateway.fail = True
    r = await client.get("/v1/executive/capacity-utilization")
    assert r.status_code == 200
    assert r.headers["X-Data-Source"] == "fallback"
    assert r.json()["meta"]["cache_ttl_remaining_s"] <= 60


@pytest.mark.asyncio
async def test_unknown_growth_metric_is_rejected(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/executive/growth-trends", params={"metric": "revenue"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_executive_summary_get_and_post(client: httpx.AsyncClient, generator) -> None:
    r = await client.get("/v1/executive/summary")
    assert r.status_code == 200
    assert r.json()["data"]["generated"] is True
    assert r.json()["data"]["figures"]["critical_sites"] is not None

    posted = await client.post(
        "/v1/executive/summary",
        params={"skip_cache": "true"},
        json={"dashboard_data": {"capacity": {"average_utilization_pct": 12.5}}},
    )
    assert posted.status_code == 200
    assert posted.headers["X-Data-Source"] == "dashboard"
    assert generator.requests[-1][1] == {"capacity": {"average_utilization_pct": 12.5}}


@pytest.mark.asyncio
async def test_summary_not_configured(client: httpx.AsyncClient, generator) -> None:
    generator._configured = False
    r = await client.get("/v1/executive/summary")
    assert r.status_code == 200
    assert r.json()["data"]["generated"] is False
    assert r.json()["meta"]["cache_ttl_remaining_s"] == 0.0


@pytest.mark.asyncio
async def test_environmental_and_network_health_routes(client: httpx.AsyncClient) -> None:
    env = await client.get(
        "/v1/executive/environmental-monitoring",
        params={"sensor_type": "temperature", "alert_threshold": 30},
    )
    assert env.status_code == 200, env.text
    assert env.json()["data"]["alert_threshold"] == 30

    health = await client.get("/v1/executive/network-health", params={"include_details": "true"})
    assert health.status_code == 200
    assert health.json()["data"]["status"] == "poor"
    assert len(health.json()["data"]["locations"]) == 2


@pytest.mark.asyncio
async def test_environmental_rejects_unknown_sensor_type(client: httpx.AsyncClient) -> None:
    r = await client.get(
        "/v1/executive/environmental-monitoring", params={"sensor_type": "pressure"}
    )
    assert r.status_code == 422
