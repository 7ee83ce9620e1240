# tests/integration/routers/test_monitoring_router.py
from __future__ import annotations

import httpx
import pytest


@pytest.mark.asyncio
async def test_snapshot_envelope_headers_and_meta(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/monitoring", params={"plaza": "Saltillo"})
    assert r.status_code == 200

    body = r.json()
    assert set(body) == {"data", "meta"}
    assert body["data"]["stats"]["total_devices"] == 2
    meta = body["meta"]
    assert meta["source"] == "live"
    assert meta["origin"] == "live"
    assert meta["cached"] is False
    assert meta["requested_scope"] == meta["served_scope"] == "Saltillo"

    assert r.headers["X-Data-Source"] == "live"
    assert r.headers["ETag"].startswith('"') and r.headers["ETag"].endswith('"')
    assert r.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_cache_hit_keeps_etag(client: httpx.AsyncClient) -> None:
    first = await client.get("/v1/monitoring")
    second = await client.get("/v1/monitoring")

    assert second.json()["meta"]["source"] == "cache"
    assert second.json()["meta"]["cached"] is True
    assert second.headers["ETag"] == first.headers["ETag"]


@pytest.mark.asyncio
async def test_partial_answer_reports_served_scope(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/monitoring", params={"plaza": "Laredo"})
    meta = r.json()["meta"]
    assert r.headers["X-Data-Source"] == "partial"
    assert (meta["requested_scope"], meta["served_scope"]) == ("Laredo", "all")


@pytest.mark.asyncio
async def test_demo_data_is_labelled(client: httpx.AsyncClient, gateway) -> None:
    gateway.fail = True
    r = await client.get("/v1/monitoring")
    assert r.status_code == 200
    assert r.headers["X-Data-Source"] == "demo"
    assert r.json()["data"]["source_kind"] == "demo"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/monitoring", headers={"X-Request-ID": "req-42"})
    assert r.headers["X-Request-ID"] == "req-42"
    assert r.headers["x-trace-id"] == "req-42"


@pytest.mark.asyncio
async def test_push_dashboard_then_summary(client: httpx.AsyncClient, generator) -> None:
    pushed = await client.post(
        "/v1/monitoring/dashboard",
        json={
            "plaza": "Saltillo",
            "devices": [{"device_id": "9", "hostname": "sal-edge", "is_up": True}],
        },
    )
    assert pushed.status_code == 201
    assert pushed.headers["X-Data-Source"] == "dashboard"

    r = await client.get("/v1/monitoring/summary", params={"plaza": "Saltillo"})
    assert r.status_code == 200
    assert r.json()["data"]["data_source"] == "dashboard"
    assert r.json()["data"]["generated"] is True
    assert len(generator.requests) == 1


@pytest.mark.asyncio
async def test_push_requires_devices(client: httpx.AsyncClient) -> None:
    r = await client.post("/v1/monitoring/dashboard", json={"plaza": "Saltillo", "devices": []})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_invalidate_cache(client: httpx.AsyncClient, gateway) -> None:
    await client.get("/v1/monitoring")
    r = await client.delete("/v1/monitoring/cache")
    assert r.status_code == 200
    assert r.json() == {"data": {"invalidated": ["monitoring-data:all", "dashboard-data:all"]}}

    again = await client.get("/v1/monitoring")
    assert again.json()["meta"]["source"] == "live"
    assert gateway.count("devices") == 2


@pytest.mark.asyncio
async def test_device_detail_route(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/monitoring/devices/1", params={"include_attention": "false"})
    assert r.status_code == 200, r.text
    assert r.json()["data"]["device"]["device_id"] == "1"
    assert r.json()["data"]["attention"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize(("device_id", "status_code"), [("999", 404), ("abc", 422)])
async def test_device_detail_errors(
    client: httpx.AsyncClient, device_id: str, status_code: int
) -> None:
    r = await client.get(f"/v1/monitoring/devices/{device_id}")
    assert r.status_code == status_code


@pytest.mark.asyncio
async def test_unknown_device_while_upstream_down_is_unavailable(
    client: httpx.AsyncClient, gateway
) -> None:
    gateway.fail = True
    r = await client.get("/v1/monitoring/devices/1")
    assert r.status_code == 503


@pytest.mark.asyncio
async def test_saturated_and_port_alert_routes(client: httpx.AsyncClient, gateway) -> None:
    saturated = await client.get("/v1/monitoring/saturated-sites", params={"limit": 1})
    assert saturated.status_code == 200
    assert len(saturated.json()["data"]["sites"]) == 1

    ranked = await client.get("/v1/classification/most-saturated-sites")
    assert ranked.status_code == 200
    assert ranked.json()["data"]["total_sites"] == 2

    gateway.fail = True
    alerts = await client.get("/v1/monitoring/port-alerts")
    assert alerts.headers["X-Data-Source"] == "demo"
    assert [a["entity_type"] for a in alerts.json()["data"]["alerts"]] == ["port"]


@pytest.mark.asyncio
async def test_alerts_route_filters(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/alerts", params={"severity": "warning"})
    assert r.status_code == 200
    assert [a["alert_id"] for a in r.json()["data"]["alerts"]] == ["a2"]

    bad = await client.get("/v1/alerts", params={"limit": 0})
    assert bad.status_code == 422
