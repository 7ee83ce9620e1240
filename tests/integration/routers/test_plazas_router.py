# tests/integration/routers/test_plazas_router.py
from __future__ import annotations

import httpx
import pytest


@pytest.mark.asyncio
async def test_list_plazas(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/plazas")
    assert r.status_code == 200
    assert "Saltillo" in r.json()["data"]["plazas"]


@pytest.mark.asyncio
async def test_plaza_overview_with_capacity(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/plazas/Saltillo", params={"include_capacity": "true"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["plaza"] == "Saltillo"
    assert data["capacity"]["links"] >= 1
    assert data["top_devices"] is None


@pytest.mark.asyncio
async def test_plaza_trends_and_bad_period(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/plazas/Saltillo/trends", params={"period": "7d"})
    assert r.status_code == 200
    assert r.json()["data"]["points"][-1] == {"date": "2025-06-10", "utilization": 50.0}

    bad = await client.get("/v1/plazas/Saltillo/trends", params={"period": "1y"})
    assert bad.status_code == 422
    assert bad.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_blank_plaza_is_unprocessable(client: httpx.AsyncClient) -> None:
    r = await client.get("/v1/plazas/%20%20")
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_latency_route_is_labelled_fallback(client: httpx.AsyncClient) -> None:
    r = await client.get(
        "/v1/plazas/Saltillo/latency", params={"period": "7d", "network_types": "acceso"}
    )
    assert r.status_code == 200, r.text
    assert r.headers["X-Data-Source"] == "fallback"
    assert list(r.json()["data"]["series"]) == ["acceso"]


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"period": "1y"}, {"network_types": "wifi"}])
async def test_latency_route_rejects_bad_input(client: httpx.AsyncClient, params: dict) -> None:
    r = await client.get("/v1/plazas/Saltillo/latency", params=params)
    assert r.status_code == 422
