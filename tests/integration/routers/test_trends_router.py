# tests/integration/routers/test_trends_router.py
from __future__ import annotations

import httpx
import pytest


@pytest.mark.asyncio
async def test_record_and_read_link(client: httpx.AsyncClient) -> None:
    put = await client.put(
        "/v1/trends/links/sal-mty-01", json={"value": 63.5, "observed_on": "2025-05-20"}
    )
    assert put.status_code == 200
    assert set(put.json()) == {"data"}
    sample = put.json()["data"]["samples"][0]
    assert (sample["period_start"], sample["value"]) == ("2025-05-16", 63.5)

    got = await client.get("/v1/trends/links/sal-mty-01")
    assert got.json()["data"]["link_id"] == "sal-mty-01"
    assert len(got.json()["data"]["samples"]) == 1


@pytest.mark.asyncio
async def test_out_of_range_reading_is_rejected(client: httpx.AsyncClient) -> None:
    r = await client.put("/v1/trends/links/l1", json={"value": 120})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_export_import_stats(client: httpx.AsyncClient) -> None:
    await client.put("/v1/trends/links/l1", json={"value": 10})
    exported = (await client.get("/v1/trends/export")).json()["data"]
    assert exported["version"] == 1
    assert "link:l1" in exported["series"]

    imported = await client.post("/v1/trends/import", json=exported)
    assert imported.json()["data"] == {"imported_samples": 1, "series_count": 1}

    stats = (await client.get("/v1/trends/stats")).json()["data"]
    assert stats["series_count"] == 1
    assert stats["total_samples"] == 1


@pytest.mark.asyncio
async def test_malformed_import_is_422(client: httpx.AsyncClient) -> None:
    r = await client.post("/v1/trends/import", json={"series": {"a": [{"value": 1}]}})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "INVALID_TREND_DATA"
