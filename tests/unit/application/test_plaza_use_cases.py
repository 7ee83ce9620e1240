# tests/unit/application/test_plaza_use_cases.py
from __future__ import annotations

from datetime import date

import pytest

from netwatch_api.dependencies.container import DashboardContainer
from netwatch_api.domain.enums.monitoring import ResolutionSource, SourceKind
from netwatch_api.domain.services.demo_data import DEFAULT_PLAZAS
from netwatch_api.infrastructure.persistence.trend_history_store import TrendHistoryStore


@pytest.mark.asyncio
async def test_list_plazas_merges_locations_with_defaults(container: DashboardContainer) -> None:
    res = await container.list_plazas.execute()

    assert res.origin is SourceKind.LIVE
    plazas = res.value["plazas"]
    assert plazas == sorted(plazas)
    assert {"Saltillo Centro", "Monterrey Norte"} <= set(plazas)
    assert set(DEFAULT_PLAZAS) <= set(plazas)


@pytest.mark.asyncio
async def test_list_plazas_falls_back_to_defaults(container: DashboardContainer, gateway) -> None:
    gateway.fail = True
    res = await container.list_plazas.execute()

    assert res.source is ResolutionSource.FALLBACK
    assert res.value == {"plazas": sorted(DEFAULT_PLAZAS), "source_kind": "fallback"}


@pytest.mark.asyncio
async def test_overview_counts_and_optional_sections(container: DashboardContainer) -> None:
    res = await container.plaza_overview.execute(
        "Saltillo", include_capacity=True, include_top_devices=True, top_devices_limit=1
    )

    overview = res.value
    assert overview["plaza"] == "Saltillo"
    assert (overview["devices_total"], overview["devices_up"]) == (2, 1)
    assert (overview["ports_total"], overview["ports_up"]) == (2, 1)
    assert [a["alert_id"] for a in overview["alerts"]] == ["a1"]
    assert overview["capacity"] is not None
    assert len(overview["top_devices"]) == 1

    bare = await container.plaza_overview.execute("Saltillo")
    assert bare.source is ResolutionSource.LIVE
    assert bare.value["capacity"] is None
    assert bare.value["top_devices"] is None


@pytest.mark.asyncio
async def test_overview_demo_when_plaza_unknown(container: DashboardContainer) -> None:
    res = await container.plaza_overview.execute("Queretaro")

    assert res.source is ResolutionSource.DEMO
    assert res.value["source_kind"] == "demo"


@pytest.mark.asyncio
async def test_overview_rejects_blank_plaza(container: DashboardContainer) -> None:
    with pytest.raises(ValueError):
        await container.plaza_overview.execute("   ")


@pytest.mark.asyncio
async def test_trends_record_today_and_window_history(
    container: DashboardContainer, history: TrendHistoryStore
) -> None:
    history.record("plaza:Saltillo", date(2025, 5, 1), 99.0)
    history.record("plaza:Saltillo", date(2025, 6, 5), 40.0)

    res = await container.plaza_trends.execute("Saltillo")

    trends = res.value
    assert trends["source_kind"] == "live"
    assert trends["points"] == [
        {"date": "2025-06-05", "utilization": 40.0},
        {"date": "2025-06-10", "utilization": 50.0},
    ]
    assert trends["summary"]["average"]["value"] == 45.0
    assert trends["summary"]["maximum"]["value"] == 50.0
    assert len(history.history("plaza:Saltillo")) == 3


@pytest.mark.asyncio
async def test_trends_synthetic_when_upstream_down(
    container: DashboardContainer, gateway, history: TrendHistoryStore
) -> None:
    gateway.fail = True
    res = await container.plaza_trends.execute("Saltillo", period="30d")

    assert res.source is ResolutionSource.FALLBACK
    assert res.value["period"] == "30d"
    assert res.value["points"]
    assert history.series_ids() == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("plaza", "period", "interval"),
    [("", "7d", "day"), ("Saltillo", "1y", "day"), ("Saltillo", "7d", "hour")],
)
async def test_trends_reject_bad_arguments(
    container: DashboardContainer, plaza: str, period: str, interval: str
) -> None:
    with pytest.raises(ValueError):
        await container.plaza_trends.execute(plaza, period=period, interval=interval)
