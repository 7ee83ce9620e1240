# tests/unit/application/test_monitoring_use_cases.py
from __future__ import annotations

import pytest

from netwatch_api.application.schemas.dto.monitoring import DashboardSnapshotDTO
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.summary_text import FAILED_MESSAGE, NOT_CONFIGURED_MESSAGE
from netwatch_api.dependencies.container import DashboardContainer
from netwatch_api.domain.enums.monitoring import ResolutionSource, SourceKind
from netwatch_api.domain.exceptions.monitoring import ConfigurationError


@pytest.mark.asyncio
async def test_snapshot_for_plaza_is_live_and_filtered(container: DashboardContainer) -> None:
    res = await container.monitoring_snapshot.execute("  Saltillo ")

    assert res.source is ResolutionSource.LIVE
    assert res.origin is SourceKind.LIVE
    snapshot = res.value
    assert snapshot["plaza"] == "Saltillo"
    assert snapshot["source_kind"] == "live"
    assert [a["alert_id"] for a in snapshot["alerts"]] == ["a1"]

    stats = snapshot["stats"]
    assert (stats["total_devices"], stats["devices_up"]) == (2, 1)
    assert (stats["total_ports"], stats["ports_up"]) == (2, 1)
    assert (stats["critical_alerts"], stats["warning_alerts"]) == (1, 0)
    assert stats["device_availability"]["value"] == 50.0
    assert stats["average_utilization"]["value"] == 50.0
    assert stats["max_utilization"]["value"] == 50.0


@pytest.mark.asyncio
async def test_snapshot_second_call_is_cached(container: DashboardContainer, gateway) -> None:
    first = await container.monitoring_snapshot.execute()
    second = await container.monitoring_snapshot.execute()

    assert second.source is ResolutionSource.CACHE
    assert second.origin is SourceKind.LIVE
    assert second.timestamp == first.timestamp
    assert second.value == first.value
    assert gateway.count("devices") == 1

    refreshed = await container.monitoring_snapshot.execute(refresh=True)
    assert refreshed.source is ResolutionSource.LIVE
    assert gateway.count("devices") == 2


@pytest.mark.asyncio
async def test_unknown_plaza_falls_back_to_partial(container: DashboardContainer) -> None:
    res = await container.monitoring_snapshot.execute("Laredo")

    assert res.source is ResolutionSource.PARTIAL
    assert res.value["plaza"] == "Laredo"
    assert res.value["source_kind"] == "partial"
    assert res.value["stats"]["total_devices"] == 3


@pytest.mark.asyncio
async def test_upstream_down_serves_demo(container: DashboardContainer, gateway) -> None:
    gateway.fail = True
    res = await container.monitoring_snapshot.execute("Saltillo")

    assert res.source is ResolutionSource.DEMO
    assert res.is_synthetic
    assert res.value["source_kind"] == "demo"
    assert res.cache_ttl_remaining_s <= container.config.ttl_fallback_s


@pytest.mark.asyncio
@pytest.mark.parametrize("dashboard_config", [DashboardConfig(demo_data_enabled=False)])
async def test_demo_disabled_raises_configuration_error(
    container: DashboardContainer, gateway
) -> None:
    gateway.fail = True
    with pytest.raises(ConfigurationError) as info:
        await container.monitoring_snapshot.execute()
    assert info.value.details == {"cache_key": "monitoring-data:all"}


def _pushed() -> DashboardSnapshotDTO:
    return DashboardSnapshotDTO.model_validate(
        {
            "plaza": "Saltillo",
            "devices": [
                {"device_id": "9", "hostname": "sal-edge", "is_up": True},
                {"device_id": "8", "hostname": "sal-core", "is_up": False},
            ],
            "alerts": [{"alert_id": "x", "device_id": "8", "severity": "warning"}],
        }
    )


@pytest.mark.asyncio
async def test_store_and_invalidate_dashboard_data(container: DashboardContainer) -> None:
    stored = await container.monitoring_snapshot.store_dashboard(_pushed())

    assert stored.origin is SourceKind.DASHBOARD
    assert stored.value["stats"]["devices_up"] == 1
    assert stored.value["stats"]["warning_alerts"] == 1
    assert await container.policy.cached("dashboard-data:Saltillo") is not None

    keys = await container.monitoring_snapshot.invalidate("Saltillo")
    assert keys == ["monitoring-data:Saltillo", "dashboard-data:Saltillo"]
    assert await container.policy.cached("dashboard-data:Saltillo") is None


@pytest.mark.asyncio
async def test_summary_is_generated_once_and_cached(
    container: DashboardContainer, generator
) -> None:
    first = await container.monitoring_summary.execute("Saltillo")

    assert first.value["generated"] is True
    assert first.value["summary"].startswith("Resumen de prueba.")
    assert "datos actuales del sistema de monitoreo" in first.value["summary"]
    assert first.value["figures"]["total_devices"] == 2
    kind, payload = generator.requests[0]
    assert kind.value == "monitoring"
    assert payload["plaza"] == "Saltillo"
    assert payload["data_source"] == "live"

    second = await container.monitoring_summary.execute("Saltillo")
    assert second.source is ResolutionSource.CACHE
    assert len(generator.requests) == 1

    await container.monitoring_summary.execute("Saltillo", skip_cache=True)
    assert len(generator.requests) == 2


@pytest.mark.asyncio
async def test_summary_prefers_pushed_dashboard_data(
    container: DashboardContainer, gateway, generator
) -> None:
    await container.monitoring_snapshot.store_dashboard(_pushed())
    res = await container.monitoring_summary.execute("Saltillo")

    assert res.value["data_source"] == "dashboard"
    assert "dashboard técnico" in res.value["summary"]
    assert gateway.count("devices") == 0
    assert generator.requests[0][1]["data_source"] == "dashboard"


@pytest.mark.asyncio
async def test_summary_without_generator_is_static_and_uncached(
    container: DashboardContainer, generator
) -> None:
    generator._configured = False
    res = await container.monitoring_summary.execute()

    assert res.value["summary"] == NOT_CONFIGURED_MESSAGE
    assert res.value["generated"] is False
    assert res.cache_ttl_remaining_s == 0.0
    assert generator.requests == []
    assert await container.policy.cached("executive-summary:all") is None


@pytest.mark.asyncio
async def test_summary_failure_is_static(container: DashboardContainer, generator) -> None:
    generator.fail = True
    res = await container.monitoring_summary.execute()

    assert res.value["summary"] == FAILED_MESSAGE
    assert res.value["generated"] is False
    assert await container.policy.cached("executive-summary:all") is None


@pytest.mark.asyncio
async def test_summary_over_demo_data_says_so(
    container: DashboardContainer, gateway
) -> None:
    gateway.fail = True
    res = await container.monitoring_summary.execute()

    assert res.origin is SourceKind.DEMO
    assert res.value["data_source"] == "demo"
    assert "datos de prueba" in res.value["summary"]
    assert res.cache_ttl_remaining_s == container.config.ttl_fallback_s
    cached = await container.policy.cached("executive-summary:all")
    assert cached is not None
    assert cached.cache_ttl_remaining_s <= container.config.ttl_fallback_s


@pytest.mark.asyncio
async def test_summary_over_cached_snapshot_mentions_cache(container: DashboardContainer) -> None:
    await container.monitoring_snapshot.execute()
    res = await container.monitoring_summary.execute()

    assert res.value["data_source"] == "live"
    assert "datos en caché" in res.value["summary"]
