# tests/unit/application/test_dashboard_views.py
from __future__ import annotations

from dataclasses import replace

import pytest

from netwatch_api.application.use_cases.monitoring.get_device_detail import HEALTH_WARNING
from netwatch_api.application.use_cases.monitoring.list_alerts import AlertFilter, filter_alerts
from netwatch_api.application.use_cases.plazas.get_plaza_latency import (
    NO_DEVICES_WARNING,
    parse_network_types,
)
from netwatch_api.dependencies.container import DashboardContainer
from netwatch_api.domain.entities.records import Alert, Sensor
from netwatch_api.domain.enums.monitoring import (
    AlertSeverity,
    ResolutionSource,
    SensorType,
    SourceKind,
)
from netwatch_api.domain.exceptions.monitoring import EmptyResult, UpstreamUnavailable


# --------------------------------------------------------------------------- #
# Environmental monitoring                                                    #
# --------------------------------------------------------------------------- #
@pytest.mark.asyncio
async def test_environmental_flags_hot_sensors(container: DashboardContainer) -> None:
    res = await container.environmental_monitoring.execute(sensor_type=SensorType.TEMPERATURE)

    report = res.value
    assert report["source_kind"] == "live"
    assert [(a["device"], a["severity"]) for a in report["alerts"]] == [
        ("SAL-PZA-01-rtr", "warning")
    ]
    figures = report["figures"]
    assert figures["average_temperature"]["value"] == 37.5
    assert (figures["max_temperature"], figures["min_temperature"]) == (40.0, 35.0)
    assert figures["temperature_alerts"] == 1
    assert figures["sensors_online"] == 2
    statuses = {loc["location"]: loc["status"] for loc in report["locations"]}
    assert statuses == {"Saltillo": "warning", "Monterrey": "normal"}


@pytest.mark.asyncio
async def test_environmental_threshold_drives_severity(container: DashboardContainer) -> None:
    res = await container.environmental_monitoring.execute(alert_threshold=30)

    severities = sorted(a["severity"] for a in res.value["alerts"])
    assert severities == ["critical", "warning"]
    assert res.value["alert_threshold"] == 30


@pytest.mark.asyncio
async def test_environmental_all_types_includes_humidity(
    container: DashboardContainer, gateway
) -> None:
    gateway.sensor_rows.append(
        Sensor(sensor_id="h3", device_id="3", sensor_class="humidity", value=60.0)
    )
    everything = await container.environmental_monitoring.execute(sensor_type=SensorType.ALL)
    only_temp = await container.environmental_monitoring.execute(
        sensor_type=SensorType.TEMPERATURE
    )

    assert everything.value["figures"]["humidity_level"]["value"] == 60.0
    assert everything.value["figures"]["sensors_online"] == 3
    assert only_temp.value["figures"]["humidity_level"]["value"] == 0.0
    assert only_temp.value["figures"]["sensors_online"] == 2


@pytest.mark.asyncio
async def test_environmental_demo_when_upstream_down(
    container: DashboardContainer, gateway
) -> None:
    gateway.fail = True
    res = await container.environmental_monitoring.execute()

    assert res.source is ResolutionSource.DEMO
    assert res.value["source_kind"] == "demo"
    assert res.value["figures"]["average_temperature"]["source_kind"] == "demo"


# --------------------------------------------------------------------------- #
# Network health                                                              #
# --------------------------------------------------------------------------- #
@pytest.mark.asyncio
async def test_network_health_weighs_components(container: DashboardContainer) -> None:
    res = await container.network_health.execute(include_details=True)

    report = res.value
    assert report["device_health"]["score"] == 66.7
    assert report["alert_health"]["score"] == 65.0
    assert report["performance_health"]["score"] == 70.0
    assert report["overall_score"]["value"] == 66.9
    assert report["status"] == "poor"
    assert [(loc["location"], loc["score"], loc["alerts"]) for loc in report["locations"]] == [
        ("Monterrey", 100.0, 1),
        ("Saltillo", 50.0, 1),
    ]


@pytest.mark.asyncio
async def test_network_health_details_are_optional(container: DashboardContainer) -> None:
    res = await container.network_health.execute()
    assert res.value["locations"] is None


@pytest.mark.asyncio
async def test_network_health_demo(container: DashboardContainer, gateway) -> None:
    gateway.fail = True
    res = await container.network_health.execute(include_details=True)

    assert res.origin is SourceKind.DEMO
    assert res.value["overall_score"]["value"] == 85.2
    assert res.value["status"] == "good"
    assert res.value["locations"][0]["location"] == "Saltillo"


# --------------------------------------------------------------------------- #
# Device detail                                                               #
# --------------------------------------------------------------------------- #
@pytest.mark.asyncio
async def test_device_detail_collects_everything(container: DashboardContainer) -> None:
    res = await container.device_detail.execute(1)

    detail = res.value
    assert detail["device"]["hostname"] == "SAL-PZA-01-rtr"
    assert [p["port_id"] for p in detail["ports"]] == ["10", "11"]
    assert [a["alert_id"] for a in detail["alerts"]] == ["a1"]
    assert detail["summary"]["active_ports_count"] == 1

    health = detail["system_health"]
    assert (health["cpu"]["max"], health["memory"]["max"], health["temperature"]["max"]) == (
        30.0,
        50.0,
        40.0,
    )
    assert health["status"] == "healthy"
    assert detail["attention"]["severity"] == "high"
    assert detail["attention"]["reasons"] == ["1 unacknowledged critical alerts"]
    assert detail["warnings"] == []


@pytest.mark.asyncio
async def test_down_device_needs_attention(container: DashboardContainer) -> None:
    res = await container.device_detail.execute(2, include_system_health=False)

    assert res.value["system_health"] is None
    assert "Device is not operational" in res.value["attention"]["reasons"]
    assert res.value["attention"]["severity"] == "high"


@pytest.mark.asyncio
async def test_unknown_device_is_not_found(container: DashboardContainer) -> None:
    with pytest.raises(EmptyResult):
        await container.device_detail.execute(999)


@pytest.mark.asyncio
async def test_device_detail_demo_only_for_demo_devices(
    container: DashboardContainer, gateway
) -> None:
    gateway.fail = True

    res = await container.device_detail.execute(1001)
    assert res.source is ResolutionSource.DEMO
    assert [p["port_id"] for p in res.value["ports"]] == ["2001", "2002"]
    assert res.value["attention"]["severity"] == "medium"

    with pytest.raises(UpstreamUnavailable):
        await container.device_detail.execute(1)


@pytest.mark.asyncio
async def test_health_failure_degrades_to_warning(
    container: DashboardContainer, gateway, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def broken(device_ids=None):
        raise UpstreamUnavailable("processors down")

    monkeypatch.setattr(gateway, "processors", broken)
    res = await container.device_detail.execute(1)

    assert res.source is ResolutionSource.LIVE
    assert res.value["system_health"] is None
    assert res.value["warnings"] == [HEALTH_WARNING]


# --------------------------------------------------------------------------- #
# Saturated sites                                                             #
# --------------------------------------------------------------------------- #
@pytest.mark.asyncio
async def test_saturated_sites_ranked_by_busiest_port(
    container: DashboardContainer, gateway
) -> None:
    gateway.port_rows = [
        replace(gateway.port_rows[0], in_perc=90.0),
        gateway.port_rows[1],
        replace(gateway.port_rows[2], out_perc=72.0),
    ]
    res = await container.saturated_sites.execute(limit=5)

    report = res.value
    assert report["total_sites"] == 2
    saltillo, monterrey = report["sites"]
    assert (saltillo["id"], saltillo["saturation"], saltillo["status"]) == (
        "saltillo-centro",
        90.0,
        "critical",
    )
    assert saltillo["trend"] == "up"
    assert saltillo["device_count"] == 1
    assert (monterrey["saturation"], monterrey["status"], monterrey["trend"]) == (
        72.0,
        "warning",
        "stable",
    )
    assert gateway.count("ports") == 1


@pytest.mark.asyncio
async def test_saturated_sites_limit_keeps_total(container: DashboardContainer) -> None:
    res = await container.saturated_sites.execute(limit=1)
    assert res.value["total_sites"] == 2
    assert len(res.value["sites"]) == 1


@pytest.mark.asyncio
async def test_saturated_sites_demo(container: DashboardContainer, gateway) -> None:
    gateway.fail = True
    res = await container.saturated_sites.execute()

    assert res.value["source_kind"] == "demo"
    assert [s["id"] for s in res.value["sites"]] == ["saltillo", "monterrey", "queretaro"]


# --------------------------------------------------------------------------- #
# Alerts                                                                      #
# --------------------------------------------------------------------------- #
def test_filter_alerts_orders_and_limits() -> None:
    alerts = [
        Alert("w1", "3", "port", "30", AlertSeverity.WARNING, last_changed=5),
        Alert("c1", "1", "device", "1", AlertSeverity.CRITICAL, last_changed=1),
        Alert("c2", "1", "port", "10", AlertSeverity.CRITICAL, last_changed=9),
    ]
    assert [a.alert_id for a in filter_alerts(alerts, None, AlertFilter())] == ["c2", "c1", "w1"]
    ports_only = filter_alerts(alerts, None, AlertFilter(entity_type="port", limit=1))
    assert [a.alert_id for a in ports_only] == ["c2"]


@pytest.mark.asyncio
async def test_alerts_filtered_by_plaza(container: DashboardContainer) -> None:
    res = await container.alerts.execute(AlertFilter(plaza="Monterrey"))
    assert res.value["count"] == 1
    assert res.value["alerts"][0]["alert_id"] == "a2"


@pytest.mark.asyncio
async def test_alerts_filtered_by_severity(container: DashboardContainer) -> None:
    res = await container.alerts.execute(AlertFilter(severity=AlertSeverity.CRITICAL))
    assert [a["alert_id"] for a in res.value["alerts"]] == ["a1"]


@pytest.mark.asyncio
async def test_port_alerts_demo(container: DashboardContainer, gateway) -> None:
    gateway.fail = True
    res = await container.alerts.execute(AlertFilter(entity_type="port"))

    assert res.value["source_kind"] == "demo"
    assert [a["alert_id"] for a in res.value["alerts"]] == ["3002"]


# --------------------------------------------------------------------------- #
# Plaza latency                                                               #
# --------------------------------------------------------------------------- #
def test_parse_network_types() -> None:
    assert parse_network_types(None) == ["backbone", "distribucion", "acceso"]
    assert parse_network_types(" Acceso, backbone,acceso ,wifi") == ["acceso", "backbone"]
    with pytest.raises(ValueError):
        parse_network_types("wifi, satellite")


@pytest.mark.asyncio
async def test_latency_is_modeled_and_labelled(
    container: DashboardContainer, dashboard_config
) -> None:
    res = await container.plaza_latency.execute("Saltillo", network_types="backbone")

    assert res.source is ResolutionSource.FALLBACK
    assert res.origin is SourceKind.FALLBACK
    assert res.cache_ttl_remaining_s <= dashboard_config.ttl_fallback_s
    body = res.value
    assert body["device_count"] == 2
    assert list(body["series"]) == ["backbone"]
    assert len(body["series"]["backbone"]) == 7
    assert body["series"]["backbone"][-1]["date"] == "2025-06-10"
    assert all(p["latency_ms"] >= 1 for p in body["series"]["backbone"])


@pytest.mark.asyncio
async def test_latency_series_is_deterministic(container: DashboardContainer) -> None:
    first = await container.plaza_latency.execute("Saltillo", period="30d")
    second = await container.plaza_latency.execute("Saltillo", period="30d", refresh=True)

    assert first.value["series"] == second.value["series"]
    assert len(first.value["series"]["acceso"]) == 30


@pytest.mark.asyncio
async def test_latency_for_empty_plaza_warns(container: DashboardContainer) -> None:
    res = await container.plaza_latency.execute("Laredo")

    assert res.source is ResolutionSource.LIVE
    assert res.value["device_count"] == 0
    assert res.value["warning"] == NO_DEVICES_WARNING
    assert res.value["series"] == {}


@pytest.mark.asyncio
async def test_latency_rejects_bad_input(container: DashboardContainer) -> None:
    with pytest.raises(ValueError):
        await container.plaza_latency.execute("Saltillo", period="1y")
    with pytest.raises(ValueError):
        await container.plaza_latency.execute("Saltillo", network_types="wifi")
