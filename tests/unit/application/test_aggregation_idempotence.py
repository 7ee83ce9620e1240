# tests/unit/application/test_aggregation_idempotence.py
from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any

import pytest

from netwatch_api.application.use_cases.executive.get_capacity_utilization import (
    capacity_report,
    plaza_utilization,
)
from netwatch_api.application.use_cases.executive.get_critical_sites import (
    analyze_site,
    summarize_sites,
)
from netwatch_api.application.use_cases.executive.get_environmental_monitoring import (
    build_environmental_report,
)
from netwatch_api.application.use_cases.executive.get_growth_trends import (
    build_growth_trends,
    network_baseline,
)
from netwatch_api.application.use_cases.executive.get_infrastructure_health import (
    build_health_report,
)
from netwatch_api.application.use_cases.executive.get_network_consumption import (
    build_consumption,
    consumption_by_location,
)
from netwatch_api.application.use_cases.executive.get_network_health import build_network_health
from netwatch_api.application.use_cases.monitoring.get_device_detail import build_device_detail
from netwatch_api.application.use_cases.monitoring.get_monitoring_snapshot import snapshot_stats
from netwatch_api.application.use_cases.monitoring.get_saturated_sites import (
    analyze_saturation,
    rank_sites,
)
from netwatch_api.application.use_cases.plazas.get_plaza_latency import build_latency
from netwatch_api.application.use_cases.plazas.get_plaza_overview import build_overview
from netwatch_api.application.use_cases.plazas.get_plaza_trends import build_trends
from netwatch_api.domain.entities.records import (
    Alert,
    Bill,
    Device,
    Mempool,
    Port,
    Processor,
    Sensor,
)
from netwatch_api.domain.enums.monitoring import AlertSeverity, SensorType, SourceKind
from netwatch_api.domain.services.growth import GrowthMetric, GrowthPeriod

TODAY = date(2025, 6, 10)

DEVICES = [
    Device(device_id="1", hostname="SAL-PZA-01-rtr", location="Saltillo Centro", is_up=True),
    Device(device_id="2", hostname="SAL-PZA-01-sw", location="Saltillo Centro"),
    Device(device_id="3", hostname="MTY-NTE-01-rtr", location="Monterrey Norte", is_up=True),
]
PORTS = [
    Port(port_id="10", device_id="1", is_up=True, if_high_speed_mbps=1000.0,
         in_octets_rate=41_666_666.7),
    Port(port_id="11", device_id="2", is_up=True, if_high_speed_mbps=100.0, in_perc=33.33),
    Port(port_id="30", device_id="3", is_up=True, if_high_speed_mbps=1000.0,
         out_octets_rate=12_345_678.9),
]
ALERTS = [
    Alert(alert_id="a1", device_id="1", severity=AlertSeverity.CRITICAL),
    Alert(alert_id="a2", device_id="3", severity=AlertSeverity.WARNING),
]
BILLS = [
    Bill(bill_id="1", name="Saltillo enlace", rate_95th_in=104_857_601),
    Bill(bill_id="2", name="MTY transito", rate_95th_out=52_428_799),
]
SENSORS = [
    Sensor(sensor_id="s1", device_id="1", sensor_class="temperature", value=28.55),
    Sensor(sensor_id="s2", device_id="1", sensor_class="humidity", value=47.3),
    Sensor(sensor_id="s3", device_id="3", sensor_class="voltage", value=12.13),
]


def _capacity() -> Any:
    rows = [plaza_utilization("Saltillo", DEVICES[:2], PORTS[:2])]
    rows.append(plaza_utilization("Monterrey", DEVICES[2:], PORTS[2:]))
    return capacity_report(rows, SourceKind.LIVE)


def _critical_sites() -> Any:
    site = analyze_site("SAL-PZA-01", DEVICES[:2], PORTS[:2], 1, 20.0)
    return summarize_sites(
        [site] if site else [], total_sites=2, threshold=20.0, limit=10,
        source_kind=SourceKind.LIVE,
    )


def _health() -> Any:
    return build_health_report(
        DEVICES,
        [Processor(processor_id="p1", device_id="1", usage_pct=65.2)],
        [Mempool(mempool_id="m1", device_id="1", usage_pct=72.1)],
        [Sensor(sensor_id="s1", device_id="1", sensor_class="temperature", value=28.5)],
        threshold=80.0,
        include_details=True,
    )


BUILDERS: dict[str, Callable[[], Any]] = {
    "snapshot_stats": lambda: snapshot_stats(DEVICES, PORTS, ALERTS, SourceKind.LIVE),
    "capacity": _capacity,
    "critical_sites": _critical_sites,
    "health": _health,
    "growth": lambda: build_growth_trends(
        network_baseline(DEVICES, BILLS),
        GrowthMetric.UTILIZATION,
        GrowthPeriod.ONE_YEAR,
        today=TODAY,
        source_kind=SourceKind.LIVE,
    ),
    "consumption": lambda: build_consumption(consumption_by_location(BILLS), SourceKind.LIVE),
    "overview": lambda: build_overview(
        "Saltillo", DEVICES[:2], PORTS[:2], ALERTS[:1], SourceKind.LIVE,
        include_capacity=True, include_top_devices=True, top_devices_limit=5,
    ),
    "trends": lambda: build_trends(
        "Saltillo", "7d", "day", [(date(2025, 6, d), d * 7.77) for d in range(4, 11)],
        SourceKind.LIVE,
    ),
    "environmental": lambda: build_environmental_report(
        DEVICES, SENSORS, sensor_type=SensorType.ALL, threshold=27.0
    ),
    "network_health": lambda: build_network_health(DEVICES, ALERTS, BILLS, include_details=True),
    "device_detail": lambda: build_device_detail(
        DEVICES[0], PORTS[:1], ALERTS[:1], [], [], SENSORS[:1],
        include_system_health=True, include_attention=True,
    ),
    "saturation": lambda: rank_sites(
        [analyze_saturation("Saltillo Centro", DEVICES[:2], PORTS[:2])], 5, SourceKind.LIVE
    ),
    "latency": lambda: build_latency("Saltillo", "30d", ["acceso"], TODAY, device_count=2),
}


@pytest.mark.parametrize("name", sorted(BUILDERS))
def test_aggregates_are_bit_identical_on_repeat(name: str) -> None:
    build = BUILDERS[name]
    first, second = build(), build()

    assert first == second
    assert first.model_dump_json() == second.model_dump_json()
