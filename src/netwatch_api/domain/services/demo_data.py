# src/netwatch_api/domain/services/demo_data.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Demo and fallback fixtures.

Purpose:
    Static synthetic data served by the last resolution tier when the
    monitoring upstream is unavailable or returns nothing. Callers tag every
    value built from this module as ``fallback``/``demo``; nothing here is
    ever presented as live data.

Layer:
    domain

Notes:
    Snapshot-shaped payloads are constants. Time series come from a
    deterministic generator so repeated calls give identical output.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Final

from netwatch_api.domain.entities.records import Alert, Device, Port
from netwatch_api.domain.enums.monitoring import AlertSeverity
from netwatch_api.domain.services.aggregation import clamp, round_to

DEFAULT_PLAZAS: Final[tuple[str, ...]] = ("Laredo", "Saltillo", "CDMX", "Monterrey")
PLAZA_SEEDS: Final[dict[str, int]] = {"Laredo": 1, "Saltillo": 2, "CDMX": 3, "Monterrey": 4}
TREND_PERIOD_DAYS: Final[dict[str, int]] = {"7d": 7, "30d": 30, "90d": 90}


@dataclass(frozen=True, slots=True)
class NetworkBaseline:
    """Current network state the growth series is scaled from."""

    device_count: float
    bill_count: float
    average_traffic_mbps: float
    average_utilization: float
    total_contracted_mbps: float


FALLBACK_BASELINE: Final[NetworkBaseline] = NetworkBaseline(
    device_count=50,
    bill_count=25,
    average_traffic_mbps=150,
    average_utilization=45,
    total_contracted_mbps=500,
)


# --------------------------------------------------------------------------- #
# Monitoring snapshot                                                         #
# --------------------------------------------------------------------------- #
def demo_devices(plaza: str | None = None) -> list[Device]:
    """Three devices (router, switch, a firewall that is down) located at ``plaza``."""
    tag = plaza.lower() if plaza else "main"
    location = plaza or "CDMX"
    return [
        Device("1001", f"router-{tag}-01", location, True, vendor="Cisco", hardware="ASR1000",
               uptime_s=45 * 86400 + 12 * 3600 + 30 * 60 + 15),
        Device("1002", f"switch-{tag}-02", location, True, vendor="Cisco",
               hardware="Catalyst9300", uptime_s=32 * 86400 + 8 * 3600 + 45 * 60 + 22),
        Device("1003", f"firewall-{tag}-01", location, False, vendor="Fortinet",
               hardware="FortiGate", uptime_s=0.0),
    ]


def demo_ports() -> list[Port]:
    """Two busy gigabit uplinks and one port that is down."""
    return [
        Port("2001", "1001", "GigabitEthernet0/0/1", True, if_speed_bps=1e9,
             in_octets_rate=106_250_000, out_octets_rate=93_750_000, in_perc=85.0, out_perc=75.0),
        Port("2002", "1001", "GigabitEthernet0/0/2", True, if_speed_bps=1e9,
             in_octets_rate=115_000_000, out_octets_rate=110_000_000, in_perc=92.0, out_perc=88.0),
        Port("2003", "1002", "GigabitEthernet1/0/1", False, if_speed_bps=1e9,
             in_perc=0.0, out_perc=0.0),
    ]


def demo_alerts() -> list[Alert]:
    """A critical device-down alert and a warning interface-down alert."""
    return [
        Alert("3001", "1003", "device", "1003", AlertSeverity.CRITICAL,
              "Device Down - Firewall no responde"),
        Alert("3002", "1002", "port", "2003", AlertSeverity.WARNING,
              "Interface Down - Puerto crítico desconectado"),
    ]


# --------------------------------------------------------------------------- #
# Executive views                                                             #
# --------------------------------------------------------------------------- #
DEMO_CRITICAL_SITES: Final[tuple[dict[str, Any], ...]] = (
    {
        "site": "CDMX-Norte-01",
        "plaza": "CDMX",
        "health_score": 65.0,
        "utilization": 85.2,
        "alert_count": 3,
        "device_count": 4,
        "port_count": 48,
        "status": "critical",
        "issues": ["High port utilization", "Multiple device alerts", "Health score warning"],
    },
    {
        "site": "Queretaro-Centro-02",
        "plaza": "Queretaro",
        "health_score": 72.0,
        "utilization": 78.9,
        "alert_count": 2,
        "device_count": 3,
        "port_count": 36,
        "status": "warning",
        "issues": ["High port utilization", "Device alerts present"],
    },
    {
        "site": "Miami-South-03",
        "plaza": "Miami",
        "health_score": 78.0,
        "utilization": 76.4,
        "alert_count": 1,
        "device_count": 2,
        "port_count": 24,
        "status": "attention",
        "issues": ["High port utilization", "Device alerts present"],
    },
)

DEMO_CONSUMPTION_MBPS: Final[dict[str, float]] = {
    "Saltillo": 45.2,
    "Monterrey": 38.7,
    "Queretaro": 42.1,
    "Guadalajara": 35.8,
}

DEMO_INFRASTRUCTURE_HEALTH: Final[dict[str, Any]] = {
    "overall_score": 85.2,
    "components": {
        "cpu": 78.5,
        "memory": 82.1,
        "storage": 91.3,
        "environmental": 88.7,
    },
    "device_counts": {"critical": 2, "warning": 5, "healthy": 45},
    "locations": [
        {
            "location": "CDMX",
            "device_count": 15,
            "avg_cpu": 65.2,
            "avg_memory": 72.1,
            "avg_temperature": 28.5,
            "health_score": 82.3,
            "status": "healthy",
        },
        {
            "location": "Monterrey",
            "device_count": 12,
            "avg_cpu": 58.7,
            "avg_memory": 68.9,
            "avg_temperature": 26.8,
            "health_score": 87.1,
            "status": "healthy",
        },
        {
            "location": "Queretaro",
            "device_count": 8,
            "avg_cpu": 82.3,
            "avg_memory": 89.1,
            "avg_temperature": 31.2,
            "health_score": 65.4,
            "status": "warning",
        },
    ],
    "alerts": [
        {
            "device": "QRO-SW-01",
            "metric": "cpu",
            "value": 95.2,
            "threshold": 85.0,
            "severity": "critical",
        },
        {
            "device": "QRO-RTR-01",
            "metric": "memory",
            "value": 88.7,
            "threshold": 80.0,
            "severity": "warning",
        },
    ],
}

DEMO_ENVIRONMENTAL: Final[dict[str, Any]] = {
    "figures": {
        "average_temperature": 28.5,
        "max_temperature": 35.2,
        "min_temperature": 22.1,
        "temperature_alerts": 2,
        "humidity_level": 45.8,
        "voltage_stability": 98.5,
        "environmental_health": 85.2,
        "sensors_online": 45,
        "sensors_offline": 3,
    },
    "locations": [
        {"location": "CDMX", "avg_temperature": 29.2, "max_temperature": 32.1, "humidity": 48.5,
         "sensor_count": 12, "alert_count": 1, "status": "normal"},
        {"location": "Monterrey", "avg_temperature": 26.8, "max_temperature": 30.5,
         "humidity": 42.3, "sensor_count": 10, "alert_count": 0, "status": "normal"},
        {"location": "Queretaro", "avg_temperature": 31.5, "max_temperature": 38.5,
         "humidity": 52.1, "sensor_count": 8, "alert_count": 2, "status": "warning"},
    ],
    "alerts": [
        {"location": "Queretaro", "device": "QRO-SW-01", "sensor_type": "temperature",
         "value": 38.5, "threshold": 35.0, "severity": "warning"},
        {"location": "CDMX", "device": "CDMX-RTR-02", "sensor_type": "temperature",
         "value": 36.2, "threshold": 35.0, "severity": "warning"},
    ],
}

DEMO_NETWORK_HEALTH: Final[dict[str, Any]] = {
    "overall_score": 85.2,
    "device_health": {"score": 92.1, "total_devices": 150, "active_devices": 138,
                      "down_devices": 12},
    "alert_health": {"score": 78.3, "total_alerts": 45, "critical_alerts": 3,
                     "warning_alerts": 15, "info_alerts": 27},
    "performance_health": {"score": 85.0, "avg_utilization": 65.2, "peak_utilization": 89.1},
    "locations": [
        {"location": "Saltillo", "score": 88.5, "devices": 45, "alerts": 8},
        {"location": "Queretaro", "score": 87.9, "devices": 32, "alerts": 6},
        {"location": "Monterrey", "score": 82.1, "devices": 38, "alerts": 12},
    ],
}

DEMO_SATURATED_SITES: Final[tuple[dict[str, Any], ...]] = (
    {"id": "saltillo", "name": "Saltillo", "location": "Coahuila, Saltillo, RB Jolla",
     "saturation": 85.2, "trend": "up", "outages": 0, "device_count": 3, "critical_ports": 2,
     "max_port_utilization": 85.2, "avg_port_utilization": 67.8, "operational_ports": 14,
     "status": "critical"},
    {"id": "monterrey", "name": "Monterrey", "location": "Nuevo Leon, Monterrey, Centro",
     "saturation": 72.4, "trend": "stable", "outages": 0, "device_count": 4,
     "critical_ports": 0, "max_port_utilization": 72.4, "avg_port_utilization": 51.3,
     "operational_ports": 22, "status": "warning"},
    {"id": "queretaro", "name": "Queretaro", "location": "Queretaro, Queretaro, Norte",
     "saturation": 48.3, "trend": "down", "outages": 0, "device_count": 2,
     "critical_ports": 0, "max_port_utilization": 48.3, "avg_port_utilization": 31.9,
     "operational_ports": 9, "status": "normal"},
)


# --------------------------------------------------------------------------- #
# Time series                                                                 #
# --------------------------------------------------------------------------- #
def plaza_seed(plaza: str) -> int:
    """Pattern seed for a plaza (unknown plazas share seed 1)."""
    return PLAZA_SEEDS.get(plaza, 1)


def synthetic_plaza_trend(plaza: str, period: str, today: date) -> list[tuple[date, float]]:
    """Daily utilization for the ``period`` window ending ``today``, oldest first.

    Each plaza gets its own phase and level; values stay within [20, 90] and
    are whole percentages.
    """
    seed = plaza_seed(plaza)
    days = TREND_PERIOD_DAYS.get(period, 7)
    series: list[tuple[date, float]] = []
    for i in range(days - 1, -1, -1):
        variation = math.sin((i + seed) * 0.8) * 20 + seed * 5
        value = clamp(50 + seed * 10 + variation, 20.0, 90.0)
        series.append((today - timedelta(days=i), round_to(value, 0)))
    return series


LATENCY_BASELINES_MS: Final[dict[str, float]] = {
    "backbone": 5.0,
    "distribucion": 15.0,
    "acceso": 25.0,
}


def synthetic_latency(
    plaza: str, period: str, network_type: str, today: date
) -> list[tuple[date, float]]:
    """Modeled daily latency (ms) of one network tier, oldest first.

    Latency is not collected upstream; the series is derived from the tier's
    baseline and the plaza seed, never below 1 ms.
    """
    seed = plaza_seed(plaza)
    base = LATENCY_BASELINES_MS[network_type]
    days = TREND_PERIOD_DAYS.get(period, 7)
    series: list[tuple[date, float]] = []
    for i in range(days - 1, -1, -1):
        variation = math.sin((i + seed + len(network_type)) * 0.6) * 3 + seed * 0.5
        series.append((today - timedelta(days=i), round_to(max(1.0, base + variation), 1)))
    return series
