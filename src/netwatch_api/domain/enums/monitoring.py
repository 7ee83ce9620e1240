# src/netwatch_api/domain/enums/monitoring.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Monitoring enumerations.

Purpose:
    Stable string identifiers for data provenance, upstream resource kinds,
    and the status buckets produced by aggregation. Values are emitted in
    JSON payloads and are part of the HTTP contract.

Layer:
    domain
"""

from __future__ import annotations

from enum import Enum


class SourceKind(str, Enum):
    """Provenance of a value produced by the resolution tiers.

    ``LIVE`` honors the requested filter, ``PARTIAL`` came from a broader
    query, ``FALLBACK``/``DEMO`` are synthetic and must be surfaced as such.
    ``DASHBOARD`` marks snapshots pushed by a client.
    """

    LIVE = "live"
    PARTIAL = "partial"
    FALLBACK = "fallback"
    DEMO = "demo"
    DASHBOARD = "dashboard"

    @property
    def is_synthetic(self) -> bool:
        """Return True for generated data that never came from the upstream."""
        return self in (SourceKind.FALLBACK, SourceKind.DEMO)


class ResolutionSource(str, Enum):
    """Tier that answered a resolution request (``cache`` plus every SourceKind)."""

    CACHE = "cache"
    LIVE = "live"
    PARTIAL = "partial"
    FALLBACK = "fallback"
    DEMO = "demo"
    DASHBOARD = "dashboard"


class ResourceKind(str, Enum):
    """Upstream collections exposed by the monitoring gateway."""

    DEVICES = "devices"
    PORTS = "ports"
    ALERTS = "alerts"
    SENSORS = "sensors"
    PROCESSORS = "processors"
    MEMPOOLS = "mempools"
    BILLS = "bills"


class HealthStatus(str, Enum):
    """Three-way health classification."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class UtilizationStatus(str, Enum):
    """Port/plaza utilization classification."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


class SiteStatus(str, Enum):
    """Severity of a site flagged by the critical-sites analysis."""

    CRITICAL = "critical"
    WARNING = "warning"
    ATTENTION = "attention"


class TrendDirection(str, Enum):
    """Direction of a growth series."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class AlertSeverity(str, Enum):
    """Normalized alert severity."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class NetworkHealthStatus(str, Enum):
    """Five-step grade of the network health score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    CRITICAL = "critical"


class SensorType(str, Enum):
    """Sensor classes the environmental view reads; ``all`` reads every class."""

    ALL = "all"
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    VOLTAGE = "voltage"


class SaturationTrend(str, Enum):
    UP = "up"
    STABLE = "stable"
    DOWN = "down"


class AttentionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
