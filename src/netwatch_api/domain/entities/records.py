# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Monitoring Records

Purpose:
    Typed, immutable variants of the upstream monitoring records. The gateway
    normalizes raw payloads into these; aggregation functions only accept
    them. Numeric fields are always real floats (never NaN): missing upstream
    values default to ``0.0`` for required metrics and ``None`` for optional ones.

Layer: domain/entities
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any

from netwatch_api.domain.enums.monitoring import AlertSeverity


def _finite(name: str, value: float | None) -> None:
    if value is not None and not math.isfinite(value):
        raise ValueError(f"{name} must be finite")


@dataclass(frozen=True, slots=True)
class Device:
    """A monitored network device.

    Args:
        device_id: Upstream identifier (string, as Observium returns it).
        hostname: Device hostname.
        location: Free-form location string; plazas are derived from it.
        is_up: True when the upstream reports the device as up.
    """

    device_id: str
    hostname: str
    location: str = ""
    is_up: bool = False
    os: str | None = None
    type: str | None = None
    vendor: str | None = None
    hardware: str | None = None
    uptime_s: float | None = None

    def __post_init__(self) -> None:
        if not self.device_id:
            raise ValueError("device_id must be non-empty")
        _finite("uptime_s", self.uptime_s)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return asdict(self)


@dataclass(frozen=True, slots=True)
class Port:
    """A network interface.

    Rates are bytes per second as reported by the upstream counters; speeds
    are ``if_speed_bps`` (bits/s) and ``if_high_speed_mbps`` (Mbit/s).
    ``in_perc``/``out_perc`` are upstream-computed utilization percentages.
    """

    port_id: str
    device_id: str = ""
    name: str = ""
    is_up: bool = False
    if_speed_bps: float = 0.0
    if_high_speed_mbps: float | None = None
    in_octets_rate: float = 0.0
    out_octets_rate: float = 0.0
    in_perc: float | None = None
    out_perc: float | None = None
    alias: str | None = None

    def __post_init__(self) -> None:
        if not self.port_id:
            raise ValueError("port_id must be non-empty")
        for name in ("if_speed_bps", "in_octets_rate", "out_octets_rate"):
            value = getattr(self, name)
            _finite(name, value)
            if value < 0:
                raise ValueError(f"{name} must be >= 0")
        for name in ("if_high_speed_mbps", "in_perc", "out_perc"):
            _finite(name, getattr(self, name))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return asdict(self)


@dataclass(frozen=True, slots=True)
class Alert:
    """An active (failed) alert entry."""

    alert_id: str
    device_id: str = ""
    entity_type: str = ""
    entity_id: str = ""
    severity: AlertSeverity = AlertSeverity.INFO
    message: str = ""
    last_changed: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


@dataclass(frozen=True, slots=True)
class Sensor:
    """An environmental sensor reading (temperature, humidity, ...)."""

    sensor_id: str
    device_id: str = ""
    sensor_class: str = ""
    value: float = 0.0
    descr: str = ""
    is_ok: bool = True

    def __post_init__(self) -> None:
        _finite("value", self.value)


@dataclass(frozen=True, slots=True)
class Processor:
    """A CPU usage sample, in percent."""

    processor_id: str
    device_id: str = ""
    usage_pct: float = 0.0

    def __post_init__(self) -> None:
        _finite("usage_pct", self.usage_pct)


@dataclass(frozen=True, slots=True)
class Mempool:
    """A memory pool usage sample, in percent."""

    mempool_id: str
    device_id: str = ""
    usage_pct: float = 0.0

    def __post_init__(self) -> None:
        _finite("usage_pct", self.usage_pct)


@dataclass(frozen=True, slots=True)
class Bill:
    """A traffic bill. Quota and 95th percentile rates are in bytes (per second)."""

    bill_id: str
    name: str = ""
    quota_bytes: float = 0.0
    rate_95th_in: float = 0.0
    rate_95th_out: float = 0.0
    notes: str = ""
    ref: str = ""

    def __post_init__(self) -> None:
        for name in ("quota_bytes", "rate_95th_in", "rate_95th_out"):
            _finite(name, getattr(self, name))


type MonitoringRecord = Device | Port | Alert | Sensor | Processor | Mempool | Bill
