# src/netwatch_api/adapters/gateways/observium_gateway.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: Observium API v0 -> typed monitoring records.

This gateway sits on top of the Observium transport client and provides:

* ``fetch(kind, filters)`` for every :class:`ResourceKind`.
* Typed convenience readers (devices, ports, alerts, sensors, ...).

Design principles:
    * Observium returns collections either as object-keyed maps
      (``{"12": {...}, "13": {...}}``) or as arrays. Both are flattened into
      one ordered list (map key order); non-mapping entries are dropped.
    * Numeric strings are parsed defensively: missing, empty or non-finite
      values become ``None`` for optional fields and ``0.0`` for required
      ones. NaN never leaves this module.
    * Page sizes come from configuration; one request per call.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Final, Protocol

from netwatch_api.domain.entities.records import (
    Alert,
    Bill,
    Device,
    Mempool,
    MonitoringRecord,
    Port,
    Processor,
    Sensor,
)
from netwatch_api.domain.enums.monitoring import AlertSeverity, ResourceKind
from netwatch_api.domain.exceptions.monitoring import UpstreamValidationError
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import location_matches
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

DEFAULT_PAGE_SIZE: Final[int] = 100

# Response keys holding each collection. Bills appear under either name.
_COLLECTION_KEYS: Final[dict[ResourceKind, tuple[str, ...]]] = {
    ResourceKind.DEVICES: ("devices",),
    ResourceKind.PORTS: ("ports",),
    ResourceKind.ALERTS: ("alerts",),
    ResourceKind.SENSORS: ("sensors",),
    ResourceKind.PROCESSORS: ("processors",),
    ResourceKind.MEMPOOLS: ("mempools",),
    ResourceKind.BILLS: ("bill", "bills"),
}

_UP_VALUES: Final[frozenset[str]] = frozenset({"1", "up", "true"})


class ObserviumTransport(Protocol):
    """The slice of :class:`ObserviumClient` this gateway depends on."""

    async def get(
        self, resource: str, params: Mapping[str, Any] | None = None
    ) -> Mapping[str, Any]: ...


# --------------------------------------------------------------------------- #
# Parsing helpers                                                             #
# --------------------------------------------------------------------------- #
def parse_optional_float(raw: Any) -> float | None:
    """Parse a numeric (string) field; ``None`` when missing, empty or non-finite."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def parse_float(raw: Any, default: float = 0.0) -> float:
    """Parse a required numeric field, defaulting instead of propagating NaN."""
    value = parse_optional_float(raw)
    return default if value is None else value


def parse_rate(raw: Any) -> float:
    """Parse a counter rate; negative readings (counter wraps) read as 0."""
    return max(0.0, parse_float(raw))


def _text(raw: Any) -> str:
    return "" if raw is None else str(raw).strip()


def _optional_text(raw: Any) -> str | None:
    text = _text(raw)
    return text or None


def _is_up(raw: Any) -> bool:
    return _text(raw).lower() in _UP_VALUES


def normalize_collection(container: Any) -> list[Mapping[str, Any]]:
    """Flatten an object-keyed map or an array into an ordered list of mappings."""
    if isinstance(container, Mapping):
        items: Sequence[Any] = list(container.values())
    elif isinstance(container, list | tuple):
        items = container
    else:
        return []
    return [item for item in items if isinstance(item, Mapping)]


def _severity(raw: Any) -> AlertSeverity:
    text = _text(raw).lower()
    if text in ("crit", "critical"):
        return AlertSeverity.CRITICAL
    if text in ("warn", "warning"):
        return AlertSeverity.WARNING
    return AlertSeverity.INFO


# --------------------------------------------------------------------------- #
# Record mappers                                                              #
# --------------------------------------------------------------------------- #
def map_device(raw: Mapping[str, Any]) -> Device:
    """Map an Observium device row."""
    return Device(
        device_id=_text(raw.get("device_id")),
        hostname=_text(raw.get("hostname")) or _text(raw.get("sysName")),
        location=_text(raw.get("location")),
        is_up=_is_up(raw.get("status")),
        os=_optional_text(raw.get("os")),
        type=_optional_text(raw.get("type")),
        vendor=_optional_text(raw.get("vendor")),
        hardware=_optional_text(raw.get("hardware")),
        uptime_s=parse_optional_float(raw.get("uptime")),
    )


def map_port(raw: Mapping[str, Any]) -> Port:
    """Map an Observium port row."""
    high_speed = parse_optional_float(raw.get("ifHighSpeed"))
    return Port(
        port_id=_text(raw.get("port_id")),
        device_id=_text(raw.get("device_id")),
        name=_text(raw.get("ifName")) or _text(raw.get("port_label")) or _text(raw.get("ifDescr")),
        is_up=_is_up(raw.get("ifOperStatus")),
        if_speed_bps=max(0.0, parse_float(raw.get("ifSpeed"))),
        if_high_speed_mbps=high_speed if high_speed and high_speed > 0 else None,
        in_octets_rate=parse_rate(raw.get("ifInOctets_rate")),
        out_octets_rate=parse_rate(raw.get("ifOutOctets_rate")),
        in_perc=parse_optional_float(raw.get("ifInOctets_perc")),
        out_perc=parse_optional_float(raw.get("ifOutOctets_perc")),
        alias=_optional_text(raw.get("ifAlias")),
    )


def map_alert(raw: Mapping[str, Any]) -> Alert:
    """Map an Observium alert-table row."""
    last_changed = parse_optional_float(raw.get("last_changed"))
    return Alert(
        alert_id=_text(raw.get("alert_table_id")) or _text(raw.get("id")),
        device_id=_text(raw.get("device_id")),
        entity_type=_text(raw.get("entity_type")),
        entity_id=_text(raw.get("entity_id")),
        severity=_severity(raw.get("severity")),
        message=_text(raw.get("alert_message")) or _text(raw.get("last_message")),
        last_changed=int(last_changed) if last_changed is not None else None,
    )


def map_sensor(raw: Mapping[str, Any]) -> Sensor:
    """Map an Observium sensor row."""
    return Sensor(
        sensor_id=_text(raw.get("sensor_id")),
        device_id=_text(raw.get("device_id")),
        sensor_class=_text(raw.get("sensor_class")),
        value=parse_float(raw.get("sensor_value")),
        descr=_text(raw.get("sensor_descr")),
        is_ok=_text(raw.get("sensor_event")).lower() == "ok",
    )


def map_processor(raw: Mapping[str, Any]) -> Processor:
    """Map an Observium processor row."""
    return Processor(
        processor_id=_text(raw.get("processor_id")),
        device_id=_text(raw.get("device_id")),
        usage_pct=parse_float(raw.get("processor_usage")),
    )


def map_mempool(raw: Mapping[str, Any]) -> Mempool:
    """Map an Observium memory-pool row."""
    return Mempool(
        mempool_id=_text(raw.get("mempool_id")),
        device_id=_text(raw.get("device_id")),
        usage_pct=parse_float(raw.get("mempool_perc")),
    )


def map_bill(raw: Mapping[str, Any]) -> Bill:
    """Map an Observium bill row."""
    return Bill(
        bill_id=_text(raw.get("bill_id")),
        name=_text(raw.get("bill_name")),
        quota_bytes=parse_float(raw.get("bill_quota")),
        rate_95th_in=parse_rate(raw.get("rate_95th_in")),
        rate_95th_out=parse_rate(raw.get("rate_95th_out")),
        notes=_text(raw.get("bill_notes")),
        ref=_text(raw.get("bill_ref")),
    )


_MAPPERS: Final[dict[ResourceKind, Callable[[Mapping[str, Any]], MonitoringRecord]]] = {
    ResourceKind.DEVICES: map_device,
    ResourceKind.PORTS: map_port,
    ResourceKind.ALERTS: map_alert,
    ResourceKind.SENSORS: map_sensor,
    ResourceKind.PROCESSORS: map_processor,
    ResourceKind.MEMPOOLS: map_mempool,
    ResourceKind.BILLS: map_bill,
}


class ObserviumGateway(MonitoringGatewayProtocol):
    """Observium adapter implementing the monitoring gateway port."""

    def __init__(
        self,
        client: ObserviumTransport,
        *,
        page_sizes: Mapping[ResourceKind, int] | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            client: Transport exposing ``get(resource, params)``.
            page_sizes: Per-resource ``pagesize`` limits; unspecified kinds
                use ``DEFAULT_PAGE_SIZE``.
        """
        self._client = client
        self._page_sizes = dict(page_sizes or {})

    async def fetch(
        self, kind: ResourceKind, filters: Mapping[str, Any] | None = None
    ) -> list[MonitoringRecord]:
        """Fetch one collection and map it to typed records.

        Rows that cannot be mapped (missing identifiers, invalid numbers) are
        skipped and counted in a single warning.

        Raises:
            UpstreamUnavailable: Propagated from the transport.
            UpstreamAuthError: Propagated from the transport.
            UpstreamValidationError: Transport shape errors, or a body that
                carries none of the expected collection keys.
        """
        params: dict[str, Any] = {"pagesize": self._page_sizes.get(kind, DEFAULT_PAGE_SIZE)}
        params.update(filters or {})
        payload = await self._client.get(kind.value, params)

        container = self._collection(kind, payload)
        mapper = _MAPPERS[kind]
        records: list[MonitoringRecord] = []
        skipped = 0
        for row in normalize_collection(container):
            try:
                records.append(mapper(row))
            except (TypeError, ValueError):
                skipped += 1
        if skipped:
            logger.warning(
                "observium.rows_skipped",
                extra={"resource": kind.value, "skipped": skipped, "kept": len(records)},
            )
        return records

    # --------------------------------------------------------------------- #
    # Convenience readers
    # --------------------------------------------------------------------- #
    async def devices(self, location: str | None = None) -> list[Device]:
        records = await self.fetch(ResourceKind.DEVICES)
        devices = [r for r in records if isinstance(r, Device)]
        if location:
            devices = [d for d in devices if location_matches(d.location, location)]
        return devices

    async def ports(
        self, device_ids: Sequence[str] | None = None, *, up_only: bool = False
    ) -> list[Port]:
        filters: dict[str, Any] = {}
        if device_ids:
            filters["device_id"] = list(device_ids)
        if up_only:
            filters["ifOperStatus"] = "up"
        records = await self.fetch(ResourceKind.PORTS, filters)
        ports = [r for r in records if isinstance(r, Port)]
        return [p for p in ports if p.is_up] if up_only else ports

    async def alerts(self, status: str = "failed") -> list[Alert]:
        records = await self.fetch(ResourceKind.ALERTS, {"status": status})
        return [r for r in records if isinstance(r, Alert)]

    async def sensors(
        self, sensor_class: str, device_ids: Sequence[str] | None = None
    ) -> list[Sensor]:
        filters: dict[str, Any] = {"sensor_class": sensor_class}
        if device_ids:
            filters["device_id"] = list(device_ids)
        records = await self.fetch(ResourceKind.SENSORS, filters)
        return [r for r in records if isinstance(r, Sensor)]

    async def processors(self, device_ids: Sequence[str] | None = None) -> list[Processor]:
        filters = {"device_id": list(device_ids)} if device_ids else None
        records = await self.fetch(ResourceKind.PROCESSORS, filters)
        return [r for r in records if isinstance(r, Processor)]

    async def mempools(self, device_ids: Sequence[str] | None = None) -> list[Mempool]:
        filters = {"device_id": list(device_ids)} if device_ids else None
        records = await self.fetch(ResourceKind.MEMPOOLS, filters)
        return [r for r in records if isinstance(r, Mempool)]

    async def bills(self) -> list[Bill]:
        records = await self.fetch(ResourceKind.BILLS)
        return [r for r in records if isinstance(r, Bill)]

    # --------------------------------------------------------------------- #
    # Private helpers
    # --------------------------------------------------------------------- #
    @staticmethod
    def _collection(kind: ResourceKind, payload: Mapping[str, Any]) -> Any:
        """Return the raw collection container for ``kind``.

        A body with ``count: 0`` and no collection key is an empty result,
        not a schema error.
        """
        for key in _COLLECTION_KEYS[kind]:
            if key in payload:
                return payload[key]
        if parse_float(payload.get("count"), default=-1.0) == 0:
            return []
        raise UpstreamValidationError(
            "missing_collection",
            details={"resource": kind.value, "expected": list(_COLLECTION_KEYS[kind])},
        )
