# src/netwatch_api/domain/interfaces/gateways/monitoring_gateway.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Monitoring Gateway Protocol.

Synopsis:
    Domain-level Protocol (PEP 544) over the network-monitoring upstream.
    The Observium adapter satisfies it; tests substitute in-memory fakes.

Design:
    * One generic ``fetch(kind, filters)`` plus typed convenience readers.
    * Returns normalized, typed records only; vendor payload shapes
      (object-keyed maps vs arrays, numeric strings) never cross this seam.
    * Failures are domain exceptions (``UpstreamUnavailable``,
      ``UpstreamAuthError``, ``UpstreamValidationError``), never transport types.

Layer:
    domain/interfaces/gateways
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

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
from netwatch_api.domain.enums.monitoring import ResourceKind


class MonitoringGatewayProtocol(Protocol):
    """Abstraction over the monitoring vendor's REST API.

    An empty list is a valid success; deciding whether it is *useful* belongs
    to the caller (the resolution policy treats it like a failure).
    """

    async def fetch(
        self, kind: ResourceKind, filters: Mapping[str, Any] | None = None
    ) -> Sequence[MonitoringRecord]:
        """Return every record of ``kind`` matching upstream ``filters``.

        Raises:
            UpstreamUnavailable: Network error, timeout, 429/5xx or breaker open.
            UpstreamAuthError: Credentials rejected.
            UpstreamValidationError: Payload not in the expected shape.
        """
        ...

    async def devices(self, location: str | None = None) -> list[Device]:
        """Devices, optionally restricted to a case-insensitive location substring."""
        ...

    async def ports(
        self, device_ids: Sequence[str] | None = None, *, up_only: bool = False
    ) -> list[Port]:
        """Ports of ``device_ids`` (all devices when ``None``)."""
        ...

    async def alerts(self, status: str = "failed") -> list[Alert]:
        """Alerts in the given upstream status."""
        ...

    async def sensors(
        self, sensor_class: str, device_ids: Sequence[str] | None = None
    ) -> list[Sensor]:
        """Sensors of one class (e.g. ``temperature``)."""
        ...

    async def processors(self, device_ids: Sequence[str] | None = None) -> list[Processor]:
        """CPU samples."""
        ...

    async def mempools(self, device_ids: Sequence[str] | None = None) -> list[Mempool]:
        """Memory pool samples."""
        ...

    async def bills(self) -> list[Bill]:
        """Traffic bills."""
        ...
