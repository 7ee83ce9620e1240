# src/netwatch_api/application/use_cases/monitoring/list_alerts.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: active alerts, filtered by severity, entity type, device or plaza."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from netwatch_api.application.schemas.dto.monitoring import AlertDTO, AlertListDTO
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.entities.records import Alert, Device
from netwatch_api.domain.enums.monitoring import AlertSeverity, SourceKind
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import location_matches
from netwatch_api.domain.services.demo_data import demo_alerts, demo_devices

_SEVERITY_ORDER = {AlertSeverity.CRITICAL: 0, AlertSeverity.WARNING: 1, AlertSeverity.INFO: 2}


@dataclass(frozen=True, slots=True)
class AlertFilter:
    severity: AlertSeverity | None = None
    entity_type: str | None = None
    device_id: str | None = None
    plaza: str | None = None
    limit: int | None = None

    def key(self) -> str:
        parts = (
            self.severity.value if self.severity else "",
            self.entity_type or "",
            self.device_id or "",
            (self.plaza or "").lower(),
            str(self.limit or ""),
        )
        return ":".join(parts)


def filter_alerts(
    alerts: Sequence[Alert], devices: Sequence[Device] | None, wanted: AlertFilter
) -> list[Alert]:
    """Apply ``wanted``; the plaza filter needs ``devices`` to locate each alert."""
    in_plaza: set[str] | None = None
    if wanted.plaza:
        in_plaza = {
            d.device_id for d in devices or () if location_matches(d.location, wanted.plaza)
        }
    selected = [
        a
        for a in alerts
        if (wanted.severity is None or a.severity is wanted.severity)
        and (wanted.entity_type is None or a.entity_type == wanted.entity_type)
        and (wanted.device_id is None or a.device_id == wanted.device_id)
        and (in_plaza is None or a.device_id in in_plaza)
    ]
    selected.sort(key=lambda a: (_SEVERITY_ORDER[a.severity], -(a.last_changed or 0), a.alert_id))
    return selected[: wanted.limit] if wanted.limit else selected


def alert_list(alerts: Sequence[Alert], source_kind: SourceKind) -> AlertListDTO:
    return AlertListDTO(
        source_kind=source_kind,
        count=len(alerts),
        alerts=[AlertDTO.from_record(a) for a in alerts],
    )


class ListAlertsUseCase:
    def __init__(
        self,
        *,
        policy: ResolutionPolicy,
        gateway: MonitoringGatewayProtocol,
        config: DashboardConfig,
    ) -> None:
        self._policy = policy
        self._gateway = gateway
        self._config = config

    @staticmethod
    def cache_key(wanted: AlertFilter) -> str:
        return f"alerts:{wanted.key()}"

    async def execute(
        self, query: AlertFilter | None = None, *, refresh: bool = False
    ) -> Resolution:
        wanted = query or AlertFilter()

        async def primary() -> dict[str, Any]:
            alerts = await self._gateway.alerts()
            devices = await self._gateway.devices() if wanted.plaza else None
            return alert_list(filter_alerts(alerts, devices, wanted), SourceKind.LIVE).model_dump(
                mode="json"
            )

        def demo() -> dict[str, Any]:
            selected = filter_alerts(demo_alerts(), demo_devices(wanted.plaza), wanted)
            return alert_list(selected, SourceKind.DEMO).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(wanted),
                fetch_primary=primary,
                ttl_s=self._config.ttl_monitoring_s,
                fallback=self._config.fallback_or_none(demo),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.DEMO,
                skip_cache=refresh,
            )
        )
