# src/netwatch_api/application/use_cases/monitoring/get_monitoring_summary.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: LLM narrative summary of the monitoring snapshot.

Data source order: a dashboard snapshot pushed by a client, else the
resolved monitoring snapshot. Generated summaries are cached per plaza;
static "not configured" / "could not generate" answers are not.
"""

from __future__ import annotations

from typing import Any

from netwatch_api.application.interfaces.summary_port import SummaryGeneratorPort, SummaryKind
from netwatch_api.application.schemas.dto.monitoring import MonitoringSnapshotDTO, SummaryDTO
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import Clock, Resolution, ResolutionPolicy, utcnow
from netwatch_api.application.services.summary_text import (
    FAILED_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    uncached_result,
    with_note,
)
from netwatch_api.application.use_cases.monitoring.get_monitoring_snapshot import (
    GetMonitoringSnapshotUseCase,
    normalize_plaza,
    scope_of,
)
from netwatch_api.domain.exceptions.monitoring import SummaryGenerationError
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def monitoring_figures(snapshot: MonitoringSnapshotDTO) -> dict[str, Any]:
    """Pre-aggregated figures handed to the generator (never raw rows)."""
    stats = snapshot.stats
    return {
        "total_devices": stats.total_devices,
        "devices_up": stats.devices_up,
        "device_availability_pct": stats.device_availability.value,
        "total_ports": stats.total_ports,
        "ports_up": stats.ports_up,
        "average_port_utilization_pct": stats.average_utilization.value,
        "max_port_utilization_pct": stats.max_utilization.value,
        "critical_alerts": stats.critical_alerts,
        "warning_alerts": stats.warning_alerts,
    }


class GetMonitoringSummaryUseCase:
    def __init__(
        self,
        *,
        policy: ResolutionPolicy,
        snapshots: GetMonitoringSnapshotUseCase,
        generator: SummaryGeneratorPort,
        config: DashboardConfig,
        clock: Clock = utcnow,
    ) -> None:
        self._policy = policy
        self._snapshots = snapshots
        self._generator = generator
        self._config = config
        self._clock = clock

    @staticmethod
    def cache_key(plaza: str | None) -> str:
        return f"executive-summary:{scope_of(plaza)}"

    async def execute(self, plaza: str | None = None, *, skip_cache: bool = False) -> Resolution:
        plaza = normalize_plaza(plaza)
        key = self.cache_key(plaza)
        if not skip_cache:
            hit = await self._policy.cached(key)
            if hit is not None:
                return hit

        data = await self._source(plaza, skip_cache=skip_cache)
        snapshot = MonitoringSnapshotDTO.model_validate(data.value)
        figures = monitoring_figures(snapshot)

        if not self._generator.configured:
            return self._static(NOT_CONFIGURED_MESSAGE, plaza, figures, data)

        payload = {"plaza": scope_of(plaza), "data_source": data.origin.value, **figures}
        try:
            text = await self._generator.generate(SummaryKind.MONITORING, payload)
        except SummaryGenerationError as exc:
            logger.warning(
                "summary.monitoring_unavailable",
                extra={"plaza": scope_of(plaza), "error": str(exc)},
            )
            return self._static(FAILED_MESSAGE, plaza, figures, data)

        summary = SummaryDTO(
            summary=with_note(text, data),
            generated=True,
            data_source=data.origin,
            plaza=plaza,
            figures=figures,
        )
        return await self._policy.store(
            key,
            summary.model_dump(mode="json"),
            source=data.origin,
            ttl_s=self._config.summary_ttl(data.origin),
        )

    async def _source(self, plaza: str | None, *, skip_cache: bool) -> Resolution:
        pushed = await self._policy.cached(self._snapshots.dashboard_key(plaza))
        if pushed is not None:
            return pushed
        return await self._snapshots.execute(plaza, refresh=skip_cache)

    def _static(
        self, message: str, plaza: str | None, figures: dict[str, Any], data: Resolution
    ) -> Resolution:
        summary = SummaryDTO(
            summary=message, generated=False, data_source=data.origin, plaza=plaza, figures=figures
        )
        return uncached_result(summary.model_dump(mode="json"), data=data, now=self._clock())
