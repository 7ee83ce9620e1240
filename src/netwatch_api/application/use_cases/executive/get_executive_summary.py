# src/netwatch_api/application/use_cases/executive/get_executive_summary.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: LLM summary of the executive dashboard.

Synopsis:
    Gathers the capacity, critical-site (top 8 at 75%) and 3-month
    utilization growth views, or takes dashboard data posted by a client,
    and asks the summary generator for a narrative. One summary is cached
    for the whole dashboard under a fixed key.

    The data behind the summary is tagged with its weakest provenance: any
    synthetic view makes the whole summary ``demo``; any partial view makes
    it ``partial``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any, Final

from netwatch_api.application.interfaces.summary_port import SummaryGeneratorPort, SummaryKind
from netwatch_api.application.schemas.dto.executive import (
    CapacityUtilizationDTO,
    CriticalSitesDTO,
    GrowthTrendsDTO,
)
from netwatch_api.application.schemas.dto.monitoring import SummaryDTO
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Clock,
    Resolution,
    ResolutionPolicy,
    utcnow,
)
from netwatch_api.application.services.summary_text import (
    FAILED_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    uncached_result,
    with_note,
)
from netwatch_api.application.use_cases.executive.get_capacity_utilization import (
    GetCapacityUtilizationUseCase,
)
from netwatch_api.application.use_cases.executive.get_critical_sites import GetCriticalSitesUseCase
from netwatch_api.application.use_cases.executive.get_growth_trends import GetGrowthTrendsUseCase
from netwatch_api.domain.enums.monitoring import ResolutionSource, SourceKind
from netwatch_api.domain.exceptions.monitoring import SummaryGenerationError
from netwatch_api.domain.services.growth import GrowthMetric, GrowthPeriod
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

CACHE_KEY: Final[str] = "executive-dashboard-summary"
SUMMARY_SITES: Final[int] = 8
SUMMARY_SITE_THRESHOLD: Final[float] = 75.0


def weakest_origin(parts: Sequence[Resolution]) -> SourceKind:
    origins = {p.origin for p in parts}
    if any(o.is_synthetic for o in origins):
        return SourceKind.DEMO
    if SourceKind.PARTIAL in origins:
        return SourceKind.PARTIAL
    return SourceKind.LIVE


def combine(parts: Sequence[Resolution], value: Any) -> Resolution:
    """One provenance record for several resolved views."""
    origin = weakest_origin(parts)
    all_cached = all(p.cached for p in parts)
    return Resolution(
        value=value,
        source=ResolutionSource.CACHE if all_cached else ResolutionSource(origin.value),
        origin=origin,
        timestamp=min(p.timestamp for p in parts),
        cache_ttl_remaining_s=min(p.cache_ttl_remaining_s for p in parts),
    )


def dashboard_payload(
    capacity: CapacityUtilizationDTO, sites: CriticalSitesDTO, growth: GrowthTrendsDTO
) -> dict[str, Any]:
    """Compact view of the three dashboard sections for the generator."""
    return {
        "capacity": {
            "average_utilization_pct": capacity.summary.average_utilization.value,
            "total_capacity_mbps": capacity.summary.total_capacity_mbps,
            "total_used_capacity_mbps": capacity.summary.total_used_capacity_mbps,
            "status": capacity.summary.status.value,
            "plazas": [
                {"plaza": p.plaza, "utilization_pct": p.utilization, "status": p.status.value}
                for p in capacity.plazas
            ],
        },
        "critical_sites": {
            "total": sites.summary.total_critical_sites,
            "total_alerts": sites.summary.total_alerts,
            "average_health_score": sites.summary.average_health_score.value,
            "sites": [
                {"site": s.site, "status": s.status.value, "issues": s.issues} for s in sites.sites
            ],
        },
        "growth": {
            "metric": growth.metric,
            "period": growth.period,
            "trend": growth.analysis.trend.value,
            "average_growth_pct": growth.analysis.average_growth.value,
            "next_month": growth.projections.next_month.value if growth.projections else None,
        },
    }


def headline_figures(payload: Mapping[str, Any]) -> dict[str, float | int | str | None]:
    capacity = payload.get("capacity", {})
    sites = payload.get("critical_sites", {})
    growth = payload.get("growth", {})
    return {
        "average_utilization_pct": capacity.get("average_utilization_pct"),
        "total_capacity_mbps": capacity.get("total_capacity_mbps"),
        "critical_sites": sites.get("total"),
        "site_alerts": sites.get("total_alerts"),
        "growth_trend": growth.get("trend"),
        "projected_next_month": growth.get("next_month"),
    }


class GetExecutiveSummaryUseCase:
    def __init__(
        self,
        *,
        policy: ResolutionPolicy,
        capacity: GetCapacityUtilizationUseCase,
        critical_sites: GetCriticalSitesUseCase,
        growth: GetGrowthTrendsUseCase,
        generator: SummaryGeneratorPort,
        config: DashboardConfig,
        clock: Clock = utcnow,
    ) -> None:
        self._policy = policy
        self._capacity = capacity
        self._critical_sites = critical_sites
        self._growth = growth
        self._generator = generator
        self._config = config
        self._clock = clock

    async def execute(
        self,
        *,
        dashboard_data: Mapping[str, Any] | None = None,
        skip_cache: bool = False,
    ) -> Resolution:
        """Return the cached summary or generate a new one.

        Args:
            dashboard_data: Figures already shown by a client; when given they
                are summarized instead of re-resolving the dashboard views.
            skip_cache: Regenerate even when a summary is cached.
        """
        if not skip_cache:
            hit = await self._policy.cached(CACHE_KEY)
            if hit is not None:
                return hit

        if dashboard_data:
            payload = dict(dashboard_data)
            data = Resolution(
                value=payload,
                source=ResolutionSource.DASHBOARD,
                origin=SourceKind.DASHBOARD,
                timestamp=self._clock(),
                cache_ttl_remaining_s=0.0,
            )
            figures: dict[str, float | int | str | None] = {}
        else:
            data = await self._gather(refresh=skip_cache)
            payload = data.value
            figures = headline_figures(payload)

        if not self._generator.configured:
            return self._static(NOT_CONFIGURED_MESSAGE, figures, data)
        try:
            text = await self._generator.generate(SummaryKind.DASHBOARD, payload)
        except SummaryGenerationError as exc:
            logger.warning("summary.executive_unavailable", extra={"error": str(exc)})
            return self._static(FAILED_MESSAGE, figures, data)

        summary = SummaryDTO(
            summary=with_note(text, data),
            generated=True,
            data_source=data.origin,
            figures=figures,
        )
        return await self._policy.store(
            CACHE_KEY,
            summary.model_dump(mode="json"),
            source=data.origin,
            ttl_s=self._config.summary_ttl(data.origin),
        )

    async def invalidate(self) -> None:
        await self._policy.invalidate(CACHE_KEY)

    async def _gather(self, *, refresh: bool) -> Resolution:
        capacity, sites, growth = await asyncio.gather(
            self._capacity.execute(refresh=refresh),
            self._critical_sites.execute(
                limit=SUMMARY_SITES, threshold=SUMMARY_SITE_THRESHOLD, refresh=refresh
            ),
            self._growth.execute(
                period=GrowthPeriod.THREE_MONTHS, metric=GrowthMetric.UTILIZATION, refresh=refresh
            ),
        )
        payload = dashboard_payload(
            CapacityUtilizationDTO.model_validate(capacity.value),
            CriticalSitesDTO.model_validate(sites.value),
            GrowthTrendsDTO.model_validate(growth.value),
        )
        return combine([capacity, sites, growth], payload)

    def _static(
        self, message: str, figures: dict[str, float | int | str | None], data: Resolution
    ) -> Resolution:
        summary = SummaryDTO(
            summary=message, generated=False, data_source=data.origin, figures=figures
        )
        return uncached_result(summary.model_dump(mode="json"), data=data, now=self._clock())
