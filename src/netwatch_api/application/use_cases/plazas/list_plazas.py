# src/netwatch_api/application/use_cases/plazas/list_plazas.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: list the plazas available for filtering.

Device locations are merged with the default plazas; when the upstream is
unreachable only the defaults are returned, tagged ``fallback``.
"""

from __future__ import annotations

from typing import Any

from netwatch_api.application.schemas.dto.plazas import PlazaListDTO
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.enums.monitoring import SourceKind
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import DEFAULT_PLAZA
from netwatch_api.domain.services.demo_data import DEFAULT_PLAZAS

CACHE_KEY = "plazas"


class ListPlazasUseCase:
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

    async def execute(self, *, refresh: bool = False) -> Resolution:
        async def primary() -> dict[str, Any] | None:
            devices = await self._gateway.devices()
            if not devices:
                return None
            names = {d.location.strip() for d in devices if d.location.strip()}
            names.discard(DEFAULT_PLAZA)
            return PlazaListDTO(
                plazas=sorted(names | set(DEFAULT_PLAZAS)), source_kind=SourceKind.LIVE
            ).model_dump(mode="json")

        def defaults() -> dict[str, Any]:
            return PlazaListDTO(
                plazas=sorted(DEFAULT_PLAZAS), source_kind=SourceKind.FALLBACK
            ).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=CACHE_KEY,
                fetch_primary=primary,
                ttl_s=self._config.ttl_plaza_s,
                fallback=self._config.fallback_or_none(defaults),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.FALLBACK,
                skip_cache=refresh,
            )
        )
