# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Alerts Router.

Summary:
    Active alerts across the network, filterable by severity, entity type,
    device and plaza. The upstream is read-only, so alerts cannot be
    acknowledged from here.

Layer:
    adapters/routers
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Query, Request, Response

from netwatch_api.adapters.presenters.base_presenter import BasePresenter
from netwatch_api.adapters.routers.base_router import BaseRouter
from netwatch_api.adapters.schemas.http.envelopes import ResolvedEnvelope
from netwatch_api.application.schemas.dto.monitoring import AlertListDTO
from netwatch_api.application.use_cases.monitoring.list_alerts import AlertFilter, ListAlertsUseCase
from netwatch_api.dependencies.dashboard import get_alerts_uc
from netwatch_api.domain.enums.monitoring import AlertSeverity

router = BaseRouter(version="v1", resource="alerts", tags=["Alerts"])
presenter = BasePresenter()


@router.get("", response_model=ResolvedEnvelope[AlertListDTO], summary="Active alerts")
async def list_alerts(
    request: Request,
    response: Response,
    uc: Annotated[ListAlertsUseCase, Depends(get_alerts_uc)],
    severity: AlertSeverity | None = None,
    entity_type: Annotated[str | None, Query(examples=["port", "device"])] = None,
    device_id: str | None = None,
    plaza: str | None = None,
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
    refresh: Annotated[bool, Query(description="Bypass the cache.")] = False,
) -> Any:
    query = AlertFilter(
        severity=severity,
        entity_type=entity_type or None,
        device_id=device_id or None,
        plaza=(plaza or "").strip() or None,
        limit=limit,
    )
    resolution = await uc.execute(query, refresh=refresh)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)
