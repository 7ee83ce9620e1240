# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Classification Router.

Summary:
    Site rankings for the classification panel of the dashboard.

Layer:
    adapters/routers
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Query, Request, Response

from netwatch_api.adapters.presenters.base_presenter import BasePresenter
from netwatch_api.adapters.routers.base_router import BaseRouter
from netwatch_api.adapters.schemas.http.envelopes import ResolvedEnvelope
from netwatch_api.application.schemas.dto.monitoring import SaturatedSitesDTO
from netwatch_api.application.use_cases.monitoring.get_saturated_sites import (
    DEFAULT_LIMIT,
    GetSaturatedSitesUseCase,
)
from netwatch_api.dependencies.dashboard import get_saturated_sites_uc

router = BaseRouter(version="v1", resource="classification", tags=["Classification"])
presenter = BasePresenter()


@router.get(
    "/most-saturated-sites",
    response_model=ResolvedEnvelope[SaturatedSitesDTO],
    summary="Sites ranked by saturation",
)
async def most_saturated_sites(
    request: Request,
    response: Response,
    uc: Annotated[GetSaturatedSitesUseCase, Depends(get_saturated_sites_uc)],
    refresh: Annotated[bool, Query(description="Bypass the cache.")] = False,
) -> Any:
    resolution = await uc.execute(limit=DEFAULT_LIMIT, refresh=refresh)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)
