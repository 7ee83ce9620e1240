# src/netwatch_api/adapters/routers/api_router.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""API Router Aggregator (Adapters Layer).

Responsibilities:
    * Mount health endpoints under ``/health``.
    * Mount the monitoring, plazas, executive, trend-history, alerts and
      classification routers; each BaseRouter already carries its ``/v1/<resource>`` prefix.

Layer:
    adapters/routers
"""

from __future__ import annotations

from fastapi import APIRouter

from netwatch_api.adapters.routers.alerts_router import router as alerts_router
from netwatch_api.adapters.routers.classification_router import router as classification_router
from netwatch_api.adapters.routers.executive_router import router as executive_router
from netwatch_api.adapters.routers.health_router import router as health_router
from netwatch_api.adapters.routers.monitoring_router import router as monitoring_router
from netwatch_api.adapters.routers.plazas_router import router as plazas_router
from netwatch_api.adapters.routers.trends_router import router as trends_router

router = APIRouter()

router.include_router(health_router, prefix="/health", tags=["Health"])
router.include_router(monitoring_router)
router.include_router(plazas_router)
router.include_router(executive_router)
router.include_router(trends_router)
router.include_router(alerts_router)
router.include_router(classification_router)
