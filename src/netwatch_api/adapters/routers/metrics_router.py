# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Prometheus scrape endpoint (``/metrics``).

Histograms are created lazily, so the canonical server histogram is warmed
with one labelled 0.0s observation to make its buckets appear on the first
scrape.

Layer:
    adapters/routers
"""

from __future__ import annotations

from contextlib import suppress

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from netwatch_api.infrastructure.observability.metrics import (
    get_http_server_request_duration_seconds,
    get_resolutions_total,
)

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def metrics_probe() -> Response:
    """Expose Prometheus metrics in the text exposition format."""
    with suppress(Exception):
        get_http_server_request_duration_seconds().labels("GET", "/metrics", "200").observe(0.0)
        get_resolutions_total()
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
