# src/netwatch_api/infrastructure/middleware/request_metrics.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Request latency middleware.

Records ``http_server_request_duration_seconds`` labelled by method, the
templated route (raw path when no route matched) and status code. Metric
failures never affect the response.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from netwatch_api.infrastructure.observability.metrics import (
    get_http_server_request_duration_seconds,
)

__all__ = ["RequestLatencyMiddleware"]

logger = logging.getLogger(__name__)


class RequestLatencyMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._hist = get_http_server_request_duration_seconds()

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start
            route_obj = request.scope.get("route")
            handler = (
                getattr(route_obj, "path_format", None)
                or getattr(route_obj, "path", None)
                or request.url.path
            )
            try:
                self._hist.labels(request.method.upper(), handler, str(status_code)).observe(
                    duration
                )
            except Exception:
                logger.debug("prom.histogram_observe_failed", exc_info=True)
