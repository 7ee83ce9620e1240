# src/netwatch_api/infrastructure/middleware/access_log.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Access Log Middleware.

Emits one structured ``access_log`` record per request with method, path,
query, status, latency and client address. Unhandled exceptions are logged
with status 500 and re-raised.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from netwatch_api.infrastructure.logging.logger import get_json_logger

_logger: logging.Logger = get_json_logger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Structured access logging middleware."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        t0 = time.perf_counter()
        response: Response | None = None
        ok = False
        try:
            response = await call_next(request)
            ok = True
            return response
        finally:
            elapsed_ms = (time.perf_counter() - t0) * 1000.0
            log: dict[str, Any] = {
                "evt": "access",
                "method": request.method,
                "path": request.url.path,
                "query": str(request.url.query),
                "status": response.status_code if response is not None else 500,
                "elapsed_ms": round(elapsed_ms, 2),
                "client_ip": request.client.host if request.client else None,
                "ok": ok,
            }
            _logger.info("access_log", extra=log)
