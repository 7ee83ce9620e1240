# src/netwatch_api/infrastructure/middleware/request_id.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Request ID Middleware.

Summary:
    Assigns a correlation id to each request and echoes it back. An incoming
    ``X-Request-ID`` is reused when it is safe; otherwise a UUID4 is generated.
    An incoming ``x-trace-id`` is honored the same way and defaults to the
    request id.

Contract:
    * Reads:  X-Request-ID, x-trace-id (optional)
    * Writes: X-Request-ID, x-trace-id (always)
    * Stores: request.state.request_id, request.state.trace_id
    * Enriches logs via contextvars
"""

from __future__ import annotations

import re
import uuid
from typing import Final

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from netwatch_api.infrastructure.logging.logger import set_request_context

REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
TRACE_HEADER: Final[str] = "x-trace-id"
_SAFE_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9\-_.:@]{1,128}$")


def _coerce(raw: str | None) -> str | None:
    value = (raw or "").strip()
    return value if value and _SAFE_RE.match(value) else None


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach request and trace ids to the request, the log context and the response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        req_id = _coerce(request.headers.get(REQUEST_ID_HEADER)) or str(uuid.uuid4())
        trace_id = _coerce(request.headers.get(TRACE_HEADER)) or req_id

        request.state.request_id = req_id
        request.state.trace_id = trace_id
        set_request_context(request_id=req_id, trace_id=trace_id)

        response: Response = await call_next(request)
        response.headers.setdefault(REQUEST_ID_HEADER, req_id)
        response.headers.setdefault(TRACE_HEADER, trace_id)
        return response
