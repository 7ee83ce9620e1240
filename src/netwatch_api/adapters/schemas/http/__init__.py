# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""HTTP Schemas package (Adapters Layer).

Public, adapter-facing HTTP schema surface: the canonical envelopes and the
request bodies. BaseHTTPSchema stays internal to this package.

Layer:
    adapters/schemas/http
"""

from __future__ import annotations

from netwatch_api.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    ErrorObject,
    ResolutionMeta,
    ResolvedEnvelope,
    SuccessEnvelope,
)
from netwatch_api.adapters.schemas.http.requests import (
    DashboardPushRequest,
    ExecutiveSummaryRequest,
    LinkSampleRequest,
)

__all__ = [
    # Envelopes
    "ErrorObject",
    "ErrorEnvelope",
    "ResolutionMeta",
    "ResolvedEnvelope",
    "SuccessEnvelope",
    # Requests
    "DashboardPushRequest",
    "ExecutiveSummaryRequest",
    "LinkSampleRequest",
]
