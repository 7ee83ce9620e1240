# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""HTTP request bodies (Adapters Layer)."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import Field

from netwatch_api.adapters.schemas.http.base import BaseHTTPSchema
from netwatch_api.application.schemas.dto.monitoring import (
    AlertDTO,
    DashboardSnapshotDTO,
    DeviceDTO,
)


class DashboardPushRequest(BaseHTTPSchema):
    """Devices and alerts a dashboard client already rendered."""

    plaza: str | None = Field(default=None, examples=["Saltillo"])
    devices: list[DeviceDTO] = Field(..., min_length=1)
    alerts: list[AlertDTO] = Field(default_factory=list)

    def to_dto(self) -> DashboardSnapshotDTO:
        return DashboardSnapshotDTO(plaza=self.plaza, devices=self.devices, alerts=self.alerts)


class ExecutiveSummaryRequest(BaseHTTPSchema):
    """Optional dashboard figures to summarize instead of re-resolving them."""

    dashboard_data: dict[str, Any] | None = Field(default=None)


class LinkSampleRequest(BaseHTTPSchema):
    """One utilization reading for a link."""

    value: float = Field(..., ge=0, le=100, description="Utilization percent.", examples=[63.5])
    observed_on: date | None = Field(
        default=None, description="Reading date; defaults to today. Snapped to its biweekly period."
    )
