# src/netwatch_api/application/services/dashboard_config.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Freshness and threshold configuration shared by the dashboard use cases.

Use cases take a :class:`DashboardConfig` instead of the full ``Settings`` so
they stay independent of pydantic-settings and can be built directly in tests.
"""

from __future__ import annotations

from dataclasses import dataclass

from netwatch_api.config.settings import Settings
from netwatch_api.domain.enums.monitoring import SourceKind


@dataclass(frozen=True, slots=True)
class DashboardConfig:
    """TTLs (seconds), fallback switches and thresholds."""

    ttl_monitoring_s: float = 300.0
    ttl_plaza_s: float = 120.0
    ttl_trends_s: float = 3600.0
    ttl_executive_s: float = 300.0
    ttl_summary_s: float = 86400.0
    ttl_fallback_s: float = 60.0
    demo_data_enabled: bool = True
    health_threshold_pct: float = 80.0
    critical_site_threshold_pct: float = 75.0
    health_device_limit: int = 20

    @classmethod
    def from_settings(cls, settings: Settings) -> DashboardConfig:
        return cls(
            ttl_monitoring_s=float(settings.cache_ttl_monitoring_s),
            ttl_plaza_s=float(settings.cache_ttl_plaza_s),
            ttl_trends_s=float(settings.cache_ttl_trends_s),
            ttl_executive_s=float(settings.cache_ttl_executive_s),
            ttl_summary_s=float(settings.cache_ttl_summary_s),
            ttl_fallback_s=float(settings.cache_ttl_fallback_s),
            demo_data_enabled=settings.demo_data_enabled,
            health_threshold_pct=settings.health_threshold_pct,
            critical_site_threshold_pct=settings.critical_site_threshold_pct,
            health_device_limit=settings.observium_health_device_limit,
        )

    def fallback_or_none[T](self, value: T) -> T | None:
        """Return ``value`` when demo/fallback data is enabled, else None."""
        return value if self.demo_data_enabled else None

    def summary_ttl(self, origin: SourceKind) -> float:
        """Summary TTL; summaries of synthetic data expire with the fallback TTL."""
        if origin.is_synthetic:
            return min(self.ttl_fallback_s, self.ttl_summary_s)
        return self.ttl_summary_s
