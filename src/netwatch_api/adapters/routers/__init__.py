"""Routers Package Export (Adapters Layer).

Re-exports the router aggregator (``api_router``) and the Prometheus scrape
router (``metrics``) the application factory mounts.

Layer:
    adapters/routers
"""

from __future__ import annotations

from .api_router import router as api_router
from .metrics_router import router as metrics

__all__ = ["api_router", "metrics"]
