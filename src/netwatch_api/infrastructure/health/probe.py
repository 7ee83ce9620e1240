# src/netwatch_api/infrastructure/health/probe.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Readiness probes for the cache backend and the Observium upstream.

Each probe returns ``(success, detail)`` and always observes its latency on
``netwatch_readyz_probe_latency_seconds{probe=...}``.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Protocol

from netwatch_api.infrastructure.observability.metrics import get_readyz_probe_latency_seconds

__all__ = ["CacheUpstreamProbe", "Pingable"]


class Pingable(Protocol):
    async def ping(self) -> bool: ...


class CacheUpstreamProbe:
    """Readiness probe for the cache backend and the monitoring upstream."""

    def __init__(self, cache: Pingable, upstream: Pingable) -> None:
        self._cache = cache
        self._upstream = upstream

    async def cache(self) -> tuple[bool, str | None]:
        return await _timed("cache", self._cache.ping)

    async def upstream(self) -> tuple[bool, str | None]:
        return await _timed("upstream", self._upstream.ping)


async def _timed(name: str, ping: Callable[[], Awaitable[bool]]) -> tuple[bool, str | None]:
    start = time.perf_counter()
    detail: str | None = None
    try:
        ok = bool(await ping())
        if not ok:
            detail = "ping returned false"
    except Exception as exc:
        ok = False
        detail = f"{type(exc).__name__}: {exc}"
    finally:
        get_readyz_probe_latency_seconds().labels(probe=name).observe(time.perf_counter() - start)
    return ok, detail
