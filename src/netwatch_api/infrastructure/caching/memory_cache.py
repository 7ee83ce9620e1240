# src/netwatch_api/infrastructure/caching/memory_cache.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""JSON Cache (in-process).

Synopsis:
    Implements the application CachePort on top of :class:`TtlCacheStore`.
    This is the default backend: one store per process, constructed by the
    composition root and injected wherever a cache is needed.

Design:
    * Values are deep-copied on write and on read so a caller mutating a
      returned mapping can never alter what later hits observe.
    * Async signatures match the Redis backend; no awaits happen inside.
    * Operation metrics use ``backend="memory"``.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import copy
import time
from collections.abc import Mapping
from contextlib import suppress
from typing import Any

from netwatch_api.application.interfaces.cache_port import CachePort
from netwatch_api.infrastructure.caching.ttl_store import TtlCacheStore
from netwatch_api.infrastructure.observability.metrics import (
    get_cache_operation_duration_seconds,
    get_cache_operations_total,
)

__all__ = ["InMemoryJsonCache"]

_BACKEND = "memory"


def _observe(operation: str, hit: str, start: float) -> None:
    with suppress(Exception):
        get_cache_operation_duration_seconds().labels(
            backend=_BACKEND, operation=operation, hit=hit
        ).observe(time.perf_counter() - start)
        get_cache_operations_total().labels(backend=_BACKEND, operation=operation, hit=hit).inc()


class InMemoryJsonCache(CachePort):
    """CachePort backed by a process-local TTL store."""

    def __init__(self, store: TtlCacheStore | None = None) -> None:
        self._store = store if store is not None else TtlCacheStore()

    @property
    def store(self) -> TtlCacheStore:
        """The underlying store (exposed for sweeps and diagnostics)."""
        return self._store

    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        start = time.perf_counter()
        value = self._store.get(key)
        _observe("get_json", "true" if value is not None else "false", start)
        return None if value is None else copy.deepcopy(value)

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: float) -> None:
        start = time.perf_counter()
        self._store.set(key, copy.deepcopy(dict(value)), ttl)
        _observe("set_json", "n/a", start)

    async def delete(self, key: str) -> None:
        start = time.perf_counter()
        self._store.delete(key)
        _observe("delete", "n/a", start)

    async def time_remaining(self, key: str) -> float:
        return self._store.time_remaining(key)

    async def ping(self) -> bool:
        """Readiness hook; the in-process store is always reachable."""
        return True
