# src/netwatch_api/infrastructure/caching/json_cache.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""JSON Cache (Redis-backed).

Synopsis:
    CachePort implementation on top of the shared Redis client from
    `infrastructure/caching/redis_client.py`, for deployments that run more
    than one API process and want them to share resolved data.

Design:
    * Namespaced keys: ``{namespace}:{key}`` (default ``netwatch:v1``).
    * Pure JSON (utf-8) serialization; no pickle.
    * ``SET EX`` with millisecond precision (``PX``); TTL <= 0 stores nothing,
      which reads back as absent exactly like an expired in-process entry.
    * ``time_remaining`` is ``PTTL`` converted to seconds (0 when missing).

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import json
import time
from collections.abc import Mapping
from contextlib import suppress
from typing import Any

from netwatch_api.application.interfaces.cache_port import CachePort
from netwatch_api.infrastructure.caching.redis_client import RedisClient, get_redis_client
from netwatch_api.infrastructure.observability.metrics import (
    get_cache_operation_duration_seconds,
    get_cache_operations_total,
)

__all__ = ["RedisJsonCache"]

_BACKEND = "redis"


class RedisJsonCache(CachePort):
    """Redis-backed implementation of the CachePort Protocol."""

    def __init__(
        self, *, namespace: str = "netwatch:v1", client: RedisClient | None = None
    ) -> None:
        """Initialize the cache adapter.

        Args:
            namespace: Prefix applied to all keys to avoid collisions.
            client: Explicit client; defaults to the process-wide one.
        """
        self._ns = namespace
        self._client = client

    def _k(self, key: str) -> str:
        return f"{self._ns}:{key.lstrip(':')}"

    def _redis(self) -> RedisClient:
        return self._client if self._client is not None else get_redis_client()

    def _observe(self, operation: str, hit: str, start: float) -> None:
        with suppress(Exception):
            get_cache_operation_duration_seconds().labels(
                backend=_BACKEND, operation=operation, hit=hit
            ).observe(time.perf_counter() - start)
            get_cache_operations_total().labels(
                backend=_BACKEND, operation=operation, hit=hit
            ).inc()

    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        start = time.perf_counter()
        hit = "false"
        try:
            raw = await self._redis().get(self._k(key))
            if raw is None:
                return None
            hit = "true"
            return json.loads(raw)
        finally:
            self._observe("get_json", hit, start)

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: float) -> None:
        start = time.perf_counter()
        try:
            ttl_ms = int(ttl * 1000)
            if ttl_ms <= 0:
                await self._redis().delete(self._k(key))
                return
            await self._redis().set(self._k(key), json.dumps(value), px=ttl_ms)
        finally:
            self._observe("set_json", "n/a", start)

    async def delete(self, key: str) -> None:
        start = time.perf_counter()
        try:
            await self._redis().delete(self._k(key))
        finally:
            self._observe("delete", "n/a", start)

    async def time_remaining(self, key: str) -> float:
        pttl = await self._redis().pttl(self._k(key))
        return max(0, int(pttl)) / 1000 if pttl is not None else 0.0

    async def ping(self) -> bool:
        """Readiness hook: round-trip to Redis."""
        return bool(await self._redis().ping())
