# src/netwatch_api/application/interfaces/cache_port.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Application Interface: Cache Port.

Synopsis:
    Minimal JSON cache behavior used by the resolution policy and use cases.
    Enables swapping the in-process TTL store for Redis without touching
    application code.

Layer:
    application/interfaces
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class CachePort(Protocol):
    """JSON cache with TTL semantics.

    Implementations store JSON-serializable mappings and apply TTLs in
    seconds. A TTL <= 0 must never yield a hit on a later read.
    """

    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        """Return the value stored under ``key``, or ``None`` when absent or expired."""
        ...

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: float) -> None:
        """Insert or overwrite ``key`` and restart its expiration clock.

        Args:
            key: Cache key (already namespaced if applicable).
            value: JSON-serializable mapping.
            ttl: Time-to-live in seconds.
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove ``key``; absent keys are not an error."""
        ...

    async def time_remaining(self, key: str) -> float:
        """Seconds until ``key`` expires, ``0.0`` when absent or expired."""
        ...
