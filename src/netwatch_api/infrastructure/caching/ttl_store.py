# src/netwatch_api/infrastructure/caching/ttl_store.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""In-process TTL cache store.

Synopsis:
    Thread-safe key/value store with per-entry expiration. Expired entries
    are never returned; they are evicted lazily on access or by
    :meth:`TtlCacheStore.purge_expired`.

Design:
    * One ``threading.Lock`` guards the table; every operation is O(1)
      except the sweep and the bounded-size eviction.
    * The clock is injectable (monotonic seconds) so expiry is testable
      without sleeping.
    * An entry expires once ``now >= created_at + ttl``; a TTL <= 0 is stored
      but is already expired on the next read.
    * Values are opaque; keys are opaque strings.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

__all__ = ["CacheEntry", "TtlCacheStore"]

type Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Stored value plus its expiry bookkeeping (seconds on the store clock)."""

    key: str
    value: Any
    created_at: float
    ttl: float

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TtlCacheStore:
    """Mutex-guarded TTL table.

    Args:
        clock: Zero-arg callable returning monotonic seconds.
        max_entries: Optional size bound. When a new key would exceed it,
            expired entries are purged first and then the entry closest to
            expiry is dropped.
    """

    def __init__(self, *, clock: Clock = time.monotonic, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return the live value for ``key``; evict and return ``None`` if expired."""
        with self._lock:
            entry = self._live_entry(key)
            return None if entry is None else entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Insert or overwrite ``key`` and restart its expiration clock."""
        with self._lock:
            now = self._clock()
            if (
                self._max_entries is not None
                and key not in self._entries
                and len(self._entries) >= self._max_entries
            ):
                self._make_room(now)
            self._entries[key] = CacheEntry(key=key, value=value, created_at=now, ttl=ttl)

    def delete(self, key: str) -> None:
        """Remove ``key`` unconditionally."""
        with self._lock:
            self._entries.pop(key, None)

    def time_remaining(self, key: str) -> float:
        """Seconds until expiry, ``0.0`` if absent or expired."""
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return 0.0
            return max(0.0, entry.expires_at - self._clock())

    def has(self, key: str) -> bool:
        """True when ``key`` holds a live entry."""
        with self._lock:
            return self._live_entry(key) is not None

    def keys(self) -> list[str]:
        """Keys of live entries (expired ones are skipped, not evicted)."""
        with self._lock:
            now = self._clock()
            return [k for k, e in self._entries.items() if not e.is_expired(now)]

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Evict every expired entry and return how many were removed."""
        with self._lock:
            return self._purge(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------ #
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------ #
    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    def _purge(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def _make_room(self, now: float) -> None:
        if self._purge(now) == 0 and self._entries:
            victim = min(self._entries.values(), key=lambda e: e.expires_at)
            del self._entries[victim.key]
