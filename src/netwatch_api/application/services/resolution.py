# src/netwatch_api/application/services/resolution.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Resolution policy: cache -> live -> relaxed -> fallback.

Synopsis:
    The single decision procedure every data endpoint follows to answer a
    request: serve a cached entry when one is live, otherwise fetch from the
    upstream with the exact filter, then with a relaxed filter, and finally
    return synthetic fallback data. Whatever is produced is written back to
    the cache and returned with its provenance and production timestamp.

Design:
    * Tier ordering is total and deterministic:
        1. cache hit  -> ``source=cache`` (value unchanged, original timestamp)
        2. primary    -> ``source=live``
        3. relaxed    -> ``source=partial``
        4. fallback   -> ``source=fallback`` or ``demo``
    * A fetcher "fails" when it raises *or* returns a value the request's
      ``is_useful`` predicate rejects (by default None or an empty
      collection). Failures are logged and never propagated.
    * Fallback values are cached for ``min(fallback_ttl_s, ttl_s)`` so an
      upstream outage cannot pin synthetic data for the full live TTL.
    * No fallback and every fetch failed -> :class:`ConfigurationError`.
    * Optional single-flight: concurrent misses on one key wait on a
      per-key ``asyncio.Lock`` and re-check the cache, so only one of them
      reaches the upstream. Without it, racing misses each fetch and the
      last write wins; every write is a complete entry, so the cache always
      holds one consistent value.
    * Cache read/write errors degrade to a miss / an unwritten result.

Layer:
    application/services
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping, Sized
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from netwatch_api.application.interfaces.cache_port import CachePort
from netwatch_api.domain.enums.monitoring import ResolutionSource, SourceKind
from netwatch_api.domain.exceptions.monitoring import ConfigurationError
from netwatch_api.infrastructure.logging.logger import get_json_logger
from netwatch_api.infrastructure.observability.metrics import get_resolutions_total

__all__ = [
    "Clock",
    "Fetcher",
    "Resolution",
    "ResolutionPolicy",
    "ResolutionRequest",
    "default_is_useful",
    "utcnow",
]

logger = get_json_logger(__name__)

type Fetcher = Callable[[], Awaitable[Any]]
type Clock = Callable[[], datetime]

DEFAULT_FALLBACK_TTL_S = 60.0
_MISS: Any = object()


def default_is_useful(value: Any) -> bool:
    """Reject ``None`` and empty mappings/sequences; accept everything else."""
    if value is None:
        return False
    if isinstance(value, Sized) and not isinstance(value, str | bytes):
        return len(value) > 0
    return True


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class ResolutionRequest:
    """Everything the policy needs to answer one logical query.

    Args:
        cache_key: Deterministic key derived from the query parameters.
        fetch_primary: Upstream fetch honoring the exact filter.
        ttl_s: Lifetime of a live/partial result in the cache.
        fetch_relaxed: Broader fetch tried when the primary one fails.
        fallback: Synthetic value, or a zero-arg callable producing it.
            ``None`` means no fallback was configured.
        fallback_ttl_s: Upper bound for caching the fallback value.
        fallback_source: Tag for the fallback tier (``fallback`` or ``demo``).
        is_useful: Predicate deciding whether a fetched value counts.
        skip_cache: Bypass the lookup (the result is still written back).
    """

    cache_key: str
    fetch_primary: Fetcher
    ttl_s: float
    fetch_relaxed: Fetcher | None = None
    fallback: Any = None
    fallback_ttl_s: float = DEFAULT_FALLBACK_TTL_S
    fallback_source: SourceKind = SourceKind.FALLBACK
    is_useful: Callable[[Any], bool] = default_is_useful
    skip_cache: bool = False

    def __post_init__(self) -> None:
        if not self.cache_key:
            raise ValueError("cache_key must be non-empty")
        if self.fallback_source not in (SourceKind.FALLBACK, SourceKind.DEMO):
            raise ValueError("fallback_source must be 'fallback' or 'demo'")


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of :meth:`ResolutionPolicy.resolve`.

    Attributes:
        value: The payload (JSON-ready).
        source: Tier that answered this request.
        origin: Tier that originally produced the value (equals ``source``
            except on cache hits).
        timestamp: When the value was produced (not when it was read).
        cache_ttl_remaining_s: Seconds until the cache entry expires.
    """

    value: Any
    source: ResolutionSource
    origin: SourceKind
    timestamp: datetime
    cache_ttl_remaining_s: float

    @property
    def cached(self) -> bool:
        return self.source is ResolutionSource.CACHE

    @property
    def is_synthetic(self) -> bool:
        return self.origin.is_synthetic


@dataclass
class _InFlight:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class ResolutionPolicy:
    """Tiered resolver bound to one cache instance.

    Args:
        cache: CachePort implementation owning every entry.
        single_flight: Share one fetch between concurrent misses on a key.
        clock: Returns the current aware UTC datetime.
    """

    def __init__(
        self,
        cache: CachePort,
        *,
        single_flight: bool = False,
        clock: Clock = utcnow,
    ) -> None:
        self._cache = cache
        self._single_flight = single_flight
        self._clock = clock
        self._inflight: dict[str, _InFlight] = {}

    @property
    def cache(self) -> CachePort:
        return self._cache

    async def resolve(self, request: ResolutionRequest) -> Resolution:
        """Answer ``request`` from the first tier that yields something useful.

        Raises:
            ConfigurationError: Every fetch failed and no fallback was supplied.
        """
        if not request.skip_cache:
            hit = await self._lookup(request.cache_key)
            if hit is not None:
                return self._count(hit)

        if not self._single_flight:
            return self._count(await self._run_tiers(request))

        async with self._key_lock(request.cache_key):
            if not request.skip_cache:
                hit = await self._lookup(request.cache_key)
                if hit is not None:
                    return self._count(hit)
            return self._count(await self._run_tiers(request))

    async def store(
        self, key: str, value: Any, *, source: SourceKind, ttl_s: float
    ) -> Resolution:
        """Write ``value`` under ``key`` as if a tier tagged ``source`` produced it."""
        produced_at = self._clock()
        entry = {"value": value, "source": source.value, "timestamp": produced_at.isoformat()}
        stored = True
        try:
            await self._cache.set_json(key, entry, ttl=ttl_s)
        except Exception as exc:
            stored = False
            logger.warning(
                "resolution.cache_write_failed",
                extra={"key": key, "error_type": type(exc).__name__, "error": str(exc)},
            )
        return Resolution(
            value=value,
            source=ResolutionSource(source.value),
            origin=source,
            timestamp=produced_at,
            cache_ttl_remaining_s=max(0.0, float(ttl_s)) if stored else 0.0,
        )

    async def cached(self, key: str) -> Resolution | None:
        """Return the live cache entry for ``key`` (tagged ``cache``), or None."""
        hit = await self._lookup(key)
        return self._count(hit) if hit is not None else None

    async def invalidate(self, key: str) -> None:
        """Drop the cache entry for ``key`` (no error if absent)."""
        await self._cache.delete(key)
        logger.info("resolution.invalidated", extra={"key": key})

    # ------------------------------------------------------------------ #
    # Tiers
    # ------------------------------------------------------------------ #
    async def _run_tiers(self, request: ResolutionRequest) -> Resolution:
        tiers: tuple[tuple[SourceKind, Fetcher | None], ...] = (
            (SourceKind.LIVE, request.fetch_primary),
            (SourceKind.PARTIAL, request.fetch_relaxed),
        )
        for tier, fetcher in tiers:
            if fetcher is None:
                continue
            value = await self._attempt(request, tier, fetcher)
            if value is not _MISS:
                return await self.store(
                    request.cache_key, value, source=tier, ttl_s=request.ttl_s
                )

        fallback = request.fallback() if callable(request.fallback) else request.fallback
        if fallback is None:
            logger.error("resolution.no_fallback", extra={"key": request.cache_key})
            raise ConfigurationError(
                "All fetch tiers failed and no fallback value is configured.",
                details={"cache_key": request.cache_key},
            )

        ttl = min(request.fallback_ttl_s, request.ttl_s)
        logger.warning(
            "resolution.fallback_served",
            extra={
                "key": request.cache_key,
                "source": request.fallback_source.value,
                "ttl_s": ttl,
            },
        )
        return await self.store(
            request.cache_key, fallback, source=request.fallback_source, ttl_s=ttl
        )

    async def _attempt(
        self, request: ResolutionRequest, tier: SourceKind, fetcher: Fetcher
    ) -> Any:
        """Run one fetcher; return its value if useful, else ``_MISS`` (after logging)."""
        try:
            value = await fetcher()
        except Exception as exc:
            logger.warning(
                "resolution.tier_failed",
                extra={
                    "key": request.cache_key,
                    "tier": tier.value,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            return _MISS
        if not request.is_useful(value):
            logger.warning(
                "resolution.tier_empty",
                extra={"key": request.cache_key, "tier": tier.value},
            )
            return _MISS
        return value

    # ------------------------------------------------------------------ #
    # Cache helpers
    # ------------------------------------------------------------------ #
    async def _lookup(self, key: str) -> Resolution | None:
        try:
            entry = await self._cache.get_json(key)
            if entry is None:
                return None
            remaining = await self._cache.time_remaining(key)
        except Exception as exc:
            logger.warning(
                "resolution.cache_read_failed",
                extra={"key": key, "error_type": type(exc).__name__, "error": str(exc)},
            )
            return None
        decoded = self._decode(key, entry)
        if decoded is None:
            return None
        value, origin, produced_at = decoded
        return Resolution(
            value=value,
            source=ResolutionSource.CACHE,
            origin=origin,
            timestamp=produced_at,
            cache_ttl_remaining_s=remaining,
        )

    @staticmethod
    def _decode(key: str, entry: Mapping[str, Any]) -> tuple[Any, SourceKind, datetime] | None:
        try:
            return (
                entry["value"],
                SourceKind(entry["source"]),
                datetime.fromisoformat(entry["timestamp"]),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("resolution.cache_entry_corrupt", extra={"key": key})
            return None

    @asynccontextmanager
    async def _key_lock(self, key: str) -> AsyncIterator[None]:
        slot = self._inflight.get(key)
        if slot is None:
            slot = self._inflight[key] = _InFlight()
        slot.users += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if slot.users == 0:
                self._inflight.pop(key, None)

    @staticmethod
    def _count(resolution: Resolution) -> Resolution:
        with suppress(Exception):
            get_resolutions_total().labels(tier=resolution.source.value).inc()
        return resolution
