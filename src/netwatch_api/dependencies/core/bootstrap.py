# src/netwatch_api/dependencies/core/bootstrap.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Core bootstrap for infrastructure (cache, Observium, OpenAI, trend history).

This module owns the lifecycle of shared infrastructure used by the FastAPI
app. Configuration is read from Settings; construction is delegated to the
infrastructure modules and :func:`build_container`.

The public surface is :func:`bootstrap`, an async context manager yielding a
:class:`BootstrapState`, and :func:`build_cache`.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Final

import httpx
from fastapi import FastAPI

from netwatch_api.adapters.gateways.observium_gateway import ObserviumGateway
from netwatch_api.application.interfaces.cache_port import CachePort
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.config.settings import Settings, get_settings
from netwatch_api.dependencies.container import DashboardContainer, build_container
from netwatch_api.domain.enums.monitoring import ResourceKind
from netwatch_api.infrastructure.caching import redis_client
from netwatch_api.infrastructure.caching.json_cache import RedisJsonCache
from netwatch_api.infrastructure.caching.memory_cache import InMemoryJsonCache
from netwatch_api.infrastructure.caching.ttl_store import TtlCacheStore
from netwatch_api.infrastructure.external_apis.llm.summary_client import OpenAISummaryGenerator
from netwatch_api.infrastructure.external_apis.observium.client import ObserviumClient
from netwatch_api.infrastructure.external_apis.observium.settings import ObserviumSettings
from netwatch_api.infrastructure.health.probe import CacheUpstreamProbe
from netwatch_api.infrastructure.logging.logger import get_json_logger
from netwatch_api.infrastructure.persistence.trend_history_store import TrendHistoryStore

logger = get_json_logger(__name__)

SWEEP_INTERVAL_S: Final[float] = 60.0


@dataclass
class BootstrapState:
    """State yielded by the bootstrap context manager."""

    settings: Settings
    http_client: httpx.AsyncClient
    observium: ObserviumClient
    generator: OpenAISummaryGenerator
    container: DashboardContainer
    probe: CacheUpstreamProbe


def build_cache(settings: Settings) -> CachePort:
    """Select the cache backend named by ``CACHE_BACKEND``."""
    if settings.cache_backend == "redis":
        redis_client.init_redis(settings)
        return RedisJsonCache()
    return InMemoryJsonCache(TtlCacheStore(max_entries=settings.cache_max_entries))


def page_sizes(settings: Settings) -> dict[ResourceKind, int]:
    return {
        ResourceKind.DEVICES: settings.observium_devices_page_size,
        ResourceKind.PORTS: settings.observium_ports_page_size,
        ResourceKind.ALERTS: settings.observium_alerts_page_size,
        ResourceKind.BILLS: settings.observium_bills_page_size,
    }


async def _sweep(store: TtlCacheStore, interval_s: float) -> None:
    while True:
        await asyncio.sleep(interval_s)
        purged = store.purge_expired()
        if purged:
            logger.debug("cache.swept", extra={"purged": purged})


@asynccontextmanager
async def bootstrap(app: FastAPI) -> AsyncGenerator[BootstrapState, None]:
    """Initialize and tear down shared infrastructure.

    Responsibilities:
        * Load application settings.
        * Build the cache backend (and the Redis client when selected).
        * Create one shared HTTPX AsyncClient for the Observium transport.
        * Build the OpenAI summary generator (inert without an API key).
        * Wire every use case and sweep the in-process cache periodically.
        * Close everything on exit, even on error.

    Args:
        app: FastAPI application instance (unused today).

    Yields:
        BootstrapState: Settings, shared clients and the use-case container.
    """
    settings: Settings = get_settings()
    logger.info(
        "bootstrap.start",
        extra={
            "cache_backend": settings.cache_backend,
            "summaries_enabled": settings.openai_api_key is not None,
            "demo_data_enabled": settings.demo_data_enabled,
        },
    )

    cache = build_cache(settings)
    http_client = httpx.AsyncClient(timeout=settings.observium_timeout_s)
    observium = ObserviumClient(ObserviumSettings.from_settings(settings), http=http_client)
    generator = OpenAISummaryGenerator.from_settings(settings)
    container = build_container(
        cache=cache,
        gateway=ObserviumGateway(observium, page_sizes=page_sizes(settings)),
        history=TrendHistoryStore(),
        generator=generator,
        config=DashboardConfig.from_settings(settings),
        single_flight=settings.resolution_single_flight,
    )
    state = BootstrapState(
        settings=settings,
        http_client=http_client,
        observium=observium,
        generator=generator,
        container=container,
        probe=CacheUpstreamProbe(cache=cache, upstream=observium),  # type: ignore[arg-type]
    )

    sweeper: asyncio.Task[None] | None = None
    if isinstance(cache, InMemoryJsonCache):
        sweeper = asyncio.create_task(_sweep(cache.store, SWEEP_INTERVAL_S))

    try:
        yield state
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper

        try:
            await generator.aclose()
        except Exception:
            logger.exception("bootstrap.summary_client_close_failed")

        try:
            await http_client.aclose()
        except Exception:
            logger.exception("bootstrap.http_client_close_failed")

        if settings.cache_backend == "redis":
            try:
                await redis_client.close_redis()
            except Exception:
                logger.exception("bootstrap.redis_close_failed")

        logger.info("bootstrap.stop")
