# tests/unit/dependencies/test_bootstrap.py
from __future__ import annotations

import pytest
from fastapi import FastAPI

from netwatch_api.config.settings import Settings
from netwatch_api.dependencies.core import bootstrap as bootstrap_module
from netwatch_api.dependencies.core.bootstrap import bootstrap, build_cache, page_sizes
from netwatch_api.domain.enums.monitoring import ResourceKind
from netwatch_api.infrastructure.caching.memory_cache import InMemoryJsonCache


def test_memory_backend_is_default() -> None:
    cache = build_cache(Settings(CACHE_MAX_ENTRIES=10))
    assert isinstance(cache, InMemoryJsonCache)


def test_page_sizes_follow_settings() -> None:
    sizes = page_sizes(Settings(OBSERVIUM_PORTS_PAGE_SIZE=7))
    assert sizes[ResourceKind.PORTS] == 7
    assert set(sizes) == {
        ResourceKind.DEVICES,
        ResourceKind.PORTS,
        ResourceKind.ALERTS,
        ResourceKind.BILLS,
    }


@pytest.mark.asyncio
async def test_bootstrap_wires_container_and_closes(monkeypatch) -> None:
    settings = Settings(OPENAI_API_KEY=None, DEMO_DATA_ENABLED=False)
    monkeypatch.setattr(bootstrap_module, "get_settings", lambda: settings)

    async with bootstrap(FastAPI()) as state:
        assert state.settings is settings
        assert state.container.config.demo_data_enabled is False
        assert state.generator.configured is False
        assert not state.http_client.is_closed

    assert state.http_client.is_closed
