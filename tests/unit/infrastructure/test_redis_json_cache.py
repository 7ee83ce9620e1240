# tests/unit/infrastructure/test_redis_json_cache.py
from __future__ import annotations

import json

import fakeredis.aioredis
import pytest

from netwatch_api.application.services.resolution import ResolutionPolicy
from netwatch_api.domain.enums.monitoring import ResolutionSource, SourceKind
from netwatch_api.infrastructure.caching import redis_client as redis_client_module
from netwatch_api.infrastructure.caching.json_cache import RedisJsonCache


@pytest.mark.asyncio
async def test_key_shape_and_millisecond_ttl(monkeypatch) -> None:
    """Keys are namespaced and TTLs are applied in milliseconds."""
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)

    cache = RedisJsonCache(namespace="netwatch:test")
    await cache.set_json("monitoring-data:Saltillo", {"x": 1}, ttl=1.5)

    full_key = "netwatch:test:monitoring-data:Saltillo"
    assert await fake.get(full_key) == json.dumps({"x": 1})
    assert 0 < await fake.pttl(full_key) <= 1500
    assert 0 < await cache.time_remaining("monitoring-data:Saltillo") <= 1.5
    assert await cache.get_json("monitoring-data:Saltillo") == {"x": 1}


@pytest.mark.asyncio
async def test_non_positive_ttl_deletes() -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    cache = RedisJsonCache(client=fake)

    await cache.set_json("plazas", {"plazas": ["Saltillo"]}, ttl=60)
    await cache.set_json("plazas", {"plazas": []}, ttl=0)

    assert await cache.get_json("plazas") is None
    assert await cache.time_remaining("plazas") == 0.0
    assert await cache.ping() is True


@pytest.mark.asyncio
async def test_policy_round_trip_through_redis() -> None:
    cache = RedisJsonCache(client=fakeredis.aioredis.FakeRedis(decode_responses=True))
    policy = ResolutionPolicy(cache)

    stored = await policy.store("plazas", {"plazas": ["Laredo"]}, source=SourceKind.LIVE, ttl_s=30)
    hit = await policy.cached("plazas")

    assert hit is not None
    assert hit.source is ResolutionSource.CACHE
    assert hit.origin is SourceKind.LIVE
    assert hit.value == {"plazas": ["Laredo"]}
    assert hit.timestamp == stored.timestamp
    assert 0 < hit.cache_ttl_remaining_s <= 30

    await policy.invalidate("plazas")
    assert await policy.cached("plazas") is None
