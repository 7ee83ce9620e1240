# tests/unit/infrastructure/test_health_probe.py
from __future__ import annotations

import pytest

from netwatch_api.infrastructure.health.probe import CacheUpstreamProbe


class _Ping:
    def __init__(self, result: bool | Exception) -> None:
        self.result = result

    async def ping(self) -> bool:
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


@pytest.mark.asyncio
async def test_probe_reports_each_dependency() -> None:
    probe = CacheUpstreamProbe(_Ping(True), _Ping(ConnectionError("refused")))

    assert await probe.cache() == (True, None)
    ok, detail = await probe.upstream()
    assert ok is False
    assert detail == "ConnectionError: refused"


@pytest.mark.asyncio
async def test_false_ping_is_down() -> None:
    probe = CacheUpstreamProbe(_Ping(False), _Ping(True))
    assert await probe.cache() == (False, "ping returned false")
