# tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

import httpx
import pytest
from fastapi import FastAPI

from netwatch_api.application.interfaces.summary_port import SummaryKind
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.dependencies.container import DashboardContainer, build_container
from netwatch_api.domain.entities.records import (
    Alert,
    Bill,
    Device,
    Mempool,
    MonitoringRecord,
    Port,
    Processor,
    Sensor,
)
from netwatch_api.domain.enums.monitoring import AlertSeverity, ResourceKind
from netwatch_api.domain.exceptions.monitoring import SummaryGenerationError, UpstreamUnavailable
from netwatch_api.infrastructure.caching.memory_cache import InMemoryJsonCache
from netwatch_api.infrastructure.caching.ttl_store import TtlCacheStore
from netwatch_api.infrastructure.persistence.trend_history_store import TrendHistoryStore
from netwatch_api.main import create_app

FIXED_NOW = datetime(2025, 6, 10, 12, 0, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW


class StubGateway:
    """In-memory monitoring upstream with a small two-plaza network.

    Saltillo has two devices (one down) sharing site ``SAL-PZA-01``; Monterrey
    has one. Port 10 runs at 50% of 1 Gbit/s, port 30 at 10%. Set ``fail`` to
    make every call raise ``UpstreamUnavailable``.
    """

    def __init__(self) -> None:
        self.fail = False
        self.calls: list[str] = []
        self.device_rows = [
            Device(device_id="1", hostname="SAL-PZA-01-rtr", location="Saltillo Centro",
                   is_up=True),
            Device(device_id="2", hostname="SAL-PZA-01-sw", location="Saltillo Centro"),
            Device(device_id="3", hostname="MTY-NTE-01-rtr", location="Monterrey Norte",
                   is_up=True),
        ]
        self.port_rows = [
            Port(port_id="10", device_id="1", is_up=True, if_high_speed_mbps=1000.0,
                 in_octets_rate=62_500_000.0),
            Port(port_id="11", device_id="1", is_up=False, if_high_speed_mbps=1000.0),
            Port(port_id="30", device_id="3", is_up=True, if_high_speed_mbps=1000.0,
                 out_octets_rate=12_500_000.0),
        ]
        self.alert_rows = [
            Alert(alert_id="a1", device_id="1", severity=AlertSeverity.CRITICAL),
            Alert(alert_id="a2", device_id="3", severity=AlertSeverity.WARNING),
        ]
        self.processor_rows = [
            Processor(processor_id="p1", device_id="1", usage_pct=30.0),
            Processor(processor_id="p3", device_id="3", usage_pct=20.0),
        ]
        self.mempool_rows = [
            Mempool(mempool_id="m1", device_id="1", usage_pct=50.0),
            Mempool(mempool_id="m3", device_id="3", usage_pct=40.0),
        ]
        self.sensor_rows = [
            Sensor(sensor_id="s1", device_id="1", sensor_class="temperature", value=40.0),
            Sensor(sensor_id="s3", device_id="3", sensor_class="temperature", value=35.0),
        ]
        self.bill_rows = [
            Bill(bill_id="1", name="Saltillo enlace", rate_95th_in=100 * 1024 * 1024),
            Bill(bill_id="2", name="MTY transito", rate_95th_out=50 * 1024 * 1024),
        ]

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if self.fail:
            raise UpstreamUnavailable("stub upstream down", details={"resource": name})

    def count(self, name: str) -> int:
        return self.calls.count(name)

    async def fetch(
        self, kind: ResourceKind, filters: Mapping[str, Any] | None = None
    ) -> Sequence[MonitoringRecord]:
        self._enter(kind.value)
        rows: dict[ResourceKind, Sequence[MonitoringRecord]] = {
            ResourceKind.DEVICES: self.device_rows,
            ResourceKind.PORTS: self.port_rows,
            ResourceKind.ALERTS: self.alert_rows,
            ResourceKind.SENSORS: self.sensor_rows,
            ResourceKind.PROCESSORS: self.processor_rows,
            ResourceKind.MEMPOOLS: self.mempool_rows,
            ResourceKind.BILLS: self.bill_rows,
        }
        return list(rows[kind])

    async def devices(self, location: str | None = None) -> list[Device]:
        self._enter("devices")
        if not location:
            return list(self.device_rows)
        needle = location.lower()
        return [d for d in self.device_rows if needle in d.location.lower()]

    async def ports(
        self, device_ids: Sequence[str] | None = None, *, up_only: bool = False
    ) -> list[Port]:
        self._enter("ports")
        rows = self.port_rows
        if device_ids is not None:
            rows = [p for p in rows if p.device_id in set(device_ids)]
        return [p for p in rows if p.is_up or not up_only]

    async def alerts(self, status: str = "failed") -> list[Alert]:
        self._enter("alerts")
        return list(self.alert_rows)

    async def sensors(
        self, sensor_class: str, device_ids: Sequence[str] | None = None
    ) -> list[Sensor]:
        self._enter("sensors")
        return [
            s
            for s in self.sensor_rows
            if s.sensor_class == sensor_class and (device_ids is None or s.device_id in device_ids)
        ]

    async def processors(self, device_ids: Sequence[str] | None = None) -> list[Processor]:
        self._enter("processors")
        return [p for p in self.processor_rows if device_ids is None or p.device_id in device_ids]

    async def mempools(self, device_ids: Sequence[str] | None = None) -> list[Mempool]:
        self._enter("mempools")
        return [m for m in self.mempool_rows if device_ids is None or m.device_id in device_ids]

    async def bills(self) -> list[Bill]:
        self._enter("bills")
        return list(self.bill_rows)


class StubGenerator:
    """Summary generator returning canned text, or failing on demand."""

    def __init__(self, text: str = "Resumen de prueba.", *, configured: bool = True) -> None:
        self.text = text
        self._configured = configured
        self.fail = False
        self.requests: list[tuple[SummaryKind, dict[str, Any]]] = []

    @property
    def configured(self) -> bool:
        return self._configured

    async def generate(self, kind: SummaryKind, payload: Mapping[str, Any]) -> str:
        self.requests.append((kind, dict(payload)))
        if self.fail:
            raise SummaryGenerationError("stub failure", details={"error_type": "RuntimeError"})
        return self.text


class StubProbe:
    def __init__(self, *, cache_ok: bool = True, upstream_ok: bool = True) -> None:
        self.cache_ok = cache_ok
        self.upstream_ok = upstream_ok

    async def cache(self) -> tuple[bool, str | None]:
        return self.cache_ok, None if self.cache_ok else "ConnectionError"

    async def upstream(self) -> tuple[bool, str | None]:
        return self.upstream_ok, None if self.upstream_ok else "UpstreamUnavailable"


@pytest.fixture
def gateway() -> StubGateway:
    return StubGateway()


@pytest.fixture
def generator() -> StubGenerator:
    return StubGenerator()


@pytest.fixture
def history() -> TrendHistoryStore:
    return TrendHistoryStore()


@pytest.fixture
def dashboard_config() -> DashboardConfig:
    return DashboardConfig()


@pytest.fixture
def container(
    gateway: StubGateway,
    generator: StubGenerator,
    history: TrendHistoryStore,
    dashboard_config: DashboardConfig,
) -> DashboardContainer:
    return build_container(
        cache=InMemoryJsonCache(TtlCacheStore()),
        gateway=gateway,
        history=history,
        generator=generator,
        config=dashboard_config,
        clock=fixed_clock,
    )


@pytest.fixture
def probe() -> StubProbe:
    return StubProbe()


@pytest.fixture
def app(container: DashboardContainer, probe: StubProbe) -> FastAPI:
    app = create_app(lifespan=False)
    app.state.container = container
    app.state.probe = probe
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
