# tests/unit/adapters/test_observium_gateway.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from netwatch_api.adapters.gateways.observium_gateway import (
    ObserviumGateway,
    map_port,
    map_sensor,
    normalize_collection,
    parse_optional_float,
)
from netwatch_api.domain.entities.records import Bill, Device
from netwatch_api.domain.enums.monitoring import AlertSeverity, ResourceKind
from netwatch_api.domain.exceptions.monitoring import UpstreamValidationError


class FakeTransport:
    """Returns canned bodies per resource and records the query parameters."""

    def __init__(self, bodies: Mapping[str, Mapping[str, Any]]) -> None:
        self.bodies = bodies
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def get(
        self, resource: str, params: Mapping[str, Any] | None = None
    ) -> Mapping[str, Any]:
        self.calls.append((resource, dict(params or {})))
        return self.bodies[resource]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("12.5", 12.5), (" 3 ", 3.0), ("", None), (None, None), ("NaN", None), ("inf", None),
     ("abc", None), (True, None), (7, 7.0)],
)
def test_parse_optional_float(raw: Any, expected: float | None) -> None:
    assert parse_optional_float(raw) == expected


def test_normalize_map_and_array_shapes() -> None:
    assert normalize_collection({"2": {"a": 1}, "1": {"a": 2}, "x": "junk"}) == [
        {"a": 1},
        {"a": 2},
    ]
    assert normalize_collection([{"a": 1}, 5]) == [{"a": 1}]
    assert normalize_collection("nope") == []


def test_port_mapping_never_produces_nan() -> None:
    port = map_port(
        {
            "port_id": "9",
            "ifOperStatus": "up",
            "ifSpeed": "",
            "ifHighSpeed": "0",
            "ifInOctets_rate": "-5",
            "ifOutOctets_rate": "nan",
            "ifInOctets_perc": None,
        }
    )
    assert port.is_up is True
    assert port.if_speed_bps == 0.0
    assert port.if_high_speed_mbps is None
    assert port.in_octets_rate == 0.0
    assert port.out_octets_rate == 0.0
    assert port.in_perc is None


def test_sensor_event_marks_sensor_online() -> None:
    ok = map_sensor({"sensor_id": "5", "sensor_class": "humidity", "sensor_value": "44.5",
                     "sensor_event": "OK"})
    alert = map_sensor({"sensor_id": "6", "sensor_value": "41", "sensor_event": "alert"})
    assert (ok.value, ok.is_ok) == (44.5, True)
    assert alert.is_ok is False
    assert map_sensor({"sensor_id": "7"}).is_ok is False


@pytest.mark.asyncio
async def test_devices_filter_by_location_and_skip_bad_rows() -> None:
    transport = FakeTransport(
        {
            "devices": {
                "count": 3,
                "devices": {
                    "1": {"device_id": "1", "hostname": "sal-rtr", "location": "Saltillo Centro",
                          "status": "1"},
                    "2": {"device_id": "2", "hostname": "lrd-rtr", "location": "Laredo",
                          "status": "0"},
                    "3": {"hostname": "orphan"},
                },
            }
        }
    )
    gateway = ObserviumGateway(transport, page_sizes={ResourceKind.DEVICES: 25})

    everything = await gateway.devices()
    assert [d.device_id for d in everything] == ["1", "2"]
    assert everything[0].is_up and not everything[1].is_up

    saltillo = await gateway.devices("saltillo")
    assert [d.hostname for d in saltillo] == ["sal-rtr"]
    assert transport.calls[0] == ("devices", {"pagesize": 25})


@pytest.mark.asyncio
async def test_ports_and_alerts_pass_filters() -> None:
    transport = FakeTransport(
        {
            "ports": {"ports": [{"port_id": "1", "ifOperStatus": "up"},
                                {"port_id": "2", "ifOperStatus": "down"}]},
            "alerts": {"alerts": {"5": {"alert_table_id": "5", "severity": "crit"}}},
        }
    )
    gateway = ObserviumGateway(transport)

    ports = await gateway.ports(["1", "2"], up_only=True)
    assert [p.port_id for p in ports] == ["1"]
    assert transport.calls[0][1] == {
        "pagesize": 100,
        "device_id": ["1", "2"],
        "ifOperStatus": "up",
    }

    alerts = await gateway.alerts()
    assert alerts[0].severity is AlertSeverity.CRITICAL
    assert transport.calls[1][1]["status"] == "failed"


@pytest.mark.asyncio
async def test_bills_read_either_key_and_empty_count() -> None:
    gateway = ObserviumGateway(
        FakeTransport({"bills": {"bill": {"1": {"bill_id": "1", "bill_name": "MTY"}}}})
    )
    bills = await gateway.bills()
    assert bills == [Bill(bill_id="1", name="MTY")]

    empty = ObserviumGateway(FakeTransport({"bills": {"status": "ok", "count": 0}}))
    assert await empty.bills() == []


@pytest.mark.asyncio
async def test_missing_collection_is_schema_error() -> None:
    gateway = ObserviumGateway(FakeTransport({"devices": {"status": "ok", "count": 4}}))
    with pytest.raises(UpstreamValidationError) as info:
        await gateway.fetch(ResourceKind.DEVICES)
    assert info.value.details["resource"] == "devices"


@pytest.mark.asyncio
async def test_fetch_returns_typed_records() -> None:
    gateway = ObserviumGateway(
        FakeTransport({"devices": {"devices": [{"device_id": "4", "sysName": "core"}]}})
    )
    records = await gateway.fetch(ResourceKind.DEVICES)
    assert records == [Device(device_id="4", hostname="core")]
