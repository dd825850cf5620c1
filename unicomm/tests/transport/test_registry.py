from __future__ import annotations

import pytest

from unicomm.transport.registry import TransportDriverRegistry
from unicomm.transport.base import Transport
from unicomm.transport.errors import TransportError
from unicomm.transport.serial_port import SerialPortTransport
from unicomm.transport.tcp import TcpTransport


class DummyTransport(Transport):
    def __init__(self, *, x: int = 0):
        super().__init__()
        self.x = x

    @property
    def address(self) -> str: return "dummy"
    def open(self) -> None: ...
    def close(self) -> None: ...
    def is_open(self) -> bool: return False
    def probe(self) -> None: ...
    def read(self, n: int) -> bytes: return b""
    def write(self, data: bytes) -> int: return len(data)
    def flush(self) -> None: ...


def test_registry_has_and_get_class_case_insensitive():
    reg = TransportDriverRegistry({"DUMMY": DummyTransport})

    assert reg.has("dummy") is True
    assert reg.has("DUMMY") is True
    assert reg.has("DuMmY") is True

    cls = reg.get_class("dummy")
    assert cls is DummyTransport


def test_registry_get_class_unknown_raises():
    reg = TransportDriverRegistry({})
    with pytest.raises(TransportError):
        reg.get_class("serial")


def test_registry_create_instantiates_with_params():
    reg = TransportDriverRegistry({"dummy": DummyTransport})

    t = reg.create("DUMMY", x=42)
    assert isinstance(t, DummyTransport)
    assert t.x == 42


def test_default_registry_knows_serial_and_tcp():
    reg = TransportDriverRegistry.default()

    assert reg.get_class("serial") is SerialPortTransport
    assert reg.get_class("TCP") is TcpTransport


def test_register_rejects_non_transport_classes():
    reg = TransportDriverRegistry({})

    with pytest.raises(TransportError):
        reg.register("bogus", dict)  # type: ignore[arg-type]


def test_register_adds_driver_and_lists_names():
    reg = TransportDriverRegistry.default()
    reg.register("Loop", DummyTransport)

    assert reg.names() == ["loop", "serial", "tcp"]
    assert reg.get_class("LOOP") is DummyTransport


def test_unknown_driver_error_lists_known_drivers():
    reg = TransportDriverRegistry.default()

    with pytest.raises(TransportError, match="known: serial, tcp"):
        reg.get_class("udp")
