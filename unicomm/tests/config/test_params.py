from __future__ import annotations

import pytest

from unicomm.config.params import OptionsResolver, decode_delimiter, parse_protocol
from unicomm.core.errors import TransportConfigError, UnknownProtocolError
from unicomm.core.options import Parity, Protocol, StopBits


def test_resolve_serial_converts_milliseconds_and_enums():
    opts = OptionsResolver().resolve(
        "serial",
        {
            "port": "/dev/ttyUSB0",
            "baudrate": 115200,
            "parity": "even",
            "stop_bits": 2,
            "read_timeout_ms": 250,
            "end_delimiter": r"\r\n",
        },
    )

    assert opts.protocol is Protocol.SERIAL
    s = opts.serial
    assert s is not None
    assert s.port == "/dev/ttyUSB0"
    assert s.baudrate == 115200
    assert s.parity is Parity.EVEN
    assert s.stop_bits is StopBits.TWO
    assert s.read_timeout == pytest.approx(0.25)
    assert s.write_timeout == pytest.approx(0.1)
    assert s.end_delimiter == b"\r\n"
    assert opts.tcp is None


def test_resolve_tcp_defaults():
    opts = OptionsResolver().resolve(Protocol.TCP, {"host": "10.0.0.5", "port": 5025})

    t = opts.tcp
    assert t is not None
    assert t.dial_timeout == pytest.approx(0.5)
    assert t.read_timeout == pytest.approx(0.1)
    assert t.end_delimiter == b""


def test_unknown_param_rejected():
    with pytest.raises(TransportConfigError) as ei:
        OptionsResolver().resolve("tcp", {"host": "h", "port": 1, "baudrate": 9600})

    assert ei.value.details["param"] == "baudrate"


def test_missing_required_param_rejected():
    with pytest.raises(TransportConfigError) as ei:
        OptionsResolver().resolve("tcp", {"host": "h"})

    assert ei.value.details["param"] == "port"


@pytest.mark.parametrize(
    "params",
    [
        {"host": "h", "port": "5025"},
        {"host": "h", "port": True},
        {"host": "h", "port": 1, "read_timeout_ms": "fast"},
        {"host": ["h"], "port": 1},
    ],
)
def test_type_mismatch_rejected(params):
    with pytest.raises(TransportConfigError):
        OptionsResolver().resolve("tcp", params)


def test_bool_param_accepts_zero_one():
    opts = OptionsResolver().resolve("serial", {"port": "COM1", "verify_port": 0})
    assert opts.serial is not None
    assert opts.serial.verify_port is False


@pytest.mark.parametrize("raw", ["serial", "SERIAL", 0, Protocol.SERIAL])
def test_parse_protocol_accepts_names_and_numbers(raw):
    assert parse_protocol(raw) is Protocol.SERIAL


def test_parse_protocol_unknown():
    with pytest.raises(UnknownProtocolError):
        parse_protocol("udp")
    with pytest.raises(UnknownProtocolError):
        parse_protocol(9)


def test_decode_delimiter_escapes():
    assert decode_delimiter(r"\r\n") == b"\r\n"
    assert decode_delimiter(r"\x03") == b"\x03"
    assert decode_delimiter("\n") == b"\n"
    assert decode_delimiter(r"a\\b") == b"a\\b"
