from __future__ import annotations

import dataclasses

import pytest

from unicomm.core.errors import TransportConfigError
from unicomm.core.options import (
    DEFAULT_READ_TIMEOUT_S,
    DEFAULT_WRITE_TIMEOUT_S,
    Parity,
    SerialOptions,
    StopBits,
    TcpOptions,
)


def test_serial_defaults_applied_once_at_construction():
    opts = SerialOptions(port="COM6")

    assert opts.read_timeout == DEFAULT_READ_TIMEOUT_S == 0.1
    assert opts.write_timeout == DEFAULT_WRITE_TIMEOUT_S == 0.1
    assert opts.parity is Parity.NONE
    assert opts.stop_bits is StopBits.ONE
    assert opts.end_delimiter == b""
    assert opts.retry_connect is False


def test_none_timeout_counts_as_unset():
    opts = TcpOptions(host="h", port=1, read_timeout=None, write_timeout=None)

    assert opts.read_timeout == 0.1
    assert opts.write_timeout == 0.1
    assert opts.dial_timeout == 0.5


def test_explicit_timeouts_are_kept():
    opts = SerialOptions(port="COM6", read_timeout=5, write_timeout=2.5)

    assert opts.read_timeout == 5.0
    assert opts.write_timeout == 2.5


def test_negative_timeout_rejected():
    with pytest.raises(TransportConfigError):
        TcpOptions(host="h", port=1, read_timeout=-1)


def test_options_are_immutable():
    opts = SerialOptions(port="COM6")
    with pytest.raises(dataclasses.FrozenInstanceError):
        opts.baudrate = 115200  # type: ignore[misc]


@pytest.mark.parametrize(
    "raw,expected",
    [("even", Parity.EVEN), ("ODD", Parity.ODD), (Parity.MARK, Parity.MARK), ("space", Parity.SPACE)],
)
def test_parity_coercion(raw, expected):
    assert SerialOptions(port="p", parity=raw).parity is expected


@pytest.mark.parametrize(
    "raw,expected",
    [(1, StopBits.ONE), ("1.5", StopBits.ONE_POINT_FIVE), (1.5, StopBits.ONE_POINT_FIVE), (2, StopBits.TWO)],
)
def test_stop_bits_coercion(raw, expected):
    assert SerialOptions(port="p", stop_bits=raw).stop_bits is expected


def test_invalid_framing_rejected():
    with pytest.raises(TransportConfigError):
        SerialOptions(port="p", parity="sideways")
    with pytest.raises(TransportConfigError):
        SerialOptions(port="p", data_bits=9)


def test_text_delimiter_is_encoded():
    assert SerialOptions(port="p", end_delimiter="\r\n").end_delimiter == b"\r\n"


def test_serial_port_required():
    with pytest.raises(TransportConfigError):
        SerialOptions(port="")


@pytest.mark.parametrize("port", [0, 65536, True, "80"])
def test_tcp_port_validated(port):
    with pytest.raises(TransportConfigError):
        TcpOptions(host="h", port=port)


def test_tcp_address_brackets_ipv6_literals():
    assert TcpOptions(host="fe80::1", port=502).address == "[fe80::1]:502"
    assert TcpOptions(host="[::1]", port=502).address == "[::1]:502"
    assert TcpOptions(host="10.0.0.2", port=502).address == "10.0.0.2:502"
