from __future__ import annotations

import textwrap

import pytest

from unicomm.config.loader import ProfileLoader
from unicomm.core.errors import TransportConfigError
from unicomm.core.options import Protocol


def _write(tmp_path, body: str):
    p = tmp_path / "connections.yml"
    p.write_text(textwrap.dedent(body), encoding="utf-8")
    return p


def test_load_all_reads_profiles(tmp_path):
    path = _write(
        tmp_path,
        """
        connections:
          bench-psu:
            protocol: tcp
            host: 192.168.0.10
            port: 5025
            end_delimiter: "\\n"
          scope:
            protocol: serial
            port: /dev/ttyUSB0
            baudrate: 115200
            stop_bits: 1.5
            read_timeout_ms: 500
        """,
    )

    loader = ProfileLoader(path)
    profiles = loader.load_all()

    assert sorted(profiles) == ["bench-psu", "scope"]

    psu = loader.get("bench-psu").options()
    assert psu.protocol is Protocol.TCP
    assert psu.tcp is not None
    assert psu.tcp.address == "192.168.0.10:5025"
    assert psu.tcp.end_delimiter == b"\n"

    scope = profiles["scope"].options()
    assert scope.serial is not None
    assert scope.serial.read_timeout == pytest.approx(0.5)
    assert scope.serial.stop_bits.value == "1.5"


def test_single_quoted_escapes_are_decoded(tmp_path):
    path = _write(
        tmp_path,
        """
        connections:
          dmm:
            protocol: serial
            port: COM3
            end_delimiter: '\\r\\n'
        """,
    )

    loader = ProfileLoader(path)
    loader.load_all()

    opts = loader.get("dmm").options()
    assert opts.serial is not None
    assert opts.serial.end_delimiter == b"\r\n"


def test_missing_file_raises(tmp_path):
    with pytest.raises(TransportConfigError):
        ProfileLoader(tmp_path / "nope.yml").load_all()


def test_missing_root_node_raises(tmp_path):
    path = _write(tmp_path, "devices: {}\n")
    with pytest.raises(TransportConfigError):
        ProfileLoader(path).load_all()


def test_invalid_yaml_raises(tmp_path):
    path = _write(tmp_path, "connections: [unclosed\n")
    with pytest.raises(TransportConfigError):
        ProfileLoader(path).load_all()


def test_entry_without_protocol_raises(tmp_path):
    path = _write(
        tmp_path,
        """
        connections:
          x:
            host: h
            port: 1
        """,
    )
    with pytest.raises(TransportConfigError):
        ProfileLoader(path).load_all()


def test_bad_entry_fails_at_load_time(tmp_path):
    path = _write(
        tmp_path,
        """
        connections:
          x:
            protocol: tcp
            host: h
            port: 70000
        """,
    )
    with pytest.raises(TransportConfigError):
        ProfileLoader(path).load_all()


def test_get_unknown_profile_raises(tmp_path):
    path = _write(
        tmp_path,
        """
        connections:
          a:
            protocol: tcp
            host: h
            port: 1
        """,
    )
    loader = ProfileLoader(path)
    loader.load_all()

    with pytest.raises(TransportConfigError) as ei:
        loader.get("b")

    assert "a" in (ei.value.hint or "")
