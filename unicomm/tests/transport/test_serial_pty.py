from __future__ import annotations

import os
import threading

import pytest

from unicomm.core.errors import ReadTimeoutError
from unicomm.core.options import Protocol, SerialOptions, UnicommOptions
from unicomm.transport.factory import create

pytestmark = pytest.mark.skipif(not hasattr(os, "openpty"), reason="needs a pseudo-terminal")


class Streamer(threading.Thread):
    """Keeps writing `chunk` to the master side of a pty until stopped."""

    def __init__(self, fd: int, chunk: bytes):
        super().__init__(daemon=True)
        self.fd = fd
        self.chunk = chunk
        self.stop_event = threading.Event()

    def run(self) -> None:
        while not self.stop_event.wait(0.005):
            try:
                os.write(self.fd, self.chunk)
            except OSError:
                return


@pytest.fixture
def pty_port():
    master, slave = os.openpty()
    name = os.ttyname(slave)
    yield master, name
    os.close(slave)
    os.close(master)


def _open(port: str):
    conn = create(UnicommOptions(
        protocol=Protocol.SERIAL,
        serial=SerialOptions(port=port, baudrate=115200, verify_port=False, read_timeout=0.1),
    ))
    conn.connect()
    return conn


def _stream(master: int, chunk: bytes) -> Streamer:
    s = Streamer(master, chunk)
    s.start()
    return s


def test_read_after_timed_out_read_until_sees_streamed_data(pty_port):
    master, name = pty_port
    streamer = _stream(master, b"x")
    conn = _open(name)
    try:
        for _ in range(5):
            with pytest.raises(ReadTimeoutError) as ei:
                conn.read_until("\n")
            assert ei.value.partial.startswith(b"x")
            assert conn.read(8) != b""
    finally:
        streamer.stop_event.set()
        streamer.join(1.0)
        conn.disconnect()


def test_read_until_after_timeout_still_matches(pty_port):
    master, name = pty_port
    streamer = _stream(master, b"ab")
    conn = _open(name)
    try:
        with pytest.raises(ReadTimeoutError):
            conn.read_until("\n")

        assert conn.read_until("b").endswith(b"b")
    finally:
        streamer.stop_event.set()
        streamer.join(1.0)
        conn.disconnect()
