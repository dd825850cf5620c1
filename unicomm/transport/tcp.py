# unicomm/transport/tcp.py
from __future__ import annotations

import logging
import socket
from typing import Optional

from unicomm.core.options import TcpOptions
from .base import Transport
from .errors import DialError, TransportIOError, WriteTimeoutError


class TcpTransport(Transport):
    """
    TCP stream transport over a plain socket.

    Deadlines map onto the socket timeout before every recv()/send(), so a
    read never blocks past the read deadline. A recv() timeout and end of
    stream both come back as b"".
    """

    def __init__(self, options: TcpOptions, logger: Optional[logging.Logger] = None):
        super().__init__()
        self.options = options
        self.sock: Optional[socket.socket] = None
        self._log = logger or logging.getLogger(__name__)

    @property
    def address(self) -> str:
        return self.options.address

    def open(self) -> None:
        opts = self.options

        if self.sock is not None:
            self._release_stale()

        try:
            self.sock = socket.create_connection(
                (opts.host.strip("[]"), opts.port),
                timeout=opts.dial_timeout,
            )
        except OSError as e:
            self.sock = None
            raise DialError(f"could not connect to {self.address}: {e}") from None

    def _release_stale(self) -> None:
        try:
            self.sock.close()  # type: ignore[union-attr]
        except OSError:
            self._log.debug("STALE_HANDLE_CLOSE_FAILED address=%s", self.address, exc_info=True)
        self.sock = None

    def close(self) -> None:
        if self.sock is None:
            return
        try:
            self.sock.close()
        except OSError as e:
            raise TransportIOError(f"tcp close failed: {e}") from None
        self.sock = None

    def is_open(self) -> bool:
        return self.sock is not None and self.sock.fileno() != -1

    def probe(self) -> None:
        if not self.is_open():
            raise TransportIOError("tcp socket not open")
        try:
            self.sock.send(b"")  # type: ignore[union-attr]
        except OSError as e:
            raise TransportIOError(f"tcp probe failed: {e}") from None

    def read(self, n: int) -> bytes:
        if self.sock is None:
            raise TransportIOError("read while transport not open")

        remaining = self._remaining(self._read_deadline)
        if remaining is not None and remaining <= 0:
            return b""

        try:
            self.sock.settimeout(remaining)
            return self.sock.recv(n)
        except socket.timeout:
            return b""
        except OSError as e:
            raise TransportIOError(f"tcp read failed: {e}") from None

    def write(self, data: bytes) -> int:
        if self.sock is None:
            raise TransportIOError("write while transport not open")

        remaining = self._remaining(self._write_deadline)
        if remaining is not None and remaining <= 0:
            raise WriteTimeoutError("tcp write deadline already passed")

        try:
            self.sock.settimeout(remaining)
            return self.sock.send(data)
        except socket.timeout:
            raise WriteTimeoutError(f"tcp write to {self.address} timed out") from None
        except OSError as e:
            raise TransportIOError(f"tcp write failed: {e}") from None

    def flush(self) -> None:
        # send() hands data straight to the kernel
        if self.sock is None:
            raise TransportIOError("flush while transport not open")
