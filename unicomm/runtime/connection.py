# unicomm/runtime/connection.py
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional, Union

from unicomm.core.errors import AlreadyConnectedError, NotConnectedError, ShortWriteError
from unicomm.core.options import DEFAULT_READ_TIMEOUT_S, DEFAULT_WRITE_TIMEOUT_S, Protocol
from unicomm.transport.base import Transport
from unicomm.transport.errors import TransportError

from .framing import BytesLike, frame_payload, to_bytes
from ._internal.scan_worker import scan_until


@dataclass(frozen=True)
class ConnectionStatus:
    protocol: Optional[str]
    address: str
    connected: bool


class Connection:
    """
    Uniform connect/disconnect/read/read_until/write over one transport.

    Responsibilities:
      - own the transport handle: present iff connected, installed only by
        connect(), cleared only by a successful disconnect() or a failed connect()
      - serialize every operation on this connection through one lock
      - frame outgoing payloads and bound reads by a deadline

    The lock is not re-entrant; the *_locked helpers expect it to be held.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        protocol: Optional[Union[Protocol, int]] = None,
        read_timeout: float = DEFAULT_READ_TIMEOUT_S,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT_S,
        end_delimiter: Union[bytes, str] = b"",
        logger: Optional[logging.Logger] = None,
    ):
        self._transport = transport
        self._protocol = Protocol(protocol) if protocol is not None else None
        self.read_timeout = float(read_timeout)
        self.write_timeout = float(write_timeout)
        self.end_delimiter = to_bytes(end_delimiter or b"")

        self._log = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._handle: Optional[Transport] = None

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def address(self) -> str:
        return self._transport.address

    # ---------------- liveness ----------------
    def _probe_locked(self) -> bool:
        if self._handle is None:
            return False
        try:
            self._handle.probe()
        except (TransportError, OSError) as e:
            self._log.debug("PROBE_FAILED address=%s err=%s", self.address, e)
            return False
        return True

    def _require_handle_locked(self) -> Transport:
        if not self._probe_locked():
            raise NotConnectedError(
                f"There is no connection to {self.address}.",
                hint="Call connect() first.",
                details={"address": self.address},
            )
        assert self._handle is not None
        return self._handle

    def is_connected(self) -> bool:
        """
        Probe the handle; False when there is none or the probe fails. Never raises.

        The handle is only ever read under the lock, so even a never-connected
        instance waits for an in-flight connect() (at most the dial timeout).
        """
        with self._lock:
            return self._probe_locked()

    def status(self) -> ConnectionStatus:
        return ConnectionStatus(
            protocol=self._protocol.name.lower() if self._protocol is not None else None,
            address=self.address,
            connected=self.is_connected(),
        )

    # ---------------- lifecycle ----------------
    def connect(self) -> None:
        with self._lock:
            if self._probe_locked():
                raise AlreadyConnectedError(
                    f"A connection to {self.address} is already established.",
                    hint="Call disconnect() before connecting again.",
                    details={"address": self.address},
                )

            try:
                self._transport.open()
            except TransportError as e:
                self._handle = None
                self._log.warning("CONNECT_FAILED address=%s err=%s", self.address, e)
                raise

            self._handle = self._transport
            self._log.info("CONNECT_OK address=%s", self.address)

    def disconnect(self) -> None:
        with self._lock:
            handle = self._require_handle_locked()
            try:
                handle.close()
            except TransportError as e:
                self._log.warning("DISCONNECT_FAILED address=%s err=%s", self.address, e)
                raise
            self._handle = None
            self._log.info("DISCONNECT_OK address=%s", self.address)

    # ---------------- I/O ----------------
    def read(self, n: int) -> bytes:
        """
        One underlying read of up to n bytes, bounded by the read timeout.

        A short (or empty) result is not an error.
        """
        if n < 0:
            raise ValueError(f"read size must be >= 0, got {n}")

        with self._lock:
            handle = self._require_handle_locked()
            handle.set_read_deadline(time.monotonic() + self.read_timeout)
            data = handle.read(n)

        self._log.debug("READ address=%s want=%d got=%d raw=%s", self.address, n, len(data), data.hex())
        return data

    def read_until(self, delimiter: BytesLike) -> bytes:
        """
        Read byte by byte until `delimiter` is contained in what was read.

        Holds the connection lock for the whole call. Raises ReadTimeoutError
        (with `.partial`) when the read timeout expires first.
        """
        delim = to_bytes(delimiter)
        if not delim:
            raise ValueError("read_until() needs a non-empty delimiter")

        with self._lock:
            handle = self._require_handle_locked()
            deadline = time.monotonic() + self.read_timeout
            handle.set_read_deadline(deadline)
            data = scan_until(handle, delim, deadline, logger=self._log)

        self._log.debug("READ_UNTIL address=%s len=%d raw=%s", self.address, len(data), data.hex())
        return data

    def write(self, payload: BytesLike) -> None:
        """
        Send `payload`, terminated with the configured end delimiter.

        One underlying write; fewer bytes accepted than framed is a ShortWriteError.
        """
        message = frame_payload(payload, self.end_delimiter)

        with self._lock:
            handle = self._require_handle_locked()
            handle.set_write_deadline(time.monotonic() + self.write_timeout)
            written = handle.write(message)

        if written != len(message):
            self._log.warning("SHORT_WRITE address=%s written=%d expected=%d", self.address, written, len(message))
            raise ShortWriteError(written, len(message))

        self._log.debug("WRITE address=%s len=%d raw=%s", self.address, len(message), message.hex())

    def __enter__(self) -> "Connection":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.is_connected():
            self.disconnect()

    def __repr__(self) -> str:
        proto = self._protocol.name.lower() if self._protocol is not None else type(self._transport).__name__
        return f"Connection(protocol={proto}, address='{self.address}')"
