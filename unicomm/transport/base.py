from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Optional


class Transport(ABC):
    """
    Abstract transport interface (serial line, TCP stream).

    Contract:
      - open()/close() manage the underlying connection handle.
      - read(n) performs one underlying read and returns 0..n bytes. b"" means
        no data: per-read timeout, read deadline already passed, or end of stream.
      - write(data) performs one underlying write and returns the number of
        bytes accepted. No retry of partial writes.
      - probe() is the liveness check: a zero-length write. It returns None when
        the handle accepts it and raises TransportIOError otherwise.
      - Deadlines are absolute time.monotonic() values (or None for "no deadline")
        applied to subsequent read()/write() calls where the transport can honour them.
    """

    def __init__(self) -> None:
        self._read_deadline: Optional[float] = None
        self._write_deadline: Optional[float] = None

    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def is_open(self) -> bool: ...

    @abstractmethod
    def read(self, n: int) -> bytes: ...

    @abstractmethod
    def write(self, data: bytes) -> int: ...

    @abstractmethod
    def flush(self) -> None: ...

    @abstractmethod
    def probe(self) -> None: ...

    @property
    @abstractmethod
    def address(self) -> str:
        """Human-readable endpoint (port name, host:port) for logs and errors."""

    def set_read_deadline(self, deadline: Optional[float]) -> None:
        self._read_deadline = deadline

    def set_write_deadline(self, deadline: Optional[float]) -> None:
        self._write_deadline = deadline

    def cancel_read(self) -> None:
        """Interrupt a read blocked in another thread, if the platform allows it."""
        return None

    @staticmethod
    def _remaining(deadline: Optional[float]) -> Optional[float]:
        if deadline is None:
            return None
        return max(0.0, deadline - time.monotonic())

    def __enter__(self) -> "Transport":
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()
