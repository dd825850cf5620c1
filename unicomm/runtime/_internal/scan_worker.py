# unicomm/runtime/_internal/scan_worker.py
from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Optional

from unicomm.core.errors import ReadTimeoutError

if TYPE_CHECKING:
    from unicomm.transport.base import Transport


# how long a timed-out caller waits for the scan thread to notice it was stopped
SCAN_JOIN_GRACE_S = 0.05

MATCHED = "matched"
DRAINED = "drained"
DEADLINE = "deadline"
STOPPED = "stopped"
FAILED = "failed"


class DelimiterScan(threading.Thread):
    """
    Thread that reads one byte at a time into a private buffer until the
    delimiter is contained in it, the transport runs dry, or the deadline passes.
    """

    def __init__(self, transport: "Transport", delimiter: bytes, deadline: float):
        super().__init__(daemon=True, name="DelimiterScan")
        self.transport = transport
        self.delimiter = bytes(delimiter)
        self.deadline = deadline
        self.outcome: Optional[str] = None
        self.error: Optional[BaseException] = None
        self._buf = bytearray()
        self._buf_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._finished = threading.Event()

    def run(self) -> None:
        try:
            self.outcome = self._scan()
        except Exception as e:
            # handed to the waiting caller, who re-raises it
            self.error = e
            self.outcome = FAILED
        finally:
            self._finished.set()

    def _scan(self) -> str:
        width = len(self.delimiter)
        while not self._stop_event.is_set():
            chunk = self.transport.read(1)
            if not chunk:
                # an empty read at the deadline is the timer's win, not completion
                if time.monotonic() >= self.deadline:
                    return DEADLINE
                return DRAINED

            with self._buf_lock:
                self._buf += chunk
                # growing one byte at a time, a new occurrence can only end at the tail
                start = max(0, len(self._buf) - width - len(chunk) + 1)
                if self._buf.find(self.delimiter, start) != -1:
                    return MATCHED
        return STOPPED

    def snapshot(self) -> bytes:
        with self._buf_lock:
            return bytes(self._buf)

    def wait(self, timeout: Optional[float]) -> bool:
        return self._finished.wait(timeout)

    def stop(self) -> None:
        self._stop_event.set()


def scan_until(
    transport: "Transport",
    delimiter: bytes,
    deadline: float,
    logger: Optional[logging.Logger] = None,
) -> bytes:
    """
    Race a DelimiterScan against `deadline`.

    Returns the accumulated bytes on a delimiter match or when the transport
    runs dry before the deadline. Raises the scan's transport error unchanged,
    or ReadTimeoutError carrying the partial bytes when the deadline wins.

    A scan that loses the race is stopped. Transport reads end at the deadline,
    so it normally exits within SCAN_JOIN_GRACE_S; one still blocked after that
    is nudged via cancel_read() and, failing that, abandoned (daemon thread),
    leaving at most that one read outstanding.
    """
    log = logger or logging.getLogger(__name__)

    scan = DelimiterScan(transport, delimiter, deadline)
    scan.start()

    finished = scan.wait(max(0.0, deadline - time.monotonic()))
    if finished and scan.outcome == FAILED:
        assert scan.error is not None
        raise scan.error
    if finished and scan.outcome in (MATCHED, DRAINED):
        return scan.snapshot()

    scan.stop()
    scan.join(SCAN_JOIN_GRACE_S)
    if scan.is_alive():
        # only a read that is actually blocked may be cancelled; a spurious
        # cancel leaves pyserial's abort flag set for the next read
        transport.cancel_read()
        scan.join(SCAN_JOIN_GRACE_S)
        if scan.is_alive():
            log.warning("SCAN_ABANDONED address=%s", transport.address)

    partial = scan.snapshot()
    log.debug("READ_UNTIL_TIMEOUT address=%s partial_len=%d", transport.address, len(partial))
    raise ReadTimeoutError(
        "read until timeout",
        partial=partial,
        details={"address": transport.address, "delimiter": delimiter, "partial_len": len(partial)},
    )
