# unicomm/cli/commands.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from unicomm.config.params import decode_delimiter
from unicomm.core.options import UnicommOptions
from unicomm.runtime.connection import Connection
from unicomm.transport.factory import create
from unicomm.transport.ports import describe_ports


log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# ---------------- Logging ----------------

def configure_logging(*, verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Attach stderr (and optionally file) handlers to the root logger (idempotent).
    Kept in CLI (presentation-layer concern).
    """
    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.WARNING

    if not any(getattr(h, "_unicomm_cli", False) for h in root.handlers):
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter(LOG_FORMAT))
        sh._unicomm_cli = True  # type: ignore[attr-defined]
        root.addHandler(sh)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        target = str(log_file.resolve())
        if not any(
            isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target
            for h in root.handlers
        ):
            fh = logging.FileHandler(log_file, encoding="utf-8", delay=True)
            fh.setLevel(logging.INFO if not verbose else logging.DEBUG)
            fh.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(fh)
            level = min(level, fh.level)

    root.setLevel(level)


# ---------------- Output ----------------

def render(data: bytes) -> str:
    """Printable form of received bytes; control characters stay escaped."""
    return repr(data)[2:-1]


# ---------------- Commands ----------------

def _log_status(conn: Connection) -> None:
    st = conn.status()
    log.info("SESSION_OPEN protocol=%s address=%s connected=%s", st.protocol, st.address, st.connected)


def cmd_ports() -> int:
    lines = describe_ports()
    if not lines:
        print("(no serial ports found)")
        return 0
    for line in lines:
        print(f"- {line}")
    return 0


def cmd_query(*, options: UnicommOptions, payload: str, until: str) -> int:
    with create(options) as conn:
        _log_status(conn)
        conn.write(decode_delimiter(payload))
        reply = conn.read_until(decode_delimiter(until))
    print(render(reply))
    return 0


def cmd_read(*, options: UnicommOptions, size: int) -> int:
    with create(options) as conn:
        _log_status(conn)
        data = conn.read(size)
    print(data.hex())
    return 0
