# unicomm/core/errors.py
from __future__ import annotations


class UnicommError(Exception):
    """
    Base class for all expected operational errors raised by a connection.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, logs, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration / construction errors (no transport access yet)
# ---------------------------------------------------------------------------

class TransportConfigError(UnicommError):
    """
    Connection options are invalid or incomplete.

    Examples:
      - protocol selected without its sub-configuration
      - negative timeout
      - unknown / missing / mistyped profile parameter
    """
    code = "transport_config_error"


class UnknownProtocolError(TransportConfigError):
    """The protocol selector does not name a registered transport."""
    code = "unknown_protocol"


# ---------------------------------------------------------------------------
# Lifecycle errors
# ---------------------------------------------------------------------------

class AlreadyConnectedError(UnicommError):
    """connect() called while the liveness probe succeeds."""
    code = "already_connected"


class NotConnectedError(UnicommError):
    """Operation requires a live connection and there is none."""
    code = "not_connected"


# ---------------------------------------------------------------------------
# Framing errors
# ---------------------------------------------------------------------------

class ReadTimeoutError(UnicommError):
    """
    read_until() hit its deadline before the delimiter showed up.

    `partial` holds whatever was accumulated up to that point.
    """
    code = "read_timeout"

    def __init__(self, message: str, *, partial: bytes = b"", **kwargs):
        super().__init__(message, **kwargs)
        self.partial = bytes(partial)


class ShortWriteError(UnicommError):
    """The transport accepted fewer bytes than the framed payload holds."""
    code = "short_write"

    def __init__(self, written: int, expected: int):
        super().__init__(
            f"wrote {written} bytes, expected {expected}",
            details={"written": written, "expected": expected},
        )
        self.written = written
        self.expected = expected
