# unicomm/transport/errors.py
from __future__ import annotations

class TransportError(Exception):
    """Base class for transport-layer failures."""

class TransportOpenError(TransportError):
    pass

class PortUnavailableError(TransportOpenError):
    """Serial port missing from the enumerated list or refusing to open."""

class DialError(TransportOpenError):
    """TCP connect attempt rejected or timed out."""

class TransportIOError(TransportError):
    pass

class WriteTimeoutError(TransportIOError):
    """Write deadline expired before the transport accepted the payload."""
