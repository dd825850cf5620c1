# unicomm/__init__.py

from .core.errors import (
    UnicommError,
    TransportConfigError,
    UnknownProtocolError,
    AlreadyConnectedError,
    NotConnectedError,
    ReadTimeoutError,
    ShortWriteError,
)
from .core.options import Protocol, Parity, StopBits, SerialOptions, TcpOptions, UnicommOptions
from .transport.errors import (
    TransportError,
    TransportOpenError,
    PortUnavailableError,
    DialError,
    TransportIOError,
    WriteTimeoutError,
)
from .runtime.connection import Connection, ConnectionStatus
from .transport.factory import ConnectionFactory, create

__all__ = [
    "create", "ConnectionFactory", "Connection", "ConnectionStatus",
    "Protocol", "Parity", "StopBits", "SerialOptions", "TcpOptions", "UnicommOptions",
    "UnicommError", "TransportConfigError", "UnknownProtocolError",
    "AlreadyConnectedError", "NotConnectedError", "ReadTimeoutError", "ShortWriteError",
    "TransportError", "TransportOpenError", "PortUnavailableError", "DialError",
    "TransportIOError", "WriteTimeoutError",
]
