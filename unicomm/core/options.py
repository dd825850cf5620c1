# unicomm/core/options.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Union

from unicomm.core.errors import TransportConfigError


DEFAULT_READ_TIMEOUT_S = 0.1
DEFAULT_WRITE_TIMEOUT_S = 0.1
DEFAULT_DIAL_TIMEOUT_S = 0.5


class Protocol(IntEnum):
    SERIAL = 0
    TCP = 1


class Parity(str, Enum):
    NONE = "none"
    ODD = "odd"
    EVEN = "even"
    MARK = "mark"
    SPACE = "space"


class StopBits(str, Enum):
    ONE = "1"
    ONE_POINT_FIVE = "1.5"
    TWO = "2"


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    # accepts "even"/"EVEN", 1/1.5/2 and "1"/"1.5"/"2"
    return enum_cls(str(value).strip().lower())


def _normalize_timeout(owner: object, name: str, default: float) -> None:
    """Apply the default to an unset (None/zero) timeout field, reject negatives."""
    value = getattr(owner, name)
    if value is None or value == 0:
        value = default
    value = float(value)
    if value < 0:
        raise TransportConfigError(
            f"Invalid {name}: {value!r}.",
            hint="Timeouts are seconds and must be >= 0 (0 selects the default).",
            details={"field": name, "value": value},
        )
    # frozen dataclass: normalization is the only mutation, done once here
    object.__setattr__(owner, name, value)


def _normalize_delimiter(owner: object) -> None:
    value = getattr(owner, "end_delimiter")
    if value is None:
        value = b""
    elif isinstance(value, str):
        value = value.encode("utf-8")
    object.__setattr__(owner, "end_delimiter", bytes(value))


@dataclass(frozen=True)
class SerialOptions:
    """
    Serial line configuration.

    retry_connect is carried for callers that want to implement their own
    reconnect policy; the connection layer never consults it.
    """
    port: str
    baudrate: int = 9600
    parity: Parity = Parity.NONE
    data_bits: int = 8
    stop_bits: StopBits = StopBits.ONE
    read_timeout: Optional[float] = 0.0
    write_timeout: Optional[float] = 0.0
    end_delimiter: Union[bytes, str, None] = b""
    retry_connect: bool = False
    verify_port: bool = True
    reset_buffers_on_write: bool = True

    def __post_init__(self) -> None:
        if not self.port:
            raise TransportConfigError("Serial port name is required.", hint="e.g. COM6 or /dev/ttyUSB0")
        if self.data_bits not in (5, 6, 7, 8):
            raise TransportConfigError(
                f"Invalid data_bits: {self.data_bits!r}.",
                hint="Valid values: 5, 6, 7, 8",
                details={"field": "data_bits", "value": self.data_bits},
            )
        try:
            object.__setattr__(self, "parity", _coerce(Parity, self.parity))
            object.__setattr__(self, "stop_bits", _coerce(StopBits, self.stop_bits))
        except ValueError as e:
            raise TransportConfigError(
                "Invalid serial framing option.",
                hint=str(e),
                details={"parity": self.parity, "stop_bits": self.stop_bits},
            ) from None
        _normalize_timeout(self, "read_timeout", DEFAULT_READ_TIMEOUT_S)
        _normalize_timeout(self, "write_timeout", DEFAULT_WRITE_TIMEOUT_S)
        _normalize_delimiter(self)


@dataclass(frozen=True)
class TcpOptions:
    host: str
    port: int
    read_timeout: Optional[float] = 0.0
    write_timeout: Optional[float] = 0.0
    end_delimiter: Union[bytes, str, None] = b""
    dial_timeout: Optional[float] = DEFAULT_DIAL_TIMEOUT_S

    def __post_init__(self) -> None:
        if not self.host:
            raise TransportConfigError("TCP host is required.")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not (0 < self.port < 65536):
            raise TransportConfigError(
                f"Invalid TCP port: {self.port!r}.",
                hint="Valid range: 1..65535",
                details={"field": "port", "value": self.port},
            )
        _normalize_timeout(self, "read_timeout", DEFAULT_READ_TIMEOUT_S)
        _normalize_timeout(self, "write_timeout", DEFAULT_WRITE_TIMEOUT_S)
        _normalize_timeout(self, "dial_timeout", DEFAULT_DIAL_TIMEOUT_S)
        _normalize_delimiter(self)

    @property
    def address(self) -> str:
        host = self.host.strip("[]")
        if ":" in host:
            return f"[{host}]:{self.port}"
        return f"{host}:{self.port}"


@dataclass(frozen=True)
class UnicommOptions:
    """
    Protocol selector plus the sub-configuration for each transport.

    Only the sub-configuration matching `protocol` is used.
    """
    protocol: Union[Protocol, int]
    serial: Optional[SerialOptions] = None
    tcp: Optional[TcpOptions] = None
