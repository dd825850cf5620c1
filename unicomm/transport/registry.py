# unicomm/transport/registry.py
from __future__ import annotations

from typing import Dict, List, Type

from .base import Transport
from .errors import TransportError
from .serial_port import SerialPortTransport
from .tcp import TcpTransport


class TransportDriverRegistry:
    """
    Maps driver keys ("serial", "tcp", ...) to Transport classes.

    Keys are case-insensitive. The factory looks drivers up here, so a custom
    transport (e.g. a loopback for tests) only needs to be registered.
    """

    def __init__(self, drivers: Dict[str, Type[Transport]]):
        self._drivers: Dict[str, Type[Transport]] = {}
        for key, cls in drivers.items():
            self.register(key, cls)

    @classmethod
    def default(cls) -> "TransportDriverRegistry":
        return cls({"serial": SerialPortTransport, "tcp": TcpTransport})

    def register(self, driver: str, transport_cls: Type[Transport]) -> None:
        if not (isinstance(transport_cls, type) and issubclass(transport_cls, Transport)):
            raise TransportError(f"Driver '{driver}' must map to a Transport subclass")
        self._drivers[driver.lower()] = transport_cls

    def names(self) -> List[str]:
        return sorted(self._drivers)

    def has(self, driver: str) -> bool:
        return driver.lower() in self._drivers

    def get_class(self, driver: str) -> Type[Transport]:
        try:
            return self._drivers[driver.lower()]
        except KeyError:
            known = ", ".join(self.names()) or "none"
            raise TransportError(f"Transport driver '{driver}' not registered (known: {known})") from None

    def create(self, driver: str, **params) -> Transport:
        """Instantiate the transport registered under `driver`."""
        return self.get_class(driver)(**params)
