# unicomm/transport/factory.py
from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from unicomm.core.errors import TransportConfigError, UnknownProtocolError
from unicomm.core.options import Protocol, UnicommOptions
from unicomm.runtime.connection import Connection
from unicomm.transport.errors import TransportError
from unicomm.transport.registry import TransportDriverRegistry


# protocol -> (driver key, UnicommOptions attribute holding its sub-configuration)
PROTOCOL_DRIVERS: Dict[Protocol, Tuple[str, str]] = {
    Protocol.SERIAL: ("serial", "serial"),
    Protocol.TCP: ("tcp", "tcp"),
}


class ConnectionFactory:
    """
    Constructs a connection from options.
    Note: does NOT open the transport.
    """

    def __init__(
        self,
        drivers: Optional[TransportDriverRegistry] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._drivers = drivers or TransportDriverRegistry.default()
        self._log = logger

    def create(self, options: UnicommOptions) -> Connection:
        try:
            protocol = Protocol(options.protocol)
        except ValueError:
            raise UnknownProtocolError(
                f"Unknown protocol {options.protocol!r}.",
                hint=f"Valid protocols: {', '.join(p.name.lower() for p in Protocol)}",
                details={"protocol": options.protocol},
            ) from None

        driver, attr = PROTOCOL_DRIVERS[protocol]
        sub = getattr(options, attr)
        if sub is None:
            raise TransportConfigError(
                f"Protocol '{protocol.name.lower()}' selected but no '{attr}' options given.",
                hint=f"Pass UnicommOptions(protocol=Protocol.{protocol.name}, {attr}=...).",
                details={"protocol": protocol.name.lower()},
            )

        try:
            transport = self._drivers.create(driver, options=sub, logger=self._log)
        except (TransportError, TypeError) as e:
            # unknown driver key or constructor mismatch
            raise TransportConfigError(
                f"Failed to construct transport for protocol '{protocol.name.lower()}' (driver='{driver}').",
                hint=str(e),
                details={"protocol": protocol.name.lower(), "driver": driver},
            ) from None

        return Connection(
            transport,
            protocol=protocol,
            read_timeout=sub.read_timeout,
            write_timeout=sub.write_timeout,
            end_delimiter=sub.end_delimiter,
            logger=self._log,
        )


def create(options: UnicommOptions) -> Connection:
    """Build a connection with the default driver registry."""
    return ConnectionFactory().create(options)
