# unicomm/config/params.py
from __future__ import annotations

import codecs
from typing import Any, Dict, Mapping, Optional

from unicomm.core.errors import TransportConfigError, UnknownProtocolError
from unicomm.core.options import (
    Protocol,
    SerialOptions,
    TcpOptions,
    UnicommOptions,
)


# Parameter schema per protocol: name -> {type, default, required}.
# Timeouts are milliseconds here; option records hold seconds.
SERIAL_PARAMS: Dict[str, Dict[str, Any]] = {
    "port": {"type": "str", "required": True},
    "baudrate": {"type": "int", "default": 9600},
    "parity": {"type": "str", "default": "none"},
    "data_bits": {"type": "int", "default": 8},
    "stop_bits": {"type": "str", "default": "1"},
    "read_timeout_ms": {"type": "float", "default": 0},
    "write_timeout_ms": {"type": "float", "default": 0},
    "end_delimiter": {"type": "delimiter", "default": ""},
    "retry_connect": {"type": "bool", "default": False},
    "verify_port": {"type": "bool", "default": True},
    "reset_buffers_on_write": {"type": "bool", "default": True},
}

TCP_PARAMS: Dict[str, Dict[str, Any]] = {
    "host": {"type": "str", "required": True},
    "port": {"type": "int", "required": True},
    "read_timeout_ms": {"type": "float", "default": 0},
    "write_timeout_ms": {"type": "float", "default": 0},
    "dial_timeout_ms": {"type": "float", "default": 500},
    "end_delimiter": {"type": "delimiter", "default": ""},
}

SCHEMAS: Dict[Protocol, Dict[str, Dict[str, Any]]] = {
    Protocol.SERIAL: SERIAL_PARAMS,
    Protocol.TCP: TCP_PARAMS,
}


def parse_protocol(value: Any) -> Protocol:
    """Accept a Protocol, its numeric value, or its name ("serial", "tcp")."""
    if isinstance(value, Protocol):
        return value
    try:
        if isinstance(value, str):
            return Protocol[value.strip().upper()]
        return Protocol(value)
    except (KeyError, ValueError):
        raise UnknownProtocolError(
            f"Unknown protocol {value!r}.",
            hint=f"Valid protocols: {', '.join(p.name.lower() for p in Protocol)}",
            details={"protocol": value},
        ) from None


def decode_delimiter(text: str) -> bytes:
    r"""Decode backslash escapes (\r, \n, \t, \\, \xNN) typed in configs or on the command line."""
    return codecs.escape_decode(text.encode("utf-8"))[0]


class OptionsResolver:
    """
    Resolve UnicommOptions from a flat parameter mapping (profile entry or CLI flags).
    """

    def __init__(self, schemas: Optional[Mapping[Protocol, Dict[str, Dict[str, Any]]]] = None):
        self._schemas = schemas or SCHEMAS

    def resolve(self, protocol: Any, overrides: Optional[Mapping[str, Any]] = None) -> UnicommOptions:
        proto = parse_protocol(protocol)
        params = self._resolve_params(proto, dict(overrides or {}))

        if proto is Protocol.SERIAL:
            return UnicommOptions(
                protocol=proto,
                serial=SerialOptions(
                    port=params["port"],
                    baudrate=params["baudrate"],
                    parity=params["parity"],
                    data_bits=params["data_bits"],
                    stop_bits=params["stop_bits"],
                    read_timeout=params["read_timeout_ms"] / 1000.0,
                    write_timeout=params["write_timeout_ms"] / 1000.0,
                    end_delimiter=params["end_delimiter"],
                    retry_connect=params["retry_connect"],
                    verify_port=params["verify_port"],
                    reset_buffers_on_write=params["reset_buffers_on_write"],
                ),
            )

        return UnicommOptions(
            protocol=proto,
            tcp=TcpOptions(
                host=params["host"],
                port=params["port"],
                read_timeout=params["read_timeout_ms"] / 1000.0,
                write_timeout=params["write_timeout_ms"] / 1000.0,
                dial_timeout=params["dial_timeout_ms"] / 1000.0,
                end_delimiter=params["end_delimiter"],
            ),
        )

    def _resolve_params(self, proto: Protocol, overrides: Dict[str, Any]) -> Dict[str, Any]:
        schema = self._schemas[proto]
        label = proto.name.lower()
        resolved: Dict[str, Any] = {}

        # Validate override keys
        for key in overrides:
            if key not in schema:
                raise TransportConfigError(
                    f"Unknown parameter '{key}' for protocol '{label}'.",
                    hint=f"Valid params: {sorted(schema.keys())}",
                    details={"protocol": label, "param": key},
                ) from None

        for name, spec in schema.items():
            if name in overrides and overrides[name] is not None:
                value = overrides[name]
            elif "default" in spec:
                value = spec["default"]
            elif spec.get("required", False):
                raise TransportConfigError(
                    f"Missing required parameter '{name}' for protocol '{label}'.",
                    hint="Provide it in the profile or as a CLI flag.",
                    details={"protocol": label, "param": name},
                ) from None
            else:
                continue

            try:
                resolved[name] = self._cast_param(value, spec.get("type"))
            except (TypeError, ValueError) as e:
                raise TransportConfigError(
                    f"Invalid value for protocol '{label}' param '{name}'.",
                    hint=str(e),
                    details={
                        "protocol": label,
                        "param": name,
                        "value": value,
                        "expected_type": spec.get("type"),
                    },
                ) from None

        return resolved

    @staticmethod
    def _cast_param(value: Any, type_name: Any) -> Any:
        if type_name == "str":
            # YAML turns 1.5 / 2 into numbers; stop bits and parity are names
            if isinstance(value, bool) or not isinstance(value, (str, int, float)):
                raise TypeError(f"Expected str, got {type(value).__name__}")
            return str(value)

        if type_name == "int":
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"Expected int, got {type(value).__name__}")
            return value

        if type_name == "float":
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"Expected float, got {type(value).__name__}")
            return float(value)

        if type_name == "bool":
            if isinstance(value, bool):
                return value
            # accept 0/1 int
            if isinstance(value, int) and value in (0, 1):
                return bool(value)
            raise TypeError(f"Expected bool (or 0/1), got {type(value).__name__}")

        if type_name == "delimiter":
            if isinstance(value, bytes):
                return value
            if not isinstance(value, str):
                raise TypeError(f"Expected str, got {type(value).__name__}")
            return decode_delimiter(value)

        # unknown schema type
        raise TypeError(f"Unknown schema type '{type_name}'")
