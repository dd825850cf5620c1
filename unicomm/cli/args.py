# unicomm/cli/args.py
from __future__ import annotations

import argparse
from typing import Any, Dict, Optional, Tuple

from unicomm.config.loader import ProfileLoader
from unicomm.config.params import OptionsResolver
from unicomm.core.errors import TransportConfigError
from unicomm.core.options import Protocol, UnicommOptions


DEFAULT_CONFIG = "connections.yml"

# CLI flag dest -> parameter name understood by OptionsResolver
SHARED_FLAGS = ("read_timeout_ms", "write_timeout_ms", "end_delimiter")
SERIAL_FLAGS = ("baudrate", "parity", "data_bits", "stop_bits")


def split_host_port(value: str) -> Tuple[str, int]:
    """Parse HOST:PORT, accepting bracketed IPv6 literals ([::1]:5025)."""
    host, sep, port = value.rpartition(":")
    if not sep or not host:
        raise argparse.ArgumentTypeError(f"Expected HOST:PORT, got '{value}'")
    try:
        return host.strip("[]"), int(port)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid port in '{value}'") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="unicomm")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level (payloads in hex).")
    parser.add_argument("--log-file", default=None, help="Also append logs to this file.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("ports", help="List serial ports.")

    common = argparse.ArgumentParser(add_help=False)
    target = common.add_mutually_exclusive_group(required=True)
    target.add_argument("--profile", help="Connection profile name from --config.")
    target.add_argument("--serial", metavar="PORT", help="Serial port name (COM6, /dev/ttyUSB0).")
    target.add_argument("--tcp", metavar="HOST:PORT", type=split_host_port, help="TCP endpoint.")
    common.add_argument("--config", default=DEFAULT_CONFIG, help=f"Profiles file (default: {DEFAULT_CONFIG}).")

    common.add_argument("--baudrate", type=int, default=None)
    common.add_argument("--parity", choices=["none", "odd", "even", "mark", "space"], default=None)
    common.add_argument("--data-bits", type=int, choices=[5, 6, 7, 8], default=None)
    common.add_argument("--stop-bits", choices=["1", "1.5", "2"], default=None)
    common.add_argument("--read-timeout-ms", type=float, default=None)
    common.add_argument("--write-timeout-ms", type=float, default=None)
    common.add_argument(
        "--end-delimiter",
        default=None,
        help=r"Appended to outgoing payloads when missing (escapes allowed, e.g. '\r\n').",
    )

    p_query = sub.add_parser("query", parents=[common], help="Write a payload and read the reply.")
    p_query.add_argument("payload")
    p_query.add_argument("--until", default=r"\n", help=r"Reply delimiter (default: '\n').")

    p_read = sub.add_parser("read", parents=[common], help="Read up to N bytes.")
    p_read.add_argument("size", type=int)

    return parser


def _flag_overrides(args: argparse.Namespace, names: Tuple[str, ...]) -> Dict[str, Any]:
    return {name: getattr(args, name) for name in names if getattr(args, name, None) is not None}


def resolve_options(args: argparse.Namespace, resolver: Optional[OptionsResolver] = None) -> UnicommOptions:
    """
    Build connection options from --profile/--serial/--tcp plus override flags.

    Flags override profile values; serial-only flags are rejected for TCP targets.
    """
    resolver = resolver or OptionsResolver()
    shared = _flag_overrides(args, SHARED_FLAGS)
    serial_only = _flag_overrides(args, SERIAL_FLAGS)

    if args.profile:
        loader = ProfileLoader(args.config, resolver)
        loader.load_all()
        profile = loader.get(args.profile)
        protocol = profile.protocol
        params = dict(profile.params)
    elif args.serial:
        protocol = Protocol.SERIAL
        params = {"port": args.serial}
    else:
        host, port = args.tcp
        protocol = Protocol.TCP
        params = {"host": host, "port": port}

    if protocol is Protocol.TCP and serial_only:
        raise TransportConfigError(
            "Serial framing flags given for a TCP connection.",
            hint=f"Drop: {', '.join('--' + k.replace('_', '-') for k in sorted(serial_only))}",
        )

    params.update(shared)
    params.update(serial_only)
    return resolver.resolve(protocol, params)


def parse_args(argv: Optional[list[str]] = None) -> Tuple[argparse.Namespace, Optional[UnicommOptions]]:
    """
    Returns: (args, options)

    - options is None for 'ports'
    """
    args = build_parser().parse_args(argv)
    if args.cmd == "ports":
        return args, None
    return args, resolve_options(args)
