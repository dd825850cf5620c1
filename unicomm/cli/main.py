# unicomm/cli/main.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from unicomm.core.errors import ReadTimeoutError, UnicommError
from unicomm.transport.errors import TransportError

from unicomm.cli.args import parse_args
from unicomm.cli.commands import (
    cmd_ports,
    cmd_query,
    cmd_read,
    configure_logging,
    render,
)


def main(argv: Optional[list[str]] = None) -> int:
    try:
        args, options = parse_args(argv)
        configure_logging(
            verbose=args.verbose,
            log_file=Path(args.log_file) if args.log_file else None,
        )

        if args.cmd == "ports":
            return cmd_ports()

        assert options is not None

        if args.cmd == "query":
            return cmd_query(options=options, payload=args.payload, until=args.until)
        if args.cmd == "read":
            return cmd_read(options=options, size=args.size)

        return 2
    except ReadTimeoutError as e:
        print(f"ERROR: {e.message}")
        print(f"Partial: {render(e.partial)}")
        return 1
    except UnicommError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1
    except TransportError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
