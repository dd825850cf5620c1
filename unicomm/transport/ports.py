# unicomm/transport/ports.py
from __future__ import annotations

from typing import List

from serial.tools import list_ports


def list_candidates():
    """Return a list of pyserial port info objects (for error messages/UI)."""
    return list(list_ports.comports())


def available_ports() -> List[str]:
    """Device names of the serial ports the OS currently enumerates."""
    return [p.device for p in list_candidates()]


def describe_ports() -> List[str]:
    """One human-readable line per port: device, VID:PID when known, descriptors."""
    lines = []
    for p in list_candidates():
        desc = " ".join(filter(None, [p.manufacturer, p.product, p.description]))
        if p.vid is not None and p.pid is not None:
            lines.append(f"{p.device} [{p.vid:04X}:{p.pid:04X}] {desc}".strip())
        else:
            lines.append(f"{p.device} {desc}".strip())
    return lines
