# unicomm/runtime/framing.py
from __future__ import annotations

from typing import Union


BytesLike = Union[bytes, bytearray, memoryview, str]


def to_bytes(data: BytesLike) -> bytes:
    """Accept text (UTF-8 encoded) or any bytes-like payload."""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def frame_payload(payload: BytesLike, end_delimiter: bytes) -> bytes:
    """
    Terminate an outgoing payload with `end_delimiter`.

    The delimiter is appended only when it is non-empty and the payload does
    not already end with it. This is a suffix test; read_until() uses a
    containment test on the receive side.
    """
    data = to_bytes(payload)
    if end_delimiter and not data.endswith(end_delimiter):
        data += end_delimiter
    return data
