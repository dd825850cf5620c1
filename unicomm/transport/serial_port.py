# unicomm/transport/serial_port.py
from __future__ import annotations

import logging
from typing import Optional

import serial
from serial import SerialException, SerialTimeoutException

from unicomm.core.options import Parity, SerialOptions, StopBits
from .base import Transport
from .errors import PortUnavailableError, TransportIOError, WriteTimeoutError
from .ports import available_ports


_PARITY = {
    Parity.NONE: serial.PARITY_NONE,
    Parity.ODD: serial.PARITY_ODD,
    Parity.EVEN: serial.PARITY_EVEN,
    Parity.MARK: serial.PARITY_MARK,
    Parity.SPACE: serial.PARITY_SPACE,
}

_STOPBITS = {
    StopBits.ONE: serial.STOPBITS_ONE,
    StopBits.ONE_POINT_FIVE: serial.STOPBITS_ONE_POINT_FIVE,
    StopBits.TWO: serial.STOPBITS_TWO,
}


class SerialPortTransport(Transport):
    """
    Serial line transport implemented via pyserial.

    pyserial timeouts are per call. Each read() sets the port timeout to what is
    left of the read deadline, so a read never outlives it; a deadline that has
    already passed short-circuits read() to b"" without touching the port.
    The write timeout is configured once at open().
    """

    def __init__(self, options: SerialOptions, logger: Optional[logging.Logger] = None):
        super().__init__()
        self.options = options
        self.ser: Optional[serial.Serial] = None
        self._log = logger or logging.getLogger(__name__)

    @property
    def address(self) -> str:
        return self.options.port

    def open(self) -> None:
        opts = self.options

        if self.ser is not None:
            self._release_stale()

        if opts.verify_port:
            ports = available_ports()
            if opts.port not in ports:
                raise PortUnavailableError(
                    f"serial port {opts.port!r} is not available (found: {', '.join(ports) or 'none'})"
                )

        try:
            self.ser = serial.Serial(
                opts.port,
                baudrate=opts.baudrate,
                bytesize=opts.data_bits,
                parity=_PARITY[opts.parity],
                stopbits=_STOPBITS[opts.stop_bits],
                timeout=opts.read_timeout,
                write_timeout=opts.write_timeout,
            )
            self.ser.reset_input_buffer()
            self.ser.reset_output_buffer()
        except SerialException as e:
            self.ser = None
            raise PortUnavailableError(f"could not open serial port {opts.port!r}: {e}") from None

    def _release_stale(self) -> None:
        try:
            self.ser.close()  # type: ignore[union-attr]
        except (SerialException, OSError):
            self._log.debug("STALE_HANDLE_CLOSE_FAILED port=%s", self.address, exc_info=True)
        self.ser = None

    def close(self) -> None:
        if self.ser is None:
            return
        try:
            self.ser.close()
        except (SerialException, OSError) as e:
            raise TransportIOError(f"serial close failed: {e}") from None
        self.ser = None

    def is_open(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def probe(self) -> None:
        if not self.is_open():
            raise TransportIOError("serial port not open")
        try:
            self.ser.write(b"")  # type: ignore[union-attr]
        except (SerialException, OSError) as e:
            raise TransportIOError(f"serial probe failed: {e}") from None

    def read(self, n: int) -> bytes:
        if self.ser is None:
            raise TransportIOError("read while transport not open")

        remaining = self._remaining(self._read_deadline)
        if remaining is not None and remaining <= 0:
            return b""

        timeout = self.options.read_timeout if remaining is None else remaining
        try:
            # the call must return by the deadline on its own
            if self.ser.timeout != timeout:
                self.ser.timeout = timeout
            return self.ser.read(n)
        except (SerialException, OSError) as e:
            raise TransportIOError(f"serial read failed: {e}") from None

    def write(self, data: bytes) -> int:
        if self.ser is None:
            raise TransportIOError("write while transport not open")

        try:
            if self.options.reset_buffers_on_write:
                # drop stale input from previous exchanges before a new command
                self.ser.reset_input_buffer()
                self.ser.reset_output_buffer()
            written = self.ser.write(data)
        except SerialTimeoutException as e:
            raise WriteTimeoutError(f"serial write timed out: {e}") from None
        except (SerialException, OSError) as e:
            raise TransportIOError(f"serial write failed: {e}") from None

        # some pyserial URL handlers return None on success
        return len(data) if written is None else int(written)

    def flush(self) -> None:
        if self.ser is None:
            raise TransportIOError("flush while transport not open")

        try:
            self.ser.flush()
        except (SerialException, OSError) as e:
            raise TransportIOError(f"serial flush failed: {e}") from None

    def cancel_read(self) -> None:
        ser = self.ser
        cancel = getattr(ser, "cancel_read", None)
        if cancel is None:
            return
        try:
            cancel()
        except (SerialException, OSError):
            self._log.debug("CANCEL_READ_FAILED port=%s", self.address, exc_info=True)
