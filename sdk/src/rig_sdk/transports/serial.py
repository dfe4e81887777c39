"""Async serial transport using asyncio.to_thread()."""

import asyncio
from dataclasses import dataclass
from typing import Optional

import serial

from ..base import ByteTransport
from ..errors import NotConnectedError, RigTimeoutError, TransportError


@dataclass
class SerialConfig:
    """Line settings for a CAT serial port.

    Defaults are 8N1 with no flow control, which is what CI-V interfaces
    expect. ``poll_interval`` bounds each blocking read so that deadlines and
    cancellation are honoured promptly.
    """

    port: str
    baudrate: int = 19200
    bytesize: int = serial.EIGHTBITS
    parity: str = serial.PARITY_NONE
    stopbits: float = serial.STOPBITS_ONE
    rtscts: bool = False
    xonxoff: bool = False
    poll_interval: float = 0.1
    dtr: Optional[bool] = None
    rts: Optional[bool] = None


class AsyncSerialTransport(ByteTransport):
    """Serial byte link using asyncio.to_thread() for blocking pyserial I/O.

    All access to the port goes through a single lock so a close cannot race
    a read in flight.
    """

    def __init__(self, port: str, baudrate: int = 19200, config: Optional[SerialConfig] = None):
        super().__init__()
        self.config = config or SerialConfig(port=port, baudrate=baudrate)
        self._serial: Optional[serial.Serial] = None
        self._lock = asyncio.Lock()  # Protect serial port access

    @property
    def port(self) -> str:
        return self.config.port

    @property
    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    async def open(self) -> None:
        """Open the port, apply line settings and drop stale input."""
        if self.is_open:
            return

        cfg = self.config

        def _open_serial():
            self.logger.debug(
                f"Opening serial port {cfg.port} at {cfg.baudrate} baud "
                f"({cfg.bytesize}{cfg.parity}{cfg.stopbits}, rtscts={cfg.rtscts}, xonxoff={cfg.xonxoff})"
            )
            ser = serial.Serial(
                cfg.port,
                baudrate=cfg.baudrate,
                bytesize=cfg.bytesize,
                parity=cfg.parity,
                stopbits=cfg.stopbits,
                rtscts=cfg.rtscts,
                xonxoff=cfg.xonxoff,
                timeout=cfg.poll_interval,
                write_timeout=None,
            )
            try:
                if cfg.dtr is not None:
                    ser.dtr = cfg.dtr
                if cfg.rts is not None:
                    ser.rts = cfg.rts
            except Exception:
                ser.close()
                raise
            return ser

        try:
            self._serial = await asyncio.to_thread(_open_serial)
        except (serial.SerialException, ValueError) as e:
            raise TransportError(f"Cannot open {cfg.port}", str(e)) from e

        # Flush any pending data
        async with self._lock:
            ser = self._serial
            assert ser is not None
            try:
                flushed = await asyncio.to_thread(lambda: ser.in_waiting)
                await asyncio.to_thread(ser.reset_input_buffer)
            except serial.SerialException as e:
                self._serial = None
                await asyncio.to_thread(ser.close)
                raise TransportError(f"Cannot flush {cfg.port}", str(e)) from e
            if flushed > 0:
                self.logger.debug(f"Flushed {flushed} bytes from input buffer")

        self.logger.info(f"AsyncSerialTransport connected to {cfg.port}")

    async def close(self) -> None:
        """Close the port. Does nothing if already closed."""
        async with self._lock:
            if self._serial is None:
                return
            ser = self._serial
            self._serial = None
            self.logger.debug(f"Closing serial port {ser.port}")
            await asyncio.to_thread(ser.close)
        self.logger.info("AsyncSerialTransport disconnected")

    def _require_open(self) -> serial.Serial:
        if self._serial is None:
            raise NotConnectedError(f"Serial port {self.port} is not open")
        return self._serial

    async def write(self, data: bytes) -> None:
        """Write bytes and wait for them to drain."""
        async with self._lock:
            ser = self._require_open()
            try:
                written = await asyncio.to_thread(ser.write, data)
                await asyncio.to_thread(ser.flush)
            except serial.SerialException as e:
                raise TransportError(f"Write to {self.port} failed", str(e)) from e

        if written is not None and written != len(data):
            raise TransportError(f"Short write to {self.port}: {written} of {len(data)} bytes")

    async def read(self, timeout: float) -> bytes:
        """Read whatever is available before the deadline."""
        deadline = asyncio.get_event_loop().time() + timeout

        while True:
            async with self._lock:
                ser = self._require_open()
                try:
                    available = await asyncio.to_thread(lambda: ser.in_waiting)
                    if available > 0:
                        return await asyncio.to_thread(ser.read, available)
                except serial.SerialException as e:
                    raise TransportError(f"Read from {self.port} failed", str(e)) from e

            if asyncio.get_event_loop().time() >= deadline:
                raise RigTimeoutError(f"No data from {self.port} within {timeout}s")
            # No data available, small sleep before retry
            await asyncio.sleep(0.01)

    async def read_until(self, terminator: int, timeout: float) -> bytes:
        """Read one byte at a time until ``terminator`` (inclusive)."""
        deadline = asyncio.get_event_loop().time() + timeout
        data = bytearray()

        while True:
            remaining_time = deadline - asyncio.get_event_loop().time()
            if remaining_time <= 0:
                raise RigTimeoutError(
                    f"Timeout waiting for 0x{terminator:02X} on {self.port} "
                    f"(got {len(data)} bytes: {bytes(data).hex(' ')})"
                )

            async with self._lock:
                ser = self._require_open()
                try:
                    available = await asyncio.to_thread(lambda: ser.in_waiting)
                    chunk = await asyncio.to_thread(ser.read, 1) if available > 0 else b""
                except serial.SerialException as e:
                    raise TransportError(f"Read from {self.port} failed", str(e)) from e

            if chunk:
                data.extend(chunk)
                if chunk[0] == terminator:
                    return bytes(data)
            else:
                await asyncio.sleep(0.01)

    async def flush(self) -> None:
        """Drop pending input and output."""
        async with self._lock:
            ser = self._require_open()
            try:
                pending = await asyncio.to_thread(lambda: ser.in_waiting)
                await asyncio.to_thread(ser.reset_input_buffer)
                await asyncio.to_thread(ser.reset_output_buffer)
            except serial.SerialException as e:
                raise TransportError(f"Flush of {self.port} failed", str(e)) from e
            if pending > 0:
                self.logger.debug(f"Discarded {pending} pending bytes on {self.port}")
