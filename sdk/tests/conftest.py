"""Pytest configuration for rig SDK tests"""
import asyncio
import logging
import os
import sys
from collections import deque

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
for _path in (os.path.join(ROOT, "sdk", "src"), os.path.join(ROOT, "client", "src")):
    if _path not in sys.path:
        sys.path.insert(0, _path)

from rig_sdk import ByteTransport, NotConnectedError, RigTimeoutError  # noqa: E402
from rig_sdk.config import debug_enabled  # noqa: E402
from rig_sdk.framing import ACK, CONTROLLER_ADDRESS, NAK, encode_frame  # noqa: E402


def pytest_configure(config):
    """Enable debug logging if RIG_DEBUG is set"""
    if debug_enabled():
        # Enable log output to console during tests
        config.option.log_cli = True
        config.option.log_cli_level = "DEBUG"


@pytest.fixture(scope="session", autouse=True)
def setup_logging():
    """Setup test logging"""
    # Configure test logger - pytest will handle output via log_cli
    test_logger = logging.getLogger("test")

    debug = debug_enabled()
    test_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Also configure SDK logger level
    sdk_logger = logging.getLogger("rig_sdk")
    sdk_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if debug:
        test_logger.info("Debug logging enabled (RIG_DEBUG=1)")

    yield test_logger


# ---------------------------------------------------------------------------
# Scripted transport
# ---------------------------------------------------------------------------


def reply(radio_address, opcode, payload=b""):
    """Frame sent by the radio back to the controller."""
    return encode_frame(CONTROLLER_ADDRESS, opcode, payload, from_=radio_address)


def ack(radio_address):
    return reply(radio_address, bytes([ACK]))


def nak(radio_address):
    return reply(radio_address, bytes([NAK]))


class ScriptedTransport(ByteTransport):
    """In-memory transport double.

    Records every write. Each write consumes the next entry of ``script``
    (a frame, a list of frames, or None for silence) and queues it for
    reading. With ``echo=True`` the written bytes are queued first, like a
    radio that repeats commands on the bus.

    Like a real half-duplex bus, a write while frames from an earlier write
    are still unread fails the test: replies would no longer pair with their
    requests.
    """

    def __init__(self, script=None, echo=False, read_delay=0.0):
        super().__init__()
        self.script = deque(script or [])
        self.echo = echo
        self.read_delay = read_delay
        self.writes = []
        self.pending = deque()
        self.flushes = 0
        self.opened = 0
        self._open = False

    def queue(self, *entries):
        self.script.extend(entries)

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self) -> None:
        if not self._open:
            self.opened += 1
        self._open = True

    async def close(self) -> None:
        self._open = False

    async def write(self, data: bytes) -> None:
        if not self._open:
            raise NotConnectedError()
        if self.pending:
            raise AssertionError(
                f"Write {bytes(data).hex(' ')} while {len(self.pending)} frame(s) "
                f"from an earlier write are unread"
            )
        self.writes.append(bytes(data))
        if self.echo:
            self.pending.append(bytes(data))
        if self.script:
            entry = self.script.popleft()
            if isinstance(entry, list):
                self.pending.extend(entry)
            elif entry is not None:
                self.pending.append(entry)

    async def read(self, timeout: float) -> bytes:
        if not self._open:
            raise NotConnectedError()
        if not self.pending:
            raise RigTimeoutError("No scripted data")
        data = b"".join(self.pending)
        self.pending.clear()
        return data

    async def read_until(self, terminator: int, timeout: float) -> bytes:
        if not self._open:
            raise NotConnectedError()
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if not self.pending:
            raise RigTimeoutError(f"Timeout waiting for 0x{terminator:02X}")
        return self.pending.popleft()

    async def flush(self) -> None:
        self.flushes += 1
        self.pending.clear()


@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def echo_transport():
    return ScriptedTransport(echo=True)
