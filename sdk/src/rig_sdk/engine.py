"""Request/response engine for a half-duplex CI-V link."""

import asyncio
import logging
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from .base import ByteTransport
from .commands import CommandSet, CommandSpec, Operation
from .errors import InvalidResponseError, RejectedError, RigError, RigTimeoutError
from .framing import CONTROLLER_ADDRESS, NAK, TERMINATOR, Frame, decode_frame, encode_frame


class ExchangeState(str, Enum):
    """Lifecycle of one request/response exchange."""

    IDLE = "idle"
    SENT = "sent"
    ECHO_CONSUMPTION = "echo_consumption"
    AWAITING_REPLY = "awaiting_reply"
    DECODED = "decoded"
    TIMED_OUT = "timed_out"
    REJECTED = "rejected"
    MALFORMED = "malformed"


Step = Tuple[Operation, Any]


class ProtocolEngine:
    """Runs one command at a time against a radio.

    The link has no request ids, so pairing a reply with its request relies
    on there never being more than one request outstanding. An asyncio.Lock
    enforces that; ``execute_sequence`` holds it across several exchanges so
    that a VFO select and the read that depends on it cannot be split by
    another caller.

    Args:
        transport: Open byte transport
        command_set: Wire table of the target radio
        timeout: Seconds allowed for each exchange, echo included
        controller_address: Our address on the CI-V bus
    """

    def __init__(
        self,
        transport: ByteTransport,
        command_set: CommandSet,
        timeout: float = 1.0,
        controller_address: int = CONTROLLER_ADDRESS,
    ):
        self.transport = transport
        self.command_set = command_set
        self.timeout = timeout
        self.controller_address = controller_address
        self.state = ExchangeState.IDLE
        self._lock = asyncio.Lock()
        self.logger = logging.getLogger(f"rig_sdk.{self.__class__.__name__}")

    async def execute(self, operation: Operation, value: Any = None) -> Any:
        """Send one command and wait for its outcome.

        Args:
            operation: Logical operation to perform
            value: Argument for SET operations

        Returns:
            Decoded value for reads, None for SET operations

        Raises:
            UnsupportedOperationError: If the radio has no such command
            InvalidParameterError: If ``value`` cannot be encoded
            RejectedError: If the radio answers NAK
            RigTimeoutError: If no complete reply arrives in time
            InvalidResponseError: If the reply is malformed or unexpected
        """
        async with self._lock:
            return await self._exchange(operation, value)

    async def execute_sequence(self, steps: Sequence[Step]) -> List[Any]:
        """Run several exchanges back to back without releasing the link.

        Stops at the first failure, which is raised.
        """
        async with self._lock:
            results = []
            for operation, value in steps:
                results.append(await self._exchange(operation, value))
            return results

    def _set_state(self, state: ExchangeState) -> None:
        self.state = state
        self.logger.debug(f"state -> {state.value}")

    async def _exchange(self, operation: Operation, value: Any) -> Any:
        cs = self.command_set
        spec = cs.command(operation)
        payload = spec.encode(value)
        frame = encode_frame(cs.address, spec.opcode, payload, from_=self.controller_address)

        deadline = asyncio.get_event_loop().time() + self.timeout

        self.logger.debug(f"→ TX {operation.value}: {frame.hex(' ')}")
        await self.transport.write(frame)
        self._set_state(ExchangeState.SENT)

        try:
            reply: Optional[bytes] = None
            if cs.echoes_commands:
                self._set_state(ExchangeState.ECHO_CONSUMPTION)
                first = await self._read_frame(deadline)
                if first == frame:
                    self.logger.debug("Discarded command echo")
                else:
                    self.logger.debug(f"Expected echo, got {first.hex(' ')}; treating it as the reply")
                    reply = first

            if reply is None and not operation.is_read and not cs.acks_set_commands:
                self._set_state(ExchangeState.DECODED)
                result = None
            else:
                self._set_state(ExchangeState.AWAITING_REPLY)
                if reply is None:
                    reply = await self._read_frame(deadline)
                result = self._interpret(operation, spec, reply)
                self._set_state(ExchangeState.DECODED)
        except RigTimeoutError:
            self._set_state(ExchangeState.TIMED_OUT)
            await self._discard_input()
            raise
        except RejectedError:
            self._set_state(ExchangeState.REJECTED)
            raise
        except InvalidResponseError:
            self._set_state(ExchangeState.MALFORMED)
            await self._discard_input()
            raise
        except asyncio.CancelledError:
            # A late reply to a cancelled request must not be read by the next one
            self.logger.debug(f"{operation.value} cancelled after write")
            await self._discard_input()
            self._set_state(ExchangeState.IDLE)
            raise

        delay = cs.settle_delays.get(operation)
        if delay:
            self.logger.debug(f"Settling {delay}s after {operation.value}")
            await asyncio.sleep(delay)

        self._set_state(ExchangeState.IDLE)
        return result

    async def _read_frame(self, deadline: float) -> bytes:
        remaining = deadline - asyncio.get_event_loop().time()
        if remaining <= 0:
            raise RigTimeoutError(f"No reply within {self.timeout}s")
        data = await self.transport.read_until(TERMINATOR, remaining)
        self.logger.debug(f"← RX {data.hex(' ')}")
        return data

    def _interpret(self, operation: Operation, spec: CommandSpec, raw: bytes) -> Any:
        frame: Frame = decode_frame(raw, opcode_length=len(spec.opcode))

        if frame.to != self.controller_address or frame.from_ != self.command_set.address:
            raise InvalidResponseError(
                f"Reply addressed 0x{frame.from_:02X} -> 0x{frame.to:02X}, expected "
                f"0x{self.command_set.address:02X} -> 0x{self.controller_address:02X}"
            )

        if frame.is_nak:
            raise RejectedError(NAK, operation.value)

        if not spec.expects_data:
            if not frame.is_ack:
                raise InvalidResponseError(f"Expected ACK for {operation.value}, got {frame!r}")
            return None

        if frame.is_ack:
            raise InvalidResponseError(f"Radio acknowledged {operation.value} without returning data")
        if frame.opcode != spec.opcode:
            raise InvalidResponseError(
                f"Reply opcode {frame.opcode.hex(' ')} does not match request {spec.opcode.hex(' ')}"
            )
        return spec.decode(frame.payload)

    async def _discard_input(self) -> None:
        try:
            await self.transport.flush()
        except RigError as e:
            self.logger.warning(f"Could not discard pending input: {e}")
