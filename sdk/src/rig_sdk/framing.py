"""CI-V frame codec.

Frame layout::

    FE FE | to | from | opcode [sub-opcode] | payload ... | FD
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .errors import InvalidResponseError, InvalidParameterError

PREAMBLE = b"\xFE\xFE"
TERMINATOR = 0xFD
CONTROLLER_ADDRESS = 0xE0

ACK = 0xFB
NAK = 0xFA

MIN_FRAME_LENGTH = 6  # FE FE to from opcode FD

# Opcodes whose second byte is a sub-opcode rather than payload
SUBCOMMAND_OPCODES = frozenset({0x14, 0x15, 0x16, 0x1A, 0x1C})

BytesLike = Union[bytes, bytearray, Iterable[int]]


@dataclass(frozen=True)
class Frame:
    """One decoded (or to-be-encoded) CI-V frame."""

    to: int
    from_: int
    opcode: bytes
    payload: bytes = b""

    @property
    def is_ack(self) -> bool:
        return self.opcode == bytes([ACK])

    @property
    def is_nak(self) -> bool:
        return self.opcode == bytes([NAK])

    def to_bytes(self) -> bytes:
        return encode_frame(self.to, self.opcode, self.payload, from_=self.from_)

    def __repr__(self) -> str:
        return (
            f"Frame(to=0x{self.to:02X}, from=0x{self.from_:02X}, "
            f"opcode={self.opcode.hex(' ')}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def _address(value: int, name: str) -> int:
    if not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise InvalidParameterError(f"{name} address must be a byte, got {value!r}")
    return value


def encode_frame(
    to: int,
    opcode: BytesLike,
    payload: BytesLike = b"",
    from_: int = CONTROLLER_ADDRESS,
) -> bytes:
    """Build a complete frame ready for the wire.

    Args:
        to: Destination (radio) address
        opcode: 1 or 2 opcode bytes
        payload: Optional payload bytes
        from_: Source address, the controller by default

    Returns:
        ``FE FE to from opcode payload FD``

    Raises:
        InvalidParameterError: On a non-byte address or an opcode that is not 1-2 bytes
    """
    try:
        opcode = bytes(opcode)
        payload = bytes(payload)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"Opcode and payload must be bytes: {e}") from e

    if not 1 <= len(opcode) <= 2:
        raise InvalidParameterError(f"Opcode must be 1 or 2 bytes, got {len(opcode)}")

    header = PREAMBLE + bytes([_address(to, "Destination"), _address(from_, "Source")])
    return header + opcode + payload + bytes([TERMINATOR])


def decode_frame(message: bytes, opcode_length: Optional[int] = None) -> Frame:
    """Parse raw bytes (preamble through terminator) into a Frame.

    Args:
        message: Complete frame as read from the wire
        opcode_length: Number of opcode bytes when the caller knows it. When
            None, a sub-opcode is assumed for the opcodes in SUBCOMMAND_OPCODES
            and ACK/NAK are single-byte. A bare ACK or NAK body is always
            decoded as a 1-byte opcode.

    Raises:
        InvalidResponseError: Bad preamble, missing terminator or too short
    """
    data = bytes(message)

    if len(data) < MIN_FRAME_LENGTH:
        raise InvalidResponseError(f"Frame too short ({len(data)} bytes): {data.hex(' ')}")
    if data[:2] != PREAMBLE:
        raise InvalidResponseError(f"Invalid preamble: {data.hex(' ')}")
    if data[-1] != TERMINATOR:
        raise InvalidResponseError(f"Missing terminator: {data.hex(' ')}")

    body = data[4:-1]
    first = body[0]

    if len(body) == 1 or (opcode_length is None and first in (ACK, NAK)):
        length = 1
    elif opcode_length is not None:
        if opcode_length not in (1, 2):
            raise ValueError(f"opcode_length must be 1 or 2, got {opcode_length}")
        if opcode_length > len(body):
            raise InvalidResponseError(f"Frame too short for a {opcode_length}-byte opcode: {data.hex(' ')}")
        length = opcode_length
    elif first in SUBCOMMAND_OPCODES and len(body) > 1:
        length = 2
    else:
        length = 1

    return Frame(to=data[2], from_=data[3], opcode=body[:length], payload=body[length:])
