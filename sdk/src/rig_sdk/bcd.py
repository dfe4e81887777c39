"""Packed decimal (BCD) codecs used in CI-V payloads.

Frequencies and levels use two different layouts and are kept apart on purpose::

    frequency  5 bytes, little-endian, two digits per byte
               14.230 MHz -> 00 00 23 14 00

    level      2 bytes, big-endian
               byte0 = hundreds (low nibble), byte1 = tens | ones
               255 -> 02 55
"""

from .errors import InvalidParameterError, InvalidResponseError

FREQUENCY_BYTES = 5
FREQUENCY_LIMIT = 10 ** (FREQUENCY_BYTES * 2)

LEVEL_BYTES = 2
LEVEL_MAX = 255


def encode_frequency(hz: int) -> bytes:
    """Encode a frequency in Hz as 5-byte little-endian BCD.

    Args:
        hz: Frequency in Hertz, 0 <= hz < 10**10

    Returns:
        5 bytes, least significant digit pair first

    Raises:
        InvalidParameterError: If hz is negative or needs more than 10 digits
    """
    if not isinstance(hz, int) or isinstance(hz, bool):
        raise InvalidParameterError(f"Frequency must be an integer number of Hz, got {hz!r}")
    if hz < 0 or hz >= FREQUENCY_LIMIT:
        raise InvalidParameterError(f"Frequency {hz} Hz does not fit in {FREQUENCY_BYTES * 2} BCD digits")

    result = bytearray(FREQUENCY_BYTES)
    remaining = hz
    for i in range(FREQUENCY_BYTES):
        remaining, low = divmod(remaining, 10)
        remaining, high = divmod(remaining, 10)
        result[i] = (high << 4) | low
    return bytes(result)


def decode_frequency(data: bytes) -> int:
    """Decode 5-byte little-endian BCD into Hz.

    Raises:
        InvalidResponseError: On wrong length or any nibble above 9
    """
    if len(data) != FREQUENCY_BYTES:
        raise InvalidResponseError(
            f"Frequency payload must be {FREQUENCY_BYTES} bytes, got {len(data)}: {bytes(data).hex(' ')}"
        )

    hz = 0
    multiplier = 1
    for byte in data:
        low = byte & 0x0F
        high = byte >> 4
        if low > 9 or high > 9:
            raise InvalidResponseError(f"Invalid BCD byte 0x{byte:02X} in frequency {bytes(data).hex(' ')}")
        hz += low * multiplier
        multiplier *= 10
        hz += high * multiplier
        multiplier *= 10
    return hz


def encode_level(level: int) -> bytes:
    """Encode a 0-255 level (RF power, meters) as 2-byte big-endian BCD."""
    if not isinstance(level, int) or isinstance(level, bool):
        raise InvalidParameterError(f"Level must be an integer, got {level!r}")
    if not 0 <= level <= LEVEL_MAX:
        raise InvalidParameterError(f"Level {level} outside 0-{LEVEL_MAX}")

    hundreds, rest = divmod(level, 100)
    tens, ones = divmod(rest, 10)
    return bytes([hundreds, (tens << 4) | ones])


def decode_level(data: bytes) -> int:
    """Decode a 2-byte big-endian BCD level.

    Raises:
        InvalidResponseError: On wrong length, a non-decimal nibble, a set high
            nibble in the hundreds byte, or a value above 255
    """
    if len(data) != LEVEL_BYTES:
        raise InvalidResponseError(
            f"Level payload must be {LEVEL_BYTES} bytes, got {len(data)}: {bytes(data).hex(' ')}"
        )

    hundreds_byte, tens_ones = data[0], data[1]
    if hundreds_byte > 9:
        raise InvalidResponseError(f"Invalid BCD hundreds byte 0x{hundreds_byte:02X}")

    tens = tens_ones >> 4
    ones = tens_ones & 0x0F
    if tens > 9 or ones > 9:
        raise InvalidResponseError(f"Invalid BCD byte 0x{tens_ones:02X} in level")

    level = hundreds_byte * 100 + tens * 10 + ones
    if level > LEVEL_MAX:
        raise InvalidResponseError(f"Level {level} outside 0-{LEVEL_MAX}")
    return level
