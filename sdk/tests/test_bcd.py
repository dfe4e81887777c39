import logging
import random

import pytest

from rig_sdk import InvalidParameterError, InvalidResponseError
from rig_sdk.bcd import decode_frequency, decode_level, encode_frequency, encode_level

# Test logger
log = logging.getLogger("test.bcd")


def test_frequency_layout():
    log.info("=== Starting test_frequency_layout ===")
    assert encode_frequency(14_230_000) == bytes([0x00, 0x00, 0x23, 0x14, 0x00])
    assert encode_frequency(7_074_000) == bytes([0x00, 0x40, 0x07, 0x07, 0x00])
    assert encode_frequency(1_296_123_450) == bytes([0x50, 0x34, 0x12, 0x96, 0x12])
    log.info("✓ test_frequency_layout passed")


@pytest.mark.parametrize("hz", [0, 1, 9_999_999_999, 145_500_000, 3_000_000_000])
def test_frequency_roundtrip(hz):
    assert decode_frequency(encode_frequency(hz)) == hz


@pytest.mark.parametrize("hz", [-1, 10_000_000_000, 14.2e6, True])
def test_frequency_rejects_unencodable(hz):
    with pytest.raises(InvalidParameterError):
        encode_frequency(hz)


def test_frequency_decode_rejects_bad_nibbles():
    log.info("=== Starting test_frequency_decode_rejects_bad_nibbles ===")
    with pytest.raises(InvalidResponseError):
        decode_frequency(bytes([0x00, 0x0A, 0x23, 0x14, 0x00]))
    with pytest.raises(InvalidResponseError):
        decode_frequency(bytes([0x00, 0x00, 0x23, 0xF4, 0x00]))
    log.info("✓ test_frequency_decode_rejects_bad_nibbles passed")


@pytest.mark.parametrize("data", [b"", b"\x00\x00\x23\x14", b"\x00\x00\x23\x14\x00\x00"])
def test_frequency_decode_rejects_wrong_length(data):
    with pytest.raises(InvalidResponseError):
        decode_frequency(data)


def test_level_layout():
    log.info("=== Starting test_level_layout ===")
    assert encode_level(0) == b"\x00\x00"
    assert encode_level(128) == b"\x01\x28"
    assert encode_level(255) == b"\x02\x55"
    assert decode_level(b"\x01\x28") == 128
    assert decode_level(b"\x02\x55") == 255
    log.info("✓ test_level_layout passed")


@pytest.mark.parametrize("level", [-1, 256, 1000])
def test_level_out_of_range_is_not_clamped(level):
    with pytest.raises(InvalidParameterError):
        encode_level(level)


@pytest.mark.parametrize("data", [b"\x02\x56", b"\x10\x00", b"\x00\x1A", b"\x01", b"\x00\x00\x00"])
def test_level_decode_rejects_invalid(data):
    with pytest.raises(InvalidResponseError):
        decode_level(data)


def test_frequency_roundtrip_sweep():
    rng = random.Random(7300)
    values = [rng.randrange(10 ** rng.randint(1, 10)) for _ in range(2000)]
    values += [10 ** n - 1 for n in range(1, 11)] + [10 ** n for n in range(10)]
    for hz in values:
        assert decode_frequency(encode_frequency(hz)) == hz, hz
    log.info(f"✓ test_frequency_roundtrip_sweep passed ({len(values)} values)")


def test_level_roundtrip_full_range():
    for level in range(256):
        assert decode_level(encode_level(level)) == level
