"""Checks against a real radio. Set RIG_PORT and RIG_MODEL to run them."""
import logging
import os

import pytest

from rig_sdk import RigController, get_radio

# Test logger
log = logging.getLogger("test.serial_hw")


PORT = os.getenv("RIG_PORT")
MODEL = os.getenv("RIG_MODEL")
pytestmark = pytest.mark.skipif(not (PORT and MODEL), reason="RIG_PORT / RIG_MODEL not set")


@pytest.mark.asyncio
async def test_frequency_roundtrip():
    log.info("=== Starting test_frequency_roundtrip ===")
    async with RigController(MODEL, port=PORT) as rig:
        start = await rig.get_frequency(cached=False)
        log.info(f"Current frequency: {start} Hz")
        target = start + 1000 if rig.capabilities.supports_frequency(start + 1000) else start - 1000
        try:
            await rig.set_frequency(target)
            assert await rig.get_frequency(cached=False) == target
        finally:
            await rig.set_frequency(start)
        log.info(f"✓ test_frequency_roundtrip passed ({target} Hz)")


@pytest.mark.asyncio
async def test_mode_read():
    log.info("=== Starting test_mode_read ===")
    async with RigController(MODEL, port=PORT) as rig:
        mode = await rig.get_mode(cached=False)
        assert mode in get_radio(MODEL).capabilities.supported_modes
        log.info(f"✓ test_mode_read passed ({mode.value})")


@pytest.mark.asyncio
async def test_signal_strength_in_range():
    async with RigController(MODEL, port=PORT) as rig:
        if not rig.capabilities.has_s_meter:
            pytest.skip("No S-meter")
        level = await rig.get_signal_strength(cached=False)
        assert 0 <= level <= 255
        log.info(f"✓ test_signal_strength_in_range passed (S-meter={level})")
