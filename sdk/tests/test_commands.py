import logging
from dataclasses import FrozenInstanceError

import pytest

from rig_sdk import (
    VFO,
    CommandSet,
    InvalidParameterError,
    InvalidResponseError,
    Mode,
    Operation,
    UnsupportedOperationError,
    VFOModel,
    get_radio,
    RADIOS,
)
from rig_sdk.commands import FILTER_1

# Test logger
log = logging.getLogger("test.commands")


def test_current_only_has_no_vfo_select():
    log.info("=== Starting test_current_only_has_no_vfo_select ===")
    cs = CommandSet(address=0x88, vfo_model=VFOModel.CURRENT_ONLY, mode_filter=None)
    assert not cs.supports(Operation.SELECT_VFO)
    with pytest.raises(UnsupportedOperationError):
        cs.command(Operation.SELECT_VFO)
    for vfo in VFO:
        with pytest.raises(UnsupportedOperationError):
            cs.check_vfo(vfo)
    log.info("✓ test_current_only_has_no_vfo_select passed")


def test_direct_ab_vfo_codes():
    cs = CommandSet(address=0x94, vfo_model=VFOModel.DIRECT_AB, mode_filter=FILTER_1)
    spec = cs.command(Operation.SELECT_VFO)
    assert spec.opcode == b"\x07"
    assert spec.encode(VFO.A) == b"\x00"
    assert spec.encode(VFO.B) == b"\x01"
    with pytest.raises(UnsupportedOperationError):
        spec.encode(VFO.MAIN)
    assert not cs.supports(Operation.EXCHANGE_BANDS)


def test_main_sub_vfo_codes_and_dual_receiver_ops():
    cs = CommandSet(address=0xA2, vfo_model=VFOModel.MAIN_SUB, mode_filter=None)
    select = cs.command(Operation.SELECT_VFO)
    assert select.encode(VFO.MAIN) == b"\xd0"
    assert select.encode(VFO.SUB) == b"\xd1"
    with pytest.raises(UnsupportedOperationError):
        select.encode(VFO.A)
    assert cs.command(Operation.EXCHANGE_BANDS).encode(None) == b"\xb0"
    assert cs.command(Operation.SET_DUALWATCH).encode(True) == b"\xc1"
    assert cs.command(Operation.SET_DUALWATCH).encode(False) == b"\xc0"


def test_mode_filter_byte_is_per_model():
    log.info("=== Starting test_mode_filter_byte_is_per_model ===")
    with_filter = CommandSet(address=0x94, vfo_model=VFOModel.DIRECT_AB, mode_filter=FILTER_1)
    without = CommandSet(address=0x88, vfo_model=VFOModel.CURRENT_ONLY, mode_filter=None)
    assert with_filter.command(Operation.SET_MODE).encode(Mode.USB) == b"\x01\x01"
    assert without.command(Operation.SET_MODE).encode(Mode.USB) == b"\x01"
    assert without.command(Operation.SET_MODE).encode(Mode.CW_R) == b"\x07"
    log.info("✓ test_mode_filter_byte_is_per_model passed")


def test_mode_without_wire_code_is_rejected():
    cs = CommandSet(address=0x94, vfo_model=VFOModel.DIRECT_AB, mode_filter=FILTER_1)
    with pytest.raises(InvalidParameterError):
        cs.command(Operation.SET_MODE).encode(Mode.DATA_USB)


def test_mode_decode():
    cs = CommandSet(address=0x94, vfo_model=VFOModel.DIRECT_AB, mode_filter=FILTER_1)
    decode = cs.command(Operation.READ_MODE).decode
    assert decode(b"\x03\x01") is Mode.CW
    assert decode(b"\x05") is Mode.FM
    with pytest.raises(InvalidResponseError):
        decode(b"\x42\x01")
    with pytest.raises(InvalidResponseError):
        decode(b"")


def test_command_set_is_immutable():
    cs = get_radio("IC-7100").command_set
    with pytest.raises(FrozenInstanceError):
        cs.address = 0x00
    with pytest.raises(TypeError):
        cs.settle_delays[Operation.SET_MODE] = 1.0


def test_registry_lookup():
    log.info("=== Starting test_registry_lookup ===")
    assert get_radio("IC-7300") is get_radio("ic7300") is get_radio("7300")
    assert get_radio("ic-9700").command_set.vfo_model is VFOModel.MAIN_SUB
    with pytest.raises(InvalidParameterError):
        get_radio("FT-991")
    log.info(f"✓ test_registry_lookup passed ({len(RADIOS)} radios)")


def test_registry_quirks():
    ic7100 = get_radio("IC-7100").command_set
    assert ic7100.mode_filter is None
    assert ic7100.echoes_commands
    assert ic7100.settle_delays[Operation.SET_MODE] == 0.05

    ic7300 = get_radio("IC-7300").command_set
    assert ic7300.mode_filter == FILTER_1
    assert not ic7300.echoes_commands

    assert get_radio("IC-9700").command_set.echoes_commands
    assert get_radio("IC-706MKIIG").command_set.mode_filter is None


@pytest.mark.parametrize("name", list(RADIOS))
def test_registry_entries_are_consistent(name):
    radio = RADIOS[name]
    assert radio.capabilities.vfo_model is radio.command_set.vfo_model
    assert radio.capabilities.supported_modes <= set(radio.command_set.mode_codes)
    low, high = radio.capabilities.frequency_range
    assert 0 <= low < high < 10 ** 10


def test_with_address_copies():
    radio = get_radio("IC-7300")
    moved = radio.with_address(0x95)
    assert moved.address == 0x95
    assert radio.address == 0x94
    assert moved.command_set.mode_filter == radio.command_set.mode_filter
