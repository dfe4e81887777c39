"""Table-driven CI-V command sets.

A ``CommandSet`` is plain data: the radio's bus address, its VFO addressing
model and its quirks. The per-operation ``CommandSpec`` table (opcode plus
payload encoder / reply decoder) is derived from that data once, at
construction. Supporting another radio means writing another ``CommandSet``,
never another code path.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from . import bcd
from .errors import InvalidParameterError, InvalidResponseError, UnsupportedOperationError
from .model import VFO, Mode, VFOModel


class Operation(str, Enum):
    """Logical operations a command set can map onto the wire."""

    READ_FREQUENCY = "read_frequency"
    SET_FREQUENCY = "set_frequency"
    READ_MODE = "read_mode"
    SET_MODE = "set_mode"
    SELECT_VFO = "select_vfo"
    READ_PTT = "read_ptt"
    SET_PTT = "set_ptt"
    READ_POWER = "read_power"
    SET_POWER = "set_power"
    READ_SPLIT = "read_split"
    SET_SPLIT = "set_split"
    READ_S_METER = "read_s_meter"
    EXCHANGE_BANDS = "exchange_bands"
    SET_DUALWATCH = "set_dualwatch"

    @property
    def is_read(self) -> bool:
        return self.value.startswith("read_")


# Opcodes
CMD_READ_FREQUENCY = 0x03
CMD_READ_MODE = 0x04
CMD_SET_FREQUENCY = 0x05
CMD_SET_MODE = 0x06
CMD_SELECT_VFO = 0x07
CMD_SPLIT = 0x0F
CMD_SETTINGS = 0x14
CMD_READ_LEVEL = 0x15
CMD_PTT = 0x1C

# Sub-opcodes
SUB_RF_POWER = 0x0A
SUB_S_METER = 0x02
SUB_PTT = 0x00

# VFO select payloads (07 xx)
VFO_CODES = MappingProxyType({
    VFO.A: 0x00,
    VFO.B: 0x01,
    VFO.MAIN: 0xD0,
    VFO.SUB: 0xD1,
})
EXCHANGE_BANDS_CODE = 0xB0
DUALWATCH_OFF = 0xC0
DUALWATCH_ON = 0xC1

# Filter selectors for the trailing byte of a set-mode command
FILTER_1 = 0x01
FILTER_2 = 0x02
FILTER_3 = 0x03

STANDARD_MODE_CODES = MappingProxyType({
    Mode.LSB: 0x00,
    Mode.USB: 0x01,
    Mode.AM: 0x02,
    Mode.CW: 0x03,
    Mode.RTTY: 0x04,
    Mode.FM: 0x05,
    Mode.WFM: 0x06,
    Mode.CW_R: 0x07,
    Mode.RTTY_R: 0x08,
})


def _no_payload(_value: Any = None) -> bytes:
    return b""


def _encode_bool(value: bool) -> bytes:
    return b"\x01" if value else b"\x00"


def _decode_bool(payload: bytes) -> bool:
    if len(payload) != 1:
        raise InvalidResponseError(f"Expected 1 status byte, got {payload.hex(' ') or '(empty)'}")
    return payload[0] == 0x01


@dataclass(frozen=True)
class CommandSpec:
    """Wire form of one logical operation."""

    operation: Operation
    opcode: bytes
    encode: Callable[[Any], bytes] = _no_payload
    decode: Optional[Callable[[bytes], Any]] = None

    @property
    def expects_data(self) -> bool:
        return self.decode is not None


@dataclass(frozen=True)
class CommandSet:
    """Per-model wire table.

    Attributes:
        address: Radio's CI-V bus address
        vfo_model: VFO addressing variant
        mode_filter: Filter selector appended to set-mode commands, or None
            for radios that refuse a filter byte. There is deliberately no
            default: radios disagree and NAK the wrong one.
        echoes_commands: Radio repeats every command verbatim before replying
        acks_set_commands: Radio answers SET commands with ACK/NAK
        settle_delays: Seconds to wait after an operation before the radio's
            state is reliable
        mode_codes: Mode to wire byte mapping
    """

    address: int
    vfo_model: VFOModel
    mode_filter: Optional[int]
    echoes_commands: bool = False
    acks_set_commands: bool = True
    settle_delays: Mapping[Operation, float] = field(default_factory=dict)
    mode_codes: Mapping[Mode, int] = field(default_factory=lambda: STANDARD_MODE_CODES)

    def __post_init__(self):
        if not 0 <= self.address <= 0xFF:
            raise ValueError(f"CI-V address must be a byte, got {self.address!r}")
        if self.mode_filter is not None and not 0 <= self.mode_filter <= 0xFF:
            raise ValueError(f"Filter selector must be a byte, got {self.mode_filter!r}")

        object.__setattr__(self, "settle_delays", MappingProxyType(dict(self.settle_delays)))
        object.__setattr__(self, "mode_codes", MappingProxyType(dict(self.mode_codes)))
        object.__setattr__(self, "_modes_by_code", MappingProxyType(
            {code: mode for mode, code in self.mode_codes.items()}
        ))
        object.__setattr__(self, "_table", MappingProxyType(self._build_table()))

    def _build_table(self) -> Dict[Operation, CommandSpec]:
        table = {
            Operation.READ_FREQUENCY: CommandSpec(
                Operation.READ_FREQUENCY, bytes([CMD_READ_FREQUENCY]),
                decode=bcd.decode_frequency,
            ),
            Operation.SET_FREQUENCY: CommandSpec(
                Operation.SET_FREQUENCY, bytes([CMD_SET_FREQUENCY]),
                encode=bcd.encode_frequency,
            ),
            Operation.READ_MODE: CommandSpec(
                Operation.READ_MODE, bytes([CMD_READ_MODE]),
                decode=self._decode_mode,
            ),
            Operation.SET_MODE: CommandSpec(
                Operation.SET_MODE, bytes([CMD_SET_MODE]),
                encode=self._encode_mode,
            ),
            Operation.READ_PTT: CommandSpec(
                Operation.READ_PTT, bytes([CMD_PTT, SUB_PTT]),
                decode=_decode_bool,
            ),
            Operation.SET_PTT: CommandSpec(
                Operation.SET_PTT, bytes([CMD_PTT, SUB_PTT]),
                encode=_encode_bool,
            ),
            Operation.READ_POWER: CommandSpec(
                Operation.READ_POWER, bytes([CMD_SETTINGS, SUB_RF_POWER]),
                decode=bcd.decode_level,
            ),
            Operation.SET_POWER: CommandSpec(
                Operation.SET_POWER, bytes([CMD_SETTINGS, SUB_RF_POWER]),
                encode=bcd.encode_level,
            ),
            Operation.READ_SPLIT: CommandSpec(
                Operation.READ_SPLIT, bytes([CMD_SPLIT]),
                decode=_decode_bool,
            ),
            Operation.SET_SPLIT: CommandSpec(
                Operation.SET_SPLIT, bytes([CMD_SPLIT]),
                encode=_encode_bool,
            ),
            Operation.READ_S_METER: CommandSpec(
                Operation.READ_S_METER, bytes([CMD_READ_LEVEL, SUB_S_METER]),
                decode=bcd.decode_level,
            ),
        }

        if self.vfo_model is not VFOModel.CURRENT_ONLY:
            table[Operation.SELECT_VFO] = CommandSpec(
                Operation.SELECT_VFO, bytes([CMD_SELECT_VFO]),
                encode=self._encode_vfo,
            )

        if self.vfo_model is VFOModel.MAIN_SUB:
            table[Operation.EXCHANGE_BANDS] = CommandSpec(
                Operation.EXCHANGE_BANDS, bytes([CMD_SELECT_VFO]),
                encode=lambda _value=None: bytes([EXCHANGE_BANDS_CODE]),
            )
            table[Operation.SET_DUALWATCH] = CommandSpec(
                Operation.SET_DUALWATCH, bytes([CMD_SELECT_VFO]),
                encode=lambda enabled: bytes([DUALWATCH_ON if enabled else DUALWATCH_OFF]),
            )

        return table

    # -- lookups --

    def supports(self, operation: Operation) -> bool:
        return operation in self._table

    def command(self, operation: Operation) -> CommandSpec:
        """Return the wire spec for an operation.

        Raises:
            UnsupportedOperationError: If this model has no such command
        """
        try:
            return self._table[operation]
        except KeyError:
            raise UnsupportedOperationError(
                f"{operation.value} is not available on a {self.vfo_model.value} radio "
                f"(address 0x{self.address:02X})"
            ) from None

    def check_vfo(self, vfo: VFO) -> None:
        """Raise UnsupportedOperationError unless this model can address ``vfo``."""
        if self.vfo_model is VFOModel.CURRENT_ONLY:
            raise UnsupportedOperationError(
                f"VFO {vfo.value} cannot be selected: radio only operates on the current VFO"
            )
        if vfo not in self.vfo_model.legal_vfos:
            legal = ", ".join(sorted(v.value for v in self.vfo_model.legal_vfos))
            raise UnsupportedOperationError(
                f"VFO {vfo.value} is not valid for a {self.vfo_model.value} radio (use {legal})"
            )

    # -- payload codecs --

    def _encode_vfo(self, vfo: VFO) -> bytes:
        self.check_vfo(vfo)
        return bytes([VFO_CODES[vfo]])

    def _encode_mode(self, mode: Mode) -> bytes:
        code = self.mode_codes.get(mode)
        if code is None:
            raise InvalidParameterError(f"Mode {mode.value} has no wire code on this radio")
        if self.mode_filter is None:
            return bytes([code])
        return bytes([code, self.mode_filter])

    def _decode_mode(self, payload: bytes) -> Mode:
        # mode byte, optionally followed by the active filter
        if not 1 <= len(payload) <= 2:
            raise InvalidResponseError(f"Unexpected mode payload: {payload.hex(' ') or '(empty)'}")
        try:
            return self._modes_by_code[payload[0]]
        except KeyError:
            raise InvalidResponseError(f"Unknown mode code 0x{payload[0]:02X}") from None
