"""Registry of supported radios.

Each entry pairs a ``Capabilities`` descriptor with the ``CommandSet`` that
drives it. Adding a radio means adding an entry here.
"""

from dataclasses import dataclass, replace
from typing import Dict, List

from .commands import FILTER_1, CommandSet, Operation
from .errors import InvalidParameterError
from .model import Capabilities, Mode, VFOModel

HF_MODES = frozenset({
    Mode.LSB, Mode.USB, Mode.CW, Mode.CW_R, Mode.RTTY, Mode.RTTY_R, Mode.AM, Mode.FM,
})
VHF_MODES = HF_MODES | {Mode.WFM}
LEGACY_MODES = frozenset({Mode.LSB, Mode.USB, Mode.CW, Mode.RTTY, Mode.AM, Mode.FM})
QRP_MODES = frozenset({Mode.LSB, Mode.USB, Mode.CW, Mode.CW_R, Mode.AM, Mode.FM})


@dataclass(frozen=True)
class RadioDefinition:
    """A concrete radio model: identity, capabilities and wire table."""

    name: str
    manufacturer: str
    default_baudrate: int
    capabilities: Capabilities
    command_set: CommandSet

    def __post_init__(self):
        if self.capabilities.vfo_model is not self.command_set.vfo_model:
            raise ValueError(
                f"{self.name}: capabilities declare {self.capabilities.vfo_model.value} "
                f"but the command set uses {self.command_set.vfo_model.value}"
            )
        missing = self.capabilities.supported_modes - set(self.command_set.mode_codes)
        if missing:
            names = ", ".join(sorted(m.value for m in missing))
            raise ValueError(f"{self.name}: no wire code for supported mode(s) {names}")

    @property
    def address(self) -> int:
        return self.command_set.address

    def with_address(self, address: int) -> "RadioDefinition":
        """Copy of this definition talking to a different CI-V address."""
        return replace(self, command_set=replace(self.command_set, address=address))

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "manufacturer": self.manufacturer,
            "address": f"0x{self.address:02X}",
            "default_baudrate": self.default_baudrate,
            "capabilities": self.capabilities.to_dict(),
        }


def _icom(name, address, baudrate, vfo_model, mode_filter, modes, frequency_range,
          max_power=100, echoes=False, settle_delays=None, **features):
    return RadioDefinition(
        name=name,
        manufacturer="Icom",
        default_baudrate=baudrate,
        capabilities=Capabilities(
            supported_modes=modes,
            frequency_range=frequency_range,
            max_power=max_power,
            vfo_model=vfo_model,
            **features,
        ),
        command_set=CommandSet(
            address=address,
            vfo_model=vfo_model,
            mode_filter=mode_filter,
            echoes_commands=echoes,
            settle_delays=settle_delays or {},
        ),
    )


IC_7300 = _icom("IC-7300", 0x94, 115200, VFOModel.DIRECT_AB, FILTER_1,
                HF_MODES, (30_000, 74_800_000))
IC_7610 = _icom("IC-7610", 0x98, 115200, VFOModel.MAIN_SUB, FILTER_1,
                HF_MODES, (30_000, 60_000_000))
IC_7600 = _icom("IC-7600", 0x7A, 19200, VFOModel.MAIN_SUB, FILTER_1,
                HF_MODES, (30_000, 60_000_000), echoes=True)
IC_9100 = _icom("IC-9100", 0x7C, 115200, VFOModel.MAIN_SUB, FILTER_1,
                HF_MODES, (30_000, 1_320_000_000))
IC_7200 = _icom("IC-7200", 0x76, 19200, VFOModel.CURRENT_ONLY, FILTER_1,
                HF_MODES, (30_000, 60_000_000))
IC_7410 = _icom("IC-7410", 0x80, 19200, VFOModel.CURRENT_ONLY, FILTER_1,
                HF_MODES, (30_000, 60_000_000))

# The IC-7100 family echoes every command, NAKs a filter byte on set-mode and
# needs a moment after a mode change before reads reflect it.
IC_7100 = _icom("IC-7100", 0x88, 19200, VFOModel.CURRENT_ONLY, None,
                VHF_MODES, (30_000, 470_000_000), echoes=True,
                settle_delays={Operation.SET_MODE: 0.05})
IC_705 = _icom("IC-705", 0xA4, 19200, VFOModel.CURRENT_ONLY, None,
               VHF_MODES, (30_000, 470_000_000), max_power=10, echoes=True,
               settle_delays={Operation.SET_MODE: 0.05})
IC_9700 = _icom("IC-9700", 0xA2, 115200, VFOModel.MAIN_SUB, None,
                VHF_MODES, (30_000, 1_300_000_000), echoes=True)

IC_706MKIIG = _icom("IC-706MKIIG", 0x58, 19200, VFOModel.DIRECT_AB, None,
                    LEGACY_MODES | {Mode.WFM}, (30_000, 470_000_000))
IC_746PRO = _icom("IC-746PRO", 0x66, 19200, VFOModel.DIRECT_AB, None,
                  HF_MODES, (30_000, 148_000_000))
IC_756PROIII = _icom("IC-756PROIII", 0x6E, 19200, VFOModel.MAIN_SUB, FILTER_1,
                     HF_MODES, (30_000, 60_000_000))

IC_R8600 = _icom("IC-R8600", 0x96, 115200, VFOModel.DIRECT_AB, FILTER_1,
                 VHF_MODES, (10_000, 3_000_000_000), max_power=0,
                 power_control=False, has_ptt=False, has_split=False)

XIEGU_G90 = replace(
    _icom("G90", 0xA4, 19200, VFOModel.CURRENT_ONLY, FILTER_1,
          QRP_MODES, (500_000, 30_000_000), max_power=20),
    manufacturer="Xiegu",
)
XIEGU_X6100 = replace(
    _icom("X6100", 0xA4, 19200, VFOModel.CURRENT_ONLY, FILTER_1,
          QRP_MODES, (500_000, 54_000_000), max_power=10),
    manufacturer="Xiegu",
)

RADIOS: Dict[str, RadioDefinition] = {
    radio.name: radio
    for radio in (
        IC_7300, IC_7610, IC_7600, IC_9100, IC_7200, IC_7410, IC_7100, IC_705,
        IC_9700, IC_706MKIIG, IC_746PRO, IC_756PROIII, IC_R8600,
        XIEGU_G90, XIEGU_X6100,
    )
}


def _normalize(name: str) -> str:
    return "".join(ch for ch in name.upper() if ch.isalnum())


def get_radio(name: str) -> RadioDefinition:
    """Look up a radio by model name ("IC-7300", "ic7300" and "7300" all work).

    Raises:
        InvalidParameterError: If no registered radio matches
    """
    key = _normalize(name)
    for radio in RADIOS.values():
        candidate = _normalize(radio.name)
        if key in (candidate, candidate.removeprefix("IC")):
            return radio
    raise InvalidParameterError(
        f"Unknown radio model: {name!r} (known: {', '.join(list_radios())})"
    )


def list_radios() -> List[str]:
    return list(RADIOS)
