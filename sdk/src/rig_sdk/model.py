"""Value types shared by the command sets, the controller and the CLI."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Tuple

from .errors import InvalidParameterError


class Mode(str, Enum):
    """Operating modes."""

    LSB = "LSB"
    USB = "USB"
    CW = "CW"
    CW_R = "CW-R"
    AM = "AM"
    FM = "FM"
    FM_N = "FM-N"
    WFM = "WFM"
    RTTY = "RTTY"
    RTTY_R = "RTTY-R"
    DATA_USB = "DATA-USB"
    DATA_LSB = "DATA-LSB"
    DATA_FM = "DATA-FM"

    @classmethod
    def parse(cls, value: str) -> "Mode":
        """Look up a mode by name, case-insensitive ("usb", "cw-r", "CW_R")."""
        key = value.strip().upper().replace("_", "-")
        for mode in cls:
            if mode.value == key:
                return mode
        raise InvalidParameterError(f"Unknown mode: {value!r}")


class VFO(str, Enum):
    """VFO designators. Which ones are legal depends on the model's VFOModel."""

    A = "A"
    B = "B"
    MAIN = "Main"
    SUB = "Sub"

    @classmethod
    def parse(cls, value: str) -> "VFO":
        key = value.strip().lower()
        for vfo in cls:
            if vfo.value.lower() == key:
                return vfo
        raise InvalidParameterError(f"Unknown VFO: {value!r}")


class VFOModel(str, Enum):
    """How a radio addresses its tuning registers.

    DIRECT_AB     VFO A/B selectable (07 00 / 07 01)
    MAIN_SUB      independent Main/Sub receivers (07 D0 / 07 D1), plus
                  band exchange and dual watch
    CURRENT_ONLY  no VFO select; every command acts on the current VFO
    """

    DIRECT_AB = "directAB"
    MAIN_SUB = "mainSub"
    CURRENT_ONLY = "currentOnly"

    @property
    def legal_vfos(self) -> FrozenSet[VFO]:
        if self is VFOModel.DIRECT_AB:
            return frozenset({VFO.A, VFO.B})
        if self is VFOModel.MAIN_SUB:
            return frozenset({VFO.MAIN, VFO.SUB})
        return frozenset()


@dataclass(frozen=True)
class Capabilities:
    """Immutable description of what one radio model can do."""

    supported_modes: FrozenSet[Mode]
    frequency_range: Tuple[int, int]
    max_power: int
    vfo_model: VFOModel
    power_control: bool = True
    has_ptt: bool = True
    has_split: bool = True
    has_s_meter: bool = True
    min_power: int = 0

    def __post_init__(self):
        low, high = self.frequency_range
        if low < 0 or high < low:
            raise ValueError(f"Invalid frequency range {self.frequency_range}")
        if self.max_power < self.min_power:
            raise ValueError(f"Invalid power range {self.min_power}-{self.max_power}")
        if self.power_control and self.max_power <= 0:
            raise ValueError("Power control requires a positive max_power")
        object.__setattr__(self, "supported_modes", frozenset(self.supported_modes))

    @property
    def has_dual_receiver(self) -> bool:
        return self.vfo_model is VFOModel.MAIN_SUB

    @property
    def power_range(self) -> Tuple[int, int]:
        return (self.min_power, self.max_power)

    def supports_frequency(self, hz: int) -> bool:
        low, high = self.frequency_range
        return low <= hz <= high

    def to_dict(self) -> dict:
        return {
            "supported_modes": sorted(m.value for m in self.supported_modes),
            "frequency_range": list(self.frequency_range),
            "power_range": list(self.power_range),
            "vfo_model": self.vfo_model.value,
            "legal_vfos": sorted(v.value for v in self.vfo_model.legal_vfos),
            "power_control": self.power_control,
            "ptt": self.has_ptt,
            "split": self.has_split,
            "s_meter": self.has_s_meter,
            "dual_receiver": self.has_dual_receiver,
        }
