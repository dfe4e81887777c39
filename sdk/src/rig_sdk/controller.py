"""High-level rig control facade."""

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from .base import ByteTransport
from .cache import CacheKey, CacheStatistics, Quantity, StateCache
from .commands import Operation
from .engine import ProtocolEngine, Step
from .errors import InvalidParameterError, NotConnectedError, UnsupportedOperationError
from .framing import CONTROLLER_ADDRESS
from .model import VFO, Capabilities, Mode
from .rigs import RadioDefinition, get_radio
from .transports.serial import AsyncSerialTransport

CURRENT = "current"

VFOArg = Optional[Union[VFO, str]]


class RigController:
    """Typed, cached control of one radio.

    Usage::

        async with RigController("IC-7300", port="/dev/ttyUSB0") as rig:
            await rig.set_frequency(14_074_000, vfo=VFO.A)
            await rig.set_mode(Mode.USB)
            hz = await rig.get_frequency()

    ``vfo=None`` acts on whichever VFO the radio currently has selected. A
    named VFO is selected first, in the same exchange sequence as the command
    itself. Radios without VFO selection reject any named VFO.

    Every SET is validated against the model's capabilities before a byte is
    sent, and invalidates the cached values it can affect.
    """

    def __init__(
        self,
        radio: Union[RadioDefinition, str],
        transport: Optional[ByteTransport] = None,
        port: Optional[str] = None,
        baudrate: Optional[int] = None,
        timeout: float = 1.0,
        cache_max_age: float = 0.5,
        controller_address: int = CONTROLLER_ADDRESS,
    ):
        if isinstance(radio, str):
            radio = get_radio(radio)
        if transport is None:
            if not port:
                raise ValueError("Either a transport or a serial port is required")
            transport = AsyncSerialTransport(port, baudrate or radio.default_baudrate)

        self.radio = radio
        self.transport = transport
        self.engine = ProtocolEngine(transport, radio.command_set, timeout, controller_address)
        self.cache = StateCache(default_max_age=cache_max_age)
        self._connected = False
        self.logger = logging.getLogger(f"rig_sdk.{self.__class__.__name__}")

    # -- connection --

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def capabilities(self) -> Capabilities:
        return self.radio.capabilities

    @property
    def radio_name(self) -> str:
        return f"{self.radio.manufacturer} {self.radio.name}"

    async def connect(self) -> None:
        """Open the transport. Does nothing when already connected."""
        if self._connected:
            return
        await self.transport.open()
        self._connected = True
        self.logger.info(f"Connected to {self.radio_name} (address 0x{self.radio.address:02X})")

    async def disconnect(self) -> None:
        """Close the transport and drop all cached state."""
        if not self._connected:
            return
        self.cache.invalidate()
        self._connected = False
        await self.transport.close()
        self.logger.info(f"Disconnected from {self.radio_name}")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
        return False

    # -- frequency --

    async def get_frequency(self, vfo: VFOArg = None, cached: bool = True) -> int:
        """Read a VFO frequency in Hz."""
        return await self._get(Quantity.FREQUENCY, Operation.READ_FREQUENCY, vfo, cached)

    async def set_frequency(self, hz: int, vfo: VFOArg = None) -> None:
        """Tune a VFO.

        Raises:
            InvalidParameterError: If ``hz`` is outside the radio's range
            UnsupportedOperationError: If ``vfo`` cannot be selected on this radio
        """
        self._require_connected()
        vfo = self._vfo(vfo)
        self._check_frequency(hz)
        await self._set(Operation.SET_FREQUENCY, hz, vfo)
        self._invalidate(Quantity.FREQUENCY)

    # -- mode --

    async def get_mode(self, vfo: VFOArg = None, cached: bool = True) -> Mode:
        return await self._get(Quantity.MODE, Operation.READ_MODE, vfo, cached)

    async def set_mode(self, mode: Union[Mode, str], vfo: VFOArg = None) -> None:
        self._require_connected()
        vfo = self._vfo(vfo)
        mode = self._check_mode(mode)
        await self._set(Operation.SET_MODE, mode, vfo)
        self._invalidate(Quantity.MODE)

    # -- VFO --

    async def select_vfo(self, vfo: Union[VFO, str]) -> None:
        """Make ``vfo`` the current VFO."""
        self._require_connected()
        vfo = self._vfo(vfo)
        if vfo is None:
            raise InvalidParameterError("A VFO is required")
        await self.engine.execute(Operation.SELECT_VFO, vfo)
        self._invalidate_current()

    async def exchange_bands(self) -> None:
        """Swap the Main and Sub receivers (dual receiver radios only)."""
        self._require_connected()
        self._require_dual_receiver("Band exchange")
        await self.engine.execute(Operation.EXCHANGE_BANDS)
        self._invalidate(Quantity.FREQUENCY)
        self._invalidate(Quantity.MODE)

    async def set_dualwatch(self, enabled: bool) -> None:
        self._require_connected()
        self._require_dual_receiver("Dual watch")
        await self.engine.execute(Operation.SET_DUALWATCH, bool(enabled))

    # -- PTT --

    async def get_ptt(self, cached: bool = True) -> bool:
        self._require_connected()
        self._require_feature(self.capabilities.has_ptt, "PTT")
        return await self._get(Quantity.PTT, Operation.READ_PTT, None, cached)

    async def set_ptt(self, enabled: bool) -> None:
        """Key (True) or unkey (False) the transmitter."""
        self._require_connected()
        self._require_feature(self.capabilities.has_ptt, "PTT")
        await self.engine.execute(Operation.SET_PTT, bool(enabled))
        self._invalidate(Quantity.PTT)

    # -- power --

    async def get_power(self, cached: bool = True) -> int:
        """Read the RF power setting in watts."""
        self._require_connected()
        self._require_feature(self.capabilities.power_control, "Power control")
        return await self._get(Quantity.POWER, Operation.READ_POWER, None, cached, convert=self._level_to_watts)

    async def set_power(self, watts: int) -> None:
        """Set the RF power in watts (0 to the radio's maximum).

        Raises:
            UnsupportedOperationError: If the radio has no power control
            InvalidParameterError: If ``watts`` is outside the power range
        """
        self._require_connected()
        self._require_feature(self.capabilities.power_control, "Power control")
        level = self._watts_to_level(watts)
        await self.engine.execute(Operation.SET_POWER, level)
        self._invalidate(Quantity.POWER)

    # -- split --

    async def get_split(self, cached: bool = True) -> bool:
        self._require_connected()
        self._require_feature(self.capabilities.has_split, "Split operation")
        return await self._get(Quantity.SPLIT, Operation.READ_SPLIT, None, cached)

    async def set_split(self, enabled: bool) -> None:
        self._require_connected()
        self._require_feature(self.capabilities.has_split, "Split operation")
        await self.engine.execute(Operation.SET_SPLIT, bool(enabled))
        self._invalidate(Quantity.SPLIT)

    # -- meters --

    async def get_signal_strength(self, cached: bool = True) -> int:
        """Raw S-meter reading, 0-255."""
        self._require_connected()
        self._require_feature(self.capabilities.has_s_meter, "S-meter reading")
        return await self._get(Quantity.S_METER, Operation.READ_S_METER, None, cached)

    # -- bulk --

    async def configure(
        self,
        frequency: Optional[int] = None,
        mode: Optional[Union[Mode, str]] = None,
        vfo: VFOArg = None,
        power: Optional[int] = None,
    ) -> None:
        """Apply several settings in one uninterrupted sequence.

        Everything is validated before the first command goes out; the
        commands are then sent as frequency, mode, power.
        """
        self._require_connected()
        vfo = self._vfo(vfo)

        steps: List[Step] = []
        if vfo is not None:
            steps.append((Operation.SELECT_VFO, vfo))
        if frequency is not None:
            self._check_frequency(frequency)
            steps.append((Operation.SET_FREQUENCY, frequency))
        if mode is not None:
            steps.append((Operation.SET_MODE, self._check_mode(mode)))
        if power is not None:
            self._require_feature(self.capabilities.power_control, "Power control")
            steps.append((Operation.SET_POWER, self._watts_to_level(power)))

        if not steps:
            return

        try:
            await self.engine.execute_sequence(steps)
        finally:
            # A partial failure may still have changed state
            self._invalidate(Quantity.FREQUENCY)
            self._invalidate(Quantity.MODE)
            self._invalidate(Quantity.POWER)

    async def get_status(self) -> Dict[str, Any]:
        """Frequency and mode of the current VFO, plus PTT and split where supported."""
        status: Dict[str, Any] = {
            "radio": self.radio_name,
            "frequency": await self.get_frequency(),
            "mode": (await self.get_mode()).value,
        }
        if self.capabilities.has_ptt:
            status["ptt"] = await self.get_ptt()
        if self.capabilities.has_split:
            status["split"] = await self.get_split()
        return status

    # -- cache --

    def invalidate_cache(self) -> None:
        """Forget all cached values."""
        self.cache.invalidate()

    def cache_statistics(self) -> CacheStatistics:
        return self.cache.statistics()

    # -- internals --

    def _require_connected(self) -> None:
        if not self._connected:
            raise NotConnectedError(f"Not connected to {self.radio_name}")

    def _require_feature(self, supported: bool, what: str) -> None:
        if not supported:
            raise UnsupportedOperationError(f"{what} not supported by {self.radio_name}")

    def _require_dual_receiver(self, what: str) -> None:
        self._require_feature(self.capabilities.has_dual_receiver, what)

    def _vfo(self, vfo: VFOArg) -> Optional[VFO]:
        if vfo is None:
            return None
        if isinstance(vfo, str) and not isinstance(vfo, VFO):
            vfo = VFO.parse(vfo)
        self.radio.command_set.check_vfo(vfo)
        return vfo

    def _check_frequency(self, hz: int) -> None:
        if not isinstance(hz, int) or isinstance(hz, bool):
            raise InvalidParameterError(f"Frequency must be an integer number of Hz, got {hz!r}")
        if not self.capabilities.supports_frequency(hz):
            low, high = self.capabilities.frequency_range
            raise InvalidParameterError(
                f"{hz} Hz is outside the {self.radio.name} range {low}-{high} Hz"
            )

    def _check_mode(self, mode: Union[Mode, str]) -> Mode:
        if not isinstance(mode, Mode):
            mode = Mode.parse(mode)
        if mode not in self.capabilities.supported_modes:
            raise InvalidParameterError(f"Mode {mode.value} not supported by {self.radio.name}")
        return mode

    def _watts_to_level(self, watts: int) -> int:
        low, high = self.capabilities.power_range
        if not isinstance(watts, int) or isinstance(watts, bool):
            raise InvalidParameterError(f"Power must be an integer number of watts, got {watts!r}")
        if not low <= watts <= high:
            raise InvalidParameterError(f"Power must be between {low} and {high} watts")
        return round(watts * 255 / high)

    def _level_to_watts(self, level: int) -> int:
        return round(level * self.capabilities.max_power / 255)

    def _key(self, quantity: Quantity, vfo: Optional[VFO]) -> CacheKey:
        return CacheKey(quantity, vfo.value if vfo is not None else CURRENT)

    async def _get(
        self,
        quantity: Quantity,
        operation: Operation,
        vfo: VFOArg,
        cached: bool,
        convert: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        self._require_connected()
        vfo = self._vfo(vfo)

        async def fetch():
            if vfo is None:
                value = await self.engine.execute(operation)
            else:
                _, value = await self.engine.execute_sequence([
                    (Operation.SELECT_VFO, vfo),
                    (operation, None),
                ])
                self._invalidate_current()
            return convert(value) if convert else value

        return await self.cache.get(self._key(quantity, vfo), fetch, max_age=None if cached else 0)

    async def _set(self, operation: Operation, value: Any, vfo: Optional[VFO]) -> None:
        if vfo is None:
            await self.engine.execute(operation, value)
        else:
            await self.engine.execute_sequence([(Operation.SELECT_VFO, vfo), (operation, value)])
            self._invalidate_current()

    def _invalidate(self, quantity: Quantity) -> None:
        # The current VFO may be any of the named ones, so drop them all
        self.cache.invalidate(CacheKey(quantity, CURRENT))
        for vfo in self.radio.command_set.vfo_model.legal_vfos:
            self.cache.invalidate(CacheKey(quantity, vfo.value))

    def _invalidate_current(self) -> None:
        self.cache.invalidate(CacheKey(Quantity.FREQUENCY, CURRENT))
        self.cache.invalidate(CacheKey(Quantity.MODE, CURRENT))
