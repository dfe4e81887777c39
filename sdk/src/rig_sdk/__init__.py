"""CI-V rig control SDK.

A fully async SDK for controlling Icom-protocol (CI-V) transceivers over a
serial link: frequency, mode, VFO, power, PTT, split and S-meter, with
per-model quirks described as data.
"""

from .base import ByteTransport
from .cache import CacheKey, CacheStatistics, Quantity, StateCache
from .commands import CommandSet, CommandSpec, Operation
from .config import configure_logging
from .controller import RigController
from .engine import ExchangeState, ProtocolEngine
from .errors import (
    InvalidParameterError,
    InvalidResponseError,
    NotConnectedError,
    RejectedError,
    RigError,
    RigTimeoutError,
    TransportError,
    UnsupportedOperationError,
)
from .framing import Frame, decode_frame, encode_frame
from .model import VFO, Capabilities, Mode, VFOModel
from .rigs import RADIOS, RadioDefinition, get_radio, list_radios
from .transports import AsyncSerialTransport, SerialConfig

__all__ = [
    # High-level
    "RigController",
    "RadioDefinition",
    "RADIOS",
    "get_radio",
    "list_radios",
    "Capabilities",
    "Mode",
    "VFO",
    "VFOModel",
    # Engine
    "ProtocolEngine",
    "ExchangeState",
    "CommandSet",
    "CommandSpec",
    "Operation",
    "StateCache",
    "CacheKey",
    "CacheStatistics",
    "Quantity",
    # Transports
    "ByteTransport",
    "AsyncSerialTransport",
    "SerialConfig",
    # Framing utilities
    "Frame",
    "encode_frame",
    "decode_frame",
    # Errors
    "RigError",
    "NotConnectedError",
    "TransportError",
    "RigTimeoutError",
    "InvalidResponseError",
    "RejectedError",
    "UnsupportedOperationError",
    "InvalidParameterError",
    # Logging
    "configure_logging",
]

__version__ = "0.1.0"
