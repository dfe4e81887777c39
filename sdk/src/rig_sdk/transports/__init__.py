"""Transport modules for the rig SDK."""

from .serial import AsyncSerialTransport, SerialConfig

__all__ = [
    "AsyncSerialTransport",
    "SerialConfig",
]
