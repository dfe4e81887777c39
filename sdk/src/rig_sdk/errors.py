"""Exception hierarchy for rig control operations."""

from typing import Optional


class RigError(Exception):
    """Base error for everything raised by the SDK."""


class NotConnectedError(RigError, ConnectionError):
    """Raised when an operation is attempted before connect() succeeded."""

    def __init__(self, message: str = "Not connected"):
        super().__init__(message)


class TransportError(RigError, ConnectionError):
    """Raised when the serial device cannot be opened, configured or written."""

    def __init__(self, message: str, os_message: Optional[str] = None):
        self.os_message = os_message
        if os_message:
            message = f"{message}: {os_message}"
        super().__init__(message)


class RigTimeoutError(RigError, TimeoutError):
    """Raised when the radio does not answer within the deadline."""


class InvalidResponseError(RigError, ValueError):
    """Raised when reply bytes are malformed (preamble, terminator, length, digits)."""


class RejectedError(RigError):
    """Raised when the radio explicitly refuses a command (NAK)."""

    def __init__(self, opcode: int, command: Optional[str] = None):
        self.opcode = opcode
        self.command = command
        what = f" {command}" if command else ""
        super().__init__(f"Radio rejected{what} (reply opcode 0x{opcode:02X})")


class UnsupportedOperationError(RigError):
    """Raised when the model's capabilities or command set forbid an operation."""


class InvalidParameterError(RigError, ValueError):
    """Raised when a value is outside the model's declared range."""
