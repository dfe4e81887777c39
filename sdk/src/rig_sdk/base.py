"""Abstract base class for async byte-stream transports."""

import logging
from abc import ABC, abstractmethod


class ByteTransport(ABC):
    """Raw, unframed byte link to a radio.

    The protocol engine owns framing and request pairing; a transport only
    moves bytes and reports timeouts.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"rig_sdk.{self.__class__.__name__}")

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True while the underlying device is open."""

    @abstractmethod
    async def open(self) -> None:
        """Open and configure the link. Opening an open link does nothing.

        Raises:
            TransportError: If the device cannot be opened or configured
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the device. Safe to call more than once."""
        pass

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Transmit exactly ``data`` and wait until it has drained.

        Raises:
            NotConnectedError: If the link is closed
            TransportError: On a failed or short write
        """
        pass

    @abstractmethod
    async def read(self, timeout: float) -> bytes:
        """Return whatever bytes arrive within ``timeout`` seconds.

        Raises:
            NotConnectedError: If the link is closed
            RigTimeoutError: If nothing arrives in time
        """
        pass

    @abstractmethod
    async def read_until(self, terminator: int, timeout: float) -> bytes:
        """Accumulate bytes until ``terminator`` is seen.

        Args:
            terminator: Byte value ending the message
            timeout: Total time allowed, in seconds

        Returns:
            Bytes read, terminator included

        Raises:
            NotConnectedError: If the link is closed
            RigTimeoutError: If the terminator does not arrive in time
        """
        pass

    @abstractmethod
    async def flush(self) -> None:
        """Discard any pending input and output."""
        pass

    async def __aenter__(self):
        """Async context manager entry - opens the link."""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - closes the link."""
        await self.close()
        return False
