"""
Destination connector interfaces.

The connector dials outbound byte-stream connections; each successful dial
returns an ``IDestination`` handle that the session bridge owns.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class IDestination(ABC):
    """Handle for one established destination connection."""

    @property
    @abstractmethod
    def host(self) -> str:
        pass

    @property
    @abstractmethod
    def port(self) -> int:
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Check if the connection is still usable."""
        pass

    @abstractmethod
    async def read(self) -> bytes:
        """
        Wait for the next chunk of bytes, in arrival order.

        Returns:
            The chunk, or ``b""`` once the remote side closed the stream

        Raises:
            DestinationTimeoutError: If the connection idled past the inactivity timeout
            DestinationError: If the connection failed
        """
        pass

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Write bytes to the destination.

        Raises:
            DestinationClosedError: If the connection is closed
            DestinationError: If the write failed
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Idempotent."""
        pass

    @abstractmethod
    def abort(self) -> None:
        """Close the connection immediately without waiting."""
        pass


class IDestinationConnector(ABC):
    """Interface for dialing destinations."""

    @abstractmethod
    async def connect(self, host: str, port: int) -> IDestination:
        """
        Open a connection to ``host:port`` with a bounded connect timeout.

        Raises:
            DestinationConnectError: If the dial was refused, unreachable,
                could not be resolved or timed out
        """
        pass

    def get_stats(self) -> Dict[str, Any]:
        """Connection counters for health reporting."""
        return {}
