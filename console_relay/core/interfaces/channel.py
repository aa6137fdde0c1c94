"""
Browser-side channel interface.

A channel is a message-framed, bidirectional transport. Closure and errors
surface as ``ChannelClosedError`` from ``receive``/``send`` instead of
separate close and error callbacks.
"""

from abc import ABC, abstractmethod
from typing import Union

ChannelMessage = Union[str, bytes]


class IChannel(ABC):
    """Interface for the message channel between relay and browser."""

    @property
    @abstractmethod
    def remote(self) -> str:
        """Printable address of the remote side."""
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Check if the channel can still send and receive."""
        pass

    @abstractmethod
    async def send(self, message: ChannelMessage) -> None:
        """
        Send one message.

        Raises:
            ChannelClosedError: If the channel is closed or the send failed
        """
        pass

    @abstractmethod
    async def receive(self) -> ChannelMessage:
        """
        Wait for the next inbound message.

        Raises:
            ChannelClosedError: When the remote side closes or the channel fails
        """
        pass

    @abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None:
        """Close the channel. Idempotent."""
        pass
