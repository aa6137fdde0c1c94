"""
Control command domain models.

Every inbound channel message is classified into exactly one of these
variants. They are transient values and never persisted.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ConnectCommand:
    """Switch the session to a new destination."""

    host: str
    """Destination host name or address."""

    port: int
    """Destination port."""


@dataclass(frozen=True)
class DisconnectCommand:
    """Close the current destination, if any."""


@dataclass(frozen=True)
class StatusCommand:
    """Report whether the session is connected."""


@dataclass(frozen=True)
class HelpCommand:
    """List the supported directives."""


@dataclass(frozen=True)
class DataCommand:
    """Opaque payload to forward to the destination."""

    payload: Union[str, bytes]
    """Message exactly as received from the channel."""


ControlCommand = Union[
    ConnectCommand,
    DisconnectCommand,
    StatusCommand,
    HelpCommand,
    DataCommand,
]
