"""
Core interfaces defining contracts for the relay components.

These interfaces decouple the session bridge from the concrete channel and
destination implementations.
"""

from .lifecycle import IStartable, IStoppable, IHealthCheckable, IComponent
from .channel import IChannel, ChannelMessage
from .connector import IDestination, IDestinationConnector

__all__ = [
    "IStartable",
    "IStoppable",
    "IHealthCheckable",
    "IComponent",
    "IChannel",
    "ChannelMessage",
    "IDestination",
    "IDestinationConnector",
]
