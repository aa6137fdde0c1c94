"""
Core module containing the relay state machine, domain models, and interfaces.

This module is independent of FastAPI and of the concrete TCP connector.
"""

from .interfaces.lifecycle import IStartable, IStoppable, IHealthCheckable
from .interfaces.channel import IChannel
from .interfaces.connector import IDestination, IDestinationConnector
from .domain.session import Session, SessionState, Target
from .services.bridge import SessionBridge
from .services.registry import SessionRegistry

__all__ = [
    "IStartable",
    "IStoppable",
    "IHealthCheckable",
    "IChannel",
    "IDestination",
    "IDestinationConnector",
    "Session",
    "SessionState",
    "Target",
    "SessionBridge",
    "SessionRegistry",
]
