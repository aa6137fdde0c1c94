"""
Console Relay - WebSocket to TCP bridge for browser-based consoles.

Each browser WebSocket gets its own session that is bridged to at most one
TCP destination at a time. Messages starting with ``/`` are relay
directives; everything else is forwarded to the destination unchanged.
"""

__version__ = "0.1.0"

# Public API exports
from .core.interfaces.lifecycle import IStartable, IStoppable, IHealthCheckable
from .core.interfaces.channel import IChannel
from .core.interfaces.connector import IDestination, IDestinationConnector
from .core.domain.session import Session, SessionState, Target
from .core.services.bridge import SessionBridge
from .core.services.registry import SessionRegistry
from .application.container import Container, IContainer

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
    "Container",
    "IContainer",
]
