"""
Domain models representing the core relay entities and value objects.

This module contains pure domain models without external dependencies.
"""

from .commands import (
    ConnectCommand,
    ControlCommand,
    DataCommand,
    DisconnectCommand,
    HelpCommand,
    StatusCommand,
)
from .session import Session, SessionState, Target, Trigger, transition

__all__ = [
    "ConnectCommand",
    "ControlCommand",
    "DataCommand",
    "DisconnectCommand",
    "HelpCommand",
    "StatusCommand",
    "Session",
    "SessionState",
    "Target",
    "Trigger",
    "transition",
]
