"""
Core relay services: command parsing, session bridging and the session registry.
"""

from .parser import parse_command
from .bridge import SessionBridge
from .registry import SessionRegistry

__all__ = [
    "parse_command",
    "SessionBridge",
    "SessionRegistry",
]
