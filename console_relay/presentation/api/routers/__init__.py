"""
API routers.
"""

from . import health, websocket

__all__ = [
    "health",
    "websocket",
]
