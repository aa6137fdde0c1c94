"""
FastAPI application for the relay.
"""

from .app import create_app

__all__ = [
    "create_app",
]
