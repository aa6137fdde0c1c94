"""
Configuration management infrastructure.

This module provides configuration loading and validation for the relay.
"""

from .models import ApplicationConfig, DestinationConfig, LoggingConfig, ServerConfig
from .loader import ConfigLoader

__all__ = [
    "ApplicationConfig",
    "DestinationConfig",
    "LoggingConfig",
    "ServerConfig",
    "ConfigLoader",
]
