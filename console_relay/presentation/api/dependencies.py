"""
FastAPI dependency injection utilities.

This module provides dependency functions for FastAPI routes to access
application services. ``HTTPConnection`` is used instead of ``Request`` so
the same dependencies serve HTTP and WebSocket routes.
"""

from fastapi import HTTPException, status
from starlette.requests import HTTPConnection

from ...application.container import IContainer
from ...core.services.registry import SessionRegistry
from ...infrastructure.config.models import ApplicationConfig


def get_container(connection: HTTPConnection) -> IContainer:
    """
    Get the dependency injection container from the connection.

    Raises:
        HTTPException: If container is not available
    """
    if not hasattr(connection.app.state, "container"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application container not available"
        )

    return connection.app.state.container  # type: ignore[no-any-return]


def get_config(connection: HTTPConnection) -> ApplicationConfig:
    """
    Get the application configuration from the connection.

    Raises:
        HTTPException: If configuration is not available
    """
    if not hasattr(connection.app.state, "config"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application configuration not available"
        )

    return connection.app.state.config  # type: ignore[no-any-return]


def get_registry(connection: HTTPConnection) -> SessionRegistry:
    """Resolve the session registry."""
    registry = get_container(connection).try_resolve(SessionRegistry)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session registry not available"
        )
    return registry
