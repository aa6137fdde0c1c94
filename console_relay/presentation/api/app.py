"""
FastAPI application factory and configuration.

This module creates and configures the FastAPI application with
middleware and route registration.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ...application.container import IContainer
from ...core.services.registry import SessionRegistry
from ...infrastructure.config.models import ApplicationConfig
from .routers import health, websocket


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Opens the session registry for new channels on startup and closes every
    live session on shutdown. Both steps are no-ops when the startup process
    already did them.
    """
    logger.info("Application starting up...")
    registry = app.state.container.try_resolve(SessionRegistry)
    if registry is not None:
        await registry.start()

    yield

    logger.info("Application shutting down...")
    if registry is not None:
        await registry.stop()


def create_app(container: IContainer, config: ApplicationConfig) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Dependency injection container
        config: Application configuration

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=config.name,
        version=config.version,
        description="WebSocket to TCP relay for browser-based consoles",
        debug=config.debug,
        lifespan=lifespan
    )

    # Store container and config in app state
    app.state.container = container
    app.state.config = config

    _configure_middleware(app, config)
    _register_routes(app, config)

    logger.info(f"FastAPI application created: {config.name} v{config.version}")
    return app


def _configure_middleware(app: FastAPI, config: ApplicationConfig) -> None:
    """Configure application middleware."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.debug("Middleware configured")


def _register_routes(app: FastAPI, config: ApplicationConfig) -> None:
    """Register API routes."""
    app.include_router(
        health.router,
        prefix="/health",
        tags=["health"]
    )

    app.add_api_websocket_route(config.server.path, websocket.relay_endpoint)

    @app.get("/", tags=["root"])
    async def root() -> Dict[str, Any]:
        """Root endpoint with basic application information."""
        return {
            "name": app.title,
            "version": app.version,
            "status": "running",
            "websocket_path": config.server.path,
            "default_target": f"{config.destination.host}:{config.destination.port}",
            "health_url": "/health"
        }

    logger.debug("Routes registered")
