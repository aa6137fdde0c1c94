"""
Health check API endpoints.

This module provides health check endpoints for monitoring the relay and
its live sessions.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ....core.services.registry import SessionRegistry
from ....infrastructure.config.models import ApplicationConfig
from ..dependencies import get_config, get_registry

router = APIRouter()


class TargetInfo(BaseModel):
    host: str
    port: int


class SessionInfo(BaseModel):
    """Observable state of one relay session."""
    id: str
    client: str
    state: str
    target: TargetInfo
    created_at: float
    connected_at: Optional[float] = None
    bytes_to_destination: int = 0
    bytes_from_destination: int = 0
    messages_in: int = 0
    messages_out: int = 0


class SessionsResponse(BaseModel):
    count: int
    sessions: List[SessionInfo]


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/")
async def health_check(
    config: ApplicationConfig = Depends(get_config),
    registry: SessionRegistry = Depends(get_registry)
) -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Reports "healthy" while the registry accepts sessions and "stopping"
    once shutdown has begun.
    """
    health = await registry.check_health()
    return {
        "status": "healthy" if health["healthy"] else "stopping",
        "timestamp": _timestamp(),
        "application": {
            "name": config.name,
            "version": config.version,
            "environment": config.environment
        },
        "relay": health["details"]
    }


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """Liveness check; succeeds while the process serves requests."""
    return {
        "status": "alive",
        "timestamp": _timestamp()
    }


@router.get("/sessions", response_model=SessionsResponse)
async def list_sessions(
    registry: SessionRegistry = Depends(get_registry)
) -> SessionsResponse:
    """List live sessions with their state and byte counters."""
    sessions = [SessionInfo(**snapshot) for snapshot in registry.get_sessions()]
    return SessionsResponse(count=len(sessions), sessions=sessions)
