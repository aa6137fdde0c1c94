"""
Session registry.

Admits browser channels, runs one ``SessionBridge`` per channel and closes
every live session when the application stops.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional, Set

from loguru import logger

from ..domain.session import Target
from ..exceptions import SessionRejectedError
from ..interfaces.channel import IChannel
from ..interfaces.connector import IDestinationConnector
from ..interfaces.lifecycle import IComponent
from .bridge import GOING_AWAY, SessionBridge

TRY_AGAIN_LATER = 1013


class SessionRegistry(IComponent):
    """
    Tracks the live sessions of the relay.

    Sessions share nothing with each other; the registry only holds the
    read-only default target and the table of running bridges.
    """

    def __init__(
        self,
        connector: IDestinationConnector,
        default_target: Target,
        max_sessions: int = 0,
        encoding: Optional[str] = "utf-8",
        send_banner: bool = True,
        shutdown_grace_period: float = 5.0
    ):
        """
        Initialize the registry.

        Args:
            connector: Connector handed to every session
            default_target: Destination each new session dials first
            max_sessions: Maximum concurrent sessions, 0 for unlimited
            encoding: Text encoding between channel and destination
            send_banner: Send the welcome banner on new sessions
            shutdown_grace_period: Seconds to wait for sessions on stop
        """
        self._connector = connector
        self._default_target = default_target
        self._max_sessions = max_sessions
        self._encoding = encoding
        self._send_banner = send_banner
        self._grace_period = shutdown_grace_period

        self._sessions: Dict[str, SessionBridge] = {}
        self._runs: Dict[str, "asyncio.Task[None]"] = {}
        self._aborted: Set[str] = set()
        self._accepting = False
        self._started_at: Optional[float] = None
        self._total_sessions = 0
        self._rejected_sessions = 0

    @property
    def name(self) -> str:
        return "SessionRegistry"

    @property
    def accepting(self) -> bool:
        return self._accepting

    @property
    def default_target(self) -> Target:
        return self._default_target

    def __len__(self) -> int:
        return len(self._sessions)

    async def start(self) -> None:
        if self._accepting:
            return
        self._accepting = True
        self._started_at = time.time()
        logger.info(f"Session registry started, default target {self._default_target}")

    async def stop(self) -> None:
        """Stop accepting channels and close every live session."""
        if not self._accepting and not self._sessions:
            return
        self._accepting = False

        bridges = list(self._sessions.values())
        if not bridges:
            logger.info("Session registry stopped")
            return

        logger.info(f"Closing {len(bridges)} active session(s)")
        for bridge in bridges:
            bridge.shutdown()

        _, pending = await asyncio.wait(
            [asyncio.ensure_future(bridge.wait_closed()) for bridge in bridges],
            timeout=self._grace_period
        )

        if pending:
            logger.warning(
                f"{len(pending)} session(s) did not close within {self._grace_period:g}s, aborting")
            for waiter in pending:
                waiter.cancel()
            for bridge in bridges:
                if not bridge.closed:
                    self._abort(bridge)

        logger.info("Session registry stopped")

    async def serve(self, channel: IChannel) -> None:
        """
        Run a session for ``channel`` until it ends.

        Raises:
            SessionRejectedError: If the registry is stopped or full
        """
        self._admit(channel)

        bridge = SessionBridge(
            channel,
            self._connector,
            self._default_target,
            encoding=self._encoding,
            send_banner=self._send_banner
        )
        self._sessions[bridge.id] = bridge
        self._total_sessions += 1
        logger.debug(f"Registered session {bridge.id} ({len(self._sessions)} active)")

        run = asyncio.ensure_future(bridge.run())
        self._runs[bridge.id] = run
        try:
            await run
        except asyncio.CancelledError:
            if bridge.id not in self._aborted:
                raise
            logger.warning(f"Session {bridge.id} aborted during shutdown")
        finally:
            self._sessions.pop(bridge.id, None)
            self._runs.pop(bridge.id, None)
            self._aborted.discard(bridge.id)
            logger.debug(f"Unregistered session {bridge.id} ({len(self._sessions)} active)")

    def get_session(self, session_id: str) -> Optional[SessionBridge]:
        return self._sessions.get(session_id)

    def get_sessions(self) -> List[Dict[str, Any]]:
        return [bridge.snapshot() for bridge in self._sessions.values()]

    async def check_health(self) -> Dict[str, Any]:
        return {
            "healthy": self._accepting,
            "status": "running" if self._accepting else "stopped",
            "details": {
                "accepting": self._accepting,
                "active_sessions": len(self._sessions),
                "max_sessions": self._max_sessions,
                "total_sessions": self._total_sessions,
                "rejected_sessions": self._rejected_sessions,
                "default_target": str(self._default_target),
                "connector": self._connector.get_stats(),
                "uptime": time.time() - self._started_at if self._started_at else None,
            }
        }

    def _abort(self, bridge: SessionBridge) -> None:
        self._aborted.add(bridge.id)
        bridge.abort()
        run = self._runs.get(bridge.id)
        if run is not None:
            run.cancel()

    def _admit(self, channel: IChannel) -> None:
        if not self._accepting:
            self._rejected_sessions += 1
            raise SessionRejectedError("Relay is not accepting sessions", GOING_AWAY)

        if self._max_sessions and len(self._sessions) >= self._max_sessions:
            self._rejected_sessions += 1
            logger.warning(
                f"Rejecting channel from {channel.remote}: {self._max_sessions} sessions active")
            raise SessionRejectedError(
                f"Session limit of {self._max_sessions} reached", TRY_AGAIN_LATER)
