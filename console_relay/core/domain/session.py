"""
Session domain model and state machine.

A session is the relay's per-channel unit of state. Its lifecycle is driven
through the pure ``transition`` function so that the allowed moves can be
checked without any I/O.
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional, Tuple

from ..exceptions import InvalidTransitionError


class SessionState(Enum):
    """Session connection state."""
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    CLOSED = "closed"


class Trigger(Enum):
    """Things that move a session between states."""
    DIAL_STARTED = auto()          # Dial to a target begins
    DIAL_SUCCEEDED = auto()        # Destination connection established
    DIAL_FAILED = auto()           # Dial refused, unreachable or timed out
    DESTINATION_LOST = auto()      # Established destination closed, errored or idled out
    DISCONNECT_REQUESTED = auto()  # Explicit /disconnect
    CHANNEL_CLOSED = auto()        # Browser side went away or shutdown


_TRANSITIONS: Dict[Tuple[SessionState, Trigger], SessionState] = {
    (SessionState.DISCONNECTED, Trigger.DIAL_STARTED): SessionState.CONNECTING,
    (SessionState.CONNECTING, Trigger.DIAL_STARTED): SessionState.CONNECTING,
    (SessionState.CONNECTED, Trigger.DIAL_STARTED): SessionState.CONNECTING,
    (SessionState.CONNECTING, Trigger.DIAL_SUCCEEDED): SessionState.CONNECTED,
    (SessionState.CONNECTING, Trigger.DIAL_FAILED): SessionState.DISCONNECTED,
    (SessionState.CONNECTED, Trigger.DESTINATION_LOST): SessionState.DISCONNECTED,
    (SessionState.CONNECTING, Trigger.DISCONNECT_REQUESTED): SessionState.DISCONNECTED,
    (SessionState.CONNECTED, Trigger.DISCONNECT_REQUESTED): SessionState.DISCONNECTED,
    (SessionState.DISCONNECTED, Trigger.DISCONNECT_REQUESTED): SessionState.DISCONNECTED,
}


def transition(state: SessionState, trigger: Trigger) -> SessionState:
    """
    Compute the next session state.

    ``CLOSED`` is terminal and absorbs every trigger; ``CHANNEL_CLOSED`` leads
    to ``CLOSED`` from anywhere.

    Args:
        state: Current state
        trigger: What happened

    Returns:
        The next state

    Raises:
        InvalidTransitionError: If the trigger is not valid in ``state``
    """
    if state is SessionState.CLOSED or trigger is Trigger.CHANNEL_CLOSED:
        return SessionState.CLOSED

    try:
        return _TRANSITIONS[(state, trigger)]
    except KeyError:
        raise InvalidTransitionError(
            f"Cannot apply {trigger.name} in state {state.name}") from None


@dataclass(frozen=True)
class Target:
    """Destination address."""
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass
class Session:
    """
    Per-channel relay state.

    The channel and destination handles belong to the owning bridge; this
    value carries what is observable about the session.
    """

    target: Target
    client: str = "unknown"
    state: SessionState = SessionState.DISCONNECTED
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)
    connected_at: Optional[float] = None
    bytes_to_destination: int = 0
    bytes_from_destination: int = 0
    messages_in: int = 0
    messages_out: int = 0

    def apply(self, trigger: Trigger) -> SessionState:
        """Advance the state with ``trigger`` and return the new state."""
        new_state = transition(self.state, trigger)
        if new_state is SessionState.CONNECTED:
            self.connected_at = time.time()
        elif new_state is not self.state:
            self.connected_at = None
        self.state = new_state
        return new_state

    @property
    def is_connected(self) -> bool:
        return self.state is SessionState.CONNECTED

    def to_dict(self) -> Dict[str, Any]:
        """Convert session to dictionary"""
        return {
            "id": self.id,
            "client": self.client,
            "state": self.state.value,
            "target": {"host": self.target.host, "port": self.target.port},
            "created_at": self.created_at,
            "connected_at": self.connected_at,
            "bytes_to_destination": self.bytes_to_destination,
            "bytes_from_destination": self.bytes_from_destination,
            "messages_in": self.messages_in,
            "messages_out": self.messages_out,
        }
