import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ConnectionStats:
    """Connection statistics information"""
    created_at: float = field(default_factory=time.time)
    connection_time: Optional[float] = None
    last_activity: float = field(default_factory=time.time)
    bytes_sent: int = 0
    bytes_received: int = 0
    messages_sent: int = 0
    messages_received: int = 0
    errors: int = 0

    def record_sent(self, size: int) -> None:
        self.bytes_sent += size
        self.messages_sent += 1
        self.update_activity()

    def record_received(self, size: int) -> None:
        self.bytes_received += size
        self.messages_received += 1
        self.update_activity()

    def update_activity(self) -> None:
        """Update the most recent activity time"""
        self.last_activity = time.time()

    def get_idle_time(self) -> float:
        """Get idle time (seconds)"""
        return time.time() - self.last_activity

    def get_uptime(self) -> Optional[float]:
        """Get connection uptime (seconds)"""
        if self.connection_time is None:
            return None
        return time.time() - self.connection_time

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to dictionary"""
        return {
            "created_at": self.created_at,
            "connection_time": self.connection_time,
            "last_activity": self.last_activity,
            "bytes_sent": self.bytes_sent,
            "bytes_received": self.bytes_received,
            "messages_sent": self.messages_sent,
            "messages_received": self.messages_received,
            "errors": self.errors,
            "idle_time": self.get_idle_time(),
            "uptime": self.get_uptime(),
        }


@dataclass
class ConnectorStats:
    """Global connector statistics"""
    total_connections: int = 0
    active_connections: int = 0
    failed_connections: int = 0
    start_time: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to dictionary"""
        return {
            "total_connections": self.total_connections,
            "active_connections": self.active_connections,
            "failed_connections": self.failed_connections,
            "start_time": self.start_time,
            "uptime": time.time() - self.start_time,
        }
