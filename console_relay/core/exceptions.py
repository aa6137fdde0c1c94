"""
Exception hierarchy for the relay.

Destination-side failures are always caught inside the owning session and
turned into notices; channel-side failures end the owning session only.
"""

from enum import Enum
from typing import Optional


class ErrorLevel(Enum):
    """Error level definitions"""
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class RelayError(Exception):
    """Base class for relay exceptions"""

    def __init__(self, message: str, error_code: Optional[str] = "", level: ErrorLevel = ErrorLevel.ERROR):
        self.message = message
        self.error_code = error_code
        self.level = level
        super().__init__(self.message)


class DestinationError(RelayError):
    """Failure on the destination byte stream"""

    def __init__(self, message: str, error_code: Optional[str] = "DESTINATION_ERROR"):
        super().__init__(message, error_code, ErrorLevel.WARNING)


class ConnectFailure(Enum):
    """Reason a destination dial failed"""
    REFUSED = "refused"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    DNS = "dns"
    ERROR = "error"


class DestinationConnectError(DestinationError):
    """Dial to a destination failed"""

    def __init__(self, message: str, kind: ConnectFailure = ConnectFailure.ERROR,
                 cause: Optional[BaseException] = None):
        super().__init__(message, "DESTINATION_CONNECT_ERROR")
        self.kind = kind
        self.cause = cause


class DestinationTimeoutError(DestinationError):
    """Established destination stayed idle past the inactivity timeout"""

    def __init__(self, message: str, idle_timeout: float):
        super().__init__(message, "DESTINATION_TIMEOUT")
        self.idle_timeout = idle_timeout


class DestinationClosedError(DestinationError):
    """Operation on a destination that is closed or was reset"""

    def __init__(self, message: str = "Destination connection is closed"):
        super().__init__(message, "DESTINATION_CLOSED")


class ChannelClosedError(RelayError):
    """Browser-side channel closed or failed"""

    def __init__(self, message: str = "Channel closed", code: int = 1000):
        super().__init__(message, "CHANNEL_CLOSED", ErrorLevel.INFO)
        self.code = code


class CommandUsageError(RelayError):
    """Control directive with malformed arguments"""

    def __init__(self, message: str, usage: str):
        super().__init__(message, "COMMAND_USAGE", ErrorLevel.INFO)
        self.usage = usage


class InvalidTransitionError(RelayError, ValueError):
    """State machine received a trigger that is not valid in its state"""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_TRANSITION", ErrorLevel.CRITICAL)


class SessionRejectedError(RelayError):
    """Registry refused a new channel"""

    def __init__(self, message: str, close_code: int = 1013):
        super().__init__(message, "SESSION_REJECTED", ErrorLevel.WARNING)
        self.close_code = close_code
