"""
Human-readable notices sent back over the channel.

Notices are plain text terminated with CRLF so terminal-style front ends
render each one on its own line.
"""

from typing import Optional

from ..exceptions import ConnectFailure, DestinationConnectError, DestinationError, DestinationTimeoutError
from .session import Target

EOL = "\r\n"

CONNECT_USAGE = "/connect <host> <port>"

BANNER = (
    "Console Relay - WebSocket to TCP bridge" + EOL
    + "Type /help for available commands" + EOL
)

HELP = (
    "Available commands:" + EOL
    + f"  {CONNECT_USAGE} - Connect to TCP server" + EOL
    + "  /disconnect - Disconnect from TCP server" + EOL
    + "  /status - Show connection status" + EOL
    + "  /help - Show this help" + EOL
)


def connecting(target: Target) -> str:
    return f"Connecting to {target}...{EOL}"


def connected(target: Target) -> str:
    return f"Connected to {target}{EOL}"


def connect_failed(target: Target, error: DestinationError) -> str:
    if isinstance(error, DestinationConnectError) and error.kind is ConnectFailure.TIMEOUT:
        return f"Connection to {target} timed out{EOL}"
    return f"Connection to {target} failed: {error.message}{EOL}"


def destination_lost(target: Target, error: Optional[DestinationError]) -> str:
    """Notice for an established destination that went away."""
    if error is None:
        return f"Connection to {target} closed{EOL}"
    if isinstance(error, DestinationTimeoutError):
        return f"Connection to {target} timed out after {error.idle_timeout:g}s of inactivity{EOL}"
    return f"Connection to {target} lost: {error.message}{EOL}"


def disconnected(target: Optional[Target]) -> str:
    if target is None:
        return f"Disconnected (no active connection){EOL}"
    return f"Disconnected from {target}{EOL}"


def status(is_connected: bool) -> str:
    return f"Status: {'Connected' if is_connected else 'Disconnected'}{EOL}"


def not_connected() -> str:
    return f"Not connected to TCP server. Use {CONNECT_USAGE}{EOL}"


def usage(text: str) -> str:
    return f"Usage: {text}{EOL}"


def shutting_down() -> str:
    return f"Relay is shutting down{EOL}"
