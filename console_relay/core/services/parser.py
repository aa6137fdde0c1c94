"""
Control-command parser.

Classifies one inbound channel message as a relay directive or as opaque
payload. Messages starting with ``/`` are reserved for directives; there is
no escape for payload that happens to begin with one of the directive names.
"""

from ..domain.commands import (
    ConnectCommand,
    ControlCommand,
    DataCommand,
    DisconnectCommand,
    HelpCommand,
    StatusCommand,
)
from ..domain.notices import CONNECT_USAGE
from ..exceptions import CommandUsageError
from ..interfaces.channel import ChannelMessage

COMMAND_PREFIX = "/"
CONNECT = "/connect"
DISCONNECT = "/disconnect"
STATUS = "/status"
HELP = "/help"


def parse_command(message: ChannelMessage) -> ControlCommand:
    """
    Classify a single channel message.

    Args:
        message: Text or binary message exactly as received

    Returns:
        The matching command variant; anything that is not a directive becomes
        ``DataCommand`` carrying the original message

    Raises:
        CommandUsageError: If ``/connect`` has the wrong number of arguments
            or a port that is not a non-negative integer
    """
    if isinstance(message, bytes):
        if not message.startswith(COMMAND_PREFIX.encode()):
            return DataCommand(payload=message)
        text = message.decode("utf-8", errors="replace")
    else:
        text = message

    if not text.startswith(COMMAND_PREFIX):
        return DataCommand(payload=message)

    tokens = text.split()
    if tokens and tokens[0] == CONNECT:
        return _parse_connect(tokens[1:])
    if text.startswith(DISCONNECT):
        return DisconnectCommand()
    if text.startswith(STATUS):
        return StatusCommand()
    if text.startswith(HELP):
        return HelpCommand()

    return DataCommand(payload=message)


def _parse_connect(args: list) -> ConnectCommand:
    if len(args) != 2:
        raise CommandUsageError(
            f"{CONNECT} takes exactly 2 arguments, got {len(args)}", CONNECT_USAGE)

    host, port_text = args
    if not (port_text.isascii() and port_text.isdigit()):
        raise CommandUsageError(
            f"Invalid port: {port_text!r}", CONNECT_USAGE)

    return ConnectCommand(host=host, port=int(port_text))
