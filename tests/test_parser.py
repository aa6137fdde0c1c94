"""
Tests for the control-command parser.
"""

import pytest

from console_relay.core.domain.commands import (
    ConnectCommand,
    DataCommand,
    DisconnectCommand,
    HelpCommand,
    StatusCommand,
)
from console_relay.core.exceptions import CommandUsageError
from console_relay.core.services.parser import parse_command


class TestParseCommand:
    """Classification of channel messages."""

    def test_connect(self) -> None:
        assert parse_command("/connect example.com 23") == ConnectCommand("example.com", 23)

    def test_connect_tolerates_extra_whitespace(self) -> None:
        assert parse_command("/connect   10.0.0.1\t2323\r\n") == ConnectCommand("10.0.0.1", 2323)

    def test_connect_port_zero_is_accepted(self) -> None:
        # Out-of-range ports are left to the dial to reject
        assert parse_command("/connect host 0") == ConnectCommand("host", 0)

    @pytest.mark.parametrize("message", [
        "/connect",
        "/connect host",
        "/connect host 23 extra",
        "/connect host abc",
        "/connect host -1",
        "/connect host 2.5",
    ])
    def test_connect_usage_errors(self, message: str) -> None:
        with pytest.raises(CommandUsageError) as exc_info:
            parse_command(message)

        assert exc_info.value.usage == "/connect <host> <port>"

    def test_simple_directives(self) -> None:
        assert parse_command("/disconnect") == DisconnectCommand()
        assert parse_command("/status") == StatusCommand()
        assert parse_command("/help") == HelpCommand()

    def test_directives_match_by_prefix(self) -> None:
        assert parse_command("/disconnect now") == DisconnectCommand()
        assert parse_command("/statusx") == StatusCommand()
        assert parse_command("/help me\n") == HelpCommand()

    def test_connect_requires_exact_token(self) -> None:
        assert parse_command("/connectx host 23") == DataCommand("/connectx host 23")

    def test_plain_text_is_data(self) -> None:
        assert parse_command("ls -la\n") == DataCommand("ls -la\n")

    def test_unknown_directive_is_data(self) -> None:
        assert parse_command("/quit") == DataCommand("/quit")

    def test_leading_whitespace_is_data(self) -> None:
        assert parse_command(" /status") == DataCommand(" /status")

    def test_empty_message_is_data(self) -> None:
        assert parse_command("") == DataCommand("")

    def test_binary_data_passes_through(self) -> None:
        payload = b"\xff\xfe\x00"
        assert parse_command(payload) == DataCommand(payload)

    def test_binary_directive(self) -> None:
        assert parse_command(b"/status") == StatusCommand()
        assert parse_command(b"/connect host 23") == ConnectCommand("host", 23)

    def test_binary_unknown_directive_keeps_bytes(self) -> None:
        payload = b"/\xff\xfe"
        assert parse_command(payload) == DataCommand(payload)
