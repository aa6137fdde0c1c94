"""
Tests for the main entry point and CLI commands.
"""

from pathlib import Path
from typing import Any, Dict
from unittest.mock import AsyncMock, Mock, patch

import pytest
import uvicorn
import yaml
from typer.testing import CliRunner

from console_relay.infrastructure.config.models import ApplicationConfig
from console_relay.main import RelayServer, cli, main, run_application


def _mock_client_session(status: int, payload: Dict[str, Any]) -> Mock:
    mock_response = Mock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=payload)

    mock_session = Mock()
    mock_get_context = AsyncMock()
    mock_get_context.__aenter__ = AsyncMock(return_value=mock_response)
    mock_get_context.__aexit__ = AsyncMock(return_value=None)
    mock_session.get.return_value = mock_get_context

    mock_session_context = AsyncMock()
    mock_session_context.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session_context.__aexit__ = AsyncMock(return_value=None)
    return mock_session_context


class TestMainCLI:
    """CLI commands."""

    def setup_method(self) -> None:
        self.runner = CliRunner()

    def test_cli_help_command(self) -> None:
        result = self.runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "WebSocket to TCP relay" in result.output

    @patch('console_relay.main.ConfigLoader')
    @patch('console_relay.main.setup_logging')
    @patch('console_relay.main.run_application', new_callable=Mock)
    @patch('console_relay.main.asyncio.run')
    def test_start_command_basic(self, mock_run: Mock, mock_run_application: Mock,
                                 mock_setup_logging: Mock, mock_config_loader: Mock) -> None:
        mock_config_loader.return_value.load_config.return_value = ApplicationConfig()

        result = self.runner.invoke(cli, ["start"])

        assert result.exit_code == 0
        mock_config_loader.return_value.load_config.assert_called_once_with(None)
        mock_setup_logging.assert_called_once()
        mock_run.assert_called_once()

    @patch('console_relay.main.ConfigLoader')
    @patch('console_relay.main.setup_logging')
    @patch('console_relay.main.run_application', new_callable=Mock)
    @patch('console_relay.main.asyncio.run')
    def test_start_command_with_options(self, mock_run: Mock, mock_run_application: Mock,
                                        mock_setup_logging: Mock, mock_config_loader: Mock) -> None:
        mock_config_loader.return_value.load_config.return_value = ApplicationConfig()

        result = self.runner.invoke(cli, [
            "start",
            "--config", "relay.yaml",
            "--host", "127.0.0.1",
            "--port", "8081",
            "--target-host", "bbs.example.org",
            "--target-port", "23",
            "--debug"
        ])

        assert result.exit_code == 0
        mock_config_loader.return_value.load_config.assert_called_once_with("relay.yaml")
        config = mock_run_application.call_args[0][0]
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8081
        assert config.destination.host == "bbs.example.org"
        assert config.destination.port == 23
        assert config.debug is True
        assert config.logging.level == "DEBUG"

    @patch('console_relay.main.ConfigLoader')
    @patch('console_relay.main.setup_logging')
    @patch('console_relay.main.asyncio.run')
    def test_start_rejects_invalid_override(self, mock_run: Mock, mock_setup_logging: Mock,
                                            mock_config_loader: Mock) -> None:
        mock_config_loader.return_value.load_config.return_value = ApplicationConfig()

        result = self.runner.invoke(cli, ["start", "--target-port", "70000"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        mock_run.assert_not_called()

    @patch('console_relay.main.ConfigLoader')
    @patch('console_relay.main.setup_logging')
    @patch('console_relay.main.run_application', new_callable=Mock)
    @patch('console_relay.main.asyncio.run')
    def test_start_failure_exits(self, mock_run: Mock, mock_run_application: Mock,
                                 mock_setup_logging: Mock, mock_config_loader: Mock) -> None:
        mock_config_loader.return_value.load_config.return_value = ApplicationConfig()
        mock_run.side_effect = OSError("address already in use")

        result = self.runner.invoke(cli, ["start"])

        assert result.exit_code == 1

    def test_init_and_validate_config(self, tmp_path: Path) -> None:
        output = tmp_path / "relay.yaml"

        result = self.runner.invoke(cli, ["init-config", "--output", str(output)])
        assert result.exit_code == 0
        assert yaml.safe_load(output.read_text(encoding="utf-8"))["server"]["path"] == "/ws"

        result = self.runner.invoke(cli, ["validate-config", str(output)])
        assert result.exit_code == 0
        assert f"Configuration file {output} is valid" in result.output
        assert "Default target: localhost:9000" in result.output

    def test_validate_config_command_failure(self, tmp_path: Path) -> None:
        result = self.runner.invoke(cli, ["validate-config", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output

    @patch('console_relay.main.aiohttp.ClientSession')
    def test_health_check_command_success(self, mock_client_session: Mock) -> None:
        mock_client_session.return_value = _mock_client_session(
            200, {"status": "healthy", "relay": {"active_sessions": 2}})

        result = self.runner.invoke(cli, ["health-check", "--host", "localhost", "--port", "8080"])

        assert result.exit_code == 0
        assert "Relay is healthy, 2 active session(s)" in result.output

    @patch('console_relay.main.aiohttp.ClientSession')
    def test_health_check_command_stopping(self, mock_client_session: Mock) -> None:
        mock_client_session.return_value = _mock_client_session(200, {"status": "stopping"})

        result = self.runner.invoke(cli, ["health-check"])

        assert result.exit_code == 1

    @patch('console_relay.main.aiohttp.ClientSession')
    def test_health_check_command_failure(self, mock_client_session: Mock) -> None:
        mock_client_session.return_value = _mock_client_session(500, {})

        result = self.runner.invoke(cli, ["health-check"])

        assert result.exit_code == 1
        assert "Server returned status 500" in result.output


class TestApplicationRuntime:
    """Application runtime wiring."""

    @pytest.mark.asyncio
    @patch('console_relay.main.Container')
    @patch('console_relay.main.ApplicationStartup')
    @patch('console_relay.main.create_app')
    @patch('console_relay.main.RelayServer')
    async def test_run_application_success(self, mock_server_class: Mock, mock_create_app: Mock,
                                           mock_startup_class: Mock, mock_container_class: Mock) -> None:
        mock_startup = AsyncMock()
        mock_startup_class.return_value = mock_startup
        mock_server = AsyncMock()
        mock_server_class.return_value = mock_server
        config = ApplicationConfig(shutdown_grace_period=3.0)

        await run_application(config)

        mock_startup.configure_services.assert_awaited_once_with(config)
        mock_startup.start_application.assert_awaited_once()
        mock_create_app.assert_called_once_with(mock_container_class.return_value, config)
        mock_server.serve.assert_awaited_once()
        mock_startup.stop_application.assert_awaited()

        server_config = mock_server_class.call_args[0][0]
        assert server_config.port == config.server.port
        assert server_config.timeout_graceful_shutdown == 3

    @pytest.mark.asyncio
    @patch('console_relay.main.Container')
    @patch('console_relay.main.ApplicationStartup')
    async def test_run_application_startup_failure(self, mock_startup_class: Mock,
                                                   mock_container_class: Mock) -> None:
        mock_startup = AsyncMock()
        mock_startup.configure_services.side_effect = Exception("Startup failed")
        mock_startup_class.return_value = mock_startup

        with pytest.raises(Exception, match="Startup failed"):
            await run_application(ApplicationConfig())

        mock_startup.stop_application.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_server_stops_sessions_before_shutdown(self) -> None:
        order = []
        startup = Mock()
        startup.stop_application = AsyncMock(side_effect=lambda: order.append("sessions"))
        server = RelayServer(uvicorn.Config(app=Mock()), startup)

        async def base_shutdown(self, sockets=None):
            order.append("server")

        with patch.object(uvicorn.Server, "shutdown", base_shutdown):
            await server.shutdown()

        assert order == ["sessions", "server"]


class TestMainFunction:
    """Console script entry point."""

    @patch('console_relay.main.cli')
    def test_main_function(self, mock_cli: Mock) -> None:
        main()

        mock_cli.assert_called_once()
