"""
Main entry point for the Console Relay application.

This module provides the command-line interface and application startup logic.
"""

import asyncio
import sys
from typing import List, Optional

import aiohttp
import typer
import uvicorn
from loguru import logger

from .application.container import Container
from .application.startup import ApplicationStartup
from .infrastructure.config.loader import ConfigLoader
from .infrastructure.config.models import ApplicationConfig
from .infrastructure.logging.setup import setup_logging
from .presentation.api.app import create_app

# Create CLI application
cli = typer.Typer(
    name="console-relay",
    help="WebSocket to TCP relay for browser-based consoles"
)


class RelayServer(uvicorn.Server):
    """uvicorn server that closes relay sessions before dropping connections."""

    def __init__(self, config: uvicorn.Config, startup: ApplicationStartup):
        super().__init__(config)
        self._startup = startup

    async def shutdown(self, sockets: Optional[List] = None) -> None:
        # Sessions send their shutdown notice while the sockets are still open
        await self._startup.stop_application()
        await super().shutdown(sockets=sockets)


@cli.command()
def start(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="Listen address"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Listen port"
    ),
    target_host: Optional[str] = typer.Option(
        None, "--target-host", help="Default destination host"
    ),
    target_port: Optional[int] = typer.Option(
        None, "--target-port", help="Default destination port"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug mode"
    )
) -> None:
    """Start the relay server."""

    try:
        config = ConfigLoader().load_config(config_file)

        # Override with command line arguments
        if host:
            config.server.host = host
        if port:
            config.server.port = port
        if target_host:
            config.destination.host = target_host
        if target_port:
            config.destination.port = target_port
        if log_level:
            config.logging.level = log_level.upper()
        if debug:
            config.debug = True
            config.logging.level = "DEBUG"

        # Re-run validation on the overridden values
        config = ApplicationConfig.from_dict(config.to_dict())
    except (OSError, ValueError, TypeError) as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    setup_logging(config.logging)

    logger.info(f"Starting {config.name} v{config.version}")
    logger.info(f"Environment: {config.environment}")
    logger.info(
        f"Listening on ws://{config.server.host}:{config.server.port}{config.server.path}, "
        f"default target {config.destination.host}:{config.destination.port}")

    try:
        asyncio.run(run_application(config))
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception as e:
        logger.error(f"Application failed: {e}")
        sys.exit(1)


@cli.command()
def init_config(
    output: str = typer.Option(
        "config.yaml", "--output", "-o", help="Output configuration file"
    ),
    format: str = typer.Option(
        "yaml", "--format", "-f", help="Configuration format (yaml/json)"
    )
) -> None:
    """Generate a default configuration file."""

    config = ApplicationConfig()
    config_loader = ConfigLoader()

    try:
        config_loader.save_config(config, output, format)
        typer.echo(f"Default configuration saved to {output}")
    except Exception as e:
        typer.echo(f"Error saving configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
def validate_config(
    config_file: str = typer.Argument(...,
                                      help="Configuration file to validate")
) -> None:
    """Validate a configuration file."""

    config_loader = ConfigLoader()

    try:
        config = config_loader.load_config(config_file)
        typer.echo(f"Configuration file {config_file} is valid")
        typer.echo(f"Application: {config.name} v{config.version}")
        typer.echo(f"Listen: {config.server.host}:{config.server.port}{config.server.path}")
        typer.echo(f"Default target: {config.destination.host}:{config.destination.port}")
    except Exception as e:
        typer.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)


@cli.command()
def health_check(
    host: str = typer.Option("localhost", "--host", help="Server host"),
    port: int = typer.Option(8080, "--port", help="Server port"),
    timeout: float = typer.Option(10.0, "--timeout", help="Request timeout")
) -> None:
    """Check the health of a running relay."""

    async def check_health() -> bool:
        url = f"http://{host}:{port}/health/"
        timeout_config = aiohttp.ClientTimeout(total=timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout_config) as session:
                async with session.get(url) as response:
                    if response.status == 200:
                        data = await response.json()
                        sessions = data.get("relay", {}).get("active_sessions", 0)
                        typer.echo(
                            f"Relay is {data.get('status', 'unknown')}, {sessions} active session(s)")
                        return data.get("status") == "healthy"
                    else:
                        typer.echo(f"Server returned status {response.status}")
                        return False
        except Exception as e:
            typer.echo(f"Health check failed: {e}")
            return False

    result = asyncio.run(check_health())
    if not result:
        sys.exit(1)


async def run_application(config: ApplicationConfig) -> None:
    """
    Run the application with the given configuration.

    Args:
        config: Application configuration
    """
    container = Container()
    startup = ApplicationStartup(container)

    try:
        await startup.configure_services(config)
        await startup.start_application()

        app = create_app(container, config)

        server_config = uvicorn.Config(
            app=app,
            host=config.server.host,
            port=config.server.port,
            log_level=config.logging.level.lower(),
            access_log=config.debug,
            timeout_graceful_shutdown=int(max(1, config.shutdown_grace_period))
        )

        server = RelayServer(server_config, startup)
        await server.serve()

    except Exception as e:
        logger.error(f"Application error: {e}")
        raise
    finally:
        # Ensure cleanup
        await startup.stop_application()


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
