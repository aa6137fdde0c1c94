"""
Configuration models and data structures.

This module defines the configuration models used throughout the application,
providing type safety and validation for configuration values.
"""

import codecs
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ServerConfig:
    """Channel endpoint configuration."""
    host: str = "0.0.0.0"
    port: int = 8080
    path: str = "/ws"
    max_sessions: int = 100
    send_banner: bool = True
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class DestinationConfig:
    """Default destination and dial settings."""
    host: str = "localhost"
    port: int = 9000
    connect_timeout: float = 10.0
    idle_timeout: float = 0.0
    read_buffer_size: int = 8192
    encoding: str = "utf-8"
    nodelay: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_directory: str = "logs"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = False


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    # Basic application settings
    name: str = "Console Relay"
    version: str = "0.1.0"
    debug: bool = False
    environment: str = "production"

    # Component configurations
    server: ServerConfig = field(default_factory=ServerConfig)
    destination: DestinationConfig = field(default_factory=DestinationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Additional settings
    shutdown_grace_period: float = 5.0
    config_file_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate_ports()
        self._validate_timeouts()
        self._validate_server()

    def _validate_ports(self) -> None:
        """Validate port numbers."""
        ports = [
            ("Server port", self.server.port),
            ("Destination port", self.destination.port),
        ]

        for name, port in ports:
            if not (1 <= port <= 65535):
                raise ValueError(
                    f"{name} must be between 1 and 65535, got {port}")

    def _validate_timeouts(self) -> None:
        """Validate timeout values."""
        positive = [
            ("Destination connect timeout", self.destination.connect_timeout),
            ("Shutdown grace period", self.shutdown_grace_period),
        ]

        for name, timeout in positive:
            if timeout <= 0:
                raise ValueError(f"{name} must be positive, got {timeout}")

        if self.destination.idle_timeout < 0:
            raise ValueError(
                f"Destination idle timeout must not be negative, got {self.destination.idle_timeout}")

    def _validate_server(self) -> None:
        if not self.server.path.startswith("/"):
            raise ValueError(
                f"Server path must start with '/', got {self.server.path!r}")
        if self.server.max_sessions < 0:
            raise ValueError(
                f"Max sessions must not be negative, got {self.server.max_sessions}")
        if self.destination.read_buffer_size <= 0:
            raise ValueError(
                f"Read buffer size must be positive, got {self.destination.read_buffer_size}")
        if self.destination.encoding:
            try:
                codecs.lookup(self.destination.encoding)
            except LookupError:
                raise ValueError(
                    f"Unknown destination encoding: {self.destination.encoding!r}") from None

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary."""
        return cls(
            name=data.get('name', 'Console Relay'),
            version=data.get('version', '0.1.0'),
            debug=data.get('debug', False),
            environment=data.get('environment', 'production'),
            server=ServerConfig(**data.get('server', {})),
            destination=DestinationConfig(**data.get('destination', {})),
            logging=LoggingConfig(**data.get('logging', {})),
            shutdown_grace_period=data.get('shutdown_grace_period', 5.0),
            config_file_path=data.get('config_file_path'),
        )
