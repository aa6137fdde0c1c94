"""
Tests for configuration models.
"""

import pytest

from console_relay.infrastructure.config.models import (
    ApplicationConfig,
    DestinationConfig,
    LoggingConfig,
    ServerConfig,
)


class TestApplicationConfig:
    """Defaults, validation and dictionary conversion."""

    def test_defaults(self) -> None:
        config = ApplicationConfig()

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 8080
        assert config.server.path == "/ws"
        assert config.server.max_sessions == 100
        assert config.server.allowed_origins == ["*"]
        assert config.destination.host == "localhost"
        assert config.destination.port == 9000
        assert config.destination.connect_timeout == 10.0
        assert config.destination.idle_timeout == 0.0
        assert config.destination.encoding == "utf-8"
        assert config.logging.level == "INFO"
        assert config.shutdown_grace_period == 5.0

    @pytest.mark.parametrize("kwargs,message", [
        ({"server": ServerConfig(port=0)}, "Server port"),
        ({"server": ServerConfig(port=70000)}, "Server port"),
        ({"destination": DestinationConfig(port=65536)}, "Destination port"),
        ({"destination": DestinationConfig(connect_timeout=0)}, "connect timeout"),
        ({"destination": DestinationConfig(idle_timeout=-1)}, "idle timeout"),
        ({"destination": DestinationConfig(read_buffer_size=0)}, "Read buffer"),
        ({"destination": DestinationConfig(encoding="no-such-codec")}, "encoding"),
        ({"server": ServerConfig(path="ws")}, "path"),
        ({"server": ServerConfig(max_sessions=-1)}, "Max sessions"),
        ({"shutdown_grace_period": 0}, "grace period"),
    ])
    def test_validation(self, kwargs, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            ApplicationConfig(**kwargs)

    def test_empty_encoding_means_binary(self) -> None:
        config = ApplicationConfig(destination=DestinationConfig(encoding=""))

        assert config.destination.encoding == ""

    def test_from_dict_partial(self) -> None:
        config = ApplicationConfig.from_dict({
            "server": {"port": 8090},
            "destination": {"host": "10.1.1.1", "port": 23},
            "logging": {"file_enabled": True},
        })

        assert config.server.port == 8090
        assert config.server.path == "/ws"
        assert config.destination.host == "10.1.1.1"
        assert config.logging.file_enabled is True

    def test_from_dict_validates(self) -> None:
        with pytest.raises(ValueError):
            ApplicationConfig.from_dict({"destination": {"port": 0}})

    def test_from_dict_rejects_unknown_keys(self) -> None:
        with pytest.raises(TypeError):
            ApplicationConfig.from_dict({"server": {"listen": 1}})

    def test_to_dict_from_dict(self) -> None:
        config = ApplicationConfig(
            debug=True,
            logging=LoggingConfig(level="DEBUG"),
            destination=DestinationConfig(host="bbs.example.org", port=23, idle_timeout=120)
        )

        assert ApplicationConfig.from_dict(config.to_dict()) == config
