"""
Tests for the dependency injection container.

This module tests service registration, resolution, and lifetime management.
"""

from typing import Protocol

import pytest

from console_relay.application.container import (
    Container,
    ServiceLifetime,
    ServiceNotRegisteredException,
    ServiceResolutionException,
)


class IGreeter(Protocol):
    """Test service interface."""
    def greet(self) -> str: ...


class Greeter:
    """Test service implementation."""
    def greet(self) -> str:
        return "hello"


class TestContainer:
    """Test cases for the dependency injection container."""

    def test_register_and_resolve_singleton(self) -> None:
        container = Container()
        container.register(IGreeter, Greeter, ServiceLifetime.SINGLETON)

        first = container.resolve(IGreeter)
        second = container.resolve(IGreeter)

        assert isinstance(first, Greeter)
        assert first is second

    def test_register_and_resolve_transient(self) -> None:
        container = Container()
        container.register(IGreeter, Greeter, ServiceLifetime.TRANSIENT)

        assert container.resolve(IGreeter) is not container.resolve(IGreeter)

    def test_factory_function(self) -> None:
        container = Container()
        calls = []

        def factory() -> Greeter:
            calls.append(1)
            return Greeter()

        container.register(IGreeter, factory)
        container.resolve(IGreeter)
        container.resolve(IGreeter)

        assert calls == [1]

    def test_register_instance(self) -> None:
        container = Container()
        greeter = Greeter()

        container.register_instance(IGreeter, greeter)

        assert container.resolve(IGreeter) is greeter
        assert container.is_registered(IGreeter)
        assert container.get_registrations() == [IGreeter]

    def test_resolve_unregistered(self) -> None:
        container = Container()

        with pytest.raises(ServiceNotRegisteredException):
            container.resolve(IGreeter)
        assert container.try_resolve(IGreeter) is None

    def test_failing_factory(self) -> None:
        container = Container()

        def factory() -> Greeter:
            raise RuntimeError("boom")

        container.register(IGreeter, factory)

        with pytest.raises(ServiceResolutionException, match="boom"):
            container.resolve(IGreeter)
        assert container.try_resolve(IGreeter) is None
