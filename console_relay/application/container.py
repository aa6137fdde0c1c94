"""
Dependency injection container for managing service instances.

This module provides a lightweight container that supports singleton and
transient service lifetimes and interface-based service registration.
"""

import inspect
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

from loguru import logger

T = TypeVar('T')


class ServiceLifetime(Enum):
    """Service lifetime management options."""
    SINGLETON = auto()  # Single instance shared across application
    TRANSIENT = auto()  # New instance created each time


class ServiceRegistration:
    """Registration information for a service."""

    def __init__(self,
                 service_type: Type[Any],
                 implementation: Union[Callable[[], Any], Any],
                 lifetime: ServiceLifetime = ServiceLifetime.SINGLETON):
        self.service_type = service_type
        self.implementation = implementation
        self.lifetime = lifetime
        self.instance: Optional[Any] = None

        # If implementation is already an instance, treat as singleton
        if not callable(implementation) or not (
                inspect.isclass(implementation) or inspect.isfunction(implementation)
                or inspect.ismethod(implementation)):
            self.instance = implementation
            self.lifetime = ServiceLifetime.SINGLETON


class IContainer(ABC):
    """Interface for dependency injection containers."""

    @abstractmethod
    def register(self,
                 service_type: Type[T],
                 implementation: Union[Callable[[], T], T],
                 lifetime: ServiceLifetime = ServiceLifetime.SINGLETON) -> None:
        """
        Register a service with the container.

        Args:
            service_type: Interface or base type
            implementation: Zero-argument factory or instance
            lifetime: Service lifetime management
        """
        pass

    @abstractmethod
    def register_instance(self, service_type: Type[T], instance: T) -> None:
        """Register a specific instance as a singleton."""
        pass

    @abstractmethod
    def resolve(self, service_type: Type[T]) -> T:
        """
        Resolve a service instance.

        Raises:
            ServiceNotRegisteredException: If service not registered
            ServiceResolutionException: If service cannot be created
        """
        pass

    @abstractmethod
    def try_resolve(self, service_type: Type[T]) -> Optional[T]:
        """Resolve a service instance, or return None if unavailable."""
        pass

    @abstractmethod
    def is_registered(self, service_type: Type[Any]) -> bool:
        """Check if a service type is registered."""
        pass


class ServiceNotRegisteredException(Exception):
    """Raised when trying to resolve an unregistered service."""
    pass


class ServiceResolutionException(Exception):
    """Raised when service resolution fails."""
    pass


class Container(IContainer):
    """Lightweight dependency injection container."""

    def __init__(self) -> None:
        self._services: Dict[Type[Any], ServiceRegistration] = {}

    def register(self,
                 service_type: Type[T],
                 implementation: Union[Callable[[], T], T],
                 lifetime: ServiceLifetime = ServiceLifetime.SINGLETON) -> None:
        """Register a service with the container."""
        registration = ServiceRegistration(service_type, implementation, lifetime)
        self._services[service_type] = registration
        logger.debug(
            f"Registered {service_type.__name__} with {registration.lifetime.name} lifetime")

    def register_instance(self, service_type: Type[T], instance: T) -> None:
        """Register a specific instance as a singleton."""
        self._services[service_type] = ServiceRegistration(
            service_type, instance, ServiceLifetime.SINGLETON)
        self._services[service_type].instance = instance
        logger.debug(f"Registered instance of {service_type.__name__}")

    def resolve(self, service_type: Type[T]) -> T:
        """Resolve a service instance."""
        if service_type not in self._services:
            raise ServiceNotRegisteredException(
                f"Service {service_type.__name__} is not registered")

        registration = self._services[service_type]

        if registration.lifetime == ServiceLifetime.SINGLETON and registration.instance is not None:
            return registration.instance  # type: ignore[no-any-return]

        try:
            instance = registration.implementation()
        except Exception as e:
            raise ServiceResolutionException(
                f"Failed to resolve {service_type.__name__}: {str(e)}") from e

        if registration.lifetime == ServiceLifetime.SINGLETON:
            registration.instance = instance

        return instance  # type: ignore[no-any-return]

    def try_resolve(self, service_type: Type[T]) -> Optional[T]:
        """Try to resolve a service instance without raising exceptions."""
        try:
            return self.resolve(service_type)
        except (ServiceNotRegisteredException, ServiceResolutionException):
            return None

    def is_registered(self, service_type: Type[Any]) -> bool:
        """Check if a service type is registered."""
        return service_type in self._services

    def get_registrations(self) -> List[Type[Any]]:
        """Get all registered service types."""
        return list(self._services.keys())
