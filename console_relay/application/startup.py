"""
Application startup and configuration logic.

This module handles the initialization and configuration of all application
components, including dependency registration and service startup.
"""

from typing import List

from loguru import logger

from .container import IContainer, ServiceLifetime
from ..core.domain.session import Target
from ..core.interfaces.connector import IDestinationConnector
from ..core.interfaces.lifecycle import IComponent, IStartable, IStoppable
from ..core.services.registry import SessionRegistry
from ..infrastructure.config.models import ApplicationConfig
from ..infrastructure.connectors.tcp import TCPConnector


class ApplicationStartup:
    """
    Manages application startup and service configuration.

    This class is responsible for registering services with the DI container
    and managing the startup and shutdown sequence.
    """

    def __init__(self, container: IContainer) -> None:
        self._container = container
        self._started_components: List[IComponent] = []
        self._startup_order: List[type] = [
            SessionRegistry,
        ]

    async def configure_services(self, config: ApplicationConfig) -> None:
        """
        Configure and register all application services.

        Args:
            config: Application configuration
        """
        logger.info("Configuring application services...")

        self._container.register_instance(ApplicationConfig, config)

        connector = TCPConnector(config.destination)
        self._container.register_instance(
            IDestinationConnector, connector)  # type: ignore[type-abstract]

        def registry_factory() -> SessionRegistry:
            return SessionRegistry(
                self._container.resolve(IDestinationConnector),  # type: ignore[type-abstract]
                Target(config.destination.host, config.destination.port),
                max_sessions=config.server.max_sessions,
                encoding=config.destination.encoding,
                send_banner=config.server.send_banner,
                shutdown_grace_period=config.shutdown_grace_period
            )

        self._container.register(
            SessionRegistry, registry_factory, ServiceLifetime.SINGLETON)

        logger.info("Service configuration completed")

    async def start_application(self) -> None:
        """Start all application components in order."""
        logger.info("Starting application components...")

        for service_type in self._startup_order:
            component = self._container.try_resolve(service_type)
            if component is None or not isinstance(component, IStartable):
                continue

            try:
                logger.debug(f"Starting component: {service_type.__name__}")
                await component.start()
            except Exception as e:
                logger.error(f"Failed to start component {service_type.__name__}: {e}")
                await self.stop_application()
                raise

            if isinstance(component, IComponent):
                self._started_components.append(component)
            logger.info(f"Started component: {service_type.__name__}")

        logger.info("Application startup completed successfully")

    async def stop_application(self) -> None:
        """Stop all started components in reverse order. Safe to call twice."""
        if not self._started_components:
            return
        logger.info("Stopping application components...")

        for component in reversed(self._started_components):
            try:
                if isinstance(component, IStoppable):
                    logger.debug(f"Stopping component: {component.name}")
                    await component.stop()
                    logger.info(f"Stopped component: {component.name}")
            except Exception as e:
                logger.error(f"Error stopping component {component.name}: {e}")
                # Continue stopping other components

        self._started_components.clear()
        logger.info("Application shutdown completed")

    @property
    def started_components(self) -> List[IComponent]:
        return list(self._started_components)
