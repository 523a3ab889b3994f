"""Dependency injection container."""

from __future__ import annotations

from newsletter_store.application.engine_selector import EngineSelector
from newsletter_store.application.newsletter_repository import NewsletterRepository
from newsletter_store.infrastructure.config import Config, get_config
from newsletter_store.infrastructure.logging import get_logger, setup_logging
from newsletter_store.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from newsletter_store.infrastructure.tracing import setup_tracing
from newsletter_store.ports.inbound.connection import Connection

logger = get_logger(__name__)


class Container:
    """Wires configuration, the engine selector and the repository.

    The container owns the process's ``EngineSelector``; callers get the
    connection from it instead of from module state.
    """

    def __init__(
        self,
        config: Config | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._config = config
        self._metrics = metrics
        self._selector: EngineSelector | None = None
        self._repository: NewsletterRepository | None = None

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = get_config()
        return self._config

    @property
    def metrics(self) -> MetricsRegistry:
        if self._metrics is None:
            self._metrics = get_metrics()
        return self._metrics

    @property
    def selector(self) -> EngineSelector:
        if self._selector is None:
            self._selector = EngineSelector(config=self.config, metrics=self.metrics)
        return self._selector

    def connection(self) -> Connection:
        return self.selector.acquire()

    def repository(self) -> NewsletterRepository:
        if self._repository is None:
            self._repository = NewsletterRepository(self.connection())
        return self._repository

    def setup_observability(self) -> None:
        """Configure logging, tracing and the metrics endpoint from config."""
        observability = self.config.observability
        setup_logging(observability.log_level, observability.log_format)
        if observability.otel_endpoint:
            setup_tracing(observability.otel_service_name, observability.otel_endpoint)
        if observability.metrics_port is not None:
            self._metrics = setup_metrics(observability.metrics_port)
        logger.info("container_initialized", environment=self.config.environment)

    def clear(self) -> None:
        """Release the connection and drop built services."""
        if self._selector is not None:
            self._selector.release()
        self._selector = None
        self._repository = None


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get the global container instance."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    if _container is not None:
        _container.clear()
    _container = None
