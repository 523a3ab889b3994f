"""Infrastructure layer - cross-cutting concerns.

The DI container lives in ``newsletter_store.infrastructure.container`` and is
imported from there directly, since it wires application services.
"""

from newsletter_store.infrastructure.config import Config, get_config
from newsletter_store.infrastructure.logging import setup_logging, get_logger
from newsletter_store.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from newsletter_store.infrastructure.tracing import setup_tracing, get_tracer, trace_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
