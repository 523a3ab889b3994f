"""OpenTelemetry tracing for the newsletter store.

Span names are prefixed with ``newsletter_store.`` and attributes live under
the ``newsletter.`` namespace:

    newsletter.engine             native | emulated
    newsletter.environment        execution mode at engine selection
    newsletter.statement.kind     StatementKind value of an emulated statement
    newsletter.statement.rows     rows returned
    newsletter.statement.affected rows inserted, updated or deleted
    newsletter.transaction.depth  1 for the outermost unit of work
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

SPAN_PREFIX = "newsletter_store."
ATTRIBUTE_PREFIX = "newsletter."

_tracer: trace.Tracer | None = None


def setup_tracing(
    service_name: str = "newsletter_store",
    otlp_endpoint: str | None = None,
) -> trace.Tracer:
    """
    Install a tracer provider exporting to an OTLP collector.

    Args:
        service_name: Name of the service for tracing
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4317")

    Returns:
        Configured tracer instance
    """
    global _tracer

    from newsletter_store import __version__

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": service_name,
                "service.version": __version__,
            }
        )
    )
    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the global tracer instance."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("newsletter_store")
    return _tracer


def set_attributes(span: trace.Span, attributes: dict[str, Any]) -> None:
    """Set namespaced attributes on a span. None values are skipped."""
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(ATTRIBUTE_PREFIX + key, value)


@contextmanager
def trace_span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """
    Open a span named ``newsletter_store.<name>``.

    Args:
        name: Operation name without the prefix
        attributes: Attributes set under the ``newsletter.`` namespace

    Yields:
        The created span
    """
    with get_tracer().start_as_current_span(SPAN_PREFIX + name) as span:
        if attributes:
            set_attributes(span, attributes)
        yield span


@contextmanager
def statement_span(kind: str, engine: str) -> Generator[trace.Span, None, None]:
    """Span around one statement execution, tagged with its kind and engine."""
    with trace_span("statement", {"statement.kind": kind, "engine": engine}) as span:
        yield span
