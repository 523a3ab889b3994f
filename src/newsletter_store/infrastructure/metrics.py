"""Prometheus metrics for the newsletter store."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all newsletter store metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Statement metrics
        self.statements_total = Counter(
            "newsletter_statements_total",
            "Total number of statements executed by the emulator",
            ["kind"],
            registry=self._registry,
        )

        self.statement_latency_seconds = Histogram(
            "newsletter_statement_latency_seconds",
            "Emulated statement latency in seconds",
            ["kind"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
            registry=self._registry,
        )

        self.unrecognized_statements_total = Counter(
            "newsletter_unrecognized_statements_total",
            "Statements the emulator did not recognize and skipped",
            registry=self._registry,
        )

        # Transaction metrics
        self.transactions_total = Counter(
            "newsletter_transactions_total",
            "Total number of transactions",
            ["status"],  # commit, rollback
            registry=self._registry,
        )

        # Snapshot metrics
        self.snapshot_writes_total = Counter(
            "newsletter_snapshot_writes_total",
            "Snapshot file writes",
            ["status"],  # success, error
            registry=self._registry,
        )

        # Engine selection
        self.engine_selections_total = Counter(
            "newsletter_engine_selections_total",
            "Engine selections by engine and reason",
            ["engine", "reason"],
            registry=self._registry,
        )

        self.info = Info(
            "newsletter_store",
            "Newsletter store information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    if _metrics is None or registry is not None:
        _metrics = MetricsRegistry(registry)

    from newsletter_store import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
