"""Pytest configuration and fixtures for newsletter_store tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
from prometheus_client import CollectorRegistry

from newsletter_store.application.emulator import InMemoryConnection
from newsletter_store.application.engine_selector import EngineSelector
from newsletter_store.adapters.outbound.json_snapshot_persister import JsonSnapshotPersister
from newsletter_store.infrastructure.config import Config, StorageConfig, get_config
from newsletter_store.infrastructure.container import reset_container
from newsletter_store.infrastructure.metrics import MetricsRegistry

ENV_VARS = (
    "NEWSLETTER_STORE_ENVIRONMENT",
    "NEWSLETTER_STORE_USE_IN_MEMORY_DB",
    "NEWSLETTER_STORE_STORAGE__DATABASE_PATH",
    "NEWSLETTER_STORE_STORAGE__SNAPSHOT_PATH",
    "NEWSLETTER_STORE_OBSERVABILITY__METRICS_PORT",
    "NEWSLETTER_STORE_OBSERVABILITY__OTEL_ENDPOINT",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear store settings from the environment and reset cached globals."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    reset_container()
    yield
    reset_container()
    get_config.cache_clear()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with files in a temporary directory."""
    return Config(
        environment="test",
        storage=StorageConfig(
            database_path=temp_dir / "newsletter.db",
            snapshot_path=temp_dir / "newsletter.seed.json",
        ),
    )


@pytest.fixture
def production_config(temp_dir: Path) -> Config:
    """Provide a production configuration with files in a temporary directory."""
    return Config(
        environment="production",
        storage=StorageConfig(
            database_path=temp_dir / "newsletter.db",
            snapshot_path=temp_dir / "newsletter.seed.json",
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def snapshot_persister(test_config: Config) -> JsonSnapshotPersister:
    """Provide a snapshot persister writing to the temporary directory."""
    return JsonSnapshotPersister(test_config.storage.snapshot_path)


@pytest.fixture
def emulator(
    snapshot_persister: JsonSnapshotPersister, metrics_registry: MetricsRegistry
) -> Generator[InMemoryConnection, None, None]:
    """Provide an emulated connection persisting to a temporary snapshot."""
    connection = InMemoryConnection.open(snapshot_persister, metrics=metrics_registry)
    yield connection
    connection.close()


@pytest.fixture
def selector(
    test_config: Config, metrics_registry: MetricsRegistry
) -> Generator[EngineSelector, None, None]:
    """Provide an engine selector for the test configuration."""
    engine_selector = EngineSelector(config=test_config, metrics=metrics_registry)
    yield engine_selector
    engine_selector.release()


@pytest.fixture
def read_metric(metrics_registry: MetricsRegistry) -> Callable[..., float]:
    """Read a sample from the test registry, 0.0 when absent."""

    def read(name: str, labels: dict[str, str] | None = None) -> float:
        value = metrics_registry.registry.get_sample_value(name, labels or {})
        return value if value is not None else 0.0

    return read


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
