"""Engine selection: SQLite or the in-memory emulator.

The selector decides once, at the first ``acquire()``, which engine backs
the process and hands out the same connection afterwards.

Selection policy:
    1. ``use_in_memory_db`` set               -> emulator
    2. environment is not ``production``      -> emulator
    3. otherwise open SQLite and create the schema
    4. if SQLite fails: fall back to the emulator with a warning when the
       mode allows it or the force flag is set, else raise
       ``EngineUnavailableError``
"""

from __future__ import annotations

from typing import Callable

from newsletter_store.adapters.outbound.json_snapshot_persister import JsonSnapshotPersister
from newsletter_store.adapters.outbound.sqlite_connection import SqliteConnection
from newsletter_store.application.emulator import InMemoryConnection
from newsletter_store.application.schema import initialize_schema
from newsletter_store.domain.value_objects import EngineKind, ExecutionMode
from newsletter_store.infrastructure.config import Config
from newsletter_store.infrastructure.logging import get_logger
from newsletter_store.infrastructure.metrics import MetricsRegistry, get_metrics
from newsletter_store.infrastructure.tracing import set_attributes, trace_span
from newsletter_store.ports.inbound.connection import Connection

logger = get_logger(__name__)

ConnectionFactory = Callable[[Config], Connection]


class EngineUnavailableError(RuntimeError):
    """SQLite could not be initialized and falling back is not allowed."""


def fallback_permitted(mode: ExecutionMode, force_in_memory: bool) -> bool:
    """Whether a failed native engine may be replaced by the emulator."""
    return mode.allows_fallback or force_in_memory


def open_native(config: Config) -> Connection:
    return SqliteConnection.open(config.storage.database_path)


def open_emulator(config: Config, metrics: MetricsRegistry | None = None) -> Connection:
    return InMemoryConnection.open(
        JsonSnapshotPersister(config.storage.snapshot_path), metrics=metrics
    )


class EngineSelector:
    """Holds the process's single connection.

    Usage:
        selector = EngineSelector()
        connection = selector.acquire()
        ...
        selector.release()

    Configuration is read when the first connection is built, so
    environment changes made before that point are honored.
    """

    def __init__(
        self,
        config: Config | None = None,
        native_factory: ConnectionFactory = open_native,
        emulator_factory: ConnectionFactory | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._config = config
        self._native_factory = native_factory
        self._emulator_factory = emulator_factory or (lambda cfg: open_emulator(cfg, metrics))
        self._metrics = metrics
        self._connection: Connection | None = None

    @property
    def connection(self) -> Connection | None:
        """The memoized connection, if one has been acquired."""
        return self._connection

    @property
    def engine_kind(self) -> EngineKind | None:
        return self._connection.engine_kind if self._connection is not None else None

    def acquire(self) -> Connection:
        """Return the process connection, creating it on first use.

        Raises:
            EngineUnavailableError: If SQLite fails in production without
                the force flag
        """
        if self._connection is None:
            config = self._config if self._config is not None else Config()
            with trace_span("select_engine", {"environment": config.environment}) as span:
                self._connection = self._select(config)
                set_attributes(span, {"engine": self._connection.engine_kind.value})
        return self._connection

    def release(self) -> None:
        """Close and forget the connection; the next acquire builds a new one."""
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        connection.close()

    def __enter__(self) -> Connection:
        return self.acquire()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def _select(self, config: Config) -> Connection:
        mode = ExecutionMode(config.environment)
        force = config.use_in_memory_db

        if force:
            return self._use_emulator(config, reason="forced")
        if mode is not ExecutionMode.PRODUCTION:
            return self._use_emulator(config, reason=mode.value)

        try:
            connection = self._native_factory(config)
        except Exception as e:
            return self._recover(config, mode, force, e)
        try:
            initialize_schema(connection)
        except Exception as e:
            connection.close()
            return self._recover(config, mode, force, e)

        self._record(EngineKind.NATIVE, reason=mode.value)
        logger.info(
            "engine_selected",
            engine=EngineKind.NATIVE.value,
            environment=mode.value,
            path=str(config.storage.database_path),
        )
        return connection

    def _recover(
        self, config: Config, mode: ExecutionMode, force: bool, error: Exception
    ) -> Connection:
        if not fallback_permitted(mode, force):
            raise EngineUnavailableError(
                f"Could not initialize SQLite at {config.storage.database_path}: {error}. "
                "Fix the database path or its permissions "
                "(NEWSLETTER_STORE_STORAGE__DATABASE_PATH), set "
                "NEWSLETTER_STORE_USE_IN_MEMORY_DB=1 to use the in-memory store, "
                "or run with NEWSLETTER_STORE_ENVIRONMENT=development."
            ) from error

        logger.warning(
            "engine_fallback",
            error=str(error),
            environment=mode.value,
            detail="SQLite unavailable. Falling back to the in-memory store.",
        )
        return self._use_emulator(config, reason="fallback")

    def _use_emulator(self, config: Config, reason: str) -> Connection:
        connection = self._emulator_factory(config)
        initialize_schema(connection)
        self._record(EngineKind.EMULATED, reason=reason)
        logger.info(
            "engine_selected",
            engine=EngineKind.EMULATED.value,
            reason=reason,
            snapshot=str(config.storage.snapshot_path),
        )
        return connection

    def _record(self, engine: EngineKind, reason: str) -> None:
        metrics = self._metrics or get_metrics()
        metrics.engine_selections_total.labels(engine=engine.value, reason=reason).inc()
