"""In-memory emulated engine.

Implements the Connection port on top of the table store. Each statement
is classified once, when it is prepared, and every execution binds its
parameters and dispatches to the table store.

Durability:
    After a mutating statement the whole store is written to the snapshot
    file. Inside a transaction the write waits for the outermost commit;
    a rollback restores the checkpoint and writes nothing. A failed write
    is logged and counted, and the statement still succeeds.

Usage:
    connection = InMemoryConnection.open(JsonSnapshotPersister("newsletter.seed.json"))
    insert = connection.prepare("INSERT INTO newsletters (month, year) VALUES (?, ?)")
    period_id = insert.run("March", "2027").inserted_id
"""

from __future__ import annotations

import functools
import time
from typing import Any, Callable, TypeVar

from newsletter_store.adapters.inbound.statement_matcher import (
    MatchedStatement,
    StatementKind,
    StatementMatcher,
)
from newsletter_store.application.executor import ExecutionResult, StatementExecutor
from newsletter_store.domain.services import TableStore, TransactionCoordinator
from newsletter_store.domain.value_objects import EngineKind
from newsletter_store.infrastructure.logging import get_logger
from newsletter_store.infrastructure.metrics import MetricsRegistry, get_metrics
from newsletter_store.infrastructure.tracing import set_attributes, statement_span, trace_span
from newsletter_store.ports.inbound.connection import ConnectionClosedError, Row, RunResult
from newsletter_store.ports.outbound.snapshot_persister import SnapshotError, SnapshotPersister

T = TypeVar("T")

logger = get_logger(__name__)


class EmulatedStatement:
    """A statement prepared against the emulator."""

    def __init__(self, connection: InMemoryConnection, matched: MatchedStatement) -> None:
        self._connection = connection
        self._matched = matched

    @property
    def source(self) -> str:
        return self._matched.source

    @property
    def kind(self) -> StatementKind:
        return self._matched.kind

    def run(self, *params: Any) -> RunResult:
        result = self._connection.execute(self._matched, params)
        return RunResult(inserted_id=result.inserted_id, changed_count=result.affected_rows)

    def get(self, *params: Any) -> Row | None:
        rows = self._connection.execute(self._matched, params).rows
        return rows[0] if rows else None

    def all(self, *params: Any) -> list[Row]:
        return self._connection.execute(self._matched, params).rows


class InMemoryConnection:
    """Connection backed by the in-process table store.

    Attributes:
        store: The table store holding all rows
        persister: Snapshot storage, or None to keep state in memory only
    """

    def __init__(
        self,
        store: TableStore | None = None,
        persister: SnapshotPersister | None = None,
        matcher: StatementMatcher | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._store = store or TableStore()
        self._persister = persister
        self._matcher = matcher or StatementMatcher()
        self._metrics = metrics or get_metrics()
        self._executor = StatementExecutor(self._store)
        self._coordinator = TransactionCoordinator(
            self._store,
            on_commit=self._flush_pending,
            on_rollback=self._discard_pending,
        )
        self._pending_write = False
        self._open = True

    @classmethod
    def open(
        cls,
        persister: SnapshotPersister | None,
        matcher: StatementMatcher | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> InMemoryConnection:
        """Create an emulator seeded from the snapshot, when one exists.

        An unreadable snapshot is moved aside and the emulator starts empty.
        """
        store = TableStore()
        if persister is not None:
            try:
                state = persister.load()
            except SnapshotError as e:
                moved_to = persister.quarantine()
                logger.warning(
                    "snapshot_corrupt",
                    path=str(persister.path),
                    moved_to=str(moved_to) if moved_to else None,
                    error=str(e),
                )
                state = None
            if state is not None:
                store = TableStore(state)
                stats = store.get_stats()
                logger.info(
                    "snapshot_loaded",
                    path=str(persister.path),
                    periods=stats.periods,
                    entries=stats.entries,
                    comments=stats.comments,
                )
        return cls(store=store, persister=persister, matcher=matcher, metrics=metrics)

    @property
    def engine_kind(self) -> EngineKind:
        return EngineKind.EMULATED

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def store(self) -> TableStore:
        return self._store

    @property
    def persister(self) -> SnapshotPersister | None:
        return self._persister

    @property
    def coordinator(self) -> TransactionCoordinator:
        return self._coordinator

    def _require_open(self) -> None:
        if not self._open:
            raise ConnectionClosedError("The database connection is not open")

    def prepare(self, sql: str) -> EmulatedStatement:
        self._require_open()
        matched = self._matcher.match(sql)
        if not matched.is_recognized:
            logger.warning("statement_unrecognized", sql=sql)
        return EmulatedStatement(self, matched)

    def exec(self, sql: str) -> None:
        """Run a script. Schema statements are accepted and ignored."""
        self._require_open()
        for matched in self._matcher.match_script(sql):
            if matched.kind is StatementKind.SCHEMA:
                continue
            if not matched.is_recognized:
                logger.warning("statement_unrecognized", sql=matched.source)
            self.execute(matched, ())

    def execute(self, statement: MatchedStatement, params: tuple[Any, ...]) -> ExecutionResult:
        """Execute a matched statement and persist the store if it changed."""
        self._require_open()
        kind = statement.kind
        if kind is StatementKind.UNRECOGNIZED:
            self._metrics.unrecognized_statements_total.inc()

        start = time.perf_counter()
        with statement_span(kind.value, EngineKind.EMULATED.value) as span:
            result = self._executor.execute(statement, params)
            set_attributes(
                span,
                {"statement.rows": len(result.rows), "statement.affected": result.affected_rows},
            )
        self._metrics.statement_latency_seconds.labels(kind=kind.value).observe(
            time.perf_counter() - start
        )
        self._metrics.statements_total.labels(kind=kind.value).inc()

        if kind.is_mutating:
            self._after_mutation()
        return result

    def transaction(self, unit_of_work: Callable[..., T]) -> Callable[..., T]:
        atomic = self._coordinator.transaction(unit_of_work)

        @functools.wraps(unit_of_work)
        def run_atomically(*args: Any, **kwargs: Any) -> T:
            self._require_open()
            with trace_span(
                "transaction",
                {"engine": EngineKind.EMULATED.value, "transaction.depth": self._coordinator.depth + 1},
            ):
                try:
                    result = atomic(*args, **kwargs)
                except BaseException as e:
                    self._metrics.transactions_total.labels(status="rollback").inc()
                    logger.info("transaction_rolled_back", error=type(e).__name__)
                    raise
            self._metrics.transactions_total.labels(status="commit").inc()
            return result

        return run_atomically

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        logger.info("connection_closed", engine=EngineKind.EMULATED.value)

    # Persistence

    def _after_mutation(self) -> None:
        if self._coordinator.in_transaction:
            self._pending_write = True
        else:
            self._persist()

    def _flush_pending(self) -> None:
        if self._pending_write:
            self._pending_write = False
            self._persist()

    def _discard_pending(self) -> None:
        self._pending_write = False

    def _persist(self) -> None:
        if self._persister is None:
            return
        try:
            self._persister.save(self._store.state)
        except (OSError, ValueError) as e:
            self._metrics.snapshot_writes_total.labels(status="error").inc()
            logger.warning(
                "snapshot_write_failed",
                path=str(self._persister.path),
                error=str(e),
            )
            return
        self._metrics.snapshot_writes_total.labels(status="success").inc()
