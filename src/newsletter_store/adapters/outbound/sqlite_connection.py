"""SQLite implementation of the Connection port.

The connection runs in autocommit mode and manages transactions itself:
``BEGIN``/``COMMIT``/``ROLLBACK`` for the outermost unit of work and
``SAVEPOINT`` for nested ones. The database uses WAL journaling and
enforces foreign keys.
"""

from __future__ import annotations

import functools
import itertools
import sqlite3
from pathlib import Path
from typing import Any, Callable, TypeVar

from newsletter_store.domain.value_objects import EngineKind
from newsletter_store.infrastructure.logging import get_logger
from newsletter_store.ports.inbound.connection import ConnectionClosedError, Row, RunResult

T = TypeVar("T")

logger = get_logger(__name__)

IN_MEMORY_DATABASE = ":memory:"


class SqliteStatement:
    """A statement string prepared against a SQLite connection."""

    def __init__(self, connection: SqliteConnection, sql: str) -> None:
        self._connection = connection
        self._sql = sql

    @property
    def source(self) -> str:
        return self._sql

    def run(self, *params: Any) -> RunResult:
        cursor = self._connection._execute(self._sql, params)
        try:
            return RunResult(
                inserted_id=cursor.lastrowid,
                changed_count=max(cursor.rowcount, 0),
            )
        finally:
            cursor.close()

    def get(self, *params: Any) -> Row | None:
        cursor = self._connection._execute(self._sql, params)
        try:
            row = cursor.fetchone()
        finally:
            cursor.close()
        return dict(row) if row is not None else None

    def all(self, *params: Any) -> list[Row]:
        cursor = self._connection._execute(self._sql, params)
        try:
            return [dict(row) for row in cursor.fetchall()]
        finally:
            cursor.close()


class SqliteConnection:
    """Connection backed by a SQLite database file.

    Usage:
        connection = SqliteConnection.open(Path("newsletter.db"))
        row = connection.prepare("SELECT * FROM newsletters WHERE id = ?").get(1)
    """

    def __init__(self, raw: sqlite3.Connection, path: str) -> None:
        self._raw: sqlite3.Connection | None = raw
        self._path = path
        self._savepoints = itertools.count(1)

    @classmethod
    def open(cls, path: str | Path) -> SqliteConnection:
        """Open (creating if needed) the database at ``path``.

        Raises:
            sqlite3.Error, OSError: If the database cannot be opened
        """
        location = str(path)
        if location != IN_MEMORY_DATABASE:
            Path(location).parent.mkdir(parents=True, exist_ok=True)

        raw = sqlite3.connect(location, isolation_level=None)
        try:
            raw.row_factory = sqlite3.Row
            raw.execute("PRAGMA journal_mode = WAL")
            raw.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error:
            raw.close()
            raise

        logger.info("sqlite_opened", path=location)
        return cls(raw, location)

    @property
    def engine_kind(self) -> EngineKind:
        return EngineKind.NATIVE

    @property
    def is_open(self) -> bool:
        return self._raw is not None

    @property
    def path(self) -> str:
        return self._path

    def _require_open(self) -> sqlite3.Connection:
        if self._raw is None:
            raise ConnectionClosedError("The database connection is not open")
        return self._raw

    def _execute(self, sql: str, params: tuple[Any, ...]) -> sqlite3.Cursor:
        return self._require_open().execute(sql, params)

    def prepare(self, sql: str) -> SqliteStatement:
        self._require_open()
        return SqliteStatement(self, sql)

    def exec(self, sql: str) -> None:
        self._require_open().executescript(sql)

    def transaction(self, unit_of_work: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(unit_of_work)
        def run_atomically(*args: Any, **kwargs: Any) -> T:
            raw = self._require_open()
            if raw.in_transaction:
                return self._run_in_savepoint(raw, unit_of_work, args, kwargs)

            raw.execute("BEGIN")
            try:
                result = unit_of_work(*args, **kwargs)
            except BaseException:
                raw.execute("ROLLBACK")
                raise
            raw.execute("COMMIT")
            return result

        return run_atomically

    def _run_in_savepoint(
        self,
        raw: sqlite3.Connection,
        unit_of_work: Callable[..., T],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> T:
        name = f"newsletter_sp_{next(self._savepoints)}"
        raw.execute(f"SAVEPOINT {name}")
        try:
            result = unit_of_work(*args, **kwargs)
        except BaseException:
            raw.execute(f"ROLLBACK TO SAVEPOINT {name}")
            raw.execute(f"RELEASE SAVEPOINT {name}")
            raise
        raw.execute(f"RELEASE SAVEPOINT {name}")
        return result

    def close(self) -> None:
        if self._raw is None:
            return
        self._raw.close()
        self._raw = None
        logger.info("connection_closed", engine=EngineKind.NATIVE.value)
