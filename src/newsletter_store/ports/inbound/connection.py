"""Connection port: the statement interface callers program against.

Both engines implement it. Callers prepare a literal SQL string once and
run it with positional parameters; rows come back as plain dicts keyed by
column name, owned by the caller.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar

from newsletter_store.domain.value_objects import EngineKind

T = TypeVar("T")

Row = dict[str, Any]


class ConnectionClosedError(RuntimeError):
    """Raised when a closed connection or its statements are used."""


@dataclass(frozen=True)
class RunResult:
    """Outcome of a data-modifying statement.

    Attributes:
        inserted_id: Identity assigned by the last insert, if any
        changed_count: Number of rows inserted, updated or deleted
    """

    inserted_id: int | None
    changed_count: int


class PreparedStatement(Protocol):
    """A statement string bound to a connection, reusable across calls."""

    @property
    @abstractmethod
    def source(self) -> str:
        """The statement text as prepared."""
        ...

    @abstractmethod
    def run(self, *params: Any) -> RunResult:
        """Execute for its side effect."""
        ...

    @abstractmethod
    def get(self, *params: Any) -> Row | None:
        """Execute and return the first row, or None."""
        ...

    @abstractmethod
    def all(self, *params: Any) -> list[Row]:
        """Execute and return every row."""
        ...


class Connection(Protocol):
    """A handle on one of the two engines."""

    @property
    @abstractmethod
    def engine_kind(self) -> EngineKind:
        ...

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...

    @abstractmethod
    def prepare(self, sql: str) -> PreparedStatement:
        ...

    @abstractmethod
    def exec(self, sql: str) -> None:
        """Run one or more statements without parameters (schema scripts)."""
        ...

    @abstractmethod
    def transaction(self, unit_of_work: Callable[..., T]) -> Callable[..., T]:
        """Wrap a unit of work so each call commits or rolls back as a whole.

        Any exception raised by the unit restores the previous state and is
        re-raised unchanged.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the connection. Closing twice is a no-op."""
        ...
