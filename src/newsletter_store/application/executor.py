"""Statement executor for the emulated engine.

Executes a ``MatchedStatement`` with bound parameters against a
``TableStore``. Every ``StatementKind`` has exactly one handler; schema
and unrecognized statements are no-ops with an empty result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from newsletter_store.adapters.inbound.statement_matcher import (
    EntryIdSet,
    MatchedStatement,
    NewComment,
    PeriodKey,
    PeriodRef,
    StatementKind,
    StatementParams,
    TouchPeriod,
)
from newsletter_store.domain.entities import EntryFields
from newsletter_store.domain.services import TableStore
from newsletter_store.ports.inbound.connection import Row


@dataclass
class ExecutionResult:
    """Result of executing one emulated statement."""

    rows: list[Row] = field(default_factory=list)
    affected_rows: int = 0
    inserted_id: int | None = None


Handler = Callable[[Any], ExecutionResult]


class StatementExecutor:
    """Dispatches matched statements to table store operations.

    Usage:
        executor = StatementExecutor(store)
        result = executor.execute(matcher.match(sql), ("March", "2027"))
    """

    def __init__(self, store: TableStore) -> None:
        self._store = store
        self._handlers: dict[StatementKind, Handler] = {
            StatementKind.INSERT_PERIOD: self._insert_period,
            StatementKind.SELECT_PERIOD_BY_KEY: self._select_period_by_key,
            StatementKind.TOUCH_PERIOD: self._touch_period,
            StatementKind.SELECT_ENTRIES_BY_PERIOD: self._select_entries_by_period,
            StatementKind.SELECT_COMMENTS_BY_ENTRY_IDS: self._select_comments_by_entry_ids,
            StatementKind.INSERT_ENTRY: self._insert_entry,
            StatementKind.DELETE_ENTRIES_BY_PERIOD: self._delete_entries_by_period,
            StatementKind.INSERT_COMMENT: self._insert_comment,
            StatementKind.SCHEMA: self._no_op,
            StatementKind.UNRECOGNIZED: self._no_op,
        }

    @property
    def handled_kinds(self) -> frozenset[StatementKind]:
        return frozenset(self._handlers)

    def execute(self, statement: MatchedStatement, params: Sequence[Any]) -> ExecutionResult:
        """Execute a statement.

        Raises:
            BindingError: If the parameter count does not match
            ConstraintViolationError: If a NOT NULL or FOREIGN KEY rule fails
        """
        bound = statement.bind(params)
        result = self._handlers[statement.kind](bound)
        if statement.projection is not None:
            result.rows = [
                {column: row[column] for column in statement.projection} for row in result.rows
            ]
        return result

    def _insert_period(self, params: PeriodKey) -> ExecutionResult:
        period_id = self._store.insert_period(params.month, params.year)
        return ExecutionResult(affected_rows=1, inserted_id=period_id)

    def _select_period_by_key(self, params: PeriodKey) -> ExecutionResult:
        period = self._store.find_period(params.month, params.year)
        return ExecutionResult(rows=[period.to_row()] if period is not None else [])

    def _touch_period(self, params: TouchPeriod) -> ExecutionResult:
        changed = self._store.touch_period(params.period_id, params.updated_at)
        return ExecutionResult(affected_rows=changed)

    def _select_entries_by_period(self, params: PeriodRef) -> ExecutionResult:
        entries = self._store.entries_for_period(params.period_id)
        return ExecutionResult(rows=[entry.to_row() for entry in entries])

    def _select_comments_by_entry_ids(self, params: EntryIdSet) -> ExecutionResult:
        comments = self._store.comments_for_entries(params.entry_ids)
        return ExecutionResult(rows=[comment.to_row() for comment in comments])

    def _insert_entry(self, params: EntryFields) -> ExecutionResult:
        entry_id = self._store.insert_entry(params)
        return ExecutionResult(affected_rows=1, inserted_id=entry_id)

    def _delete_entries_by_period(self, params: PeriodRef) -> ExecutionResult:
        removed = self._store.delete_entries_for_period(params.period_id)
        return ExecutionResult(affected_rows=removed)

    def _insert_comment(self, params: NewComment) -> ExecutionResult:
        comment_id = self._store.insert_comment(params.entry_id, params.user, params.content)
        return ExecutionResult(affected_rows=1, inserted_id=comment_id)

    def _no_op(self, params: StatementParams) -> ExecutionResult:
        return ExecutionResult()
