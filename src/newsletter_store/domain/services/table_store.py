"""In-memory table store for the emulated engine.

The store owns the three newsletter tables and their identity counters.
Every operation is one of the statement shapes the emulator recognizes;
there is no general query path.

Integrity rules mirror the native schema:
    - ``newsletter_entries.newsletter_id`` references an existing period
    - ``entry_comments.entry_id`` references an existing entry
    - deleting entries deletes their comments (ON DELETE CASCADE)
    - NOT NULL columns reject ``None``
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from newsletter_store.domain.entities import Comment, Entry, EntryFields, Period
from newsletter_store.domain.value_objects import (
    FIRST_ID,
    CommentId,
    EntryId,
    PeriodId,
    integer_affinity,
    text_affinity,
)

# Same format SQLite uses for CURRENT_TIMESTAMP.
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def current_timestamp() -> str:
    """UTC timestamp formatted like SQLite's CURRENT_TIMESTAMP."""
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


class StoreError(Exception):
    """Base error raised by the table store."""


class ConstraintViolationError(StoreError):
    """A NOT NULL or FOREIGN KEY constraint would be violated."""


@dataclass
class StoreState:
    """The three tables plus the next identity for each."""

    periods: list[Period] = field(default_factory=list)
    entries: list[Entry] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    next_period_id: int = FIRST_ID
    next_entry_id: int = FIRST_ID
    next_comment_id: int = FIRST_ID

    def copy(self) -> StoreState:
        return copy.deepcopy(self)


@dataclass(frozen=True)
class StoreStats:
    """Row counts per table."""

    periods: int
    entries: int
    comments: int


class TableStore:
    """Typed operations over the emulated tables.

    Usage:
        store = TableStore()
        period_id = store.insert_period("March", "2027")
        entry_id = store.insert_entry(EntryFields(period_id, "newHires", "employee"))
    """

    def __init__(
        self,
        state: StoreState | None = None,
        clock: Callable[[], str] = current_timestamp,
    ) -> None:
        self._state = state or StoreState()
        self._clock = clock

    @property
    def state(self) -> StoreState:
        return self._state

    # Periods

    def insert_period(self, month: Any, year: Any) -> PeriodId:
        month = text_affinity(month)
        year = text_affinity(year)
        if month is None or year is None:
            raise ConstraintViolationError("NOT NULL constraint failed: newsletters.month/year")

        now = self._clock()
        period_id = PeriodId(self._state.next_period_id)
        self._state.next_period_id += 1
        self._state.periods.append(
            Period(id=period_id, month=month, year=year, created_at=now, updated_at=now)
        )
        return period_id

    def find_period(self, month: Any, year: Any) -> Period | None:
        """First period inserted with this month and year, if any."""
        for period in self._state.periods:
            if period.matches(month, year):
                return period
        return None

    def touch_period(self, period_id: Any, updated_at: str | None = None) -> int:
        """Set ``updated_at`` on a period. Returns the number of rows changed."""
        for period in self._state.periods:
            if period.has_id(period_id):
                period.updated_at = updated_at if updated_at is not None else self._clock()
                return 1
        return 0

    def _period_exists(self, period_id: Any) -> bool:
        return any(period.has_id(period_id) for period in self._state.periods)

    # Entries

    def insert_entry(self, values: EntryFields) -> EntryId:
        missing = values.missing_required()
        if missing:
            raise ConstraintViolationError(
                f"NOT NULL constraint failed: newsletter_entries.{missing[0]}"
            )
        if not self._period_exists(values.newsletter_id):
            raise ConstraintViolationError(
                f"FOREIGN KEY constraint failed: no newsletter with id {values.newsletter_id!r}"
            )

        now = self._clock()
        entry_id = EntryId(self._state.next_entry_id)
        self._state.next_entry_id += 1
        self._state.entries.append(
            Entry(id=entry_id, fields=copy.copy(values), created_at=now, updated_at=now)
        )
        return entry_id

    def entries_for_period(self, period_id: Any) -> list[Entry]:
        """Entries of a period ordered by category, entry_order, id."""
        wanted = integer_affinity(period_id)
        selected = [entry for entry in self._state.entries if entry.newsletter_id == wanted]
        return sorted(selected, key=Entry.display_key)

    def delete_entries_for_period(self, period_id: Any) -> int:
        """Delete a period's entries and their comments. Returns entries removed."""
        wanted = integer_affinity(period_id)
        removed = {entry.id for entry in self._state.entries if entry.newsletter_id == wanted}
        if not removed:
            return 0
        self._state.entries = [e for e in self._state.entries if e.id not in removed]
        self._state.comments = [c for c in self._state.comments if c.entry_id not in removed]
        return len(removed)

    def _entry_exists(self, entry_id: Any) -> bool:
        wanted = integer_affinity(entry_id)
        return any(entry.id == wanted for entry in self._state.entries)

    # Comments

    def insert_comment(self, entry_id: Any, user: Any, content: Any) -> CommentId:
        entry_id = integer_affinity(entry_id)
        user = text_affinity(user)
        content = text_affinity(content)
        for column, value in (("entry_id", entry_id), ("user", user), ("content", content)):
            if value is None:
                raise ConstraintViolationError(f"NOT NULL constraint failed: entry_comments.{column}")
        if not self._entry_exists(entry_id):
            raise ConstraintViolationError(
                f"FOREIGN KEY constraint failed: no entry with id {entry_id!r}"
            )

        comment_id = CommentId(self._state.next_comment_id)
        self._state.next_comment_id += 1
        self._state.comments.append(
            Comment(
                id=comment_id,
                entry_id=entry_id,
                user=user,
                content=content,
                created_at=self._clock(),
            )
        )
        return comment_id

    def comments_for_entries(self, entry_ids: Iterable[Any]) -> list[Comment]:
        """Comments attached to any of the given entries, ordered by id."""
        wanted = {integer_affinity(entry_id) for entry_id in entry_ids}
        selected = [comment for comment in self._state.comments if comment.entry_id in wanted]
        return sorted(selected, key=lambda comment: comment.id)

    # Checkpoints

    def snapshot(self) -> StoreState:
        """Deep copy of all tables and counters."""
        return self._state.copy()

    def restore(self, state: StoreState) -> None:
        """Replace the current state with a checkpoint taken by ``snapshot``."""
        self._state = state

    def get_stats(self) -> StoreStats:
        return StoreStats(
            periods=len(self._state.periods),
            entries=len(self._state.entries),
            comments=len(self._state.comments),
        )
