"""Newsletter repository: the editor's persistence operations.

Uses only the statement interface, so it runs unchanged on SQLite and on
the emulator. Saving an issue replaces all of its entries in one
transaction: the period is created or touched, its entries are deleted
and the submitted drafts are inserted with ``entry_order`` set to their
position.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Sequence

from newsletter_store.domain.entities import INSERTABLE_ENTRY_COLUMNS, EntryDraft
from newsletter_store.domain.value_objects import CommentId, EntryCategory, PeriodId
from newsletter_store.infrastructure.logging import get_logger
from newsletter_store.ports.inbound.connection import Connection, Row

logger = get_logger(__name__)

SELECT_PERIOD = "SELECT * FROM newsletters WHERE month = ? AND year = ?"
INSERT_PERIOD = "INSERT INTO newsletters (month, year) VALUES (?, ?)"
TOUCH_PERIOD = "UPDATE newsletters SET updated_at = CURRENT_TIMESTAMP WHERE id = ?"
SELECT_ENTRIES = (
    "SELECT * FROM newsletter_entries WHERE newsletter_id = ? "
    "ORDER BY category, entry_order, id"
)
DELETE_ENTRIES = "DELETE FROM newsletter_entries WHERE newsletter_id = ?"
INSERT_ENTRY = (
    f"INSERT INTO newsletter_entries ({', '.join(INSERTABLE_ENTRY_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in INSERTABLE_ENTRY_COLUMNS)})"
)
INSERT_COMMENT = "INSERT INTO entry_comments (entry_id, user, content) VALUES (?, ?, ?)"


def select_comments_sql(count: int) -> str:
    placeholders = ", ".join("?" for _ in range(count))
    return f"SELECT * FROM entry_comments WHERE entry_id IN ({placeholders}) ORDER BY created_at"


@dataclass
class NewsletterIssue:
    """A period with its entries and their comments."""

    period: Row
    entries: list[Row] = field(default_factory=list)

    def by_category(self) -> dict[EntryCategory, list[Row]]:
        """Entries grouped by known category, in display order.

        Entries whose category is not an ``EntryCategory`` value are left out.
        """
        known = {category.value: category for category in EntryCategory}
        grouped: dict[EntryCategory, list[Row]] = defaultdict(list)
        for entry in self.entries:
            category = known.get(entry.get("category"))
            if category is not None:
                grouped[category].append(entry)
        return dict(grouped)


class NewsletterRepository:
    """Reads and writes newsletter issues through a ``Connection``.

    Usage:
        repository = NewsletterRepository(selector.acquire())
        repository.save_entries("March", "2027", [EntryDraft(EntryCategory.NEW_HIRES, {...})])
        issue = repository.load_issue("March", "2027")
    """

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._save = connection.transaction(self._replace_entries)

    def get_or_create_period(self, month: str, year: str) -> Row:
        row = self._connection.prepare(SELECT_PERIOD).get(month, year)
        if row is not None:
            return row
        result = self._connection.prepare(INSERT_PERIOD).run(month, year)
        logger.info("period_created", month=month, year=year, period_id=result.inserted_id)
        created = self._connection.prepare(SELECT_PERIOD).get(month, year)
        if created is None:
            raise LookupError(f"Period {month} {year} missing right after insert")
        return created

    def save_entries(self, month: str, year: str, drafts: Sequence[EntryDraft]) -> PeriodId:
        """Replace all entries of an issue atomically.

        Returns:
            The period id the entries were saved under
        """
        period_id = self._save(month, year, drafts)
        logger.info("entries_saved", month=month, year=year, count=len(drafts))
        return period_id

    def _replace_entries(self, month: str, year: str, drafts: Sequence[EntryDraft]) -> PeriodId:
        existing = self._connection.prepare(SELECT_PERIOD).get(month, year)
        if existing is None:
            period_id = PeriodId(self._connection.prepare(INSERT_PERIOD).run(month, year).inserted_id)
        else:
            period_id = PeriodId(existing["id"])
            self._connection.prepare(TOUCH_PERIOD).run(period_id)

        self._connection.prepare(DELETE_ENTRIES).run(period_id)
        insert = self._connection.prepare(INSERT_ENTRY)
        for order, draft in enumerate(drafts):
            row = draft.to_fields(period_id, order).to_row()
            insert.run(*(row[column] for column in INSERTABLE_ENTRY_COLUMNS))
        return period_id

    def load_issue(self, month: str, year: str) -> NewsletterIssue:
        """Load an issue, creating its period when it does not exist yet."""
        period = self.get_or_create_period(month, year)
        entries = self._connection.prepare(SELECT_ENTRIES).all(period["id"])
        if not entries:
            return NewsletterIssue(period=period)

        entry_ids = [entry["id"] for entry in entries]
        comments = self._connection.prepare(select_comments_sql(len(entry_ids))).all(*entry_ids)
        grouped: dict[Any, list[Row]] = defaultdict(list)
        for comment in comments:
            grouped[comment["entry_id"]].append(comment)
        for entry in entries:
            entry["comments"] = grouped.get(entry["id"], [])
        return NewsletterIssue(period=period, entries=entries)

    def add_comment(self, entry_id: int, user: str, content: str) -> CommentId:
        result = self._connection.prepare(INSERT_COMMENT).run(entry_id, user, content)
        return CommentId(result.inserted_id)
