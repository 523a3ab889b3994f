"""Reviewer comments attached to entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from newsletter_store.domain.value_objects import CommentId, EntryId, integer_affinity, text_affinity

COMMENT_TABLE = "entry_comments"

COMMENT_COLUMNS: tuple[str, ...] = ("id", "entry_id", "user", "content", "created_at")


@dataclass
class Comment:
    """A row of the ``entry_comments`` table."""

    id: CommentId
    entry_id: EntryId
    user: str
    content: str
    created_at: str | None = None

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "entry_id": self.entry_id,
            "user": self.user,
            "content": self.content,
            "created_at": self.created_at,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Comment:
        return cls(
            id=CommentId(int(row["id"])),
            entry_id=integer_affinity(row.get("entry_id")),
            user=text_affinity(row.get("user")),
            content=text_affinity(row.get("content")),
            created_at=row.get("created_at"),
        )
