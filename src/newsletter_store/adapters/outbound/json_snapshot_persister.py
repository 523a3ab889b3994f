"""JSON file implementation of the SnapshotPersister port.

Snapshot File Format:
    {
      "newsletters": [{"id": 1, "month": "March", "year": "2027", ...}],
      "newsletter_entries": [{"id": 1, "newsletter_id": 1, ...}],
      "entry_comments": [{"id": 1, "entry_id": 1, ...}],
      "_newsId": 2,
      "_entryId": 2,
      "_commentId": 2
    }

Rows are keyed by column name. The three ``_...Id`` counters hold the next
identity to assign and are stored explicitly, so identities are never
reused after deletions. A snapshot without counters (hand-written seed
files) resumes at max id + 1.

Writes go to a temporary file in the same directory which then replaces
the snapshot, so readers never observe a partial document.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from newsletter_store.domain.entities import Comment, Entry, Period
from newsletter_store.domain.services import StoreState
from newsletter_store.domain.value_objects import FIRST_ID
from newsletter_store.ports.outbound.snapshot_persister import SnapshotError

CORRUPT_SUFFIX = ".corrupt"


class SnapshotDocument(BaseModel):
    """On-disk layout of the emulator snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    newsletters: list[dict[str, Any]] = Field(default_factory=list)
    newsletter_entries: list[dict[str, Any]] = Field(default_factory=list)
    entry_comments: list[dict[str, Any]] = Field(default_factory=list)
    next_period_id: int | None = Field(default=None, alias="_newsId", ge=FIRST_ID)
    next_entry_id: int | None = Field(default=None, alias="_entryId", ge=FIRST_ID)
    next_comment_id: int | None = Field(default=None, alias="_commentId", ge=FIRST_ID)

    @classmethod
    def from_state(cls, state: StoreState) -> SnapshotDocument:
        return cls(
            newsletters=[period.to_row() for period in state.periods],
            newsletter_entries=[entry.to_row() for entry in state.entries],
            entry_comments=[comment.to_row() for comment in state.comments],
            next_period_id=state.next_period_id,
            next_entry_id=state.next_entry_id,
            next_comment_id=state.next_comment_id,
        )

    def to_state(self) -> StoreState:
        """Rebuild store state from the document.

        Raises:
            KeyError, TypeError, ValueError: If a row is malformed
        """
        periods = [Period.from_row(row) for row in self.newsletters]
        entries = [Entry.from_row(row) for row in self.newsletter_entries]
        comments = [Comment.from_row(row) for row in self.entry_comments]
        return StoreState(
            periods=periods,
            entries=entries,
            comments=comments,
            next_period_id=_next_id(self.next_period_id, periods),
            next_entry_id=_next_id(self.next_entry_id, entries),
            next_comment_id=_next_id(self.next_comment_id, comments),
        )


def _next_id(stored: int | None, rows: Sequence[Any]) -> int:
    if stored is not None:
        return stored
    return max((row.id for row in rows), default=FIRST_ID - 1) + 1


class JsonSnapshotPersister:
    """Saves the emulated store to a single JSON file.

    Attributes:
        path: Snapshot file location
    """

    def __init__(self, path: str | Path, indent: int | None = 2) -> None:
        self._path = Path(path)
        self._indent = indent

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> StoreState | None:
        if not self.exists():
            return None
        try:
            raw = self._path.read_text(encoding="utf-8")
            document = SnapshotDocument.model_validate_json(raw)
            return document.to_state()
        except (OSError, ValidationError, KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Cannot read snapshot {self._path}: {e}") from e

    def save(self, state: StoreState) -> None:
        payload = SnapshotDocument.from_state(state).model_dump_json(
            by_alias=True, indent=self._indent
        )
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def quarantine(self) -> Path | None:
        if not self.exists():
            return None
        target = self._path.with_name(self._path.name + CORRUPT_SUFFIX)
        os.replace(self._path, target)
        return target
