"""Domain entities for the newsletter store.

Exports:
    Period:
        - Period: A month/year issue (``newsletters`` row)

    Entry:
        - EntryFields: Insertable entry values
        - Entry: An entry with identity (``newsletter_entries`` row)
        - EntryDraft: An entry as submitted by an editor

    Comment:
        - Comment: A reviewer comment (``entry_comments`` row)

    Table metadata:
        - PERIOD_TABLE, ENTRY_TABLE, COMMENT_TABLE: Table names
        - PERIOD_COLUMNS, ENTRY_COLUMNS, COMMENT_COLUMNS: Full column lists
        - INSERTABLE_ENTRY_COLUMNS, ENTRY_DETAIL_COLUMNS: Entry column groups
"""

from newsletter_store.domain.entities.comment import COMMENT_COLUMNS, COMMENT_TABLE, Comment
from newsletter_store.domain.entities.entry import (
    DEFAULT_ENTRY_ORDER,
    ENTRY_COLUMNS,
    ENTRY_DETAIL_COLUMNS,
    ENTRY_TABLE,
    INSERTABLE_ENTRY_COLUMNS,
    REQUIRED_ENTRY_COLUMNS,
    Entry,
    EntryDraft,
    EntryFields,
)
from newsletter_store.domain.entities.period import PERIOD_COLUMNS, PERIOD_TABLE, Period

__all__ = [
    # Period
    "Period",
    "PERIOD_TABLE",
    "PERIOD_COLUMNS",
    # Entry
    "Entry",
    "EntryFields",
    "EntryDraft",
    "ENTRY_TABLE",
    "ENTRY_COLUMNS",
    "ENTRY_DETAIL_COLUMNS",
    "INSERTABLE_ENTRY_COLUMNS",
    "REQUIRED_ENTRY_COLUMNS",
    "DEFAULT_ENTRY_ORDER",
    # Comment
    "Comment",
    "COMMENT_TABLE",
    "COMMENT_COLUMNS",
]
