"""Value objects for the newsletter store domain.

Exports:
    Identifiers:
        - PeriodId, EntryId, CommentId: Per-table row identities
        - FIRST_ID: First identity handed out by each table

    Enumerations:
        - EntryCategory: Newsletter sections
        - EntryType: employee or event
        - ExecutionMode: production, development or test
        - EngineKind: native or emulated

    Affinity:
        - integer_affinity, text_affinity: SQLite-style value conversion
        - collation_key: SQLite-style sort key
"""

from newsletter_store.domain.value_objects.affinity import (
    collation_key,
    integer_affinity,
    text_affinity,
)
from newsletter_store.domain.value_objects.identifiers import (
    FIRST_ID,
    CommentId,
    EntryId,
    PeriodId,
)
from newsletter_store.domain.value_objects.newsletter_types import (
    EngineKind,
    EntryCategory,
    EntryType,
    ExecutionMode,
)

__all__ = [
    # Identifiers
    "PeriodId",
    "EntryId",
    "CommentId",
    "FIRST_ID",
    # Enumerations
    "EntryCategory",
    "EntryType",
    "ExecutionMode",
    "EngineKind",
    # Affinity
    "integer_affinity",
    "text_affinity",
    "collation_key",
]
