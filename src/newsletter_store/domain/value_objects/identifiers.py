"""Row identifiers for the three newsletter tables.

Each table has its own auto-increment sequence. Identities are assigned
by the store, start at ``FIRST_ID`` and are never reused.
"""

from __future__ import annotations

from typing import NewType


PeriodId = NewType("PeriodId", int)
"""Identity of a newsletter period (a month/year issue)."""

EntryId = NewType("EntryId", int)
"""Identity of an entry inside a period."""

CommentId = NewType("CommentId", int)
"""Identity of a reviewer comment attached to an entry."""

FIRST_ID = 1
