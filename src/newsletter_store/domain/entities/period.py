"""Newsletter period: one issue, keyed by month and year."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from newsletter_store.domain.value_objects import PeriodId, integer_affinity, text_affinity

PERIOD_TABLE = "newsletters"

PERIOD_COLUMNS: tuple[str, ...] = ("id", "month", "year", "created_at", "updated_at")


@dataclass
class Period:
    """A row of the ``newsletters`` table.

    ``(month, year)`` is unique in the native schema. The emulator leaves
    uniqueness to callers, which use get-or-create.
    """

    id: PeriodId
    month: str
    year: str
    created_at: str | None = None
    updated_at: str | None = None

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "month": self.month,
            "year": self.year,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Period:
        return cls(
            id=PeriodId(int(row["id"])),
            month=text_affinity(row.get("month")),
            year=text_affinity(row.get("year")),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def matches(self, month: Any, year: Any) -> bool:
        return self.month == text_affinity(month) and self.year == text_affinity(year)

    def has_id(self, value: Any) -> bool:
        return self.id == integer_affinity(value)
