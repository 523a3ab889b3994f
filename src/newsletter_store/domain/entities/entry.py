"""Newsletter entries: employee records and events belonging to a period."""

from __future__ import annotations

from dataclasses import dataclass, field, fields as dataclass_fields
from typing import Any, Mapping

from newsletter_store.domain.value_objects import (
    EntryCategory,
    EntryId,
    EntryType,
    PeriodId,
    collation_key,
    integer_affinity,
    text_affinity,
)

ENTRY_TABLE = "newsletter_entries"

# Optional free-text columns, in schema order.
ENTRY_DETAIL_COLUMNS: tuple[str, ...] = (
    "name",
    "position",
    "department",
    "previous_position",
    "previous_department",
    "from_position",
    "to_position",
    "from_department",
    "to_department",
    "blurb",
    "date",
    "achievement",
    "photo_url",
    "title",
    "description",
)

INSERTABLE_ENTRY_COLUMNS: tuple[str, ...] = (
    "newsletter_id",
    "category",
    "entry_type",
    *ENTRY_DETAIL_COLUMNS,
    "entry_order",
)

ENTRY_COLUMNS: tuple[str, ...] = ("id", *INSERTABLE_ENTRY_COLUMNS, "created_at", "updated_at")

REQUIRED_ENTRY_COLUMNS: tuple[str, ...] = ("newsletter_id", "category", "entry_type")

DEFAULT_ENTRY_ORDER = 0


@dataclass
class EntryFields:
    """Insertable values of an entry.

    Detail columns that were not supplied stay ``None``; they are never
    turned into empty strings.
    """

    newsletter_id: PeriodId | None
    category: str | None
    entry_type: str | None
    name: str | None = None
    position: str | None = None
    department: str | None = None
    previous_position: str | None = None
    previous_department: str | None = None
    from_position: str | None = None
    to_position: str | None = None
    from_department: str | None = None
    to_department: str | None = None
    blurb: str | None = None
    date: str | None = None
    achievement: str | None = None
    photo_url: str | None = None
    title: str | None = None
    description: str | None = None
    entry_order: int | None = DEFAULT_ENTRY_ORDER

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> EntryFields:
        """Build fields from a column -> value mapping, applying column affinity.

        Raises:
            ValueError: If the mapping names a column entries do not have
        """
        unknown = set(values) - set(INSERTABLE_ENTRY_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown entry columns: {', '.join(sorted(unknown))}")

        kwargs: dict[str, Any] = {
            "newsletter_id": integer_affinity(values.get("newsletter_id")),
            "category": text_affinity(values.get("category")),
            "entry_type": text_affinity(values.get("entry_type")),
        }
        for column in ENTRY_DETAIL_COLUMNS:
            kwargs[column] = text_affinity(values.get(column))
        if "entry_order" in values:
            kwargs["entry_order"] = integer_affinity(values["entry_order"])
        return cls(**kwargs)

    def to_row(self) -> dict[str, Any]:
        return {column.name: getattr(self, column.name) for column in dataclass_fields(self)}

    def missing_required(self) -> list[str]:
        return [column for column in REQUIRED_ENTRY_COLUMNS if getattr(self, column) is None]


@dataclass
class Entry:
    """A row of the ``newsletter_entries`` table."""

    id: EntryId
    fields: EntryFields
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def newsletter_id(self) -> PeriodId | None:
        return self.fields.newsletter_id

    def display_key(self) -> tuple[Any, ...]:
        """Ordering within a period: category, then entry_order, then id."""
        return (
            collation_key(self.fields.category),
            collation_key(self.fields.entry_order),
            self.id,
        )

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {"id": self.id}
        row.update(self.fields.to_row())
        row["created_at"] = self.created_at
        row["updated_at"] = self.updated_at
        return row

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Entry:
        values = {key: row[key] for key in INSERTABLE_ENTRY_COLUMNS if key in row}
        return cls(
            id=EntryId(int(row["id"])),
            fields=EntryFields.from_mapping(values),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass(frozen=True)
class EntryDraft:
    """An entry as an editor submits it, before it is placed in a period."""

    category: EntryCategory
    details: Mapping[str, str | None] = field(default_factory=dict)
    entry_type: EntryType | None = None

    def __post_init__(self) -> None:
        unknown = set(self.details) - set(ENTRY_DETAIL_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown entry details: {', '.join(sorted(unknown))}")

    def to_fields(self, period_id: PeriodId, order: int) -> EntryFields:
        entry_type = self.entry_type or self.category.entry_type
        return EntryFields.from_mapping(
            {
                "newsletter_id": period_id,
                "category": self.category.value,
                "entry_type": entry_type.value,
                "entry_order": order,
                **self.details,
            }
        )
