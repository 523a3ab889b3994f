"""Enumerations used across the newsletter store."""

from __future__ import annotations

from enum import Enum


class EntryType(str, Enum):
    """Kind of record an entry describes."""

    EMPLOYEE = "employee"
    EVENT = "event"


class EntryCategory(str, Enum):
    """Newsletter sections. Values are the wire names stored in ``category``."""

    NEW_HIRES = "newHires"
    PROMOTIONS = "promotions"
    TRANSFERS = "transfers"
    BIRTHDAYS = "birthdays"
    ANNIVERSARIES = "anniversaries"
    EXITING_EMPLOYEES = "exitingEmployees"
    BEST_EMPLOYEE = "bestEmployee"
    BEST_PERFORMER = "bestPerformer"
    EVENTS = "events"

    @property
    def entry_type(self) -> EntryType:
        """Entry type stored for entries of this category."""
        if self is EntryCategory.EVENTS:
            return EntryType.EVENT
        return EntryType.EMPLOYEE

    @property
    def is_single(self) -> bool:
        """Spotlight sections hold at most one entry per issue."""
        return self in (EntryCategory.BEST_EMPLOYEE, EntryCategory.BEST_PERFORMER)


class ExecutionMode(str, Enum):
    """Deployment mode the engine selector bases its policy on."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TEST = "test"

    @property
    def allows_fallback(self) -> bool:
        """Whether a failing native engine may be replaced by the emulator."""
        return self is not ExecutionMode.PRODUCTION


class EngineKind(str, Enum):
    """Which engine backs a connection."""

    NATIVE = "native"
    EMULATED = "emulated"
