"""Snapshot persister port for the emulator's durable state."""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Protocol

from newsletter_store.domain.services import StoreState


class SnapshotError(Exception):
    """Raised when an existing snapshot cannot be read back."""


class SnapshotPersister(Protocol):
    """Protocol for saving and loading the whole emulated store.

    ``save`` replaces the previous snapshot entirely. Writers in other
    processes are not coordinated; the last writer wins.
    """

    @property
    @abstractmethod
    def path(self) -> Path:
        ...

    @abstractmethod
    def load(self) -> StoreState | None:
        """Read the snapshot.

        Returns:
            The stored state, or None when no snapshot exists

        Raises:
            SnapshotError: If the snapshot exists but is unreadable
        """
        ...

    @abstractmethod
    def save(self, state: StoreState) -> None:
        """Write the state, replacing any previous snapshot.

        Raises:
            OSError: If the file cannot be written
        """
        ...

    @abstractmethod
    def quarantine(self) -> Path | None:
        """Move an unreadable snapshot aside. Returns its new location."""
        ...
