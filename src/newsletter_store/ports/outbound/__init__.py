"""Outbound ports - dependencies on external storage."""

from newsletter_store.ports.outbound.snapshot_persister import SnapshotError, SnapshotPersister

__all__ = [
    "SnapshotError",
    "SnapshotPersister",
]
