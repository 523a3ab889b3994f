"""Outbound adapters - SQLite connection and JSON snapshot storage."""

from newsletter_store.adapters.outbound.json_snapshot_persister import (
    JsonSnapshotPersister,
    SnapshotDocument,
)
from newsletter_store.adapters.outbound.sqlite_connection import SqliteConnection, SqliteStatement

__all__ = [
    "JsonSnapshotPersister",
    "SnapshotDocument",
    "SqliteConnection",
    "SqliteStatement",
]
