"""Ports layer - interface definitions following Hexagonal Architecture.

- Inbound ports: the connection/statement API offered to callers
- Outbound ports: snapshot storage used by the emulator

Adapters implement these ports with concrete functionality.
"""

from newsletter_store.ports.inbound import (
    Connection,
    ConnectionClosedError,
    PreparedStatement,
    Row,
    RunResult,
)
from newsletter_store.ports.outbound import SnapshotError, SnapshotPersister

__all__ = [
    # Inbound ports
    "Connection",
    "ConnectionClosedError",
    "PreparedStatement",
    "Row",
    "RunResult",
    # Outbound ports
    "SnapshotError",
    "SnapshotPersister",
]
