"""Inbound ports - the statement interface offered to callers."""

from newsletter_store.ports.inbound.connection import (
    Connection,
    ConnectionClosedError,
    PreparedStatement,
    Row,
    RunResult,
)

__all__ = [
    "Connection",
    "ConnectionClosedError",
    "PreparedStatement",
    "Row",
    "RunResult",
]
