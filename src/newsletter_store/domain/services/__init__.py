"""Domain services for the newsletter store.

Exports:
    - TableStore: Typed operations over the emulated tables
    - StoreState: Tables plus identity counters
    - StoreStats: Row counts per table
    - StoreError, ConstraintViolationError: Store errors
    - current_timestamp: SQLite-formatted UTC timestamp
    - TransactionCoordinator: Checkpoint/restore transactions
    - TransactionStats: Transaction counters
"""

from newsletter_store.domain.services.table_store import (
    ConstraintViolationError,
    StoreError,
    StoreState,
    StoreStats,
    TableStore,
    current_timestamp,
)
from newsletter_store.domain.services.transaction_coordinator import (
    TransactionCoordinator,
    TransactionStats,
)

__all__ = [
    "TableStore",
    "StoreState",
    "StoreStats",
    "StoreError",
    "ConstraintViolationError",
    "current_timestamp",
    "TransactionCoordinator",
    "TransactionStats",
]
