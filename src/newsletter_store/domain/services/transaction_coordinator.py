"""Transaction coordinator for the emulated engine.

A transaction is a checkpoint of the whole table store taken before the
unit of work runs. If the unit raises, the checkpoint is put back and the
original exception propagates unchanged. Nested transactions each keep
their own checkpoint, so an inner failure caught by the outer unit only
undoes the inner work.

Execution is synchronous and single-threaded: the wrapped unit runs to
completion inside the call.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from newsletter_store.domain.services.table_store import TableStore

T = TypeVar("T")


@dataclass(frozen=True)
class TransactionStats:
    """Lifetime transaction counters."""

    committed_total: int
    aborted_total: int
    active_count: int


class TransactionCoordinator:
    """Runs units of work atomically against a ``TableStore``.

    Usage:
        coordinator = TransactionCoordinator(store)
        save = coordinator.transaction(lambda: ...)
        save()

    ``on_commit`` and ``on_rollback`` fire only when the outermost
    transaction finishes.
    """

    def __init__(
        self,
        store: TableStore,
        on_commit: Callable[[], None] | None = None,
        on_rollback: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._on_commit = on_commit
        self._on_rollback = on_rollback
        self._depth = 0
        self._committed_total = 0
        self._aborted_total = 0

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @property
    def depth(self) -> int:
        return self._depth

    def transaction(self, unit_of_work: Callable[..., T]) -> Callable[..., T]:
        """Wrap ``unit_of_work`` so each call runs atomically.

        Args:
            unit_of_work: Callable issuing statements against the store

        Returns:
            A callable with the same signature and return value
        """

        @functools.wraps(unit_of_work)
        def run_atomically(*args: Any, **kwargs: Any) -> T:
            checkpoint = self._store.snapshot()
            self._depth += 1
            try:
                result = unit_of_work(*args, **kwargs)
            except BaseException:
                self._store.restore(checkpoint)
                self._aborted_total += 1
                self._depth -= 1
                if self._depth == 0 and self._on_rollback is not None:
                    self._on_rollback()
                raise

            self._committed_total += 1
            self._depth -= 1
            if self._depth == 0 and self._on_commit is not None:
                self._on_commit()
            return result

        return run_atomically

    def get_stats(self) -> TransactionStats:
        return TransactionStats(
            committed_total=self._committed_total,
            aborted_total=self._aborted_total,
            active_count=self._depth,
        )
