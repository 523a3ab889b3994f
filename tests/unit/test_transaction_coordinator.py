"""Unit tests for the transaction coordinator."""

from __future__ import annotations

import pytest

from newsletter_store.domain.entities import EntryFields
from newsletter_store.domain.services import TableStore, TransactionCoordinator


class Boom(Exception):
    pass


@pytest.fixture
def store() -> TableStore:
    """Create an empty table store."""
    return TableStore()


@pytest.fixture
def coordinator(store: TableStore) -> TransactionCoordinator:
    """Create a coordinator over the store."""
    return TransactionCoordinator(store)


@pytest.mark.unit
class TestTransactionCoordinator:
    """Tests for checkpoint/restore transactions."""

    def test_commit_keeps_changes_and_returns_value(
        self, store: TableStore, coordinator: TransactionCoordinator
    ) -> None:
        """Test a successful unit keeps its writes and returns its result."""
        save = coordinator.transaction(lambda month: store.insert_period(month, "2027"))

        assert save("March") == 1
        assert store.find_period("March", "2027") is not None
        assert coordinator.get_stats().committed_total == 1

    def test_rollback_restores_everything(
        self, store: TableStore, coordinator: TransactionCoordinator
    ) -> None:
        """Test a failing unit leaves no trace, counters included."""
        period_id = store.insert_period("March", "2027")
        before = store.get_stats()

        def unit() -> None:
            store.touch_period(period_id, "changed")
            entry_id = store.insert_entry(
                EntryFields(newsletter_id=period_id, category="newHires", entry_type="employee")
            )
            store.insert_comment(entry_id, "bob", "x")
            raise Boom("fail")

        with pytest.raises(Boom):
            coordinator.transaction(unit)()

        assert store.get_stats() == before
        assert store.find_period("March", "2027").updated_at != "changed"
        assert store.state.next_entry_id == 1
        assert store.state.next_comment_id == 1
        assert coordinator.get_stats().aborted_total == 1

    def test_original_exception_propagates(self, coordinator: TransactionCoordinator) -> None:
        """Test the exception object is re-raised unchanged."""
        error = Boom("original")

        def unit() -> None:
            raise error

        with pytest.raises(Boom) as exc_info:
            coordinator.transaction(unit)()

        assert exc_info.value is error

    def test_nested_inner_failure_caught_by_outer(
        self, store: TableStore, coordinator: TransactionCoordinator
    ) -> None:
        """Test an inner rollback only undoes the inner work."""

        def inner() -> None:
            store.insert_period("Inner", "2027")
            raise Boom("inner")

        def outer() -> None:
            store.insert_period("Outer", "2027")
            with pytest.raises(Boom):
                coordinator.transaction(inner)()

        coordinator.transaction(outer)()

        assert store.find_period("Outer", "2027") is not None
        assert store.find_period("Inner", "2027") is None

    def test_outer_failure_undoes_committed_inner(
        self, store: TableStore, coordinator: TransactionCoordinator
    ) -> None:
        """Test an outer rollback also undoes a committed inner unit."""
        inner = coordinator.transaction(lambda: store.insert_period("Inner", "2027"))

        def outer() -> None:
            inner()
            raise Boom("outer")

        with pytest.raises(Boom):
            coordinator.transaction(outer)()

        assert store.get_stats().periods == 0

    def test_hooks_fire_at_outermost_level_only(self, store: TableStore) -> None:
        """Test commit and rollback hooks are not called for nested units."""
        events: list[str] = []
        coordinator = TransactionCoordinator(
            store,
            on_commit=lambda: events.append("commit"),
            on_rollback=lambda: events.append("rollback"),
        )
        inner = coordinator.transaction(lambda: store.insert_period("A", "1"))

        def failing() -> None:
            inner()
            raise Boom("outer")

        coordinator.transaction(lambda: inner())()
        with pytest.raises(Boom):
            coordinator.transaction(failing)()

        assert events == ["commit", "rollback"]

    def test_depth_tracking(self, coordinator: TransactionCoordinator) -> None:
        """Test in_transaction reflects the running unit."""
        seen: list[int] = []

        def unit() -> None:
            seen.append(coordinator.depth)
            coordinator.transaction(lambda: seen.append(coordinator.depth))()

        assert coordinator.in_transaction is False
        coordinator.transaction(unit)()

        assert seen == [1, 2]
        assert coordinator.get_stats().active_count == 0

    def test_wraps_preserves_name(self, coordinator: TransactionCoordinator) -> None:
        """Test the wrapper keeps the unit's name."""

        def save_issue() -> None:
            pass

        assert coordinator.transaction(save_issue).__name__ == "save_issue"

    def test_interrupt_rolls_back_and_resets_depth(self, store: TableStore) -> None:
        """Test a KeyboardInterrupt restores the store and leaves no open unit behind."""
        events: list[str] = []
        coordinator = TransactionCoordinator(
            store,
            on_commit=lambda: events.append("commit"),
            on_rollback=lambda: events.append("rollback"),
        )

        def unit() -> None:
            store.insert_period("March", "2027")
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            coordinator.transaction(unit)()

        assert store.get_stats().periods == 0
        assert coordinator.in_transaction is False
        assert coordinator.get_stats().active_count == 0
        assert coordinator.get_stats().aborted_total == 1
        assert events == ["rollback"]

        coordinator.transaction(lambda: store.insert_period("April", "2027"))()

        assert events == ["rollback", "commit"]
