"""Unit tests for the statement matcher."""

from __future__ import annotations

import pytest

from newsletter_store.adapters.inbound.statement_matcher import (
    BindingError,
    EntryIdSet,
    NewComment,
    NoParams,
    PeriodKey,
    PeriodRef,
    StatementKind,
    StatementMatcher,
    TouchPeriod,
)
from newsletter_store.domain.entities import EntryFields


@pytest.fixture
def matcher() -> StatementMatcher:
    """Create a statement matcher."""
    return StatementMatcher()


@pytest.mark.unit
class TestClassification:
    """Tests for recognizing statement shapes."""

    @pytest.mark.parametrize(
        ("sql", "kind"),
        [
            ("INSERT INTO newsletters (month, year) VALUES (?, ?)", StatementKind.INSERT_PERIOD),
            ("insert into newsletters (year, month) values (?, ?);", StatementKind.INSERT_PERIOD),
            (
                "SELECT * FROM newsletters WHERE month = ? AND year = ?",
                StatementKind.SELECT_PERIOD_BY_KEY,
            ),
            (
                "SELECT id FROM newsletters WHERE year = ? AND month = ?",
                StatementKind.SELECT_PERIOD_BY_KEY,
            ),
            (
                "UPDATE newsletters SET updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                StatementKind.TOUCH_PERIOD,
            ),
            (
                "SELECT * FROM newsletter_entries WHERE newsletter_id = ?",
                StatementKind.SELECT_ENTRIES_BY_PERIOD,
            ),
            (
                "SELECT * FROM newsletter_entries WHERE newsletter_id = ? "
                "ORDER BY category, entry_order, id",
                StatementKind.SELECT_ENTRIES_BY_PERIOD,
            ),
            (
                "SELECT * FROM entry_comments WHERE entry_id IN (?, ?, ?) ORDER BY created_at",
                StatementKind.SELECT_COMMENTS_BY_ENTRY_IDS,
            ),
            (
                "SELECT * FROM entry_comments WHERE entry_id = ?",
                StatementKind.SELECT_COMMENTS_BY_ENTRY_IDS,
            ),
            (
                "INSERT INTO newsletter_entries (newsletter_id, category, entry_type, name) "
                "VALUES (?, ?, ?, ?)",
                StatementKind.INSERT_ENTRY,
            ),
            (
                "DELETE FROM newsletter_entries WHERE newsletter_id = ?",
                StatementKind.DELETE_ENTRIES_BY_PERIOD,
            ),
            (
                "INSERT INTO entry_comments (entry_id, user, content) VALUES (?, ?, ?)",
                StatementKind.INSERT_COMMENT,
            ),
            (
                "CREATE INDEX IF NOT EXISTS idx_x ON newsletter_entries(category)",
                StatementKind.SCHEMA,
            ),
            ("PRAGMA foreign_keys = ON", StatementKind.SCHEMA),
        ],
    )
    def test_recognized_shapes(self, matcher: StatementMatcher, sql: str, kind: StatementKind) -> None:
        """Test each supported statement maps to its kind."""
        assert matcher.match(sql).kind is kind

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT * FROM newsletters",
            "SELECT * FROM newsletters WHERE month = ?",
            "SELECT * FROM users WHERE id = ?",
            "SELECT COUNT(*) FROM newsletter_entries WHERE newsletter_id = ?",
            "SELECT * FROM newsletter_entries e JOIN entry_comments c ON c.entry_id = e.id",
            "UPDATE newsletters SET month = ? WHERE id = ?",
            "DELETE FROM newsletters WHERE id = ?",
            "DELETE FROM newsletter_entries",
            "INSERT INTO newsletter_entries (name) VALUES (?)",
            "INSERT INTO newsletter_entries (newsletter_id, category, entry_type, nickname) "
            "VALUES (?, ?, ?, ?)",
            "INSERT INTO newsletters (month, year) VALUES (?)",
            "INSERT OR IGNORE INTO newsletters (month, year) VALUES (?, ?)",
            "SELECT 1; SELECT 2",
            "BEGIN",
            "",
            "SELECT * FROM newsletters WHERE month = 'unterminated",
        ],
    )
    def test_unrecognized(self, matcher: StatementMatcher, sql: str) -> None:
        """Test statements outside the supported shapes are unrecognized, not errors."""
        matched = matcher.match(sql)

        assert matched.kind is StatementKind.UNRECOGNIZED
        assert matched.is_recognized is False

    def test_quoted_identifiers(self, matcher: StatementMatcher) -> None:
        """Test double-quoted column names are accepted."""
        matched = matcher.match('INSERT INTO entry_comments (entry_id, "user", content) VALUES (?, ?, ?)')

        assert matched.kind is StatementKind.INSERT_COMMENT

    def test_mutating_kinds(self) -> None:
        """Test which kinds trigger persistence."""
        mutating = {kind for kind in StatementKind if kind.is_mutating}

        assert mutating == {
            StatementKind.INSERT_PERIOD,
            StatementKind.TOUCH_PERIOD,
            StatementKind.INSERT_ENTRY,
            StatementKind.DELETE_ENTRIES_BY_PERIOD,
            StatementKind.INSERT_COMMENT,
        }

    def test_projection(self, matcher: StatementMatcher) -> None:
        """Test explicit column lists are kept for projection."""
        assert matcher.match("SELECT * FROM newsletters WHERE month = ? AND year = ?").projection is None
        assert matcher.match(
            "SELECT id, month FROM newsletters WHERE month = ? AND year = ?"
        ).projection == ("id", "month")

    def test_match_script_splits_statements(self, matcher: StatementMatcher) -> None:
        """Test scripts are split on semicolons."""
        script = (
            "CREATE TABLE IF NOT EXISTS t (id INTEGER);\n"
            "INSERT INTO newsletters (month, year) VALUES ('May', '2026');\n"
            "VACUUM;"
        )

        kinds = [m.kind for m in matcher.match_script(script)]

        assert kinds == [StatementKind.SCHEMA, StatementKind.INSERT_PERIOD, StatementKind.SCHEMA]


@pytest.mark.unit
class TestBinding:
    """Tests for binding positional parameters."""

    def test_bind_period_key_in_column_order(self, matcher: StatementMatcher) -> None:
        """Test parameters follow the statement's column order."""
        matched = matcher.match("INSERT INTO newsletters (year, month) VALUES (?, ?)")

        assert matched.bind(("2027", "March")) == PeriodKey(month="March", year="2027")

    def test_bind_select_conditions_any_order(self, matcher: StatementMatcher) -> None:
        """Test WHERE conditions bind by column name."""
        matched = matcher.match("SELECT * FROM newsletters WHERE year = ? AND month = ?")

        assert matched.bind(("2027", "March")) == PeriodKey(month="March", year="2027")

    def test_bind_literals(self, matcher: StatementMatcher) -> None:
        """Test literal values need no parameters."""
        matched = matcher.match("SELECT * FROM newsletters WHERE month = 'March' AND year = 2027")

        assert matched.parameter_count == 0
        assert matched.bind(()) == PeriodKey(month="March", year=2027)

    def test_bind_touch(self, matcher: StatementMatcher) -> None:
        """Test CURRENT_TIMESTAMP binds as 'now' and explicit values pass through."""
        now = matcher.match("UPDATE newsletters SET updated_at = CURRENT_TIMESTAMP WHERE id = ?")
        explicit = matcher.match("UPDATE newsletters SET updated_at = ? WHERE id = ?")

        assert now.bind((5,)) == TouchPeriod(period_id=5, updated_at=None)
        assert explicit.bind(("2027-03-01 10:00:00", 5)) == TouchPeriod(
            period_id=5, updated_at="2027-03-01 10:00:00"
        )

    def test_bind_period_ref(self, matcher: StatementMatcher) -> None:
        """Test period reference binding."""
        matched = matcher.match("DELETE FROM newsletter_entries WHERE newsletter_id = ?")

        assert matched.bind((3,)) == PeriodRef(period_id=3)

    def test_bind_entry_id_set(self, matcher: StatementMatcher) -> None:
        """Test IN lists of any length, including empty."""
        three = matcher.match("SELECT * FROM entry_comments WHERE entry_id IN (?, ?, ?)")
        empty = matcher.match("SELECT * FROM entry_comments WHERE entry_id IN ()")

        assert three.bind((1, 2, 9999)) == EntryIdSet(entry_ids=(1, 2, 9999))
        assert empty.bind(()) == EntryIdSet(entry_ids=())

    def test_bind_entry_fields(self, matcher: StatementMatcher) -> None:
        """Test omitted entry columns bind as None, never empty strings."""
        matched = matcher.match(
            "INSERT INTO newsletter_entries (newsletter_id, category, entry_type, name, blurb) "
            "VALUES (?, ?, ?, ?, NULL)"
        )

        fields = matched.bind((1, "newHires", "employee", "Grace Banda"))

        assert isinstance(fields, EntryFields)
        assert fields.name == "Grace Banda"
        assert fields.blurb is None
        assert fields.position is None
        assert fields.entry_order == 0

    def test_bind_keyword_named_columns(self, matcher: StatementMatcher) -> None:
        """Test date and position are treated as columns and bind in statement order."""
        matched = matcher.match(
            "INSERT INTO newsletter_entries (date, position, newsletter_id, category, entry_type) "
            "VALUES (?, ?, ?, ?, ?)"
        )

        fields = matched.bind(("2027-03-14", "Data Engineer", 1, "events", "event"))

        assert matched.kind is StatementKind.INSERT_ENTRY
        assert fields.date == "2027-03-14"
        assert fields.position == "Data Engineer"
        assert fields.newsletter_id == 1

    def test_bind_comment(self, matcher: StatementMatcher) -> None:
        """Test comment binding."""
        matched = matcher.match("INSERT INTO entry_comments (entry_id, user, content) VALUES (?, ?, ?)")

        assert matched.bind(("4", "bob", "Nice hire")) == NewComment(
            entry_id=4, user="bob", content="Nice hire"
        )

    def test_negative_literal(self, matcher: StatementMatcher) -> None:
        """Test negative numeric literals."""
        matched = matcher.match(
            "INSERT INTO newsletter_entries (newsletter_id, category, entry_type, entry_order) "
            "VALUES (?, ?, ?, -1)"
        )

        assert matched.bind((1, "events", "event")).entry_order == -1

    @pytest.mark.parametrize("params", [(), ("March",), ("March", "2027", "extra")])
    def test_wrong_parameter_count(self, matcher: StatementMatcher, params: tuple) -> None:
        """Test a recognized shape rejects the wrong number of parameters."""
        matched = matcher.match("INSERT INTO newsletters (month, year) VALUES (?, ?)")

        with pytest.raises(BindingError):
            matched.bind(params)

    def test_unrecognized_binds_anything(self, matcher: StatementMatcher) -> None:
        """Test unrecognized statements never fail binding."""
        matched = matcher.match("SELECT * FROM users WHERE id = ?")

        assert matched.bind((1, 2, 3)) == NoParams()
