"""Statement matcher for the emulated engine, built on sqlglot's tokenizer.

The emulator understands the handful of statements the newsletter
application issues, not SQL in general. A statement is tokenized with the
SQLite dialect and walked as keyword + table + clause shape; the result is
one ``StatementKind`` plus the positions of its value slots. Anything that
does not fit a known shape is ``UNRECOGNIZED`` (a no-op for the emulator).

Recognized shapes:
    INSERT INTO newsletters (month, year) VALUES (?, ?)
    SELECT * FROM newsletters WHERE month = ? AND year = ?
    UPDATE newsletters SET updated_at = CURRENT_TIMESTAMP WHERE id = ?
    SELECT * FROM newsletter_entries WHERE newsletter_id = ? [ORDER BY ...]
    SELECT * FROM entry_comments WHERE entry_id IN (?, ...)
    INSERT INTO newsletter_entries (<entry columns>) VALUES (...)
    DELETE FROM newsletter_entries WHERE newsletter_id = ?
    INSERT INTO entry_comments (entry_id, user, content) VALUES (?, ?, ?)

Column lists and WHERE conditions may appear in any order; value slots
accept ``?`` placeholders, literals, NULL and CURRENT_TIMESTAMP.

Keywords are compared on token text rather than token type, because the
schema uses column names (``user``, ``date``, ``position``) that SQL
treats as keywords or functions.

Statements are not parsed with ``sqlglot.parse_one``. The AST would turn
``date`` and ``user`` into function and session-user nodes and normalize
away the column order that value slots are bound by. The matcher only has
to pick one of a fixed set of shapes, so the token stream is enough.

References:
    - sqlglot tokenizer: https://sqlglot.com/sqlglot/tokens.html
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence, Union

import sqlglot
from sqlglot.errors import SqlglotError
from sqlglot.tokens import Token, TokenType

from newsletter_store.domain.entities import (
    COMMENT_COLUMNS,
    COMMENT_TABLE,
    ENTRY_COLUMNS,
    ENTRY_TABLE,
    INSERTABLE_ENTRY_COLUMNS,
    PERIOD_COLUMNS,
    PERIOD_TABLE,
    REQUIRED_ENTRY_COLUMNS,
    EntryFields,
)
from newsletter_store.domain.services import current_timestamp
from newsletter_store.domain.value_objects import integer_affinity


class StatementKind(Enum):
    """Statement shapes the emulator can execute."""

    INSERT_PERIOD = "insert_period"
    SELECT_PERIOD_BY_KEY = "select_period_by_key"
    TOUCH_PERIOD = "touch_period"
    SELECT_ENTRIES_BY_PERIOD = "select_entries_by_period"
    SELECT_COMMENTS_BY_ENTRY_IDS = "select_comments_by_entry_ids"
    INSERT_ENTRY = "insert_entry"
    DELETE_ENTRIES_BY_PERIOD = "delete_entries_by_period"
    INSERT_COMMENT = "insert_comment"
    SCHEMA = "schema"
    UNRECOGNIZED = "unrecognized"

    @property
    def is_mutating(self) -> bool:
        return self in _MUTATING_KINDS


_MUTATING_KINDS = frozenset(
    {
        StatementKind.INSERT_PERIOD,
        StatementKind.TOUCH_PERIOD,
        StatementKind.INSERT_ENTRY,
        StatementKind.DELETE_ENTRIES_BY_PERIOD,
        StatementKind.INSERT_COMMENT,
    }
)

# Leading keywords of statements that only affect schema or engine settings.
SCHEMA_KEYWORDS = frozenset({"CREATE", "DROP", "ALTER", "PRAGMA", "VACUUM", "ANALYZE", "REINDEX"})

TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    PERIOD_TABLE: PERIOD_COLUMNS,
    ENTRY_TABLE: ENTRY_COLUMNS,
    COMMENT_TABLE: COMMENT_COLUMNS,
}

COMMENT_INSERT_COLUMNS = frozenset({"entry_id", "user", "content"})


class BindingError(ValueError):
    """Positional parameters do not match the statement's placeholders."""


# Typed parameters, one shape per statement kind


@dataclass(frozen=True)
class PeriodKey:
    month: Any
    year: Any


@dataclass(frozen=True)
class PeriodRef:
    period_id: Any


@dataclass(frozen=True)
class TouchPeriod:
    period_id: Any
    updated_at: str | None  # None means "now"


@dataclass(frozen=True)
class EntryIdSet:
    entry_ids: tuple[Any, ...]


@dataclass(frozen=True)
class NewComment:
    entry_id: Any
    user: Any
    content: Any


@dataclass(frozen=True)
class NoParams:
    pass


StatementParams = Union[PeriodKey, PeriodRef, TouchPeriod, EntryIdSet, EntryFields, NewComment, NoParams]


@dataclass(frozen=True)
class ValueSlot:
    """A value position: a placeholder, a literal or CURRENT_TIMESTAMP."""

    placeholder: int | None = None
    constant: Any = None
    current_timestamp: bool = False

    def resolve(self, params: Sequence[Any]) -> Any:
        if self.placeholder is not None:
            return params[self.placeholder]
        if self.current_timestamp:
            return current_timestamp()
        return self.constant


@dataclass(frozen=True)
class Condition:
    """``column = slot`` or ``column IN (slots)`` inside a WHERE clause."""

    column: str
    operator: str  # "=" or "IN"
    slots: tuple[ValueSlot, ...]


@dataclass(frozen=True)
class MatchedStatement:
    """A classified statement, ready to bind parameters.

    Attributes:
        source: Statement text
        kind: Recognized shape
        table: Target table, when one was found
        columns: INSERT column list or UPDATE assignment targets
        values: Slots matching ``columns``
        conditions: WHERE conditions
        projection: Selected columns, None for ``*``
        parameter_count: Number of ``?`` placeholders
    """

    source: str
    kind: StatementKind
    table: str | None = None
    columns: tuple[str, ...] = ()
    values: tuple[ValueSlot, ...] = ()
    conditions: tuple[Condition, ...] = ()
    projection: tuple[str, ...] | None = None
    parameter_count: int = 0

    @property
    def is_recognized(self) -> bool:
        return self.kind is not StatementKind.UNRECOGNIZED

    def bind(self, params: Sequence[Any]) -> StatementParams:
        """Turn positional parameters into the typed parameters of this kind.

        Unrecognized statements accept any parameters.

        Raises:
            BindingError: If the number of parameters differs from the
                number of placeholders
        """
        if self.kind is StatementKind.UNRECOGNIZED:
            return NoParams()
        if len(params) != self.parameter_count:
            raise BindingError(
                f"Statement expects {self.parameter_count} parameter(s), got {len(params)}"
            )

        kind = self.kind
        if kind is StatementKind.INSERT_PERIOD:
            values = self._assigned(params)
            return PeriodKey(month=values["month"], year=values["year"])
        if kind is StatementKind.SELECT_PERIOD_BY_KEY:
            where = self._where(params)
            return PeriodKey(month=where["month"][0], year=where["year"][0])
        if kind is StatementKind.TOUCH_PERIOD:
            slot = self.values[0]
            updated_at = None if slot.current_timestamp else slot.resolve(params)
            return TouchPeriod(period_id=self._where(params)["id"][0], updated_at=updated_at)
        if kind in (StatementKind.SELECT_ENTRIES_BY_PERIOD, StatementKind.DELETE_ENTRIES_BY_PERIOD):
            return PeriodRef(period_id=self._where(params)["newsletter_id"][0])
        if kind is StatementKind.SELECT_COMMENTS_BY_ENTRY_IDS:
            return EntryIdSet(entry_ids=self._where(params)["entry_id"])
        if kind is StatementKind.INSERT_ENTRY:
            return EntryFields.from_mapping(self._assigned(params))
        if kind is StatementKind.INSERT_COMMENT:
            values = self._assigned(params)
            return NewComment(
                entry_id=integer_affinity(values["entry_id"]),
                user=values["user"],
                content=values["content"],
            )
        return NoParams()

    def _assigned(self, params: Sequence[Any]) -> dict[str, Any]:
        return {column: slot.resolve(params) for column, slot in zip(self.columns, self.values)}

    def _where(self, params: Sequence[Any]) -> dict[str, tuple[Any, ...]]:
        return {
            condition.column: tuple(slot.resolve(params) for slot in condition.slots)
            for condition in self.conditions
        }


# Lexing


class _LexKind(Enum):
    WORD = "word"
    PARAM = "param"
    STRING = "string"
    NUMBER = "number"
    PUNCT = "punct"


_PUNCTUATION: dict[TokenType, str] = {
    TokenType.L_PAREN: "(",
    TokenType.R_PAREN: ")",
    TokenType.COMMA: ",",
    TokenType.DOT: ".",
    TokenType.EQ: "=",
    TokenType.STAR: "*",
    TokenType.SEMICOLON: ";",
    TokenType.DASH: "-",
}


@dataclass(frozen=True)
class _Lexeme:
    kind: _LexKind
    text: str
    start: int
    end: int
    placeholder: int | None = None

    @property
    def name(self) -> str:
        return self.text.lower()


class _NoMatch(Exception):
    """Internal signal: the lexemes do not form a recognized shape."""


def _lexemes_for(token: Token) -> list[_Lexeme]:
    token_type = token.token_type
    if token_type == TokenType.PLACEHOLDER:
        return [_Lexeme(_LexKind.PARAM, token.text, token.start, token.end)]
    if token_type == TokenType.STRING:
        return [_Lexeme(_LexKind.STRING, token.text, token.start, token.end)]
    if token_type == TokenType.NUMBER:
        return [_Lexeme(_LexKind.NUMBER, token.text, token.start, token.end)]
    if token_type == TokenType.IDENTIFIER:
        return [_Lexeme(_LexKind.WORD, token.text, token.start, token.end)]
    if token_type in _PUNCTUATION:
        return [_Lexeme(_LexKind.PUNCT, _PUNCTUATION[token_type], token.start, token.end)]
    # Keywords and bare names; multi-word keywords such as ORDER BY are split.
    return [
        _Lexeme(_LexKind.WORD, word, token.start, token.end)
        for word in token.text.split()
    ]


class _Cursor:
    """Forward-only reader over one statement's lexemes."""

    def __init__(self, lexemes: Sequence[_Lexeme]) -> None:
        self._lexemes = lexemes
        self._pos = 0

    def at_end(self) -> bool:
        return self._pos >= len(self._lexemes)

    def peek(self) -> _Lexeme | None:
        if self.at_end():
            return None
        return self._lexemes[self._pos]

    def advance(self) -> _Lexeme:
        lexeme = self.peek()
        if lexeme is None:
            raise _NoMatch("unexpected end of statement")
        self._pos += 1
        return lexeme

    def accept_word(self, *words: str) -> bool:
        end = self._pos + len(words)
        candidates = self._lexemes[self._pos:end]
        if len(candidates) != len(words):
            return False
        for lexeme, word in zip(candidates, words):
            if lexeme.kind is not _LexKind.WORD or lexeme.text.upper() != word:
                return False
        self._pos = end
        return True

    def expect_word(self, *words: str) -> None:
        if not self.accept_word(*words):
            raise _NoMatch(f"expected {' '.join(words)}")

    def accept_punct(self, text: str) -> bool:
        lexeme = self.peek()
        if lexeme is not None and lexeme.kind is _LexKind.PUNCT and lexeme.text == text:
            self._pos += 1
            return True
        return False

    def expect_punct(self, text: str) -> None:
        if not self.accept_punct(text):
            raise _NoMatch(f"expected {text!r}")

    def expect_end(self) -> None:
        if not self.at_end():
            raise _NoMatch("trailing tokens")

    def name(self) -> str:
        lexeme = self.advance()
        if lexeme.kind is not _LexKind.WORD:
            raise _NoMatch("expected a name")
        return lexeme.name

    def names(self) -> tuple[str, ...]:
        """Comma separated names, without surrounding parentheses."""
        result = [self.name()]
        while self.accept_punct(","):
            result.append(self.name())
        return tuple(result)

    def slot(self) -> ValueSlot:
        negative = self.accept_punct("-")
        lexeme = self.advance()
        if negative and lexeme.kind is not _LexKind.NUMBER:
            raise _NoMatch("expected a number after '-'")
        if lexeme.kind is _LexKind.PARAM:
            return ValueSlot(placeholder=lexeme.placeholder)
        if lexeme.kind is _LexKind.STRING:
            return ValueSlot(constant=lexeme.text)
        if lexeme.kind is _LexKind.NUMBER:
            number = _parse_number(lexeme.text)
            return ValueSlot(constant=-number if negative else number)
        if lexeme.kind is _LexKind.WORD:
            word = lexeme.text.upper()
            if word == "NULL":
                return ValueSlot(constant=None)
            if word == "CURRENT_TIMESTAMP":
                return ValueSlot(current_timestamp=True)
        raise _NoMatch(f"unsupported value {lexeme.text!r}")

    def slots(self) -> tuple[ValueSlot, ...]:
        """Parenthesized, comma separated value slots; may be empty."""
        self.expect_punct("(")
        if self.accept_punct(")"):
            return ()
        result = [self.slot()]
        while self.accept_punct(","):
            result.append(self.slot())
        self.expect_punct(")")
        return tuple(result)


def _parse_number(text: str) -> int | float:
    try:
        return int(text)
    except ValueError:
        return float(text)


class StatementMatcher:
    """Classifies statement strings into ``MatchedStatement`` objects.

    Matching never raises: tokenizer errors and unknown shapes both yield
    ``StatementKind.UNRECOGNIZED``.

    Usage:
        matcher = StatementMatcher()
        matched = matcher.match("SELECT * FROM newsletters WHERE month = ? AND year = ?")
        params = matched.bind(("March", "2027"))
    """

    def __init__(self, dialect: str = "sqlite") -> None:
        self._dialect = dialect
        self._parsers = {
            "INSERT": self._match_insert,
            "SELECT": self._match_select,
            "UPDATE": self._match_update,
            "DELETE": self._match_delete,
        }

    def match(self, sql: str) -> MatchedStatement:
        """Classify a single statement. A trailing semicolon is allowed."""
        statements = self._split(sql)
        if not statements or len(statements) > 1:
            return MatchedStatement(source=sql, kind=StatementKind.UNRECOGNIZED)
        return self._classify(sql, statements[0])

    def match_script(self, sql: str) -> list[MatchedStatement]:
        """Classify every statement of a semicolon separated script."""
        statements = self._split(sql)
        if statements is None:
            return [MatchedStatement(source=sql, kind=StatementKind.UNRECOGNIZED)]
        return [
            self._classify(sql[lexemes[0].start:lexemes[-1].end + 1], lexemes)
            for lexemes in statements
        ]

    def _split(self, sql: str) -> list[list[_Lexeme]] | None:
        try:
            tokens = sqlglot.tokenize(sql, read=self._dialect)
        except SqlglotError:
            return None

        statements: list[list[_Lexeme]] = []
        current: list[_Lexeme] = []
        placeholders = 0
        for token in tokens:
            for lexeme in _lexemes_for(token):
                if lexeme.kind is _LexKind.PUNCT and lexeme.text == ";":
                    if current:
                        statements.append(current)
                    current = []
                    placeholders = 0
                    continue
                if lexeme.kind is _LexKind.PARAM:
                    lexeme = _Lexeme(
                        _LexKind.PARAM, lexeme.text, lexeme.start, lexeme.end, placeholders
                    )
                    placeholders += 1
                current.append(lexeme)
        if current:
            statements.append(current)
        return statements

    def _classify(self, source: str, lexemes: Sequence[_Lexeme]) -> MatchedStatement:
        first = lexemes[0]
        keyword = first.text.upper() if first.kind is _LexKind.WORD else ""
        parameter_count = sum(1 for lexeme in lexemes if lexeme.kind is _LexKind.PARAM)

        if keyword in SCHEMA_KEYWORDS:
            return MatchedStatement(
                source=source, kind=StatementKind.SCHEMA, parameter_count=parameter_count
            )

        parser = self._parsers.get(keyword)
        if parser is not None:
            try:
                matched = parser(source, _Cursor(lexemes))
            except _NoMatch:
                matched = None
            if matched is not None:
                return matched
        return MatchedStatement(
            source=source, kind=StatementKind.UNRECOGNIZED, parameter_count=parameter_count
        )

    # Shapes

    def _match_insert(self, source: str, cursor: _Cursor) -> MatchedStatement | None:
        cursor.expect_word("INSERT", "INTO")
        table = cursor.name()
        cursor.expect_punct("(")
        columns = cursor.names()
        cursor.expect_punct(")")
        cursor.expect_word("VALUES")
        values = cursor.slots()
        cursor.expect_end()

        if len(columns) != len(values) or len(set(columns)) != len(columns):
            return None

        column_set = set(columns)
        if table == PERIOD_TABLE and column_set == {"month", "year"}:
            kind = StatementKind.INSERT_PERIOD
        elif (
            table == ENTRY_TABLE
            and column_set >= set(REQUIRED_ENTRY_COLUMNS)
            and column_set <= set(INSERTABLE_ENTRY_COLUMNS)
        ):
            kind = StatementKind.INSERT_ENTRY
        elif table == COMMENT_TABLE and column_set == COMMENT_INSERT_COLUMNS:
            kind = StatementKind.INSERT_COMMENT
        else:
            return None

        return MatchedStatement(
            source=source,
            kind=kind,
            table=table,
            columns=columns,
            values=values,
            parameter_count=_count_placeholders(values),
        )

    def _match_select(self, source: str, cursor: _Cursor) -> MatchedStatement | None:
        cursor.expect_word("SELECT")
        projection: tuple[str, ...] | None
        if cursor.accept_punct("*"):
            projection = None
        else:
            projection = cursor.names()
        cursor.expect_word("FROM")
        table = cursor.name()
        conditions = self._where_clause(cursor)
        order_by = self._order_by_clause(cursor)
        cursor.expect_end()

        known = TABLE_COLUMNS.get(table)
        if known is None:
            return None
        referenced = set(projection or ()) | set(order_by)
        if not referenced <= set(known):
            return None

        shape = _condition_shape(conditions)
        if table == PERIOD_TABLE and shape == {("month", "="), ("year", "=")}:
            kind = StatementKind.SELECT_PERIOD_BY_KEY
        elif table == ENTRY_TABLE and shape == {("newsletter_id", "=")}:
            kind = StatementKind.SELECT_ENTRIES_BY_PERIOD
        elif table == COMMENT_TABLE and len(conditions) == 1 and conditions[0].column == "entry_id":
            kind = StatementKind.SELECT_COMMENTS_BY_ENTRY_IDS
        else:
            return None

        return MatchedStatement(
            source=source,
            kind=kind,
            table=table,
            conditions=conditions,
            projection=projection,
            parameter_count=sum(_count_placeholders(c.slots) for c in conditions),
        )

    def _match_update(self, source: str, cursor: _Cursor) -> MatchedStatement | None:
        cursor.expect_word("UPDATE")
        table = cursor.name()
        cursor.expect_word("SET")
        columns = [cursor.name()]
        cursor.expect_punct("=")
        values = [cursor.slot()]
        while cursor.accept_punct(","):
            columns.append(cursor.name())
            cursor.expect_punct("=")
            values.append(cursor.slot())
        conditions = self._where_clause(cursor)
        cursor.expect_end()

        if table != PERIOD_TABLE or columns != ["updated_at"]:
            return None
        if _condition_shape(conditions) != {("id", "=")}:
            return None

        return MatchedStatement(
            source=source,
            kind=StatementKind.TOUCH_PERIOD,
            table=table,
            columns=tuple(columns),
            values=tuple(values),
            conditions=conditions,
            parameter_count=_count_placeholders(values)
            + sum(_count_placeholders(c.slots) for c in conditions),
        )

    def _match_delete(self, source: str, cursor: _Cursor) -> MatchedStatement | None:
        cursor.expect_word("DELETE", "FROM")
        table = cursor.name()
        conditions = self._where_clause(cursor)
        cursor.expect_end()

        if table != ENTRY_TABLE or _condition_shape(conditions) != {("newsletter_id", "=")}:
            return None

        return MatchedStatement(
            source=source,
            kind=StatementKind.DELETE_ENTRIES_BY_PERIOD,
            table=table,
            conditions=conditions,
            parameter_count=sum(_count_placeholders(c.slots) for c in conditions),
        )

    # Clauses

    def _where_clause(self, cursor: _Cursor) -> tuple[Condition, ...]:
        if not cursor.accept_word("WHERE"):
            return ()
        conditions = [self._condition(cursor)]
        while cursor.accept_word("AND"):
            conditions.append(self._condition(cursor))
        return tuple(conditions)

    def _condition(self, cursor: _Cursor) -> Condition:
        column = cursor.name()
        if cursor.accept_punct("="):
            return Condition(column=column, operator="=", slots=(cursor.slot(),))
        if cursor.accept_word("IN"):
            return Condition(column=column, operator="IN", slots=cursor.slots())
        raise _NoMatch(f"unsupported condition on {column}")

    def _order_by_clause(self, cursor: _Cursor) -> tuple[str, ...]:
        if not cursor.accept_word("ORDER", "BY"):
            return ()
        columns = []
        while True:
            columns.append(cursor.name())
            if not cursor.accept_word("ASC"):
                cursor.accept_word("DESC")
            if not cursor.accept_punct(","):
                return tuple(columns)


def _count_placeholders(slots: Sequence[ValueSlot]) -> int:
    return sum(1 for slot in slots if slot.placeholder is not None)


def _condition_shape(conditions: Sequence[Condition]) -> set[tuple[str, str]] | None:
    """Set of (column, operator); None when a column is constrained twice."""
    shape = {(condition.column, condition.operator) for condition in conditions}
    if len(shape) != len(conditions):
        return None
    return shape
