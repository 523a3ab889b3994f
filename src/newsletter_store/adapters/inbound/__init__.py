"""Inbound adapters - statement recognition for the emulated engine."""

from newsletter_store.adapters.inbound.statement_matcher import (
    BindingError,
    EntryIdSet,
    MatchedStatement,
    NewComment,
    NoParams,
    PeriodKey,
    PeriodRef,
    StatementKind,
    StatementMatcher,
    StatementParams,
    TouchPeriod,
)

__all__ = [
    "BindingError",
    "EntryIdSet",
    "MatchedStatement",
    "NewComment",
    "NoParams",
    "PeriodKey",
    "PeriodRef",
    "StatementKind",
    "StatementMatcher",
    "StatementParams",
    "TouchPeriod",
]
