"""Application layer - engine selection, emulation and the newsletter repository."""

from newsletter_store.application.emulator import EmulatedStatement, InMemoryConnection
from newsletter_store.application.engine_selector import (
    EngineSelector,
    EngineUnavailableError,
    fallback_permitted,
)
from newsletter_store.application.executor import ExecutionResult, StatementExecutor
from newsletter_store.application.newsletter_repository import NewsletterIssue, NewsletterRepository
from newsletter_store.application.schema import SCHEMA_STATEMENTS, initialize_schema

__all__ = [
    "EmulatedStatement",
    "InMemoryConnection",
    "EngineSelector",
    "EngineUnavailableError",
    "fallback_permitted",
    "ExecutionResult",
    "StatementExecutor",
    "NewsletterIssue",
    "NewsletterRepository",
    "SCHEMA_STATEMENTS",
    "initialize_schema",
]
