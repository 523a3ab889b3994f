"""Schema for the newsletter tables.

Every statement is create-if-not-exists, so initialization can run on
each startup. The emulator accepts these statements as no-ops.
"""

from __future__ import annotations

from newsletter_store.infrastructure.logging import get_logger
from newsletter_store.ports.inbound.connection import Connection

logger = get_logger(__name__)

CREATE_NEWSLETTERS = """
CREATE TABLE IF NOT EXISTS newsletters (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    month TEXT NOT NULL,
    year TEXT NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(month, year)
)
"""

CREATE_NEWSLETTER_ENTRIES = """
CREATE TABLE IF NOT EXISTS newsletter_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    newsletter_id INTEGER NOT NULL,
    category TEXT NOT NULL,
    entry_type TEXT NOT NULL,
    name TEXT,
    position TEXT,
    department TEXT,
    previous_position TEXT,
    previous_department TEXT,
    from_position TEXT,
    to_position TEXT,
    from_department TEXT,
    to_department TEXT,
    blurb TEXT,
    date TEXT,
    achievement TEXT,
    photo_url TEXT,
    title TEXT,
    description TEXT,
    entry_order INTEGER DEFAULT 0,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (newsletter_id) REFERENCES newsletters(id) ON DELETE CASCADE
)
"""

CREATE_ENTRY_COMMENTS = """
CREATE TABLE IF NOT EXISTS entry_comments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id INTEGER NOT NULL,
    user TEXT NOT NULL,
    content TEXT NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (entry_id) REFERENCES newsletter_entries(id) ON DELETE CASCADE
)
"""

CREATE_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_newsletter_entries_newsletter_id "
    "ON newsletter_entries(newsletter_id)",
    "CREATE INDEX IF NOT EXISTS idx_newsletter_entries_category "
    "ON newsletter_entries(category)",
    "CREATE INDEX IF NOT EXISTS idx_entry_comments_entry_id "
    "ON entry_comments(entry_id)",
)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    CREATE_NEWSLETTERS,
    CREATE_NEWSLETTER_ENTRIES,
    CREATE_ENTRY_COMMENTS,
    *CREATE_INDEXES,
)


def schema_script() -> str:
    return ";\n".join(statement.strip() for statement in SCHEMA_STATEMENTS) + ";\n"


def initialize_schema(connection: Connection) -> None:
    """Create the newsletter tables and indexes if they do not exist."""
    connection.exec(schema_script())
    logger.info("schema_initialized", engine=connection.engine_kind.value)
