"""
schema.py - Schema creation helpers
Single responsibility: define and apply database schema.
"""
import logging

from issuedesk.database.connection import get_connection

logger = logging.getLogger(__name__)


# Key/value snapshot store: each key holds one full JSON document
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS snapshots (
    key        TEXT PRIMARY KEY,
    payload    TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def initialize_schema(db_path: str | None = None) -> None:
    """Create tables if missing."""
    try:
        with get_connection(db_path) as conn:
            conn.executescript(SCHEMA_SQL)
    except Exception as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
