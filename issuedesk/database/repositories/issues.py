"""
issues.py - Issue snapshot repository
Single responsibility: load and overwrite the full issue list as one JSON document.
"""
import json
import logging
import sqlite3

from issuedesk import config
from issuedesk.database.connection import get_connection
from issuedesk.database.seed import seed_issues
from issuedesk.domain.errors import StorageError
from issuedesk.domain.models import Issue
from issuedesk.utils.time import now_iso

logger = logging.getLogger(__name__)


def load_issues(db_path: str | None = None, key: str | None = None) -> list[Issue]:
    """Read the snapshot; fall back to the seed set when missing or malformed."""
    key = key or config.SNAPSHOT_KEY
    try:
        with get_connection(db_path) as conn:
            row = conn.execute("SELECT payload FROM snapshots WHERE key = ?", (key,)).fetchone()
    except sqlite3.Error as e:
        raise StorageError(f"Failed to read snapshot: {e}") from e
    if row is None:
        logger.info("No snapshot stored under %s; using seed data", key)
        return seed_issues()
    try:
        data = json.loads(row["payload"])
        if not isinstance(data, list):
            raise ValueError("snapshot is not a JSON array")
        return [Issue.from_dict(item) for item in data]
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning("Malformed snapshot under %s (%s); using seed data", key, e)
        return seed_issues()


def save_issues(issues: list[Issue], db_path: str | None = None, key: str | None = None) -> None:
    """Overwrite the whole snapshot (no incremental writes)."""
    key = key or config.SNAPSHOT_KEY
    payload = json.dumps([i.to_dict() for i in issues], ensure_ascii=False)
    try:
        with get_connection(db_path) as conn:
            conn.execute(
                "INSERT INTO snapshots (key, payload, updated_at) VALUES (?, ?, ?)"
                " ON CONFLICT(key) DO UPDATE SET payload = excluded.payload,"
                " updated_at = excluded.updated_at",
                (key, payload, now_iso()),
            )
    except sqlite3.Error as e:
        raise StorageError(f"Failed to write snapshot: {e}") from e
