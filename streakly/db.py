"""SQLite key-value layer — one table, blobs addressed by key.

The habit list lives in a single slot and is overwritten as a whole.
Tables are created automatically on first run.
"""

import sqlite3
import logging
from datetime import datetime, timezone, timedelta

from streakly.config import DB_PATH, TIMEZONE_OFFSET_HOURS, LOG_SQL
from streakly.errors import StorageError

log = logging.getLogger(__name__)

TZ = timezone(timedelta(hours=TIMEZONE_OFFSET_HOURS))


def _connect() -> sqlite3.Connection:
    """Return a connection with row_factory set."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    if LOG_SQL:
        conn.set_trace_callback(log.debug)
    return conn


def init_db() -> None:
    """Create tables if they don't exist."""
    try:
        conn = _connect()
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS kv (
                key        TEXT PRIMARY KEY,
                value      TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
        """)
        conn.commit()
        conn.close()
    except (sqlite3.Error, OSError) as e:
        raise StorageError(f"Could not initialise database at {DB_PATH}: {e}") from e
    log.debug("Database initialised at %s", DB_PATH)


def get_blob(key: str) -> str | None:
    """Read the blob stored under key. Returns None if the slot is empty."""
    try:
        conn = _connect()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
    except (sqlite3.Error, OSError) as e:
        raise StorageError(f"Read of {key!r} failed: {e}") from e
    return row["value"] if row else None


def set_blob(key: str, value: str) -> None:
    """Overwrite the blob stored under key."""
    now = datetime.now(TZ).isoformat()
    try:
        conn = _connect()
        try:
            conn.execute(
                """INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                                  updated_at = excluded.updated_at""",
                (key, value, now),
            )
            conn.commit()
        finally:
            conn.close()
    except (sqlite3.Error, OSError) as e:
        raise StorageError(f"Write of {key!r} failed: {e}") from e


def get_updated_at(key: str) -> str | None:
    """When the slot was last written (ISO timestamp), or None."""
    try:
        conn = _connect()
        try:
            row = conn.execute("SELECT updated_at FROM kv WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
    except (sqlite3.Error, OSError) as e:
        raise StorageError(f"Read of {key!r} failed: {e}") from e
    return row["updated_at"] if row else None
