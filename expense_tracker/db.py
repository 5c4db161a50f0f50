"""SQLite-backed key-value store holding the tracker's JSON documents.

Each storage key (see ``constants.STORAGE_KEYS``) maps to one row whose
``value`` column is a JSON string, mirroring a browser's local storage.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

try:
    from .config import DB_PATH
except ImportError:  # pragma: no cover - fallback for direct execution
    from config import DB_PATH

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT
);
"""


@contextmanager
def connect() -> Iterator[sqlite3.Connection]:
    path = Path(DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(SCHEMA_SQL)
        yield conn
    finally:
        conn.close()


def init_db() -> None:
    """Create the key-value table if it does not exist."""
    with connect() as conn:
        conn.commit()
    logger.debug("Key-value store ready at %s", DB_PATH)


def get_item(key: str) -> Optional[str]:
    with connect() as conn:
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    return row[0] if row else None


def set_item(key: str, value: str) -> None:
    with connect() as conn:
        conn.execute(
            "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
            (key, value, datetime.now().isoformat()),
        )
        conn.commit()


def remove_item(key: str) -> bool:
    """Delete a key. Returns True if a row was removed."""
    with connect() as conn:
        cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()
        return cursor.rowcount > 0


def keys() -> List[str]:
    with connect() as conn:
        rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
    return [r[0] for r in rows]
