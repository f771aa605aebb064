"""Link resolution cache: in-memory map + optional SQLite persistence."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from pathlib import Path

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS links (
    kind TEXT NOT NULL,
    identifier TEXT NOT NULL,
    display_text TEXT NOT NULL,
    created_at REAL NOT NULL,
    PRIMARY KEY (kind, identifier)
);
"""

CacheKey = tuple[str, str]  # (kind, identifier)


class LinkCache:
    """Resolved link texts, never invalidated during a session.

    Level 1: in-memory dict.
    Level 2: SQLite database (only when db_path is given), so item names
    survive restart and are not fetched again.
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        self._memory: dict[CacheKey, str] = {}
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None
        if db_path:
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
            self._conn.executescript(_SCHEMA)

    def get(self, kind: str, identifier: str) -> str | None:
        """Return the cached text or None on miss."""
        key: CacheKey = (kind, identifier)
        with self._lock:
            if key in self._memory:
                return self._memory[key]
            if self._conn is None:
                return None

            row = self._conn.execute(
                "SELECT display_text FROM links WHERE kind = ? AND identifier = ?",
                key,
            ).fetchone()
            if row is None:
                return None

            # Promote to memory
            self._memory[key] = row[0]
            return row[0]

    def put(self, kind: str, identifier: str, display_text: str) -> None:
        """Store a successful resolution."""
        key: CacheKey = (kind, identifier)
        with self._lock:
            self._memory[key] = display_text
            if self._conn is None:
                return
            self._conn.execute(
                "INSERT OR REPLACE INTO links "
                "(kind, identifier, display_text, created_at) VALUES (?, ?, ?, ?)",
                (*key, display_text, time.time()),
            )
            self._conn.commit()

    def stats(self) -> dict[str, int]:
        """Return cache statistics."""
        with self._lock:
            db_entries = 0
            if self._conn is not None:
                row = self._conn.execute("SELECT COUNT(*) FROM links").fetchone()
                db_entries = row[0] if row else 0
            return {"memory_entries": len(self._memory), "db_entries": db_entries}

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
