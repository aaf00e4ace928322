"""
SQLite key/value slot.

Stores each slot as one row of a ``kv_slots`` table so several named slots
can share a database file.
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime

from coatcalc.errors import PersistenceError

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_slots (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class SQLiteSlot:
    """SQLite implementation of SlotPort."""

    def __init__(
        self,
        db_path: str,
        key: str,
        connection: sqlite3.Connection | None = None,
    ):
        self.db_path = db_path
        self.key = key
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn
        return sqlite3.connect(self.db_path)

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def read(self) -> str | None:
        try:
            conn = self._get_conn()
            try:
                conn.execute(SCHEMA)
                row = conn.execute(
                    "SELECT value FROM kv_slots WHERE key = ?", (self.key,)
                ).fetchone()
            finally:
                if self._should_close():
                    conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot read slot '{self.key}': {e}") from e
        return row[0] if row else None

    def write(self, blob: str) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute(SCHEMA)
                conn.execute(
                    "INSERT INTO kv_slots (key, value, updated_at) VALUES (?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET "
                    "value = excluded.value, updated_at = excluded.updated_at",
                    (self.key, blob, datetime.now(UTC).isoformat()),
                )
                conn.commit()
            finally:
                if self._should_close():
                    conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot write slot '{self.key}': {e}") from e
