"""Entry repository - pure data access for the ``entries`` table."""

import sqlite3

from vaultmd.core.types import Entry
from vaultmd.storage.mapping import row_to_entry


class EntryRepo:
    """Repository for entry data access."""

    def __init__(self, conn: sqlite3.Connection):
        """
        Initialize entry repository.

        Args:
            conn: SQLite connection with row_factory set
        """
        self.conn = conn

    def find_by_scope_and_key(self, scope_id: int, key: str) -> Entry | None:
        row = self.conn.execute(
            "SELECT * FROM entries WHERE scope_id = ? AND key = ?",
            (scope_id, key),
        ).fetchone()
        return row_to_entry(row) if row else None

    def create(self, scope_id: int, key: str) -> int:
        cursor = self.conn.execute(
            "INSERT INTO entries (scope_id, key) VALUES (?, ?)", (scope_id, key)
        )
        return cursor.lastrowid

    def delete(self, entry_id: int) -> bool:
        cursor = self.conn.execute("DELETE FROM entries WHERE id = ?", (entry_id,))
        return cursor.rowcount > 0
