"""Entry status repository - the mutable half of an entry."""

import sqlite3

from vaultmd.core.types import EntryStatus
from vaultmd.storage.mapping import row_to_entry_status


class EntryStatusRepo:
    """Repository for entry status data access."""

    def __init__(self, conn: sqlite3.Connection):
        """
        Initialize entry status repository.

        Args:
            conn: SQLite connection with row_factory set
        """
        self.conn = conn

    def find_by_entry_id(self, entry_id: int) -> EntryStatus | None:
        row = self.conn.execute(
            "SELECT * FROM entry_status WHERE entry_id = ?", (entry_id,)
        ).fetchone()
        return row_to_entry_status(row) if row else None

    def create(
        self, entry_id: int, current_version: int, is_archived: bool = False
    ) -> None:
        self.conn.execute(
            """
            INSERT INTO entry_status (entry_id, is_archived, current_version)
            VALUES (?, ?, ?)
            """,
            (entry_id, 1 if is_archived else 0, current_version),
        )

    def update_current_version(self, entry_id: int, version: int) -> None:
        self.conn.execute(
            """
            UPDATE entry_status
            SET current_version = ?, updated_at = CURRENT_TIMESTAMP
            WHERE entry_id = ?
            """,
            (version, entry_id),
        )

    def set_archived(self, entry_id: int, is_archived: bool) -> bool:
        cursor = self.conn.execute(
            """
            UPDATE entry_status
            SET is_archived = ?, updated_at = CURRENT_TIMESTAMP
            WHERE entry_id = ?
            """,
            (1 if is_archived else 0, entry_id),
        )
        return cursor.rowcount > 0

    def delete(self, entry_id: int) -> bool:
        cursor = self.conn.execute(
            "DELETE FROM entry_status WHERE entry_id = ?", (entry_id,)
        )
        return cursor.rowcount > 0
