"""Version repository - append-only content snapshots."""

import sqlite3

from vaultmd.core.types import Version
from vaultmd.storage.mapping import row_to_version


class VersionRepo:
    """Repository for version data access."""

    def __init__(self, conn: sqlite3.Connection):
        """
        Initialize version repository.

        Args:
            conn: SQLite connection with row_factory set
        """
        self.conn = conn

    def find_all_by_entry(self, entry_id: int) -> list[Version]:
        """Get every version of an entry, newest first."""
        rows = self.conn.execute(
            "SELECT * FROM versions WHERE entry_id = ? ORDER BY version DESC",
            (entry_id,),
        ).fetchall()
        return [row_to_version(row) for row in rows]

    def get_max_version(self, entry_id: int) -> int:
        """Highest version number of an entry, 0 when it has none."""
        row = self.conn.execute(
            "SELECT COALESCE(MAX(version), 0) FROM versions WHERE entry_id = ?",
            (entry_id,),
        ).fetchone()
        return row[0]

    def create(
        self,
        entry_id: int,
        version: int,
        file_path: str,
        hash: str,
        description: str | None = None,
    ) -> int:
        cursor = self.conn.execute(
            """
            INSERT INTO versions (entry_id, version, file_path, hash, description)
            VALUES (?, ?, ?, ?, ?)
            """,
            (entry_id, version, file_path, hash, description or None),
        )
        return cursor.lastrowid

    def delete_by_entry_and_version(self, entry_id: int, version: int) -> bool:
        cursor = self.conn.execute(
            "DELETE FROM versions WHERE entry_id = ? AND version = ?",
            (entry_id, version),
        )
        return cursor.rowcount > 0

    def delete_all_by_entry(self, entry_id: int) -> int:
        cursor = self.conn.execute(
            "DELETE FROM versions WHERE entry_id = ?", (entry_id,)
        )
        return cursor.rowcount
