"""Version-number reads keyed by (scope, key)."""

import sqlite3

from vaultmd.core.types import VersionSummary
from vaultmd.storage.mapping import parse_timestamp


class EntryVersionQuery:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get_next_version(self, scope_id: int, key: str) -> int:
        """``max(version) + 1`` for a key, 1 when it has no versions."""
        row = self.conn.execute(
            """
            SELECT COALESCE(MAX(v.version), 0) + 1
            FROM entries e
            JOIN versions v ON e.id = v.entry_id
            WHERE e.scope_id = ? AND e.key = ?
            """,
            (scope_id, key),
        ).fetchone()
        return row[0]

    def get_all_versions(self, scope_id: int, key: str) -> list[VersionSummary]:
        """Every version of a key, newest first."""
        rows = self.conn.execute(
            """
            SELECT v.version, v.file_path, v.created_at
            FROM entries e
            JOIN versions v ON e.id = v.entry_id
            WHERE e.scope_id = ? AND e.key = ?
            ORDER BY v.version DESC
            """,
            (scope_id, key),
        ).fetchall()
        return [
            VersionSummary(
                version=row["version"],
                file_path=row["file_path"],
                created_at=parse_timestamp(row["created_at"]),
            )
            for row in rows
        ]
