"""Per-scope aggregate reads used by cascading deletes."""

import sqlite3

from vaultmd.core.scope import ScopeType
from vaultmd.core.types import EntryVersionCount, ScopeCounts


class ScopeEntryQuery:
    """Counts of entries and versions per scope."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get_entries_with_version_count(self, scope_id: int) -> list[EntryVersionCount]:
        rows = self.conn.execute(
            """
            SELECT e.id AS entry_id, COUNT(v.id) AS version_count
            FROM entries e
            LEFT JOIN versions v ON e.id = v.entry_id
            WHERE e.scope_id = ?
            GROUP BY e.id
            ORDER BY e.id
            """,
            (scope_id,),
        ).fetchall()
        return [
            EntryVersionCount(entry_id=row["entry_id"], version_count=row["version_count"])
            for row in rows
        ]

    def get_scopes_with_counts(self, primary_path: str) -> list[ScopeCounts]:
        """Entry and version counts for every non-global scope of a repository."""
        rows = self.conn.execute(
            """
            SELECT
                s.id AS scope_id,
                COUNT(DISTINCT e.id) AS entry_count,
                COUNT(v.id) AS version_count
            FROM scopes s
            LEFT JOIN entries e ON s.id = e.scope_id
            LEFT JOIN versions v ON e.id = v.entry_id
            WHERE s.primary_path = ? AND s.type != ?
            GROUP BY s.id
            ORDER BY s.id
            """,
            (primary_path, ScopeType.GLOBAL.value),
        ).fetchall()
        return [
            ScopeCounts(
                scope_id=row["scope_id"],
                entry_count=row["entry_count"],
                version_count=row["version_count"],
            )
            for row in rows
        ]
