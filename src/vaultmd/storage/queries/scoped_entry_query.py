"""Joined entry + status + version reads."""

from __future__ import annotations

import sqlite3

from vaultmd.core.types import ScopedEntry
from vaultmd.storage.mapping import row_to_scoped_entry

_SELECT = """
    SELECT
        e.id, e.scope_id, e.key,
        es.is_archived, es.current_version,
        v.version, v.file_path, v.hash, v.description,
        v.created_at AS version_created_at
    FROM entries e
    JOIN entry_status es ON e.id = es.entry_id
"""

_JOIN_CURRENT = "JOIN versions v ON e.id = v.entry_id AND v.version = es.current_version"
_JOIN_ALL = "JOIN versions v ON e.id = v.entry_id"


class ScopedEntryQuery:
    """Read models combining an entry with one of its versions."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get_latest(self, scope_id: int, key: str) -> ScopedEntry | None:
        """Get the current version of a key, or None."""
        row = self.conn.execute(
            f"{_SELECT} {_JOIN_CURRENT} WHERE e.scope_id = ? AND e.key = ?",
            (scope_id, key),
        ).fetchone()
        return row_to_scoped_entry(row) if row else None

    def get_by_version(
        self, scope_id: int, key: str, version: int
    ) -> ScopedEntry | None:
        """Get one specific version of a key, or None."""
        row = self.conn.execute(
            f"{_SELECT} {_JOIN_ALL} WHERE e.scope_id = ? AND e.key = ? AND v.version = ?",
            (scope_id, key, version),
        ).fetchone()
        return row_to_scoped_entry(row) if row else None

    def list(
        self, scope_id: int, include_archived: bool = False, all_versions: bool = False
    ) -> list[ScopedEntry]:
        """
        List entries of a scope ordered by key.

        Args:
            scope_id: Scope to list
            include_archived: Include archived entries
            all_versions: Every version per key, newest first, instead of
                only the current one
        """
        join = _JOIN_ALL if all_versions else _JOIN_CURRENT
        archived = "" if include_archived else "AND es.is_archived = 0"
        order = "ORDER BY e.key, v.version DESC" if all_versions else "ORDER BY e.key"
        rows = self.conn.execute(
            f"{_SELECT} {join} WHERE e.scope_id = ? {archived} {order}",
            (scope_id,),
        ).fetchall()
        return [row_to_scoped_entry(row) for row in rows]

    def list_by_scopes(self, scope_ids: list[int]) -> dict[int, list[ScopedEntry]]:
        """Current, non-archived entries of several scopes, grouped by scope id."""
        if not scope_ids:
            return {}

        placeholders = ",".join("?" for _ in scope_ids)
        rows = self.conn.execute(
            f"""
            {_SELECT} {_JOIN_CURRENT}
            WHERE e.scope_id IN ({placeholders}) AND es.is_archived = 0
            ORDER BY e.scope_id, e.key
            """,
            tuple(scope_ids),
        ).fetchall()

        result: dict[int, list[ScopedEntry]] = {}
        for row in rows:
            entry = row_to_scoped_entry(row)
            result.setdefault(entry.scope_id, []).append(entry)
        return result
