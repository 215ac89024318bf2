"""Scope repository - pure data access for the ``scopes`` table."""

import sqlite3

from vaultmd.core.scope import Scope, ScopeType, get_scope_storage_key
from vaultmd.core.types import ScopeRecord
from vaultmd.storage.mapping import row_to_scope_record, scope_to_columns

_NON_GLOBAL_TYPES = (
    ScopeType.REPOSITORY.value,
    ScopeType.BRANCH.value,
    ScopeType.WORKTREE.value,
)


class ScopeRepo:
    """Repository for scope data access."""

    def __init__(self, conn: sqlite3.Connection):
        """
        Initialize scope repository.

        Args:
            conn: SQLite connection with row_factory set
        """
        self.conn = conn

    def find_by_id(self, scope_id: int) -> ScopeRecord | None:
        row = self.conn.execute(
            "SELECT * FROM scopes WHERE id = ?", (scope_id,)
        ).fetchone()
        return row_to_scope_record(row) if row else None

    def find_by_path(self, scope_path: str) -> ScopeRecord | None:
        """Get the scope stored under a sanitized storage key."""
        row = self.conn.execute(
            "SELECT * FROM scopes WHERE scope_path = ?", (scope_path,)
        ).fetchone()
        return row_to_scope_record(row) if row else None

    def find_by_scope(self, scope: Scope) -> ScopeRecord | None:
        return self.find_by_path(get_scope_storage_key(scope))

    def find_all(self) -> list[ScopeRecord]:
        rows = self.conn.execute(
            "SELECT * FROM scopes ORDER BY type, primary_path, branch_name, worktree_id"
        ).fetchall()
        return [row_to_scope_record(row) for row in rows]

    def find_by_primary_path(self, primary_path: str) -> list[ScopeRecord]:
        """Get the repository, branch and worktree scopes of one repository."""
        rows = self.conn.execute(
            """
            SELECT * FROM scopes
            WHERE primary_path = ? AND type IN (?, ?, ?)
            ORDER BY type, branch_name, worktree_id
            """,
            (primary_path, *_NON_GLOBAL_TYPES),
        ).fetchall()
        return [row_to_scope_record(row) for row in rows]

    def create(self, scope: Scope) -> int:
        """Insert a scope row and return its id."""
        columns = scope_to_columns(scope)
        cursor = self.conn.execute(
            """
            INSERT INTO scopes
                (type, primary_path, worktree_id, worktree_path, branch_name, scope_path)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (*columns, get_scope_storage_key(scope)),
        )
        return cursor.lastrowid

    def update(self, scope_id: int, scope: Scope) -> None:
        """Refresh the stored columns of a scope in place."""
        columns = scope_to_columns(scope)
        self.conn.execute(
            """
            UPDATE scopes
            SET type = ?,
                primary_path = ?,
                worktree_id = ?,
                worktree_path = ?,
                branch_name = ?,
                scope_path = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (*columns, get_scope_storage_key(scope), scope_id),
        )

    def delete(self, scope_id: int) -> bool:
        cursor = self.conn.execute("DELETE FROM scopes WHERE id = ?", (scope_id,))
        return cursor.rowcount > 0

    def delete_by_primary_path(self, primary_path: str) -> int:
        """Delete every non-global scope of one repository."""
        cursor = self.conn.execute(
            "DELETE FROM scopes WHERE primary_path = ? AND type IN (?, ?, ?)",
            (primary_path, *_NON_GLOBAL_TYPES),
        )
        return cursor.rowcount
