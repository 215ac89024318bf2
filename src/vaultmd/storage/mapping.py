"""Row <-> domain conversions shared by every repository and query."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import NamedTuple

from vaultmd.core.errors import ConfigurationError
from vaultmd.core.scope import (
    BranchScope,
    GlobalScope,
    RepositoryScope,
    Scope,
    ScopeType,
    WorktreeScope,
)
from vaultmd.core.types import Entry, EntryStatus, ScopedEntry, ScopeRecord, Version


class ScopeColumns(NamedTuple):
    """Nullable per-variant columns of the ``scopes`` table."""

    type: str
    primary_path: str | None
    worktree_id: str | None
    worktree_path: str | None
    branch_name: str | None


def parse_timestamp(value: str | None) -> datetime:
    """Parse a SQLite ``CURRENT_TIMESTAMP`` value (UTC)."""
    if not value:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def scope_to_columns(scope: Scope) -> ScopeColumns:
    match scope:
        case GlobalScope():
            return ScopeColumns(ScopeType.GLOBAL.value, None, None, None, None)
        case RepositoryScope(primary_path=path):
            return ScopeColumns(ScopeType.REPOSITORY.value, path, None, None, None)
        case BranchScope(primary_path=path, branch_name=branch):
            return ScopeColumns(ScopeType.BRANCH.value, path, None, None, branch)
        case WorktreeScope(primary_path=path, worktree_id=worktree_id):
            return ScopeColumns(
                ScopeType.WORKTREE.value, path, worktree_id, scope.worktree_path, None
            )
    raise ConfigurationError(f"Invalid scope: {scope!r}")


def row_to_scope(row: sqlite3.Row) -> Scope:
    scope_type = row["type"]
    if scope_type == ScopeType.GLOBAL:
        return GlobalScope()
    if scope_type == ScopeType.REPOSITORY:
        return RepositoryScope(row["primary_path"] or "")
    if scope_type == ScopeType.BRANCH:
        return BranchScope(row["primary_path"] or "", row["branch_name"] or "")
    if scope_type == ScopeType.WORKTREE:
        return WorktreeScope(
            row["primary_path"] or "", row["worktree_id"] or "", row["worktree_path"]
        )
    raise ConfigurationError(f"Unknown scope type in database: {scope_type}")


def row_to_scope_record(row: sqlite3.Row) -> ScopeRecord:
    return ScopeRecord(
        id=row["id"],
        scope=row_to_scope(row),
        scope_path=row["scope_path"],
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


def row_to_entry(row: sqlite3.Row) -> Entry:
    return Entry(
        id=row["id"],
        scope_id=row["scope_id"],
        key=row["key"],
        created_at=parse_timestamp(row["created_at"]),
    )


def row_to_entry_status(row: sqlite3.Row) -> EntryStatus:
    return EntryStatus(
        entry_id=row["entry_id"],
        is_archived=bool(row["is_archived"]),
        current_version=row["current_version"],
        updated_at=parse_timestamp(row["updated_at"]),
    )


def row_to_version(row: sqlite3.Row) -> Version:
    return Version(
        id=row["id"],
        entry_id=row["entry_id"],
        version=row["version"],
        file_path=row["file_path"],
        hash=row["hash"],
        description=row["description"],
        created_at=parse_timestamp(row["created_at"]),
    )


def row_to_scoped_entry(row: sqlite3.Row) -> ScopedEntry:
    return ScopedEntry(
        id=row["id"],
        scope_id=row["scope_id"],
        key=row["key"],
        version=row["version"],
        current_version=row["current_version"],
        file_path=row["file_path"],
        hash=row["hash"],
        description=row["description"],
        created_at=parse_timestamp(row["version_created_at"]),
        is_archived=bool(row["is_archived"]),
    )
