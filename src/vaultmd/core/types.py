"""Shared record types for vaultmd persistence."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from vaultmd.core.scope import Scope


@dataclass(frozen=True)
class ScopeRecord:
    """A persisted scope row."""

    id: int
    scope: Scope
    scope_path: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Entry:
    """A key within a scope. Immutable apart from deletion."""

    id: int
    scope_id: int
    key: str
    created_at: datetime


@dataclass(frozen=True)
class EntryStatus:
    """Mutable state of an entry: which version is current, archived flag."""

    entry_id: int
    is_archived: bool
    current_version: int
    updated_at: datetime


@dataclass(frozen=True)
class Version:
    """One immutable snapshot of an entry's content."""

    id: int
    entry_id: int
    version: int
    file_path: str
    hash: str
    description: str | None
    created_at: datetime


@dataclass(frozen=True)
class ScopedEntry:
    """Entry, status and one version joined into a single read model."""

    id: int
    scope_id: int
    key: str
    version: int
    current_version: int
    file_path: str
    hash: str
    description: str | None
    created_at: datetime
    is_archived: bool

    @property
    def is_current(self) -> bool:
        return self.version == self.current_version


@dataclass(frozen=True)
class NewVersion:
    """Input for appending a version to an entry."""

    scope_id: int
    key: str
    version: int
    file_path: str
    hash: str
    description: str | None = None


@dataclass(frozen=True)
class EntryVersionCount:
    entry_id: int
    version_count: int


@dataclass(frozen=True)
class ScopeCounts:
    scope_id: int
    entry_count: int
    version_count: int


@dataclass(frozen=True)
class VersionSummary:
    version: int
    file_path: str
    created_at: datetime
