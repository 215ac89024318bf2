"""Storage layer for vaultmd - SQLite database, repositories and queries."""

from vaultmd.storage.db import Database, latest_schema_version, open_database
from vaultmd.storage.queries import EntryVersionQuery, ScopedEntryQuery, ScopeEntryQuery
from vaultmd.storage.repos import EntryRepo, EntryStatusRepo, ScopeRepo, VersionRepo

__all__ = [
    "Database",
    "latest_schema_version",
    "open_database",
    "EntryRepo",
    "EntryStatusRepo",
    "ScopeRepo",
    "VersionRepo",
    "EntryVersionQuery",
    "ScopedEntryQuery",
    "ScopeEntryQuery",
]
