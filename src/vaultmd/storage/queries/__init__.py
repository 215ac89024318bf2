"""Joined and aggregate read queries."""

from vaultmd.storage.queries.entry_version_query import EntryVersionQuery
from vaultmd.storage.queries.scope_entry_query import ScopeEntryQuery
from vaultmd.storage.queries.scoped_entry_query import ScopedEntryQuery

__all__ = [
    "EntryVersionQuery",
    "ScopeEntryQuery",
    "ScopedEntryQuery",
]
