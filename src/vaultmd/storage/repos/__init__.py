"""Repository classes for data access."""

from vaultmd.storage.repos.entry_repo import EntryRepo
from vaultmd.storage.repos.entry_status_repo import EntryStatusRepo
from vaultmd.storage.repos.scope_repo import ScopeRepo
from vaultmd.storage.repos.version_repo import VersionRepo

__all__ = [
    "EntryRepo",
    "EntryStatusRepo",
    "ScopeRepo",
    "VersionRepo",
]
