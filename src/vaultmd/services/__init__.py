"""Services composing repositories and queries into vault operations."""

from vaultmd.services.entry_service import EntryService
from vaultmd.services.scope_service import ScopeService

__all__ = ["EntryService", "ScopeService"]
