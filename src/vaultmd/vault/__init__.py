"""Vault operation surface and content store."""

from vaultmd.vault.content_store import ContentStore, StoredFile, calculate_hash
from vaultmd.vault.context import (
    VaultContext,
    VaultEntry,
    VaultOptions,
    archive_entry,
    clear_vault,
    close_vault,
    delete_all_branches,
    delete_branch,
    delete_current_scope,
    delete_entry,
    delete_key,
    delete_version,
    get_entry,
    get_info,
    list_all_entries_grouped,
    list_entries,
    move_scope,
    open_vault,
    read_entry,
    resolve_scope,
    restore_entry,
    set_entry,
)

__all__ = [
    "ContentStore",
    "StoredFile",
    "calculate_hash",
    "VaultContext",
    "VaultEntry",
    "VaultOptions",
    "archive_entry",
    "clear_vault",
    "close_vault",
    "delete_all_branches",
    "delete_branch",
    "delete_current_scope",
    "delete_entry",
    "delete_key",
    "delete_version",
    "get_entry",
    "get_info",
    "list_all_entries_grouped",
    "list_entries",
    "move_scope",
    "open_vault",
    "read_entry",
    "resolve_scope",
    "restore_entry",
    "set_entry",
]
