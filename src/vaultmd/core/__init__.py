"""Core domain for vaultmd: scopes, settings, configuration and errors."""

from vaultmd.core.errors import (
    ConfigurationError,
    IntegrityError,
    PreconditionError,
    VaultError,
)
from vaultmd.core.repo_info import NOT_A_REPO, RepoInfo, RepoInfoProvider
from vaultmd.core.scope import (
    BranchScope,
    GlobalScope,
    RepositoryScope,
    Scope,
    ScopeType,
    WorktreeScope,
    format_scope,
    format_scope_short,
    get_scope_storage_key,
    get_search_order,
    validate_scope,
)
from vaultmd.core.settings import VaultSettings, load_settings

__all__ = [
    "VaultError",
    "ConfigurationError",
    "IntegrityError",
    "PreconditionError",
    "NOT_A_REPO",
    "RepoInfo",
    "RepoInfoProvider",
    "Scope",
    "ScopeType",
    "GlobalScope",
    "RepositoryScope",
    "BranchScope",
    "WorktreeScope",
    "format_scope",
    "format_scope_short",
    "get_scope_storage_key",
    "get_search_order",
    "validate_scope",
    "VaultSettings",
    "load_settings",
]
