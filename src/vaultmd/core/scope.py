"""Scope model: the hierarchical namespace an entry belongs to.

Four variants, from least to most specific context:

- ``GlobalScope``: shared by every repository.
- ``RepositoryScope``: one repository, identified by its primary worktree path.
- ``BranchScope``: one branch of a repository.
- ``WorktreeScope``: one linked worktree of a repository.

Each scope formats to a string that, once sanitized, becomes its storage key:
the unique ``scope_path`` column and the content sub-directory name.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from enum import StrEnum

from vaultmd.core.errors import ConfigurationError

_FILE_SANITIZE_PATTERN = re.compile(r'[@/\\:?*"<>|]')


class ScopeType(StrEnum):
    """Scope discriminator as persisted in ``scopes.type``."""

    GLOBAL = "global"
    REPOSITORY = "repository"
    BRANCH = "branch"
    WORKTREE = "worktree"


@dataclass(frozen=True)
class GlobalScope:
    type: ScopeType = field(default=ScopeType.GLOBAL, init=False)


@dataclass(frozen=True)
class RepositoryScope:
    primary_path: str
    type: ScopeType = field(default=ScopeType.REPOSITORY, init=False)


@dataclass(frozen=True)
class BranchScope:
    primary_path: str
    branch_name: str
    type: ScopeType = field(default=ScopeType.BRANCH, init=False)


@dataclass(frozen=True)
class WorktreeScope:
    """Worktree scope. ``worktree_path`` is display metadata, not identity."""

    primary_path: str
    worktree_id: str
    worktree_path: str | None = field(default=None, compare=False)
    type: ScopeType = field(default=ScopeType.WORKTREE, init=False)


Scope = GlobalScope | RepositoryScope | BranchScope | WorktreeScope


def validate_scope(scope: Scope) -> None:
    """
    Check that a scope carries the fields its type requires.

    Reserved words ``global`` and ``repository`` may not be used as a primary
    path, branch name or worktree id since they collide with the discriminator.

    Raises:
        ConfigurationError: If the scope is incomplete or uses a reserved name.
    """
    match scope:
        case GlobalScope():
            return
        case RepositoryScope(primary_path=path):
            _ensure_non_empty("Repository scope requires a valid repository path", path)
            _ensure_not_reserved("Repository path", path)
        case BranchScope(primary_path=path, branch_name=branch):
            _ensure_non_empty("Branch scope requires a valid repository path", path)
            _ensure_non_empty("Branch scope requires a valid branch name", branch)
            _ensure_not_reserved("Branch scope repository path", path)
            _ensure_not_reserved("Branch name", branch)
        case WorktreeScope(primary_path=path, worktree_id=worktree_id):
            _ensure_non_empty("Worktree scope requires a valid repository path", path)
            _ensure_non_empty("Worktree scope requires a worktree id", worktree_id)
            _ensure_not_reserved("Worktree scope repository path", path)
            _ensure_not_reserved("Worktree id", worktree_id)
        case _:
            raise ConfigurationError(f"Invalid scope: {scope!r}")


def format_scope(scope: Scope) -> str:
    """Format a scope as ``global``, ``path``, ``path:branch`` or ``path@id``."""
    match scope:
        case GlobalScope():
            return ScopeType.GLOBAL.value
        case RepositoryScope(primary_path=path):
            return path
        case BranchScope(primary_path=path, branch_name=branch):
            return f"{path}:{branch}"
        case WorktreeScope(primary_path=path, worktree_id=worktree_id):
            return f"{path}@{worktree_id}"
    raise ConfigurationError(f"Invalid scope: {scope!r}")


def format_scope_short(scope: Scope) -> str:
    """Like ``format_scope`` but shows only the repository directory name."""
    match scope:
        case GlobalScope():
            return ScopeType.GLOBAL.value
        case RepositoryScope(primary_path=path):
            return _display_name(path)
        case BranchScope(primary_path=path, branch_name=branch):
            return f"{_display_name(path)}:{branch}"
        case WorktreeScope(primary_path=path, worktree_id=worktree_id):
            return f"{_display_name(path)}@{worktree_id}"
    raise ConfigurationError(f"Invalid scope: {scope!r}")


def get_scope_storage_key(scope: Scope) -> str:
    """Sanitized scope string used as ``scope_path`` and content directory."""
    return _FILE_SANITIZE_PATTERN.sub("-", format_scope(scope))


def get_primary_path(scope: Scope) -> str | None:
    if isinstance(scope, GlobalScope):
        return None
    return scope.primary_path


def get_search_order(scope: Scope) -> list[Scope]:
    """
    Fallback order for lookups, most specific first.

    Branch and worktree scopes fall back to the repository that shares their
    primary path, then to global.
    """
    match scope:
        case GlobalScope():
            return [scope]
        case RepositoryScope():
            return [scope, GlobalScope()]
        case BranchScope(primary_path=path) | WorktreeScope(primary_path=path):
            return [scope, RepositoryScope(path), GlobalScope()]
    raise ConfigurationError(f"Invalid scope: {scope!r}")


def _display_name(path: str) -> str:
    if not path:
        return ""
    if path == "/":
        return "/"
    trimmed = path.rstrip("/")
    return os.path.basename(trimmed) or trimmed


def _ensure_non_empty(message: str, value: str | None) -> None:
    if value is None or not value.strip():
        raise ConfigurationError(message)


def _ensure_not_reserved(label: str, value: str) -> None:
    if value in (ScopeType.GLOBAL.value, ScopeType.REPOSITORY.value):
        raise ConfigurationError(f'{label} cannot be "{value}" (reserved scope name)')
