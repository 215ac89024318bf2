"""Resolve caller-facing scope options into a concrete, validated Scope."""

import logging
import os

from pydantic import BaseModel, ConfigDict

from vaultmd.core.errors import ConfigurationError, PreconditionError
from vaultmd.core.repo_info import NOT_A_REPO, RepoInfo
from vaultmd.core.scope import (
    BranchScope,
    GlobalScope,
    RepositoryScope,
    Scope,
    ScopeType,
    WorktreeScope,
    validate_scope,
)

logger = logging.getLogger(__name__)


class ScopeOptions(BaseModel):
    """Scope selection as received from a front-end.

    ``scope`` is kept as a plain string so an unknown value surfaces as a
    ConfigurationError from ``resolve_scope`` rather than a validation error.
    """

    model_config = ConfigDict(frozen=True)

    scope: str | None = None
    repo: str | None = None
    branch: str | None = None
    worktree: str | None = None
    working_dir: str | None = None

    @property
    def selects_scope(self) -> bool:
        return any((self.scope, self.repo, self.branch, self.worktree))


def resolve_scope(
    options: ScopeOptions | None = None,
    repo_info: RepoInfo | None = None,
    default_type: ScopeType = ScopeType.REPOSITORY,
) -> Scope:
    """
    Convert scope options plus repository info into a Scope.

    Args:
        options: Requested scope type and explicit overrides
        repo_info: Repository state around the working directory
        default_type: Scope type used when ``options.scope`` is empty

    Returns:
        A validated Scope

    Raises:
        ConfigurationError: Unknown scope type or an invalid combination.
        PreconditionError: Branch or worktree scope requested outside a
            repository without explicit overrides.
    """
    options = options or ScopeOptions()
    info = repo_info or NOT_A_REPO

    raw_type = options.scope or default_type
    try:
        scope_type = ScopeType(raw_type)
    except ValueError:
        raise ConfigurationError(
            f"Invalid scope: {raw_type} "
            "(valid values: global, repository, branch, worktree)"
        ) from None

    match scope_type:
        case ScopeType.GLOBAL:
            scope: Scope = GlobalScope()
        case ScopeType.REPOSITORY:
            path = _explicit_repo(options) or info.primary_path or _working_dir(options)
            scope = RepositoryScope(path)
        case ScopeType.BRANCH:
            if not info.is_repo and not (options.repo and options.branch):
                raise PreconditionError(
                    "Not in a git repository. Branch scope requires a git repository"
                )
            path = _explicit_repo(options) or info.primary_path
            branch = options.branch or info.current_branch
            if not path or not branch:
                raise PreconditionError(
                    "Branch scope requires a repository path and a current branch"
                )
            scope = BranchScope(path, branch)
        case ScopeType.WORKTREE:
            if not info.is_repo and not (options.repo and options.worktree):
                raise PreconditionError(
                    "Not in a git repository. Worktree scope requires a git repository"
                )
            path = _explicit_repo(options) or info.primary_path
            worktree_id = options.worktree or info.worktree_id
            if not path or not worktree_id:
                raise PreconditionError(
                    "Worktree scope requires a repository path and a worktree id"
                )
            worktree_path = (
                info.worktree_path if worktree_id == info.worktree_id else None
            )
            scope = WorktreeScope(path, worktree_id, worktree_path)

    validate_scope(scope)
    logger.debug("Resolved scope %s", scope)
    return scope


def _working_dir(options: ScopeOptions) -> str:
    return os.path.abspath(options.working_dir or os.getcwd())


def _explicit_repo(options: ScopeOptions) -> str | None:
    """Explicit repository path made absolute against the working directory."""
    if not options.repo:
        return None
    return os.path.abspath(os.path.join(_working_dir(options), options.repo))
