"""Repository information supplied by an external introspection layer.

The core never shells out to git. Hosts run their own introspection and hand
the result over as a ``RepoInfo``.
"""

from typing import Protocol

from pydantic import BaseModel, ConfigDict


class RepoInfo(BaseModel):
    """Snapshot of the repository state around a working directory."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_repo: bool = False
    repo_root: str | None = None
    current_branch: str | None = None
    remote_url: str | None = None
    is_worktree: bool = False
    worktree_id: str | None = None
    worktree_path: str | None = None
    primary_worktree_path: str | None = None

    @property
    def primary_path(self) -> str | None:
        """Path that identifies the repository across all of its worktrees."""
        if not self.is_repo:
            return None
        return self.primary_worktree_path or self.repo_root


NOT_A_REPO = RepoInfo()


class RepoInfoProvider(Protocol):
    """Callable returning repository information for a directory."""

    def __call__(self, directory: str) -> RepoInfo:
        ...
