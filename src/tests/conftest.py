"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from vaultmd.core.repo_info import RepoInfo
from vaultmd.core.scope import BranchScope, GlobalScope, RepositoryScope
from vaultmd.services import EntryService, ScopeService
from vaultmd.storage import open_database
from vaultmd.vault import ContentStore, open_vault

REPO_PATH = "/work/project"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's vault configuration out of tests."""
    for key in ("VAULT_DIR", "XDG_DATA_HOME"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def database():
    """Migrated in-memory database."""
    db = open_database(":memory:")
    yield db
    db.close()


@pytest.fixture
def entry_service(database):
    return EntryService(database)


@pytest.fixture
def scope_service(database):
    return ScopeService(database)


@pytest.fixture
def content_store(tmp_path):
    return ContentStore(tmp_path / "files")


@pytest.fixture
def global_scope():
    return GlobalScope()


@pytest.fixture
def repo_scope():
    return RepositoryScope(REPO_PATH)


@pytest.fixture
def branch_scope():
    return BranchScope(REPO_PATH, "main")


@pytest.fixture
def repo_info():
    """Repository info for a checkout of REPO_PATH on ``main``."""
    return RepoInfo(
        is_repo=True,
        repo_root=REPO_PATH,
        current_branch="main",
        remote_url="git@example.com:team/project.git",
    )


@pytest.fixture
def vault_dir(tmp_path):
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
def vault(vault_dir, repo_info):
    """Vault context bound to the repository scope of REPO_PATH."""
    ctx = open_vault(repo_info=repo_info, working_dir=REPO_PATH, vault_dir=vault_dir)
    yield ctx
    ctx.close()
