"""Vault context - the operation surface consumed by front-ends.

A ``VaultContext`` owns one open database and one content store and is bound
to the scope resolved when it was opened. Every operation accepts
``VaultOptions``; setting any of ``scope``, ``repo``, ``branch`` or ``worktree``
redirects that one call to another scope, resolved with the context's
repository info.

The context is not thread-safe. Hosts serving several requests must serialize
access to a shared context themselves.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from vaultmd.core import resolver
from vaultmd.core.config import get_db_path, get_files_dir, get_vault_dir
from vaultmd.core.errors import PreconditionError
from vaultmd.core.repo_info import NOT_A_REPO, RepoInfo, RepoInfoProvider
from vaultmd.core.scope import (
    BranchScope,
    GlobalScope,
    Scope,
    ScopeType,
    format_scope,
    get_primary_path,
    get_scope_storage_key,
    validate_scope,
)
from vaultmd.core.settings import DEFAULT_SETTINGS, VaultSettings, load_settings
from vaultmd.core.types import NewVersion, ScopedEntry, Version
from vaultmd.services import EntryService, ScopeService
from vaultmd.storage import Database, open_database
from vaultmd.vault.content_store import ContentStore, StoredFile

logger = logging.getLogger(__name__)


class VaultOptions(BaseModel):
    """Per-call options shared by every vault operation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    scope: str | None = None
    repo: str | None = None
    branch: str | None = None
    worktree: str | None = None
    version: int | None = None
    all_scopes: bool = False
    include_archived: bool = False
    all_versions: bool = False
    description: str | None = None

    @property
    def selects_scope(self) -> bool:
        return any((self.scope, self.repo, self.branch, self.worktree))

    def scope_options(self, working_dir: str | None = None) -> resolver.ScopeOptions:
        """Scope selection part of these options.

        Without an explicit type, a worktree id implies worktree scope and a
        branch name implies branch scope.
        """
        scope_type = self.scope
        if scope_type is None:
            if self.worktree:
                scope_type = ScopeType.WORKTREE.value
            elif self.branch:
                scope_type = ScopeType.BRANCH.value

        return resolver.ScopeOptions(
            scope=scope_type,
            repo=self.repo,
            branch=self.branch,
            worktree=self.worktree,
            working_dir=working_dir,
        )


class VaultEntry(BaseModel):
    """One entry version as presented to front-ends."""

    model_config = ConfigDict(frozen=True)

    id: int
    scope_id: int
    scope: str
    scope_type: ScopeType
    key: str
    version: int
    current_version: int
    is_current: bool
    file_path: str
    hash: str
    description: str | None = None
    created_at: datetime
    is_archived: bool = False

    @classmethod
    def from_scoped(cls, entry: ScopedEntry, scope: Scope) -> VaultEntry:
        return cls(
            id=entry.id,
            scope_id=entry.scope_id,
            scope=format_scope(scope),
            scope_type=scope.type,
            key=entry.key,
            version=entry.version,
            current_version=entry.current_version,
            is_current=entry.is_current,
            file_path=entry.file_path,
            hash=entry.hash,
            description=entry.description,
            created_at=entry.created_at,
            is_archived=entry.is_archived,
        )


class VaultContext:
    """Open vault bound to one scope."""

    def __init__(
        self,
        database: Database,
        content_store: ContentStore,
        scope: Scope,
        repo_info: RepoInfo = NOT_A_REPO,
        settings: VaultSettings = DEFAULT_SETTINGS,
        working_dir: str | None = None,
    ):
        """
        Initialize vault context and register its scope.

        Args:
            database: Open, migrated database. Owned by the context from now on
            content_store: Content store for the same vault root
            scope: Resolved scope the context operates on
            repo_info: Repository info used to resolve per-call scopes
            settings: Vault settings
            working_dir: Directory the context was opened from
        """
        self.database = database
        self.content_store = content_store
        self.scope = scope
        self.repo_info = repo_info
        self.settings = settings
        self.working_dir = working_dir or os.getcwd()
        self.entries = EntryService(database)
        self.scopes = ScopeService(database)
        content_store.scope_dir(get_scope_storage_key(scope))
        self.scope_id = self.scopes.get_or_create(scope)

    def close(self) -> None:
        self.database.close()
        logger.info(f"Vault closed ({format_scope(self.scope)})")

    def __enter__(self) -> VaultContext:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def resolve_scope(
    options: VaultOptions | None = None,
    repo_info: RepoInfo | None = None,
    working_dir: str | None = None,
    default_type: ScopeType = ScopeType.REPOSITORY,
) -> Scope:
    """Resolve vault options into a Scope. See ``vaultmd.core.resolver``."""
    options = options or VaultOptions()
    return resolver.resolve_scope(
        options.scope_options(working_dir), repo_info, default_type
    )


def open_vault(
    options: VaultOptions | None = None,
    *,
    repo_info: RepoInfo | None = None,
    repo_info_provider: RepoInfoProvider | None = None,
    working_dir: str | None = None,
    vault_dir: Path | str | None = None,
    db_path: Path | str | None = None,
) -> VaultContext:
    """
    Resolve the scope, open the database and build a context.

    Args:
        options: Scope selection for the context
        repo_info: Repository info for ``working_dir``, if already known
        repo_info_provider: Called with ``working_dir`` when ``repo_info`` is
            not given
        working_dir: Directory to resolve the scope from (default: cwd)
        vault_dir: Vault root (default: ``VAULT_DIR`` / XDG data dir)
        db_path: Database file, overriding ``<vault_dir>/index.db``

    Returns:
        An open VaultContext. Close it with ``close_vault`` or use it as a
        context manager.

    Raises:
        ConfigurationError: Invalid scope or settings, or a too-new database.
        PreconditionError: Branch or worktree scope outside a repository.
    """
    working_dir = os.path.abspath(working_dir or os.getcwd())
    if repo_info is None:
        repo_info = repo_info_provider(working_dir) if repo_info_provider else NOT_A_REPO

    root = Path(vault_dir) if vault_dir else get_vault_dir()
    settings = load_settings(root)
    scope = resolve_scope(options, repo_info, working_dir, settings.default_scope)

    database = open_database(db_path or get_db_path(root))
    try:
        ctx = VaultContext(
            database,
            ContentStore(get_files_dir(root), settings.file_extension),
            scope,
            repo_info=repo_info,
            settings=settings,
            working_dir=working_dir,
        )
    except Exception:
        database.close()
        raise

    logger.info(f"Vault opened at {root} ({format_scope(scope)})")
    return ctx


def close_vault(ctx: VaultContext) -> None:
    ctx.close()


def set_entry(
    ctx: VaultContext, key: str, content: bytes | str, options: VaultOptions | None = None
) -> str:
    """
    Store a new version of ``key`` and return its content path.

    The version row and its file are written together; if the database write
    fails the file is removed again.

    Raises:
        PreconditionError: If the key is empty.
    """
    if not key or not key.strip():
        raise PreconditionError("Key must not be empty")

    options = options or VaultOptions()
    scope = _operation_scope(ctx, options)

    stored: StoredFile | None = None
    try:
        with ctx.database.transaction():
            scope_id = ctx.scopes.get_or_create(scope)
            version = ctx.entries.get_next_version(scope_id, key)
            stored = ctx.content_store.save_file(
                get_scope_storage_key(scope), key, version, content
            )
            ctx.entries.create(
                NewVersion(
                    scope_id=scope_id,
                    key=key,
                    version=version,
                    file_path=stored.path,
                    hash=stored.hash,
                    description=options.description,
                )
            )
    except Exception:
        if stored is not None:
            ctx.content_store.delete_file(stored.path)
        raise

    logger.debug(f"Set {key} v{version} in {format_scope(scope)}")
    return stored.path


def get_entry(
    ctx: VaultContext, key: str, options: VaultOptions | None = None
) -> str | None:
    """
    Content path of a key after verifying its hash, or None.

    Raises:
        IntegrityError: If the stored file is missing or altered.
    """
    found = _lookup(ctx, key, options or VaultOptions(), verify=True)
    return found[1].file_path if found else None


def read_entry(
    ctx: VaultContext, key: str, options: VaultOptions | None = None
) -> bytes | None:
    """
    Verified content of a key, or None.

    Raises:
        IntegrityError: If the stored file is missing or altered.
    """
    found = _lookup(ctx, key, options or VaultOptions(), verify=False)
    if found is None:
        return None

    entry = found[1]
    return ctx.content_store.read_verified(entry.file_path, entry.hash, entry.key)


def get_info(
    ctx: VaultContext, key: str, options: VaultOptions | None = None
) -> VaultEntry | None:
    """Metadata of a key without touching its content."""
    found = _lookup(ctx, key, options or VaultOptions(), verify=False)
    if found is None:
        return None
    return VaultEntry.from_scoped(found[1], found[0])


def list_entries(ctx: VaultContext, options: VaultOptions | None = None) -> list[VaultEntry]:
    """
    List entries of the context scope, another scope, or every scope.

    Honors ``include_archived`` and ``all_versions``.
    """
    options = options or VaultOptions()

    if options.all_scopes:
        result = []
        for record in ctx.scopes.get_all():
            entries = ctx.entries.list(
                record.id, options.include_archived, options.all_versions
            )
            result.extend(VaultEntry.from_scoped(e, record.scope) for e in entries)
        return result

    scope = _operation_scope(ctx, options)
    scope_id = _find_scope_id(ctx, scope)
    if scope_id is None:
        return []

    entries = ctx.entries.list(scope_id, options.include_archived, options.all_versions)
    return [VaultEntry.from_scoped(e, scope) for e in entries]


def list_all_entries_grouped(ctx: VaultContext) -> dict[Scope, list[VaultEntry]]:
    """Current entries of every scope, keyed by scope."""
    grouped = ctx.scopes.get_all_entries_grouped()
    return {
        scope: [VaultEntry.from_scoped(e, scope) for e in entries]
        for scope, entries in grouped.items()
    }


def delete_entry(ctx: VaultContext, key: str, options: VaultOptions | None = None) -> bool:
    """Delete one version (``options.version``) or every version of a key."""
    options = options or VaultOptions()
    if options.version is not None:
        return delete_version(ctx, key, options.version, options) > 0
    return delete_key(ctx, key, options) > 0


def delete_version(
    ctx: VaultContext, key: str, version: int, options: VaultOptions | None = None
) -> int:
    """
    Delete one version of a key with its file.

    Returns:
        1 if the version existed, else 0
    """
    scope_id = _find_scope_id(ctx, _operation_scope(ctx, options or VaultOptions()))
    if scope_id is None:
        return 0

    entry = ctx.entries.get_by_version(scope_id, key, version)
    if entry is None:
        return 0

    if not ctx.entries.delete_version(scope_id, key, version):
        return 0

    ctx.content_store.delete_file(entry.file_path)
    return 1


def delete_key(ctx: VaultContext, key: str, options: VaultOptions | None = None) -> int:
    """
    Delete every version of a key with their files.

    Returns:
        Number of versions removed
    """
    scope_id = _find_scope_id(ctx, _operation_scope(ctx, options or VaultOptions()))
    if scope_id is None:
        return 0

    versions = ctx.entries.get_all_versions(scope_id, key)
    if not ctx.entries.delete_all(scope_id, key):
        return 0

    for summary in versions:
        ctx.content_store.delete_file(summary.file_path)
    return len(versions)


def delete_current_scope(ctx: VaultContext) -> int:
    """
    Delete the context scope with all of its entries and files.

    The scope stays registered (empty) so the context remains usable.

    Returns:
        Number of versions removed

    Raises:
        PreconditionError: For the global scope.
    """
    if isinstance(ctx.scope, GlobalScope):
        raise PreconditionError("Cannot delete global scope")

    count = ctx.scopes.delete_scope(ctx.scope)
    ctx.content_store.delete_scope_files(get_scope_storage_key(ctx.scope))
    ctx.scope_id = ctx.scopes.get_or_create(ctx.scope)
    return count


def delete_branch(ctx: VaultContext, branch: str) -> int:
    """
    Delete one branch scope of the context's repository.

    Returns:
        Number of versions removed

    Raises:
        PreconditionError: From a global context.
    """
    target = BranchScope(_repository_path(ctx), branch)
    validate_scope(target)

    count = ctx.scopes.delete_scope(target)
    ctx.content_store.delete_scope_files(get_scope_storage_key(target))
    if target == ctx.scope:
        ctx.scope_id = ctx.scopes.get_or_create(ctx.scope)
    return count


def delete_all_branches(ctx: VaultContext) -> int:
    """
    Delete the repository scope and every branch and worktree scope of the
    context's repository, with their files.

    Returns:
        Number of versions removed

    Raises:
        PreconditionError: From a global context.
    """
    primary_path = _repository_path(ctx)
    storage_keys = [r.scope_path for r in ctx.scopes.list_by_primary_path(primary_path)]
    for storage_key in storage_keys:
        ctx.content_store.scope_dir(storage_key)

    count = ctx.scopes.delete_all_branches(primary_path)
    for storage_key in storage_keys:
        ctx.content_store.delete_scope_files(storage_key)

    ctx.scope_id = ctx.scopes.get_or_create(ctx.scope)
    return count


def move_scope(ctx: VaultContext, key: str, from_scope: Scope, to_scope: Scope) -> int:
    """
    Move a key with its whole history to another scope.

    Content files are copied into the target scope's directory before the
    database move and the originals removed after it commits. A failed move
    leaves the source untouched and removes the copies.

    Returns:
        Number of versions moved

    Raises:
        PreconditionError: Same scope, key missing in source, or key present
            in target.
        IntegrityError: If a source file is missing or altered.
    """
    target_key = get_scope_storage_key(to_scope)
    ctx.content_store.scope_dir(target_key)
    originals: list[str] = []
    copies: list[str] = []

    def relocate(version: Version) -> str:
        ctx.content_store.ensure_intact(version.file_path, version.hash, key)
        copy = ctx.content_store.copy_file(
            version.file_path, target_key, key, version.version
        )
        originals.append(version.file_path)
        copies.append(copy)
        return copy

    try:
        count = ctx.scopes.move_scope(key, from_scope, to_scope, relocate)
    except Exception:
        for copy in copies:
            ctx.content_store.delete_file(copy)
        raise

    for original in originals:
        if original not in copies:
            ctx.content_store.delete_file(original)
    return count


def archive_entry(ctx: VaultContext, key: str, options: VaultOptions | None = None) -> bool:
    """Hide a key from default listings and fallback search."""
    scope_id = _find_scope_id(ctx, _operation_scope(ctx, options or VaultOptions()))
    if scope_id is None:
        return False
    return ctx.entries.archive(scope_id, key)


def restore_entry(ctx: VaultContext, key: str, options: VaultOptions | None = None) -> bool:
    scope_id = _find_scope_id(ctx, _operation_scope(ctx, options or VaultOptions()))
    if scope_id is None:
        return False
    return ctx.entries.restore(scope_id, key)


def clear_vault(ctx: VaultContext) -> None:
    """Delete every scope, entry, version and content file."""
    ctx.database.clear()
    ctx.content_store.clear()
    ctx.scope_id = ctx.scopes.get_or_create(ctx.scope)
    logger.info("Vault cleared")


def _operation_scope(ctx: VaultContext, options: VaultOptions) -> Scope:
    if not options.selects_scope:
        return ctx.scope
    return resolve_scope(
        options, ctx.repo_info, ctx.working_dir, ctx.settings.default_scope
    )


def _find_scope_id(ctx: VaultContext, scope: Scope) -> int | None:
    if scope == ctx.scope:
        return ctx.scope_id
    return ctx.scopes.find_id(scope)


def _lookup(
    ctx: VaultContext, key: str, options: VaultOptions, verify: bool
) -> tuple[Scope, ScopedEntry] | None:
    scope = _operation_scope(ctx, options)

    def check(entry: ScopedEntry) -> None:
        if verify:
            ctx.content_store.ensure_intact(entry.file_path, entry.hash, key)

    if options.all_scopes:
        return ctx.scopes.get_entry_with_fallback(
            scope, key, options.version, options.include_archived, check
        )

    scope_id = _find_scope_id(ctx, scope)
    if scope_id is None:
        return None

    if options.version is not None:
        entry = ctx.entries.get_by_version(scope_id, key, options.version)
    else:
        entry = ctx.entries.get_latest(scope_id, key)
    if entry is None:
        return None

    check(entry)
    logger.debug(f"Found {key} v{entry.version} in {format_scope(scope)}")
    return scope, entry


def _repository_path(ctx: VaultContext) -> str:
    path = get_primary_path(ctx.scope)
    if path is None:
        raise PreconditionError("Cannot delete branches from global scope")
    return path
