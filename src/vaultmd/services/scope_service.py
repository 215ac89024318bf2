"""Scope service - scope registration, fallback search, cascades and moves."""

from __future__ import annotations

import logging
from typing import Callable

from vaultmd.core.errors import ConfigurationError, PreconditionError
from vaultmd.core.scope import (
    GlobalScope,
    Scope,
    format_scope,
    get_scope_storage_key,
    get_search_order,
    validate_scope,
)
from vaultmd.core.types import ScopedEntry, ScopeRecord, Version
from vaultmd.storage.db import Database
from vaultmd.storage.queries import ScopedEntryQuery, ScopeEntryQuery
from vaultmd.storage.repos import EntryRepo, EntryStatusRepo, ScopeRepo, VersionRepo

logger = logging.getLogger(__name__)

# Called with each hit of a fallback search; raises to abort the search.
EntryVerifier = Callable[[ScopedEntry], None]

# Maps a version being moved to the file path it should have in the target.
PathRelocator = Callable[[Version], str]


class ScopeService:
    """Operations spanning whole scopes or several scopes."""

    def __init__(self, database: Database):
        """
        Initialize scope service.

        Args:
            database: Open vault database
        """
        self.database = database
        conn = database.conn
        self.scope_repo = ScopeRepo(conn)
        self.entry_repo = EntryRepo(conn)
        self.status_repo = EntryStatusRepo(conn)
        self.version_repo = VersionRepo(conn)
        self.scoped_entry_query = ScopedEntryQuery(conn)
        self.scope_entry_query = ScopeEntryQuery(conn)

    def get_or_create(self, scope: Scope) -> int:
        """
        Idempotently register a scope and return its id.

        An existing row has its display metadata (e.g. worktree path) refreshed.

        Raises:
            ConfigurationError: If the scope is invalid, or a different scope
                already owns the same storage key.
        """
        validate_scope(scope)
        with self.database.transaction():
            existing = self.scope_repo.find_by_scope(scope)
            if existing is None:
                scope_id = self.scope_repo.create(scope)
                logger.debug("Registered scope %s as %d", format_scope(scope), scope_id)
                return scope_id

            _ensure_same_scope(scope, existing)
            self.scope_repo.update(existing.id, scope)
            return existing.id

    def find_id(self, scope: Scope) -> int | None:
        """Id of a stored scope, or None. Never creates a row."""
        record = self.scope_repo.find_by_scope(scope)
        if record is None or record.scope != scope:
            return None
        return record.id

    def get_by_id(self, scope_id: int) -> ScopeRecord | None:
        return self.scope_repo.find_by_id(scope_id)

    def get_all(self) -> list[ScopeRecord]:
        return self.scope_repo.find_all()

    def list_by_primary_path(self, primary_path: str) -> list[ScopeRecord]:
        return self.scope_repo.find_by_primary_path(primary_path)

    def get_all_entries_grouped(self) -> dict[Scope, list[ScopedEntry]]:
        """Every stored scope with its current, non-archived entries."""
        records = self.get_all()
        by_scope = self.scoped_entry_query.list_by_scopes([r.id for r in records])
        return {record.scope: by_scope.get(record.id, []) for record in records}

    @staticmethod
    def get_search_order(scope: Scope) -> list[Scope]:
        return get_search_order(scope)

    def get_entry_with_fallback(
        self,
        scope: Scope,
        key: str,
        version: int | None = None,
        include_archived: bool = False,
        verify: EntryVerifier | None = None,
    ) -> tuple[Scope, ScopedEntry] | None:
        """
        Walk from ``scope`` up the hierarchy and return the first hit.

        Archived entries count as misses unless ``include_archived`` is set.
        ``verify`` runs on the hit; whatever it raises propagates, an integrity
        failure is never skipped in favour of a less specific scope.

        Returns:
            (scope the entry was found in, entry), or None
        """
        for candidate in get_search_order(scope):
            scope_id = self.find_id(candidate)
            if scope_id is None:
                continue

            if version is not None:
                entry = self.scoped_entry_query.get_by_version(scope_id, key, version)
            else:
                entry = self.scoped_entry_query.get_latest(scope_id, key)

            if entry is None or (entry.is_archived and not include_archived):
                logger.debug("Fallback miss for %s in %s", key, format_scope(candidate))
                continue

            if verify is not None:
                verify(entry)
            return candidate, entry

        return None

    def delete_scope(self, scope: Scope) -> int:
        """
        Delete a scope with every entry, status and version it owns.

        Returns:
            Number of versions removed (0 if the scope was never stored)

        Raises:
            PreconditionError: For the global scope.
        """
        if isinstance(scope, GlobalScope):
            raise PreconditionError("Cannot delete global scope")

        with self.database.transaction():
            record = self.scope_repo.find_by_scope(scope)
            if record is None or record.scope != scope:
                return 0

            total = self._delete_scope_contents(record.id)
            self.scope_repo.delete(record.id)

        logger.info("Deleted scope %s (%d versions)", format_scope(scope), total)
        return total

    def delete_all_branches(self, primary_path: str) -> int:
        """
        Delete the repository scope and every branch and worktree scope of it.

        Only scopes whose primary path equals ``primary_path`` are touched.

        Returns:
            Number of versions removed
        """
        if not primary_path:
            raise PreconditionError("A repository path is required")

        with self.database.transaction():
            total = 0
            for counts in self.scope_entry_query.get_scopes_with_counts(primary_path):
                total += self._delete_scope_contents(counts.scope_id)
            self.scope_repo.delete_by_primary_path(primary_path)

        logger.info("Deleted all scopes of %s (%d versions)", primary_path, total)
        return total

    def move_scope(
        self,
        key: str,
        from_scope: Scope,
        to_scope: Scope,
        relocate: PathRelocator | None = None,
    ) -> int:
        """
        Move a key with its full history from one scope to another.

        Every version keeps its number, the target's current version is the
        source's, and the key disappears from the source. Preconditions are
        checked before anything is written; the copy and the delete commit
        together.

        Args:
            key: Key to move
            from_scope: Scope currently holding the key
            to_scope: Scope that must not hold the key yet
            relocate: Optional hook giving each version its new file path

        Returns:
            Number of versions moved

        Raises:
            PreconditionError: Same scope, key missing in source, or key
                already present in target.
            ConfigurationError: If another scope owns the target's storage key.
        """
        validate_scope(from_scope)
        validate_scope(to_scope)
        if get_scope_storage_key(from_scope) == get_scope_storage_key(to_scope):
            raise PreconditionError("Source and target scopes must be different")

        from_id = self.find_id(from_scope)
        entry = (
            self.entry_repo.find_by_scope_and_key(from_id, key)
            if from_id is not None
            else None
        )
        if entry is None:
            raise PreconditionError(
                f"Key {key!r} not found in source scope {format_scope(from_scope)}"
            )

        _ensure_same_scope(to_scope, self.scope_repo.find_by_scope(to_scope))
        to_id = self.find_id(to_scope)
        if to_id is not None and self.entry_repo.find_by_scope_and_key(to_id, key):
            raise PreconditionError(
                f"Key {key!r} already exists in target scope {format_scope(to_scope)}"
            )

        status = self.status_repo.find_by_entry_id(entry.id)
        versions = sorted(self.version_repo.find_all_by_entry(entry.id), key=lambda v: v.version)
        current = status.current_version if status else versions[-1].version
        archived = status.is_archived if status else False
        paths = [relocate(v) if relocate else v.file_path for v in versions]

        with self.database.transaction():
            target_id = self.get_or_create(to_scope)
            new_entry_id = self.entry_repo.create(target_id, key)
            self.status_repo.create(new_entry_id, current, archived)
            for version, path in zip(versions, paths):
                self.version_repo.create(
                    new_entry_id, version.version, path, version.hash, version.description
                )

            self.version_repo.delete_all_by_entry(entry.id)
            self.status_repo.delete(entry.id)
            self.entry_repo.delete(entry.id)

        logger.info(
            "Moved %s (%d versions) from %s to %s",
            key,
            len(versions),
            format_scope(from_scope),
            format_scope(to_scope),
        )
        return len(versions)

    def _delete_scope_contents(self, scope_id: int) -> int:
        total = 0
        for info in self.scope_entry_query.get_entries_with_version_count(scope_id):
            total += info.version_count
            self.version_repo.delete_all_by_entry(info.entry_id)
            self.status_repo.delete(info.entry_id)
            self.entry_repo.delete(info.entry_id)
        return total


def _ensure_same_scope(scope: Scope, record: ScopeRecord | None) -> None:
    """
    Raises:
        ConfigurationError: If a different scope owns the storage key of ``scope``.
    """
    if record is not None and record.scope != scope:
        raise ConfigurationError(
            f"Scope {format_scope(scope)!r} collides with stored scope "
            f"{format_scope(record.scope)!r} "
            f"(storage key {record.scope_path!r})"
        )
