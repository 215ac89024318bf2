"""Entry service - versioning, listing, archival and per-key deletes."""

from __future__ import annotations

import logging

from vaultmd.core.types import Entry, NewVersion, ScopedEntry, VersionSummary
from vaultmd.storage.db import Database
from vaultmd.storage.queries import EntryVersionQuery, ScopedEntryQuery
from vaultmd.storage.repos import EntryRepo, EntryStatusRepo, VersionRepo

logger = logging.getLogger(__name__)


class EntryService:
    """Operations on the entries of a single scope."""

    def __init__(self, database: Database):
        """
        Initialize entry service.

        Args:
            database: Open vault database
        """
        self.database = database
        conn = database.conn
        self.entry_repo = EntryRepo(conn)
        self.status_repo = EntryStatusRepo(conn)
        self.version_repo = VersionRepo(conn)
        self.scoped_entry_query = ScopedEntryQuery(conn)
        self.entry_version_query = EntryVersionQuery(conn)

    def get_latest(self, scope_id: int, key: str) -> ScopedEntry | None:
        return self.scoped_entry_query.get_latest(scope_id, key)

    def get_by_version(self, scope_id: int, key: str, version: int) -> ScopedEntry | None:
        return self.scoped_entry_query.get_by_version(scope_id, key, version)

    def get_next_version(self, scope_id: int, key: str) -> int:
        return self.entry_version_query.get_next_version(scope_id, key)

    def get_all_versions(self, scope_id: int, key: str) -> list[VersionSummary]:
        return self.entry_version_query.get_all_versions(scope_id, key)

    def get_entry_by_key(self, scope_id: int, key: str) -> Entry | None:
        return self.entry_repo.find_by_scope_and_key(scope_id, key)

    def create(self, new: NewVersion, is_archived: bool = False) -> int:
        """
        Append a version to a key, creating the entry on first write.

        Entry, version row and current-version pointer commit together.

        Returns:
            Id of the inserted version row
        """
        with self.database.transaction():
            existing = self.entry_repo.find_by_scope_and_key(new.scope_id, new.key)
            if existing:
                entry_id = existing.id
                if self.status_repo.find_by_entry_id(entry_id) is None:
                    self.status_repo.create(entry_id, new.version, is_archived)
            else:
                entry_id = self.entry_repo.create(new.scope_id, new.key)
                self.status_repo.create(entry_id, new.version, is_archived)

            version_id = self.version_repo.create(
                entry_id, new.version, new.file_path, new.hash, new.description
            )
            self.status_repo.update_current_version(entry_id, new.version)

        logger.debug("Stored %s v%d in scope %d", new.key, new.version, new.scope_id)
        return version_id

    def list(
        self, scope_id: int, include_archived: bool = False, all_versions: bool = False
    ) -> list[ScopedEntry]:
        return self.scoped_entry_query.list(scope_id, include_archived, all_versions)

    def delete_version(self, scope_id: int, key: str, version: int) -> bool:
        """
        Delete one version of a key.

        If it was the current version, the pointer moves to the highest
        remaining version. Deleting the last version removes the entry.

        Returns:
            True if the version existed
        """
        with self.database.transaction():
            entry = self.entry_repo.find_by_scope_and_key(scope_id, key)
            if entry is None:
                return False

            if not self.version_repo.delete_by_entry_and_version(entry.id, version):
                return False

            remaining = self.version_repo.get_max_version(entry.id)
            if remaining == 0:
                self.status_repo.delete(entry.id)
                self.entry_repo.delete(entry.id)
                return True

            status = self.status_repo.find_by_entry_id(entry.id)
            if status is None or status.current_version == version:
                self.status_repo.update_current_version(entry.id, remaining)

        return True

    def delete_all(self, scope_id: int, key: str) -> bool:
        """Delete a key with its status and every version."""
        with self.database.transaction():
            entry = self.entry_repo.find_by_scope_and_key(scope_id, key)
            if entry is None:
                return False

            self.version_repo.delete_all_by_entry(entry.id)
            self.status_repo.delete(entry.id)
            self.entry_repo.delete(entry.id)

        return True

    def archive(self, scope_id: int, key: str) -> bool:
        """Hide a key from default listings. False if missing or already archived."""
        return self._set_archived(scope_id, key, True)

    def restore(self, scope_id: int, key: str) -> bool:
        """Un-archive a key. False if missing or not archived."""
        return self._set_archived(scope_id, key, False)

    def _set_archived(self, scope_id: int, key: str, archived: bool) -> bool:
        entry = self.entry_repo.find_by_scope_and_key(scope_id, key)
        if entry is None:
            return False

        status = self.status_repo.find_by_entry_id(entry.id)
        if status is None or status.is_archived == archived:
            return False

        return self.status_repo.set_archived(entry.id, archived)
