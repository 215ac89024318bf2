"""Tests for EntryService."""

import sqlite3

import pytest

from vaultmd.core.scope import GlobalScope
from vaultmd.core.types import NewVersion


@pytest.fixture
def scope_id(scope_service):
    return scope_service.get_or_create(GlobalScope())


def _write(entry_service, scope_id, key="notes"):
    version = entry_service.get_next_version(scope_id, key)
    entry_service.create(
        NewVersion(scope_id, key, version, f"/files/{key}_v{version}.txt", f"h{version}")
    )
    return version


class TestCreate:
    """Tests for EntryService.create()."""

    def test_first_write_creates_entry(self, entry_service, scope_id):
        assert entry_service.get_entry_by_key(scope_id, "notes") is None

        _write(entry_service, scope_id)

        assert entry_service.get_entry_by_key(scope_id, "notes") is not None
        assert entry_service.get_latest(scope_id, "notes").version == 1

    def test_versions_are_gap_free(self, entry_service, scope_id):
        """After N creates the next version is N+1."""
        written = [_write(entry_service, scope_id) for _ in range(5)]

        assert written == [1, 2, 3, 4, 5]
        assert entry_service.get_next_version(scope_id, "notes") == 6

    def test_each_write_advances_current(self, entry_service, scope_id):
        _write(entry_service, scope_id)
        _write(entry_service, scope_id)

        assert entry_service.get_latest(scope_id, "notes").current_version == 2

    def test_failed_create_leaves_nothing(self, entry_service, scope_id, database):
        """Entry, status and version commit together or not at all."""
        with pytest.raises(sqlite3.IntegrityError):
            entry_service.create(NewVersion(scope_id, "other", 1, "/f", None))

        assert entry_service.get_entry_by_key(scope_id, "other") is None

        _write(entry_service, scope_id)

        with pytest.raises(sqlite3.IntegrityError):
            entry_service.create(NewVersion(scope_id, "notes", 1, "/dup", "h"))

        latest = entry_service.get_latest(scope_id, "notes")
        assert latest.version == 1
        assert latest.file_path == "/files/notes_v1.txt"
        assert not database.in_transaction

    def test_create_with_archived_flag(self, entry_service, scope_id):
        entry_service.create(NewVersion(scope_id, "notes", 1, "/f", "h"), is_archived=True)

        assert entry_service.get_latest(scope_id, "notes").is_archived is True


class TestDeleteVersion:
    """Tests for EntryService.delete_version()."""

    def test_delete_old_version_keeps_current(self, entry_service, scope_id):
        _write(entry_service, scope_id)
        _write(entry_service, scope_id)

        assert entry_service.delete_version(scope_id, "notes", 1) is True

        assert entry_service.get_by_version(scope_id, "notes", 1) is None
        assert entry_service.get_latest(scope_id, "notes").version == 2

    def test_delete_current_recomputes_pointer(self, entry_service, scope_id):
        """Deleting the current version points at the highest remaining one."""
        for _ in range(3):
            _write(entry_service, scope_id)

        entry_service.delete_version(scope_id, "notes", 3)

        latest = entry_service.get_latest(scope_id, "notes")
        assert latest.version == 2
        assert latest.current_version == 2

    def test_delete_last_version_removes_entry(self, entry_service, scope_id):
        _write(entry_service, scope_id)

        entry_service.delete_version(scope_id, "notes", 1)

        assert entry_service.get_entry_by_key(scope_id, "notes") is None
        assert entry_service.get_next_version(scope_id, "notes") == 1

    def test_delete_missing(self, entry_service, scope_id):
        assert entry_service.delete_version(scope_id, "notes", 1) is False
        _write(entry_service, scope_id)
        assert entry_service.delete_version(scope_id, "notes", 7) is False


class TestDeleteAll:
    """Tests for EntryService.delete_all()."""

    def test_removes_every_version(self, entry_service, scope_id):
        _write(entry_service, scope_id)
        _write(entry_service, scope_id)

        assert entry_service.delete_all(scope_id, "notes") is True

        assert entry_service.get_entry_by_key(scope_id, "notes") is None
        assert entry_service.get_all_versions(scope_id, "notes") == []

    def test_missing_key(self, entry_service, scope_id):
        assert entry_service.delete_all(scope_id, "notes") is False


class TestListAndArchive:
    """Tests for listing and archival."""

    def test_list_all_versions(self, entry_service, scope_id):
        _write(entry_service, scope_id)
        _write(entry_service, scope_id)

        rows = entry_service.list(scope_id, all_versions=True)

        assert [(r.version, r.is_current) for r in rows] == [(2, True), (1, False)]

    def test_archive_and_restore(self, entry_service, scope_id):
        _write(entry_service, scope_id)

        assert entry_service.archive(scope_id, "notes") is True
        assert entry_service.archive(scope_id, "notes") is False
        assert entry_service.list(scope_id) == []

        assert entry_service.restore(scope_id, "notes") is True
        assert entry_service.restore(scope_id, "notes") is False
        assert len(entry_service.list(scope_id)) == 1

    def test_archive_keeps_history(self, entry_service, scope_id):
        _write(entry_service, scope_id)
        _write(entry_service, scope_id)

        entry_service.archive(scope_id, "notes")

        assert len(entry_service.get_all_versions(scope_id, "notes")) == 2

    def test_archive_missing_key(self, entry_service, scope_id):
        assert entry_service.archive(scope_id, "missing") is False
        assert entry_service.restore(scope_id, "missing") is False
