"""SQLite database connection, migrations and transactions."""

import logging
import re
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from vaultmd.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Migrations directory
MIGRATIONS_DIR = Path(__file__).parent / "migrations"

_MIGRATION_NAME = re.compile(r"^(\d+)_[\w-]+\.sql$")

MEMORY_DB = ":memory:"


def _migration_files() -> list[tuple[int, Path]]:
    """Numbered migration files, ascending."""
    steps = []
    for path in MIGRATIONS_DIR.glob("*.sql"):
        match = _MIGRATION_NAME.match(path.name)
        if match:
            steps.append((int(match.group(1)), path))
    return sorted(steps)


def latest_schema_version() -> int:
    """Highest schema version this release knows how to build."""
    steps = _migration_files()
    return steps[-1][0] if steps else 0


def _split_statements(sql: str) -> list[str]:
    """Split a migration script into individual statements."""
    statements = []
    buffer = ""
    for line in sql.splitlines():
        if line.strip().startswith("--"):
            continue
        buffer += line + "\n"
        if sqlite3.complete_statement(buffer):
            statements.append(buffer.strip())
            buffer = ""
    if buffer.strip():
        statements.append(buffer.strip())
    return statements


def get_schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def _run_migrations(conn: sqlite3.Connection) -> None:
    """
    Apply every pending migration in one transaction.

    The schema version lives in ``PRAGMA user_version``. A database stamped
    with a version newer than this release is refused; there is no downgrade.
    """
    current = get_schema_version(conn)
    known = latest_schema_version()

    if current > known:
        raise ConfigurationError(
            f"Database schema version {current} is newer than supported version "
            f"{known}. Please upgrade vaultmd."
        )

    pending = [(version, path) for version, path in _migration_files() if version > current]
    if not pending:
        return

    conn.execute("BEGIN IMMEDIATE")
    try:
        for version, path in pending:
            logger.info("Applying migration: %s", path.name)
            for statement in _split_statements(path.read_text()):
                conn.execute(statement)
        conn.execute(f"PRAGMA user_version = {known}")
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
    logger.info("Schema migrated from version %d to %d", current, known)


class Database:
    """One open SQLite handle plus explicit transaction control.

    The connection runs in autocommit mode; multi-statement mutations must go
    through ``transaction()``. Not safe for concurrent use: hosts that serve
    requests in parallel must serialize access themselves.
    """

    def __init__(self, conn: sqlite3.Connection, path: Path | str):
        self.conn = conn
        self.path = path
        self._depth = 0

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Run a block inside one transaction.

        Commits on success and rolls back on any exception. Nested calls join
        the outermost transaction.

        Yields:
            The underlying connection
        """
        if self._depth > 0:
            self._depth += 1
            try:
                yield self.conn
            finally:
                self._depth -= 1
            return

        self.conn.execute("BEGIN IMMEDIATE")
        self._depth = 1
        try:
            yield self.conn
            self.conn.execute("COMMIT")
        except BaseException:
            # A failed COMMIT can leave SQLite inside the transaction
            if self.conn.in_transaction:
                self.conn.execute("ROLLBACK")
            raise
        finally:
            self._depth = 0

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def clear(self) -> None:
        """Delete every row from every table."""
        with self.transaction() as conn:
            conn.execute("DELETE FROM versions")
            conn.execute("DELETE FROM entry_status")
            conn.execute("DELETE FROM entries")
            conn.execute("DELETE FROM scopes")

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()


def open_database(db_path: Path | str) -> Database:
    """
    Open (creating if needed) and migrate a vault database.

    Args:
        db_path: Path to the SQLite file, or ``:memory:``

    Returns:
        A migrated Database

    Raises:
        ConfigurationError: If the stored schema is newer than this release.
    """
    if str(db_path) != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA foreign_keys=ON")
        if str(db_path) != MEMORY_DB:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
        _run_migrations(conn)
    except Exception:
        conn.close()
        raise

    return Database(conn, db_path)
