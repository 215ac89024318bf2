"""Filesystem content store.

Content lives at ``<files_dir>/<scope storage key>/<quoted key>_v<n>.<ext>``.
Paths are derived from scope, key and version rather than from the content,
so two versions never share a file even when their bytes are identical.
"""

import hashlib
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from vaultmd.core.errors import ConfigurationError, IntegrityError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    path: str
    hash: str


def calculate_hash(content: bytes) -> str:
    """SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(content).hexdigest()


def _to_bytes(content: bytes | str) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return content


class ContentStore:
    """Hash-verified byte storage keyed by (scope, key, version)."""

    def __init__(self, files_dir: Path | str, extension: str = "txt"):
        """
        Initialize content store.

        Args:
            files_dir: Root directory for content files
            extension: File extension, without the dot
        """
        self.files_dir = Path(files_dir)
        self.extension = extension

    def scope_dir(self, storage_key: str) -> Path:
        """
        Content directory of one scope, always a direct child of ``files_dir``.

        Raises:
            ConfigurationError: If the storage key would point elsewhere.
        """
        if storage_key in ("", ".", "..") or Path(storage_key).name != storage_key:
            raise ConfigurationError(f"Invalid scope storage key: {storage_key!r}")
        return self.files_dir / storage_key

    def path_for(self, storage_key: str, key: str, version: int) -> Path:
        filename = f"{quote(key, safe='')}_v{version}.{self.extension}"
        return self.scope_dir(storage_key) / filename

    def save_file(
        self, storage_key: str, key: str, version: int, content: bytes | str
    ) -> StoredFile:
        """
        Write one version's content and return its path and hash.

        Args:
            storage_key: Sanitized scope storage key
            key: Entry key
            version: Version number being written
            content: Raw bytes, or text stored as UTF-8

        Returns:
            StoredFile with the absolute path and SHA-256 hash
        """
        data = _to_bytes(content)
        path = self.path_for(storage_key, key, version)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug(f"Saved {len(data)} bytes to {path}")
        return StoredFile(path=str(path), hash=calculate_hash(data))

    def copy_file(self, source: str, storage_key: str, key: str, version: int) -> str:
        """Copy an existing content file to its slot in another scope."""
        target = self.path_for(storage_key, key, version)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        return str(target)

    def verify_file(self, path: str, expected_hash: str) -> bool:
        """True if the file exists and its bytes hash to ``expected_hash``."""
        try:
            data = Path(path).read_bytes()
        except FileNotFoundError:
            return False
        return calculate_hash(data) == expected_hash

    def ensure_intact(self, path: str, expected_hash: str, label: str = "") -> None:
        """
        Raises:
            IntegrityError: If the file is missing or its hash differs.
        """
        if not self.verify_file(path, expected_hash):
            raise IntegrityError(f"File integrity check failed for {label or path}")

    def read_verified(self, path: str, expected_hash: str, label: str = "") -> bytes:
        """
        Read a file, checking it against the hash recorded at write time.

        Raises:
            IntegrityError: If the file is missing or its hash differs.
        """
        try:
            data = Path(path).read_bytes()
        except FileNotFoundError:
            raise IntegrityError(
                f"File integrity check failed for {label or path}: file is missing"
            ) from None

        if calculate_hash(data) != expected_hash:
            raise IntegrityError(f"File integrity check failed for {label or path}")
        return data

    def delete_file(self, path: str) -> None:
        """Remove one content file. A missing file is not an error."""
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to delete {path}: {e}")

    def delete_scope_files(self, storage_key: str) -> None:
        """Remove a scope's content directory. A missing directory is not an error."""
        directory = self.scope_dir(storage_key)
        if not directory.exists():
            return
        try:
            shutil.rmtree(directory)
        except OSError as e:
            logger.warning(f"Failed to delete {directory}: {e}")

    def clear(self) -> None:
        """Remove every content file of the vault."""
        if not self.files_dir.exists():
            return
        try:
            shutil.rmtree(self.files_dir)
        except OSError as e:
            logger.warning(f"Failed to clear {self.files_dir}: {e}")
