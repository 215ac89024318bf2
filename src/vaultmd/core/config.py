"""Configuration management for vaultmd."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

VAULT_DIRNAME = "vault.md"
DB_FILENAME = "index.db"
FILES_DIRNAME = "files"


def get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def get_vault_dir() -> Path:
    """
    Resolve the vault root directory.

    Resolution order: ``VAULT_DIR``, then ``$XDG_DATA_HOME/vault.md``, then
    ``~/.local/share/vault.md``. Evaluated on every call so tests and hosts can
    repoint the vault through the environment.

    Returns:
        Path to the vault root
    """
    explicit = get_env("VAULT_DIR")
    if explicit:
        return Path(explicit).expanduser()

    data_home = get_env("XDG_DATA_HOME") or os.path.join(
        os.path.expanduser("~"), ".local", "share"
    )
    return Path(data_home).expanduser() / VAULT_DIRNAME


def get_db_path(vault_dir: Path | str | None = None) -> Path:
    """Get the SQLite database path inside the vault root."""
    root = Path(vault_dir) if vault_dir else get_vault_dir()
    return root / DB_FILENAME


def get_files_dir(vault_dir: Path | str | None = None) -> Path:
    """Get the content directory inside the vault root."""
    root = Path(vault_dir) if vault_dir else get_vault_dir()
    return root / FILES_DIRNAME
