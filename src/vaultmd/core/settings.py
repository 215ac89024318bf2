"""Per-vault settings loaded from ``vault-config.yaml``.

The settings file lives in the vault root next to the database. It is
optional; a missing or empty file yields the defaults.
"""

import logging
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from vaultmd.core.errors import ConfigurationError
from vaultmd.core.scope import ScopeType

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "vault-config.yaml"

_EXTENSION_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


class VaultSettings(BaseModel):
    """Typed vault settings.

    Frozen to prevent accidental mutation.
    Extra fields are forbidden to catch typos in config.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    file_extension: str = "txt"
    default_scope: ScopeType = ScopeType.REPOSITORY

    @field_validator("file_extension", mode="before")
    @classmethod
    def _normalize_extension(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.lstrip(".")
            if not _EXTENSION_PATTERN.match(value):
                raise ValueError("file_extension must be alphanumeric")
        return value


DEFAULT_SETTINGS = VaultSettings()


def load_settings(vault_dir: Path | str) -> VaultSettings:
    """
    Load settings from ``<vault_dir>/vault-config.yaml``.

    Args:
        vault_dir: Vault root directory

    Returns:
        Validated settings, or the defaults when no file exists.

    Raises:
        ConfigurationError: If the file is not valid YAML, not a mapping, or
            fails validation.
    """
    config_file = Path(vault_dir) / CONFIG_FILENAME
    if not config_file.exists():
        logger.debug(f"No config file at {config_file}")
        return DEFAULT_SETTINGS

    try:
        with open(config_file) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    if raw is None:
        return DEFAULT_SETTINGS

    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"{CONFIG_FILENAME} must be a mapping, got {type(raw).__name__}"
        )

    try:
        settings = VaultSettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {config_file}: {e}") from e

    logger.info(
        f"Vault settings loaded: file_extension={settings.file_extension}, "
        f"default_scope={settings.default_scope.value}"
    )
    return settings
