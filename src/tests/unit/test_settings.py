"""Unit tests for vault settings."""

from pathlib import Path

import pytest

from vaultmd.core.errors import ConfigurationError
from vaultmd.core.scope import ScopeType
from vaultmd.core.settings import DEFAULT_SETTINGS, VaultSettings, load_settings


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_defaults_when_no_config_file(self, tmp_path: Path):
        """Returns defaults when vault-config.yaml doesn't exist."""
        assert load_settings(tmp_path) == DEFAULT_SETTINGS

    def test_defaults_when_config_is_empty(self, tmp_path: Path):
        """Returns defaults when config file is empty."""
        (tmp_path / "vault-config.yaml").write_text("")

        assert load_settings(tmp_path) == DEFAULT_SETTINGS

    def test_defaults_when_config_is_null(self, tmp_path: Path):
        """Returns defaults when config file contains only null."""
        (tmp_path / "vault-config.yaml").write_text("null")

        assert load_settings(tmp_path) == DEFAULT_SETTINGS

    def test_loads_values(self, tmp_path: Path):
        """Loads configured values."""
        (tmp_path / "vault-config.yaml").write_text("""
file_extension: md
default_scope: branch
""")
        settings = load_settings(tmp_path)

        assert settings.file_extension == "md"
        assert settings.default_scope is ScopeType.BRANCH

    def test_raises_on_invalid_yaml(self, tmp_path: Path):
        """Raises ConfigurationError on invalid YAML syntax."""
        (tmp_path / "vault-config.yaml").write_text("invalid: yaml: content: [")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_settings(tmp_path)

    def test_raises_on_non_dict_yaml(self, tmp_path: Path):
        """Raises ConfigurationError when YAML is not a mapping."""
        (tmp_path / "vault-config.yaml").write_text("- item1\n- item2")

        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_settings(tmp_path)

    def test_raises_on_unknown_key(self, tmp_path: Path):
        """Typos in the config file are rejected."""
        (tmp_path / "vault-config.yaml").write_text("file_extention: md")

        with pytest.raises(ConfigurationError, match="Invalid settings"):
            load_settings(tmp_path)

    def test_raises_on_unknown_scope(self, tmp_path: Path):
        (tmp_path / "vault-config.yaml").write_text("default_scope: project")

        with pytest.raises(ConfigurationError, match="Invalid settings"):
            load_settings(tmp_path)


class TestVaultSettings:
    """Tests for the VaultSettings model."""

    def test_defaults(self):
        settings = VaultSettings()

        assert settings.file_extension == "txt"
        assert settings.default_scope is ScopeType.REPOSITORY

    def test_extension_leading_dot_is_stripped(self):
        assert VaultSettings(file_extension=".md").file_extension == "md"

    @pytest.mark.parametrize("value", ["", "tar.gz", "m d", "../x"])
    def test_extension_must_be_alphanumeric(self, value):
        with pytest.raises(ValueError):
            VaultSettings(file_extension=value)

    def test_settings_are_frozen(self):
        settings = VaultSettings()
        with pytest.raises(ValueError):
            settings.file_extension = "md"
