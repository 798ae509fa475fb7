"""
Tests for CLI settings loading and saving.

Tests cover:
- Defaults when ~/.toolentry/config.yaml doesn't exist
- Loading values from config.yaml
- Environment variable overrides
- Invalid files and overrides
"""

from pathlib import Path

import pytest

from toolentry_cli.config import ToolentrySettings
from toolentry_cli.config.settings import default_home


class TestToolentrySettings:
    """Test settings loading and saving."""

    def test_default_settings(self):
        """Test default values of a fresh instance."""
        settings = ToolentrySettings()

        assert settings.test_timeout_ms == 10000
        assert settings.exec_timeout_ms == 30000
        assert settings.backup_on_write is True
        assert settings.lock_dir is None

    def test_load_without_file(self, tmp_path):
        """Test loading when config.yaml doesn't exist (uses defaults)."""
        settings = ToolentrySettings.load(tmp_path)

        assert settings.test_timeout_ms == 10000
        assert settings.backup_on_write is True
        assert settings.lock_dir == tmp_path / "locks"

    def test_default_home_follows_env(self, toolentry_home):
        """TOOLENTRY_HOME relocates the settings directory."""
        assert default_home() == toolentry_home

    def test_load_from_file(self, tmp_path):
        """Test loading values from config.yaml."""
        (tmp_path / "config.yaml").write_text("""
test_timeout_ms: 20000
exec_timeout_ms: 120000
backup_on_write: false
lock_dir: /var/tmp/toolentry-locks
""")

        settings = ToolentrySettings.load(tmp_path)

        assert settings.test_timeout_ms == 20000
        assert settings.exec_timeout_ms == 120000
        assert settings.backup_on_write is False
        assert settings.lock_dir == Path("/var/tmp/toolentry-locks")

    def test_unknown_keys_ignored(self, tmp_path):
        (tmp_path / "config.yaml").write_text("color: blue\n")

        settings = ToolentrySettings.load(tmp_path)

        assert settings.test_timeout_ms == 10000

    def test_env_vars_override_file(self, tmp_path, monkeypatch):
        """Test environment variables override config file values."""
        (tmp_path / "config.yaml").write_text("test_timeout_ms: 20000\nbackup_on_write: true\n")

        monkeypatch.setenv("TOOLENTRY_TEST_TIMEOUT", "5000")
        monkeypatch.setenv("TOOLENTRY_EXEC_TIMEOUT", "1000")
        monkeypatch.setenv("TOOLENTRY_BACKUP", "no")
        monkeypatch.setenv("TOOLENTRY_LOCK_DIR", str(tmp_path / "elsewhere"))

        settings = ToolentrySettings.load(tmp_path)

        assert settings.test_timeout_ms == 5000
        assert settings.exec_timeout_ms == 1000
        assert settings.backup_on_write is False
        assert settings.lock_dir == tmp_path / "elsewhere"

    def test_invalid_env_var(self, tmp_path, monkeypatch):
        """Test error handling for a non-numeric timeout override."""
        monkeypatch.setenv("TOOLENTRY_TEST_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="Invalid TOOLENTRY_TEST_TIMEOUT"):
            ToolentrySettings.load(tmp_path)

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "config.yaml").write_text("test_timeout_ms: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid config.yaml"):
            ToolentrySettings.load(tmp_path)

    def test_non_mapping_yaml(self, tmp_path):
        (tmp_path / "config.yaml").write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="expected a mapping"):
            ToolentrySettings.load(tmp_path)

    def test_non_integer_timeout_in_file(self, tmp_path):
        (tmp_path / "config.yaml").write_text("exec_timeout_ms: fast\n")

        with pytest.raises(ValueError, match="Invalid exec_timeout_ms"):
            ToolentrySettings.load(tmp_path)

