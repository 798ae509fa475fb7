"""
CLI settings loaded from ~/.toolentry/config.yaml.

Handles defaults for command timeouts, backup behavior and the directory
holding config-file locks. Environment variables override file values.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

HOME_ENV = "TOOLENTRY_HOME"
"""Environment variable relocating the settings directory."""


def default_home() -> Path:
    """Return the settings directory (``$TOOLENTRY_HOME`` or ``~/.toolentry``)."""
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".toolentry"


def _int_from_env(name: str) -> int:
    try:
        return int(os.environ[name])
    except ValueError:
        raise ValueError(
            f"Invalid {name}: {os.environ[name]}. "
            "Must be an integer."
        )


@dataclass
class ToolentrySettings:
    """
    User-level CLI settings.

    Attributes:
        test_timeout_ms: Default timeout for `toolentry test` (default: 10000)
        exec_timeout_ms: Default timeout for `toolentry exec` (default: 30000)
        backup_on_write: Back up existing files before `toolentry write` (default: True)
        lock_dir: Directory for config-file lock files (default: ~/.toolentry/locks)
    """

    test_timeout_ms: int = 10000
    exec_timeout_ms: int = 30000
    backup_on_write: bool = True
    lock_dir: Optional[Path] = None

    @classmethod
    def load(cls, home: Optional[Path] = None) -> "ToolentrySettings":
        """
        Load settings from ``<home>/config.yaml``.

        Falls back to defaults if the file doesn't exist. Environment
        variables override config file values.

        Args:
            home: Settings directory (defaults to ``default_home()``)

        Returns:
            ToolentrySettings instance with loaded/default values

        Raises:
            ValueError: If the config file or an override has an invalid format
        """
        home = home if home is not None else default_home()
        config_file = home / "config.yaml"
        config_dict = {}

        if config_file.exists():
            try:
                with open(config_file) as f:
                    config_dict = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid config.yaml: {e}") from e
            if not isinstance(config_dict, dict):
                raise ValueError(f"Invalid config.yaml: expected a mapping in {config_file}")

        # Environment variables override config file
        if "TOOLENTRY_TEST_TIMEOUT" in os.environ:
            config_dict["test_timeout_ms"] = _int_from_env("TOOLENTRY_TEST_TIMEOUT")

        if "TOOLENTRY_EXEC_TIMEOUT" in os.environ:
            config_dict["exec_timeout_ms"] = _int_from_env("TOOLENTRY_EXEC_TIMEOUT")

        if "TOOLENTRY_BACKUP" in os.environ:
            config_dict["backup_on_write"] = os.environ["TOOLENTRY_BACKUP"].lower() in ("true", "1", "yes")

        if "TOOLENTRY_LOCK_DIR" in os.environ:
            config_dict["lock_dir"] = os.environ["TOOLENTRY_LOCK_DIR"]

        if config_dict.get("lock_dir"):
            config_dict["lock_dir"] = Path(config_dict["lock_dir"]).expanduser()
        else:
            config_dict["lock_dir"] = home / "locks"

        for key in ("test_timeout_ms", "exec_timeout_ms"):
            if key in config_dict and not isinstance(config_dict[key], int):
                raise ValueError(f"Invalid {key}: {config_dict[key]!r}. Must be an integer.")

        return cls(**{k: v for k, v in config_dict.items() if k in cls.__annotations__})

