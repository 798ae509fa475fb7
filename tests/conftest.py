"""Shared fixtures: keep every test away from the real ~/.toolentry."""

import pytest

SETTINGS_ENV = (
    "TOOLENTRY_TEST_TIMEOUT",
    "TOOLENTRY_EXEC_TIMEOUT",
    "TOOLENTRY_BACKUP",
    "TOOLENTRY_LOCK_DIR",
)


@pytest.fixture(autouse=True)
def toolentry_home(tmp_path, monkeypatch):
    """Point TOOLENTRY_HOME at a per-test directory and clear overrides."""
    home = tmp_path / "toolentry-home"
    monkeypatch.setenv("TOOLENTRY_HOME", str(home))
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    return home
