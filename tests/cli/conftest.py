"""Fixtures for CLI tests."""

import pytest


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    """Make client paths resolve under a temporary home directory."""
    home = tmp_path / "user-home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("APPDATA", str(home / "AppData" / "Roaming"))
    return home
