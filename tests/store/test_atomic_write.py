"""Tests for atomic config file writes."""

import os
import stat
import unittest.mock as mock

import pytest

from toolentry_cli.store import atomic_write


def test_atomic_write_creates_file(tmp_path):
    """Test that atomic_write creates a file with correct content."""
    file_path = tmp_path / "mcp.json"

    atomic_write(file_path, '{"mcpServers": {}}\n')

    assert file_path.read_text() == '{"mcpServers": {}}\n'


def test_atomic_write_overwrites_existing(tmp_path):
    """Test that atomic_write replaces an existing config."""
    file_path = tmp_path / "mcp.json"
    file_path.write_text("{}")

    atomic_write(file_path, '{"servers": {}}')

    assert file_path.read_text() == '{"servers": {}}'


def test_atomic_write_leaves_no_temp_files(tmp_path):
    """Test that only the target file remains after a write."""
    file_path = tmp_path / "mcp.json"
    files_before = set(tmp_path.iterdir())

    atomic_write(file_path, "{}")

    assert set(tmp_path.iterdir()) == files_before | {file_path}


def test_atomic_write_handles_unicode(tmp_path):
    file_path = tmp_path / "unicode.json"
    content = '{"name": "サーバー 🚀"}'

    atomic_write(file_path, content)

    assert file_path.read_text(encoding="utf-8") == content


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_atomic_write_preserves_mode(tmp_path):
    """Test that a replaced file keeps its permission bits."""
    file_path = tmp_path / "secret.json"
    file_path.write_text("{}")
    os.chmod(file_path, 0o600)

    atomic_write(file_path, '{"mcpServers": {}}')

    assert stat.S_IMODE(file_path.stat().st_mode) == 0o600


def test_atomic_write_preserves_on_crash(tmp_path):
    """Test that the previous config survives a failed rename."""
    file_path = tmp_path / "mcp.json"
    file_path.write_text("original")

    with mock.patch("os.replace", side_effect=OSError("Simulated crash")):
        with pytest.raises(OSError):
            atomic_write(file_path, "new")

    assert file_path.read_text() == "original"
    assert list(tmp_path.glob(".mcp.json.tmp.*")) == []
