"""
Tests for reading, writing, backing up and merging client configs.

Tests cover:
- JSON and YAML documents, empty and missing files
- Malformed files and missing directories
- Byte-for-byte backups
- Server merging that keeps the existing server key
"""

import json
import os

import pytest

from toolentry_cli.errors import ConfigFileError, ConfigPermissionError
from toolentry_cli.store import (
    backup_config,
    deep_merge,
    get_servers_key,
    infer_config_type,
    merge_servers,
    read_config,
    serialize_config,
    write_config,
)

GIT_SERVER = {"command": "npx", "args": ["@modelcontextprotocol/server-git"]}


class TestReadConfig:
    """Test parsing config files."""

    def test_missing_file(self, tmp_path):
        assert read_config(tmp_path / "absent.json") is None

    def test_empty_file(self, tmp_path):
        path = tmp_path / "mcp.json"
        path.write_text("  \n")

        assert read_config(path) == {}

    def test_json(self, tmp_path):
        path = tmp_path / "mcp.json"
        path.write_text(json.dumps({"mcpServers": {"git": GIT_SERVER}}))

        assert read_config(path) == {"mcpServers": {"git": GIT_SERVER}}

    def test_yaml(self, tmp_path):
        path = tmp_path / "mcp.yaml"
        path.write_text("servers:\n  git:\n    command: npx\n    args: []\n")

        assert read_config(path) == {"servers": {"git": {"command": "npx", "args": []}}}

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "mcp.json"
        path.write_text("{not json")

        with pytest.raises(ConfigFileError, match="invalid JSON"):
            read_config(path)

    @pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="needs POSIX non-root")
    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "mcp.json"
        path.write_text("{}")
        os.chmod(path, 0)

        try:
            with pytest.raises(ConfigPermissionError):
                read_config(path)
        finally:
            os.chmod(path, 0o644)


class TestWriteConfig:
    """Test serializing and writing config files."""

    def test_json_format(self, tmp_path):
        path = tmp_path / "mcp.json"

        write_config(path, {"mcpServers": {"名前": GIT_SERVER}})

        text = path.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert '  "mcpServers": {' in text
        assert "名前" in text

    def test_yaml_inferred_from_suffix(self, tmp_path):
        path = tmp_path / "mcp.yml"

        write_config(path, {"servers": {}})

        assert infer_config_type(path) == "yaml"
        assert read_config(path) == {"servers": {}}

    def test_missing_directory_requires_create_dirs(self, tmp_path):
        path = tmp_path / "nested" / "mcp.json"

        with pytest.raises(ConfigFileError, match="use --force"):
            write_config(path, {})

        assert not path.parent.exists()

    def test_create_dirs(self, tmp_path):
        path = tmp_path / "nested" / "deeper" / "mcp.json"

        write_config(path, {}, create_dirs=True)

        assert read_config(path) == {}

    def test_serialize_yaml(self):
        assert serialize_config({"a": 1}, "yaml") == "a: 1\n"


class TestBackupConfig:
    """Test backups before writes."""

    def test_backup_copies_bytes(self, tmp_path):
        path = tmp_path / "mcp.json"
        path.write_text("{broken")

        backup = backup_config(path)

        assert backup.parent == tmp_path
        assert backup.name.startswith("mcp.json.backup.")
        assert backup.name.rsplit(".", 1)[-1].isdigit()
        assert backup.read_text() == "{broken"


class TestMergeServers:
    """Test merging named servers into a document."""

    def test_merge_into_nothing(self):
        assert merge_servers(None, {"git": GIT_SERVER}) == {"mcpServers": {"git": GIT_SERVER}}

    def test_malformed_existing_treated_as_empty(self):
        assert merge_servers(["not", "a", "dict"], {"git": GIT_SERVER}) == {
            "mcpServers": {"git": GIT_SERVER}
        }

    def test_keeps_servers_key_and_other_keys(self):
        existing = {"theme": "dark", "servers": {"old": {"command": "old", "args": []}}}

        merged = merge_servers(existing, {"git": GIT_SERVER})

        assert merged == {
            "theme": "dark",
            "servers": {"old": {"command": "old", "args": []}, "git": GIT_SERVER},
        }
        assert "mcpServers" not in merged
        assert existing["servers"] == {"old": {"command": "old", "args": []}}

    def test_same_name_is_replaced(self):
        existing = {"mcpServers": {"git": {"command": "old", "args": []}}}

        merged = merge_servers(existing, {"git": GIT_SERVER})

        assert merged["mcpServers"]["git"] == GIT_SERVER

    def test_non_dict_server_map_replaced(self):
        merged = merge_servers({"mcpServers": "oops"}, {"git": GIT_SERVER})

        assert merged == {"mcpServers": {"git": GIT_SERVER}}

    def test_get_servers_key(self):
        assert get_servers_key({}) == "mcpServers"
        assert get_servers_key({"servers": {}}) == "servers"
        assert get_servers_key({"mcpServers": {}, "servers": {}}) == "mcpServers"


class TestDeepMerge:
    """Test nested dict merges."""

    def test_nested_dicts_merge(self):
        target = {"a": {"x": 1, "y": {"k": 1}}, "b": [1]}
        source = {"a": {"y": {"j": 2}}, "b": [2], "c": 3}

        assert deep_merge(target, source) == {
            "a": {"x": 1, "y": {"k": 1, "j": 2}},
            "b": [2],
            "c": 3,
        }

    def test_target_not_modified(self):
        target = {"a": {"x": 1}}

        deep_merge(target, {"a": {"y": 2}})

        assert target == {"a": {"x": 1}}
