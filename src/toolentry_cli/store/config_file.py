"""Read, write, back up and merge client configuration documents."""

import copy
import json
import logging
import shutil
import time
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from toolentry_cli.config.clients import ConfigType
from toolentry_cli.errors import ConfigFileError, ConfigPermissionError

from .persistence import atomic_write

logger = logging.getLogger(__name__)

SERVER_KEYS = ("mcpServers", "servers")
"""Keys clients use for the server map, in lookup order."""

DEFAULT_SERVER_KEY = "mcpServers"


def infer_config_type(path: Path) -> ConfigType:
    """Guess the document format from a file suffix."""
    if path.suffix.lower() in (".yaml", ".yml"):
        return "yaml"
    return "json"


def read_config(path: Path, config_type: Optional[ConfigType] = None) -> Optional[Any]:
    """
    Read and parse a configuration document.

    Args:
        path: File to read
        config_type: "json" or "yaml" (inferred from the suffix if omitted)

    Returns:
        Parsed document, ``{}`` for an empty file, or None if the file doesn't exist

    Raises:
        ConfigPermissionError: If the file cannot be opened due to permissions
        ConfigFileError: If the file cannot be read or parsed
    """
    config_type = config_type or infer_config_type(path)

    if not path.exists():
        logger.info(f"File does not exist: {path}")
        return None

    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError:
        raise ConfigPermissionError(path) from None
    except OSError as e:
        raise ConfigFileError(path, "read", reason=e.strerror or str(e)) from e

    if not content.strip():
        return {}

    try:
        if config_type == "yaml":
            return yaml.safe_load(content)
        return json.loads(content)
    except (ValueError, yaml.YAMLError) as e:
        logger.debug(f"Parse error in {path}: {e}")
        raise ConfigFileError(path, "read", reason=f"invalid {config_type.upper()}") from e


def serialize_config(data: Any, config_type: ConfigType = "json") -> str:
    """Render a document the way it is stored on disk."""
    if config_type == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_config(
    path: Path,
    data: Any,
    config_type: Optional[ConfigType] = None,
    create_dirs: bool = False,
) -> Path:
    """
    Write a configuration document atomically.

    Args:
        path: Destination file
        data: Document to serialize
        config_type: "json" or "yaml" (inferred from the suffix if omitted)
        create_dirs: Create missing parent directories

    Returns:
        The written path

    Raises:
        ConfigFileError: If the parent directory is missing or the write fails
        ConfigPermissionError: If the OS denies the write
    """
    config_type = config_type or infer_config_type(path)

    if not path.parent.exists():
        if not create_dirs:
            raise ConfigFileError(
                path, "write",
                reason=f"directory {path.parent} does not exist; use --force to create it"
            )
        logger.info(f"Creating directory: {path.parent}")

    try:
        atomic_write(path, serialize_config(data, config_type))
    except PermissionError:
        raise ConfigPermissionError(path) from None
    except OSError as e:
        raise ConfigFileError(path, "write", reason=e.strerror or str(e)) from e

    logger.info(f"Successfully wrote to: {path}")
    return path


def backup_config(path: Path) -> Path:
    """
    Copy ``path`` to ``<path>.backup.<epoch-ms>``.

    The copy is byte-for-byte, so unparseable files are preserved too.

    Raises:
        ConfigFileError: If the copy fails
    """
    backup_path = path.with_name(f"{path.name}.backup.{int(time.time() * 1000)}")
    try:
        shutil.copy2(path, backup_path)
    except PermissionError:
        raise ConfigPermissionError(backup_path) from None
    except OSError as e:
        raise ConfigFileError(backup_path, "write", reason=e.strerror or str(e)) from e

    logger.info(f"Backup created: {backup_path}")
    return backup_path


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``source`` into a copy of ``target``.

    Nested dicts are merged key by key; lists and scalars from ``source``
    replace the value in ``target``.
    """
    output = dict(target)

    for key, value in source.items():
        if isinstance(value, dict) and isinstance(output.get(key), dict):
            output[key] = deep_merge(output[key], value)
        else:
            output[key] = copy.deepcopy(value)

    return output


def get_servers_key(config: Dict[str, Any]) -> str:
    """Return the server map key already used by ``config`` (default mcpServers)."""
    for key in SERVER_KEYS:
        if key in config:
            return key
    return DEFAULT_SERVER_KEY


def merge_servers(existing: Any, new_servers: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge named server entries into a client config document.

    The existing server key (``mcpServers`` or ``servers``) is kept; new
    entries replace same-named ones; every other key is preserved.

    Args:
        existing: Current document (None, empty or malformed is treated as {})
        new_servers: Mapping of server name to server config

    Returns:
        New merged document (``existing`` is not modified)
    """
    if not isinstance(existing, dict):
        merged: Dict[str, Any] = {}
    else:
        merged = copy.deepcopy(existing)

    key = get_servers_key(merged)
    servers = merged.get(key)
    if not isinstance(servers, dict):
        servers = {}

    servers.update(copy.deepcopy(new_servers))
    merged[key] = servers
    return merged
