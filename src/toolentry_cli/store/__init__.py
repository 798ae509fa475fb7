"""Config file store: atomic writes, locking, backups and server merging."""

from .config_file import (
    backup_config,
    deep_merge,
    get_servers_key,
    infer_config_type,
    merge_servers,
    read_config,
    serialize_config,
    write_config,
)
from .locking import ConfigLock, LockTimeout, config_lock
from .persistence import atomic_write

__all__ = [
    "ConfigLock",
    "LockTimeout",
    "atomic_write",
    "backup_config",
    "config_lock",
    "deep_merge",
    "get_servers_key",
    "infer_config_type",
    "merge_servers",
    "read_config",
    "serialize_config",
    "write_config",
]
