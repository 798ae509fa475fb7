"""Client registry, platform paths and CLI settings."""

from .clients import (
    CLIENT_CONFIGS,
    SUPPORTED_CLIENTS,
    ClientConfig,
    ConfigType,
    get_client_config,
    list_clients,
    resolve_path,
)
from .platform import PlatformPaths, get_platform
from .settings import ToolentrySettings

__all__ = [
    "CLIENT_CONFIGS",
    "SUPPORTED_CLIENTS",
    "ClientConfig",
    "ConfigType",
    "PlatformPaths",
    "ToolentrySettings",
    "get_client_config",
    "get_platform",
    "list_clients",
    "resolve_path",
]
