"""Per-platform base directories used to locate client config files."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping, Optional

from toolentry_cli.errors import PlatformError

Platform = Literal["win32", "darwin", "linux"]

SUPPORTED_PLATFORMS = ("win32", "darwin", "linux")


def get_platform(raw: Optional[str] = None) -> Platform:
    """Return the normalized platform name.

    Args:
        raw: Platform string to normalize (defaults to ``sys.platform``)

    Raises:
        PlatformError: If the platform is not one of win32, darwin, linux
    """
    value = raw if raw is not None else sys.platform
    # Older interpreters report "linux2"
    if value.startswith("linux"):
        value = "linux"
    if value not in SUPPORTED_PLATFORMS:
        raise PlatformError(value)
    return value  # type: ignore[return-value]


def get_base_config_dir(
    platform: Platform,
    home: Path,
    env: Mapping[str, str],
) -> Path:
    """Return the per-user application config root for ``platform``."""
    if platform == "win32":
        appdata = env.get("APPDATA")
        return Path(appdata) if appdata else home / "AppData" / "Roaming"
    if platform == "darwin":
        return home / "Library" / "Application Support"
    xdg = env.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else home / ".config"


@dataclass(frozen=True)
class PlatformPaths:
    """
    Resolved base directories for one platform.
    
    Attributes:
        platform: Normalized platform name
        home: User home directory
        base_config_dir: Application config root (APPDATA, Application Support, XDG)
        vscode_storage_dir: VS Code extension global storage
        vscode_insiders_storage_dir: VS Code Insiders extension global storage
    """
    
    platform: Platform
    home: Path
    base_config_dir: Path
    vscode_storage_dir: Path
    vscode_insiders_storage_dir: Path
    
    @classmethod
    def detect(
        cls,
        platform: Optional[str] = None,
        home: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "PlatformPaths":
        """
        Build paths for a platform.
        
        Args:
            platform: Platform name (defaults to the running platform)
            home: Home directory (defaults to ``Path.home()``)
            env: Environment mapping (defaults to ``os.environ``)
            
        Returns:
            PlatformPaths for the requested platform
            
        Raises:
            PlatformError: If the platform is unsupported
        """
        resolved = get_platform(platform)
        home = home if home is not None else Path.home()
        env = env if env is not None else os.environ
        
        base = get_base_config_dir(resolved, home, env)
        return cls(
            platform=resolved,
            home=home,
            base_config_dir=base,
            vscode_storage_dir=base / "Code" / "User" / "globalStorage",
            vscode_insiders_storage_dir=base / "Code - Insiders" / "User" / "globalStorage",
        )
    
    def root(self, name: str) -> Path:
        """Return the named root directory used by the client table."""
        roots = {
            "home": self.home,
            "config": self.base_config_dir,
            "vscode": self.vscode_storage_dir,
            "vscode-insiders": self.vscode_insiders_storage_dir,
        }
        return roots[name]
