"""Registry of supported AI clients and their MCP config file locations.

This module is the single source of truth for which clients the CLI knows
about. Commands should resolve paths through ``resolve_path`` rather than
building them by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Literal, Mapping, Optional, Tuple

from toolentry_cli.errors import ClientNotFoundError, PlatformError

from .platform import SUPPORTED_PLATFORMS, PlatformPaths

ConfigType = Literal["json", "yaml"]


@dataclass(frozen=True)
class ClientConfig:
    """
    Location of one client's MCP configuration file.
    
    Attributes:
        name: Client identifier used on the command line
        config_type: Serialization format of the config file
        root: Base directory key (home, config, vscode, vscode-insiders)
        parts: Path components below the root
        platforms: Platforms where this location applies
    """
    
    name: str
    config_type: ConfigType
    root: str
    parts: Tuple[str, ...]
    platforms: Tuple[str, ...] = SUPPORTED_PLATFORMS
    
    def path_for(self, paths: PlatformPaths) -> Path:
        """Resolve the config file path against platform base directories."""
        if paths.platform not in self.platforms:
            raise PlatformError(paths.platform, client=self.name)
        return paths.root(self.root).joinpath(*self.parts)


# Every client currently keeps its file at the same relative location on all
# three platforms; only the base directories differ.
CLIENT_CONFIGS: List[ClientConfig] = [
    ClientConfig("claude-desktop", "json", "config", ("Claude", "claude_desktop_config.json")),
    ClientConfig("cline", "json", "vscode", ("saoudrizwan.claude-dev", "settings", "cline_mcp_settings.json")),
    ClientConfig("windsurf", "json", "home", (".codeium", "windsurf", "mcp_config.json")),
    ClientConfig("roocode", "json", "vscode", ("rooveterinaryinc.roo-cline", "settings", "cline_mcp_settings.json")),
    ClientConfig("witsy", "json", "config", ("witsy", "config.json")),
    ClientConfig("enconvo", "json", "config", ("enconvo", "config.json")),
    ClientConfig("cursor", "json", "config", ("Cursor", "User", "globalStorage", "mcp-servers", "config.json")),
    ClientConfig("vscode", "json", "vscode", ("mcp", "mcp.json")),
    ClientConfig("vscode-insiders", "json", "vscode-insiders", ("mcp", "mcp.json")),
    ClientConfig("boltai", "json", "config", ("boltai", "config.json")),
    ClientConfig("amazon-bedrock", "json", "home", (".aws", "mcp", "bedrock-config.json")),
    ClientConfig("amazonq", "json", "vscode", ("amazonq", "mcp-config.json")),
    ClientConfig("librechat", "json", "config", ("librechat", "mcp-config.json")),
    ClientConfig("gemini-cli", "json", "home", (".gemini", "mcp-config.json")),
]

CLIENTS_BY_NAME: Dict[str, ClientConfig] = {c.name: c for c in CLIENT_CONFIGS}

SUPPORTED_CLIENTS: List[str] = [c.name for c in CLIENT_CONFIGS]


def list_clients() -> List[str]:
    """Return supported client identifiers in registry order."""
    return list(SUPPORTED_CLIENTS)


def get_client_config(client: str) -> ClientConfig:
    """
    Look up a client's registry entry.
    
    Raises:
        ClientNotFoundError: If the client is unknown
    """
    try:
        return CLIENTS_BY_NAME[client]
    except KeyError:
        raise ClientNotFoundError(client) from None


def resolve_path(
    client: str,
    platform: Optional[str] = None,
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Resolve the config file path of ``client`` on ``platform``.
    
    Args:
        client: Client identifier (e.g. "claude-desktop")
        platform: Platform name (defaults to the running platform)
        home: Home directory override
        env: Environment override (APPDATA, XDG_CONFIG_HOME)
        
    Returns:
        Absolute path of the client's config file
        
    Raises:
        ClientNotFoundError: If the client is unknown
        PlatformError: If the platform is unsupported or has no path
    
    Examples:
        >>> resolve_path("windsurf", platform="linux", home=Path("/home/me"), env={})
        PosixPath('/home/me/.codeium/windsurf/mcp_config.json')
    """
    config = get_client_config(client)
    paths = PlatformPaths.detect(platform=platform, home=home, env=env)
    return config.path_for(paths)
