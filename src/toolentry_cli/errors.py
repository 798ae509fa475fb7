"""Exception hierarchy for the configuration management commands."""

from pathlib import Path
from typing import Optional, Union


class ToolentryError(Exception):
    """Base exception for errors reported to CLI users."""
    pass


class ClientNotFoundError(ToolentryError):
    """Raised when a client identifier is not in the registry."""
    
    def __init__(self, client: str):
        self.client = client
        super().__init__(
            f"Client '{client}' is not supported. "
            "Run 'toolentry clients list' to see available clients."
        )


class PlatformError(ToolentryError):
    """Raised when running on (or asking for) an unsupported platform."""
    
    def __init__(self, platform: str, client: Optional[str] = None):
        self.platform = platform
        if client:
            message = f"No configuration path defined for {client} on {platform}"
        else:
            message = (
                f"Platform '{platform}' is not supported. "
                "Supported platforms: win32, darwin, linux"
            )
        super().__init__(message)


class ConfigFileError(ToolentryError):
    """Raised when a configuration file cannot be read, parsed or written."""
    
    def __init__(self, file_path: Union[str, Path], action: str, reason: Optional[str] = None):
        self.file_path = Path(file_path)
        self.action = action
        self.reason = reason
        message = f"Failed to {action} configuration file: {file_path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ConfigPermissionError(ToolentryError):
    """Raised when the OS denies access to a configuration file."""
    
    def __init__(self, file_path: Union[str, Path]):
        self.file_path = Path(file_path)
        super().__init__(
            f"Permission denied: Cannot access {file_path}. "
            "Try running with administrator/sudo privileges."
        )
