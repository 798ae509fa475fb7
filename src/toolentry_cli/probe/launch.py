"""Launch specification and strategy types for the server probe."""

import os
import shlex
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class ProbeStrategy(str, Enum):
    """How deeply to exercise the server.

    STARTUP only checks that the command launches; PROTOCOL sends one
    JSON-RPC request; FULL runs STARTUP then PROTOCOL.
    """

    STARTUP = "startup"
    PROTOCOL = "protocol"
    FULL = "full"


STRATEGY_NAMES = tuple(s.value for s in ProbeStrategy)

MIN_TIMEOUT_MS = 1000
MAX_TIMEOUT_MS = 60000
DEFAULT_TIMEOUT_MS = 10000


@dataclass(frozen=True)
class ServerLaunchSpec:
    """
    How to start the server under test.

    Attributes:
        command: Executable name or path
        args: Arguments passed to the executable (may be empty)
        env: Variables added to (or overriding) the inherited environment;
            None inherits the caller's environment unchanged
    """

    command: str
    args: Tuple[str, ...]
    env: Optional[Mapping[str, str]] = None

    def __post_init__(self):
        if not isinstance(self.command, str) or not self.command.strip():
            raise ValueError("command must be a non-empty string")
        object.__setattr__(self, "args", tuple(str(a) for a in self.args))
        if self.env is not None:
            object.__setattr__(self, "env", {str(k): str(v) for k, v in self.env.items()})

    @classmethod
    def from_dict(cls, data: Any) -> "ServerLaunchSpec":
        """
        Build a spec from an MCP server config entry.

        Args:
            data: Mapping with ``command``, ``args`` and optional ``env``

        Raises:
            ValueError: If ``command`` is missing or ``args`` is not a list
        """
        if not isinstance(data, dict):
            raise ValueError("server configuration must be a JSON object")
        command = data.get("command")
        args = data.get("args")
        if not command or not isinstance(command, str) or not isinstance(args, list):
            raise ValueError("command and args are required")
        env = data.get("env")
        if env is not None and not isinstance(env, dict):
            raise ValueError("env must be an object of string values")
        return cls(command=command, args=tuple(args), env=env)

    @property
    def has_env(self) -> bool:
        return bool(self.env)

    @property
    def command_line(self) -> str:
        """Shell-quoted command line, for logs and messages only."""
        return shlex.join((self.command, *self.args))

    def build_env(self) -> Optional[Dict[str, str]]:
        """Environment for the child (None means inherit unchanged)."""
        if self.env is None:
            return None
        merged = dict(os.environ)
        merged.update(self.env)
        return merged
