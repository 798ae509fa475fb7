"""Terminal outcomes of a single probe phase.

The process drivers in ``runner`` return exactly one of these variants;
result builders dispatch on the variant type rather than on message text.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class Exited:
    """Process ran to completion on its own."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def output(self) -> str:
        return self.stdout or self.stderr


@dataclass(frozen=True)
class Reply:
    """A JSON-RPC 2.0 response was read from stdout."""

    message: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SpawnFailure:
    """The command could not be launched at all."""

    message: str
    errno: Optional[int] = None


@dataclass(frozen=True)
class Timeout:
    """The budget elapsed with no terminal signal; the process was killed."""

    budget_ms: int
    output: str = ""


@dataclass(frozen=True)
class EarlyExit:
    """Process ended before sending a protocol reply."""

    exit_code: Optional[int]
    signal: Optional[int] = None
    output: str = ""

    @classmethod
    def from_returncode(cls, returncode: int, output: str = "") -> "EarlyExit":
        # Negative return codes mean "killed by signal N" on POSIX
        if returncode is not None and returncode < 0:
            return cls(exit_code=None, signal=-returncode, output=output)
        return cls(exit_code=returncode, output=output)

    def describe(self) -> str:
        if self.signal is not None:
            return (
                f"Server was terminated by signal {self.signal} "
                "before responding to MCP protocol test"
            )
        return f"Server exited with code {self.exit_code} before responding to MCP protocol test"


StartupOutcome = Union[Exited, SpawnFailure, Timeout]
ProtocolOutcome = Union[Reply, SpawnFailure, Timeout, EarlyExit]
ProbeOutcome = Union[Exited, Reply, SpawnFailure, Timeout, EarlyExit]
