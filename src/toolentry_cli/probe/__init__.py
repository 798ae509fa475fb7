"""
MCP server probe.

Launches a candidate server command and checks it at one of three depths:
startup (does it launch), protocol (does it answer a JSON-RPC request) or
full (both). Every call returns exactly one ProbeResult and never leaves the
spawned process running.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .launch import (
    DEFAULT_TIMEOUT_MS,
    MAX_TIMEOUT_MS,
    MIN_TIMEOUT_MS,
    STRATEGY_NAMES,
    ProbeStrategy,
    ServerLaunchSpec,
)

GENERIC_RECOMMENDATION = "Check the server command and configuration"


@dataclass
class ProbeResult:
    """Serializable outcome of one probe call."""

    success: bool
    strategy_used: ProbeStrategy
    elapsed_ms: int
    recommendations: List[str] = field(default_factory=list)
    error: Optional[str] = None
    raw_output: Optional[str] = None

    def __post_init__(self):
        self.elapsed_ms = max(0, int(self.elapsed_ms))
        if not self.recommendations:
            self.recommendations = [GENERIC_RECOMMENDATION]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize; ``error`` and ``raw_output`` appear only when set."""
        data: Dict[str, Any] = {
            "success": self.success,
            "strategy_used": ProbeStrategy(self.strategy_used).value,
            "elapsed_ms": self.elapsed_ms,
        }
        if self.error is not None:
            data["error"] = self.error
        if self.raw_output is not None:
            data["raw_output"] = self.raw_output
        data["recommendations"] = list(self.recommendations)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


from .outcomes import EarlyExit, Exited, ProbeOutcome, Reply, SpawnFailure, Timeout
from .recommendations import classify_error
from .runner import ServerProbe, probe_server

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "MAX_TIMEOUT_MS",
    "MIN_TIMEOUT_MS",
    "STRATEGY_NAMES",
    "EarlyExit",
    "Exited",
    "ProbeOutcome",
    "ProbeResult",
    "ProbeStrategy",
    "Reply",
    "ServerLaunchSpec",
    "ServerProbe",
    "SpawnFailure",
    "Timeout",
    "classify_error",
    "probe_server",
]
