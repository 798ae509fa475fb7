"""Map probe error text to remediation hints.

Classification is a first-match walk over ``ERROR_RULES``. Rule order
matters: "not found" must be checked before the module/package rules.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .launch import ServerLaunchSpec

ENV_GUIDANCE = (
    "Server uses environment variables - ensure they are properly configured",
    "Check that all required API keys/tokens are set and valid",
)

INSTALL_HINT = "Use toolentry exec to install missing dependencies"


@dataclass(frozen=True)
class ErrorRule:
    """One error category.

    Attributes:
        category: Short identifier, used in logs and tests
        patterns: Lowercase substrings; any match selects the rule
        suggestions: Hints emitted when the rule fires; ``{command}`` is
            replaced with the launch command
        command_hints: Whether to add a runtime-specific install hint
    """

    category: str
    patterns: Tuple[str, ...]
    suggestions: Tuple[str, ...]
    command_hints: bool = False

    def matches(self, lowered: str) -> bool:
        return any(p in lowered for p in self.patterns)


# "module not found" and "package not found" also contain "not found", so the
# command-not-found rule claims them first. The module and package rules only
# fire through "no module named" and "cannot resolve".
ERROR_RULES: Tuple[ErrorRule, ...] = (
    ErrorRule(
        category="command-not-found",
        patterns=("not found", "is not recognized", "command not found", "no such file or directory", "enoent"),
        suggestions=(
            "Command '{command}' not found in PATH",
            "Ensure the required software is installed",
            "Check that the command name is spelled correctly",
        ),
        command_hints=True,
    ),
    ErrorRule(
        category="permission-denied",
        patterns=("permission denied", "eacces"),
        suggestions=(
            "Permission denied when running the command",
            "Try running with administrator/sudo privileges",
            "Check file and directory permissions",
        ),
    ),
    ErrorRule(
        category="module-not-found",
        patterns=("module not found", "no module named"),
        suggestions=(
            "Required Python module is not installed",
            "Use pip or uv to install the missing module",
            "Check if you need to activate a virtual environment",
        ),
    ),
    ErrorRule(
        category="package-not-found",
        patterns=("package not found", "cannot resolve"),
        suggestions=(
            "Required package is not installed",
            "Use npm install to install the missing package",
            "Check package.json dependencies",
        ),
    ),
)

FALLBACK_SUGGESTIONS = (
    "Unexpected error occurred during server testing",
    "Check the error output for specific details",
    "Verify all dependencies are installed",
)

COMMAND_HINTS: Dict[str, str] = {
    "python": "Install Python from python.org or your package manager",
    "python3": "Install Python from python.org or your package manager",
    "node": "Install Node.js from nodejs.org",
    "npm": "Install Node.js from nodejs.org",
    "npx": "Install Node.js from nodejs.org",
    "uv": "Install uv: pip install uv",
    "uvx": "Install uv: pip install uv",
}


def _command_key(command: str) -> str:
    name = os.path.basename(command).lower()
    for suffix in (".exe", ".cmd", ".bat"):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def match_rule(message: str) -> Optional[ErrorRule]:
    """Return the first rule matching ``message``, or None."""
    lowered = message.lower()
    for rule in ERROR_RULES:
        if rule.matches(lowered):
            return rule
    return None


def classify_error(message: str, spec: ServerLaunchSpec) -> List[str]:
    """
    Build remediation hints for a failed probe.

    Pure function: the same message and spec always give the same list.

    Args:
        message: Error text (spawn error, stderr excerpt, ...)
        spec: Launch spec of the server that failed

    Returns:
        Non-empty ordered list of suggestions, always ending with the
        dependency-installation hint
    """
    recommendations: List[str] = []

    if spec.has_env:
        recommendations.extend(ENV_GUIDANCE)

    rule = match_rule(message or "")
    if rule is None:
        recommendations.extend(FALLBACK_SUGGESTIONS)
    else:
        recommendations.extend(s.format(command=spec.command) for s in rule.suggestions)
        if rule.command_hints:
            hint = COMMAND_HINTS.get(_command_key(spec.command))
            if hint:
                recommendations.append(hint)

    recommendations.append(INSTALL_HINT)
    return recommendations
