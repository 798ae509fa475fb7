"""`toolentry exec`: run a shell command and report the result as JSON."""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from toolentry_cli.shell import run_shell

from ..context import get_state, handle_errors, print_error

logger = logging.getLogger(__name__)


def _exit_code(code: Optional[int], success: bool) -> int:
    if code is not None and 0 < code < 256:
        return code
    return 0 if success else 1


@handle_errors
def exec_command(
    ctx: typer.Context,
    command: List[str] = typer.Argument(..., help="Command and arguments to run"),
    cwd: Optional[Path] = typer.Option(None, "--cwd", "-c", help="Working directory"),
    timeout: Optional[int] = typer.Option(None, "--timeout", "-t", help="Timeout in milliseconds (default from settings)"),
):
    """
    Run a shell command, typically to install server dependencies.

    The arguments are joined with spaces and handed to the system shell.
    The exit code mirrors the command's (1 if it timed out).

    Examples:
        toolentry exec npm install -g @modelcontextprotocol/server-git
        toolentry exec --timeout 120000 uv tool install mcp-server-fetch
    """
    state = get_state(ctx)
    timeout_ms = timeout if timeout is not None else state.settings.exec_timeout_ms
    if timeout_ms <= 0:
        print_error("Invalid timeout. Must be a positive number of milliseconds")
        raise typer.Exit(1)

    command_line = " ".join(command)
    try:
        result = run_shell(command_line, cwd=cwd, timeout_ms=timeout_ms)
    except OSError as e:
        logger.debug(f"Shell failed to start: {e}")
        print_error(f"Failed to execute command: {e}")
        raise typer.Exit(1)

    typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

    if result.timed_out:
        print_error(f"Command timed out after {timeout_ms}ms")
        raise typer.Exit(1)
    raise typer.Exit(_exit_code(result.exit_code, result.success))
