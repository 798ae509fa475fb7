"""Shell command runner behind `toolentry exec`.

Agents use `exec` to install server dependencies (``npm i -g ...``,
``uv tool install ...``) and read back a JSON summary.
"""

import logging
import subprocess
import tempfile
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from toolentry_cli.processes import popen_session_kwargs, signal_process_tree

logger = logging.getLogger(__name__)

DEFAULT_EXEC_TIMEOUT_MS = 30000
MAX_OUTPUT_BYTES = 1024 * 1024
KILL_GRACE_SECONDS = 2.0


@dataclass
class ShellResult:
    """
    Outcome of one shell command.

    Attributes:
        success: True when the command exited with code 0
        exit_code: Process exit code (None when killed on timeout)
        stdout: Captured standard output, trimmed
        stderr: Captured standard error, trimmed
        command_line: The command as passed to the shell
        execution_time: Wall time in milliseconds
        timed_out: Whether the command was killed on timeout
    """

    success: bool
    exit_code: Optional[int]
    stdout: str
    stderr: str
    command_line: str
    execution_time: int
    timed_out: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _read_capped(handle) -> str:
    handle.seek(0)
    return handle.read(MAX_OUTPUT_BYTES).decode("utf-8", errors="replace").strip()


def run_shell(
    command_line: str,
    cwd: Optional[Union[str, Path]] = None,
    timeout_ms: int = DEFAULT_EXEC_TIMEOUT_MS,
) -> ShellResult:
    """
    Run ``command_line`` through the system shell.

    Output is captured in temporary files and read back up to
    MAX_OUTPUT_BYTES per stream. After a timeout the command tree is killed
    and the runner returns even if a detached grandchild still holds the
    files open.

    Args:
        command_line: Command string (interpreted by /bin/sh or cmd.exe)
        cwd: Working directory (defaults to the current directory)
        timeout_ms: Kill the command tree after this many milliseconds

    Returns:
        ShellResult with captured output

    Raises:
        OSError: If the shell itself cannot be started (e.g. missing cwd)
    """
    logger.info(f"Executing: {command_line}")
    logger.info(f"Working directory: {cwd or Path.cwd()}")
    logger.info(f"Timeout: {timeout_ms}ms")

    started = time.monotonic()
    with tempfile.TemporaryFile() as stdout, tempfile.TemporaryFile() as stderr:
        process = subprocess.Popen(
            command_line,
            shell=True,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=stdout,
            stderr=stderr,
            **popen_session_kwargs(),
        )

        timed_out = False
        try:
            process.wait(timeout=timeout_ms / 1000)
        except subprocess.TimeoutExpired:
            timed_out = True
            logger.warning(f"Command timed out after {timeout_ms}ms, killing it")
            signal_process_tree(process, force=True)
            try:
                process.wait(timeout=KILL_GRACE_SECONDS)
            except subprocess.TimeoutExpired:
                logger.warning(f"PID {process.pid} did not exit after SIGKILL")

        execution_time = int((time.monotonic() - started) * 1000)
        exit_code = None if timed_out else process.returncode

        return ShellResult(
            success=exit_code == 0,
            exit_code=exit_code,
            stdout=_read_capped(stdout),
            stderr=_read_capped(stderr),
            command_line=command_line,
            execution_time=execution_time,
            timed_out=timed_out,
        )
