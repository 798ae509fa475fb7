"""Process-tree signalling shared by the probe and the shell runner.

POSIX children are started in their own session (``start_new_session``), so
the child's pid is also its process-group id and the whole tree can be
signalled at once. Windows has no process groups in that sense; ``taskkill
/T`` walks the tree instead.
"""

import logging
import os
import signal
import subprocess
import sys

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"


def popen_session_kwargs() -> dict:
    """Extra Popen/create_subprocess_* kwargs that make the child a tree root."""
    if IS_WINDOWS:
        return {}
    return {"start_new_session": True}


def signal_process_tree(process, force: bool = False) -> None:
    """
    Ask (or force) a child process and its descendants to exit.

    Args:
        process: ``subprocess.Popen`` or ``asyncio.subprocess.Process``
        force: Send SIGKILL instead of SIGTERM (always forced on Windows)
    """
    if process.returncode is not None:
        return

    if IS_WINDOWS:
        result = subprocess.run(
            ["taskkill", "/PID", str(process.pid), "/T", "/F"],
            capture_output=True,
        )
        if result.returncode != 0:
            logger.debug(f"taskkill failed for PID {process.pid}, falling back to kill()")
            try:
                process.kill()
            except ProcessLookupError:
                pass
        return

    sig = signal.SIGKILL if force else signal.SIGTERM
    try:
        os.killpg(process.pid, sig)
    except ProcessLookupError:
        # Already gone; the caller still reaps it
        pass
    except PermissionError:
        # macOS refuses killpg on a group whose leader is a zombie
        try:
            process.send_signal(sig)
        except ProcessLookupError:
            pass
