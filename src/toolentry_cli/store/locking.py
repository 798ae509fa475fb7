"""File locking for client config writes.

Serializes read-merge-write cycles on the same config file so that two
concurrent ``toolentry autoinstall`` runs cannot drop each other's servers.
Lock files live in a dedicated directory rather than next to the client's
config.
"""

import hashlib
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout as FilelockTimeout

logger = logging.getLogger(__name__)


class LockTimeout(Exception):
    """Raised when lock acquisition times out."""
    pass


@dataclass
class ConfigLock:
    """Exclusive lock on one config file.
    
    Attributes:
        target: Config file the lock protects
        lock_file: Path to the lock file in the lock directory
        timeout_seconds: Maximum time to wait for lock acquisition (default: 10s)
    """
    
    target: Path
    lock_file: Path
    timeout_seconds: float = 10
    
    def __post_init__(self):
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
    
    @classmethod
    def for_path(
        cls,
        lock_dir: Path,
        target: Path,
        timeout_seconds: float = 10
    ) -> "ConfigLock":
        """Create a lock for ``target`` stored under ``lock_dir``.
        
        The lock file name is derived from the absolute target path, so every
        caller touching the same config file contends on the same lock.
        """
        resolved = Path(os.path.abspath(target))
        digest = hashlib.sha256(str(resolved).encode("utf-8")).hexdigest()[:16]
        lock_file = lock_dir / f".lock-{resolved.name}-{digest}"
        
        return cls(
            target=resolved,
            lock_file=lock_file,
            timeout_seconds=timeout_seconds
        )
    
    @contextmanager
    def acquire(self):
        """Hold the lock for the duration of the ``with`` block.
        
        Raises:
            LockTimeout: If lock cannot be acquired within timeout period
            
        Example:
            >>> lock = ConfigLock.for_path(lock_dir, config_path)
            >>> with lock.acquire():
            ...     write_config(config_path, merged)
        """
        self.lock_file.parent.mkdir(parents=True, exist_ok=True)
        
        lock = FileLock(self.lock_file, timeout=self.timeout_seconds)
        
        try:
            with lock.acquire(timeout=self.timeout_seconds):
                logger.debug(
                    f"Lock acquired for {self.target} "
                    f"(PID: {os.getpid()}, timeout: {self.timeout_seconds}s)"
                )
                
                yield self
                
                logger.debug(f"Lock released for {self.target}")
        except FilelockTimeout:
            raise LockTimeout(
                f"Configuration file {self.target} is locked. "
                f"Another toolentry process is writing it. "
                f"Retry in a moment (waited {self.timeout_seconds}s)."
            )


@contextmanager
def config_lock(target: Path, lock_dir: Optional[Path], timeout_seconds: float = 10):
    """Lock ``target`` when a lock directory is configured, else no-op."""
    if lock_dir is None:
        yield None
        return
    
    with ConfigLock.for_path(lock_dir, target, timeout_seconds).acquire() as lock:
        yield lock
