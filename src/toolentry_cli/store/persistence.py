"""Atomic file operations for config persistence."""

import os
import tempfile
from pathlib import Path


def atomic_write(file_path: Path, content: str):
    """
    Write content to file atomically.
    
    Strategy:
    1. Write to temporary file in same directory
    2. fsync to ensure data on disk
    3. Rename to target filename (atomic operation)
    
    A crash mid-write leaves the previous client config intact.
    
    Args:
        file_path: Target file path
        content: String content to write
        
    Raises:
        OSError: If write or rename fails
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    
    # Same directory keeps the rename on one filesystem
    temp_fd, temp_path = tempfile.mkstemp(
        dir=file_path.parent,
        prefix=f".{file_path.name}.tmp."
    )
    
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        
        # Preserve permissions of the file being replaced
        if file_path.exists():
            os.chmod(temp_path, file_path.stat().st_mode & 0o7777)
        
        os.replace(temp_path, file_path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise
