"""Build utilities for jarforge.

This module provides filesystem helpers shared by the build stages:
robust directory removal and the scratch compile directory.
"""

import logging
import os
import shutil
import stat
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator


def remove_readonly(func: Callable[[str], None], path: str, excinfo: Any) -> None:
    """
    Error handler for shutil.rmtree on Windows.

    On Windows, read-only files cannot be deleted and will cause
    shutil.rmtree to fail. This handler removes the read-only attribute
    and retries the operation.

    Args:
        func: The function that raised the exception
        path: The path to the file/directory
        excinfo: Exception information (unused)
    """
    os.chmod(path, stat.S_IWRITE)
    func(path)


def safe_rmtree(path: Path, max_retries: int = 3) -> None:
    """
    Safely remove a directory tree, handling Windows-specific issues.

    Args:
        path: Path to directory to remove
        max_retries: Maximum number of retry attempts for locked files

    Raises:
        OSError: If directory cannot be removed after all retries
    """
    if not path.exists():
        return

    for attempt in range(max_retries):
        try:
            if sys.version_info >= (3, 12):
                shutil.rmtree(path, onexc=remove_readonly)
            else:
                shutil.rmtree(path, onerror=remove_readonly)
            return
        except OSError as e:
            if attempt < max_retries - 1:
                # Files might be temporarily locked (virus scanners, IDEs)
                time.sleep(0.5)
            else:
                raise OSError(
                    f"Failed to remove directory {path} after {max_retries} attempts: {e}"
                ) from e


def compile_dir_for(jar_file: Path) -> Path:
    """Scratch directory used while building ``jar_file``: ``<jar>.tmp``."""
    return jar_file.parent / (jar_file.name + ".tmp")


@contextmanager
def scratch_directory(path: Path) -> Iterator[Path]:
    """Create ``path`` empty and remove it again when the block exits.

    Leftovers from an earlier crashed build are removed first. Removal at
    exit happens on success and on failure. A failure to remove it at exit
    is logged, not raised.
    """
    safe_rmtree(path)
    path.mkdir(parents=True)
    try:
        yield path
    finally:
        try:
            safe_rmtree(path)
        except OSError as e:
            logging.warning(f"Could not remove scratch directory: {e}")
