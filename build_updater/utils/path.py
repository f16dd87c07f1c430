"""
Filesystem helpers shared by the update managers.
"""

import logging
import shutil
from pathlib import Path

log = logging.getLogger(__name__)


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def remove_path(path: Path) -> None:
    """Removes a file or a directory tree. A missing path is not an error."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def remove_path_quietly(path: Path) -> bool:
    """Best-effort variant of remove_path; logs and returns False on failure."""
    try:
        remove_path(path)
        return True
    except OSError as e:
        log.warning(f"Could not remove '{path}': {e}")
        return False
