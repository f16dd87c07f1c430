"""
Picks the managed application's main executable out of a build directory.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from build_updater.models.config import DEFAULT_AUXILIARY_MARKERS
from build_updater.utils.formatting import format_size

log = logging.getLogger(__name__)


def _is_executable(path: Path) -> bool:
    if not path.is_file():
        return False
    if path.suffix.lower() == ".exe":
        return True
    return os.name != "nt" and os.access(path, os.X_OK)


class LaunchSelector:
    """
    Chooses the one executable in a build that is the application itself.

    Crash handlers, launchers, updaters and uninstallers ship beside the main
    binary; they are excluded by name, and of what remains the largest file wins.
    """

    def __init__(self, auxiliary_markers: Iterable[str] = DEFAULT_AUXILIARY_MARKERS):
        self.auxiliary_markers = tuple(m.lower() for m in auxiliary_markers)

    def is_auxiliary(self, name: str) -> bool:
        lowered = name.lower()
        return any(marker in lowered for marker in self.auxiliary_markers)

    def find_main_executable(self, build_dir: Path) -> Path | None:
        """Returns the main executable directly under build_dir, or None."""
        if not build_dir.is_dir():
            return None

        candidates = [
            entry
            for entry in sorted(build_dir.iterdir(), key=lambda p: p.name)
            if _is_executable(entry) and not self.is_auxiliary(entry.name)
        ]
        if not candidates:
            return None

        # max() keeps the first of equal sizes, and candidates are name-sorted.
        chosen = max(candidates, key=lambda p: p.stat().st_size)
        if len(candidates) > 1:
            log.debug(
                f"Selected '{chosen.name}' ({format_size(chosen.stat().st_size)}) "
                f"out of {len(candidates)} executables."
            )
        return chosen
