"""
Rename-based replacement of the active build directory with rollback.
"""

import logging
import os
import shutil
from enum import Enum
from pathlib import Path

from build_updater.exceptions import SwapError
from build_updater.utils.path import remove_path, remove_path_quietly

log = logging.getLogger(__name__)


class SwapState(Enum):
    """States of the active build location during one swap."""

    STABLE = "stable"  # Active directory is live, nothing staged
    STAGING = "staging"  # New payload sits beside the active directory
    SWAPPING = "swapping"  # Between the two renames
    ROLLED_BACK = "rolled_back"  # Second rename failed, old build restored


class BuildSwap:
    """
    Replaces `active` with a staged payload through two renames.

    Transitions:
    - STABLE -> STAGING: stage() moves the payload to `staging`.
    - STAGING -> SWAPPING: swap() renames `active` to `previous`.
    - SWAPPING -> STABLE: swap() renames `staging` to `active`.
    - SWAPPING -> ROLLED_BACK: the second rename failed; `previous` is renamed
      back to `active` and SwapError is raised.

    A crash inside SWAPPING can leave `active` absent with `previous` present;
    recover_interrupted() restores it on the next run.
    """

    def __init__(self, active: Path, staging: Path, previous: Path):
        self.active = active
        self.staging = staging
        self.previous = previous
        self._state = SwapState.STABLE

    @property
    def state(self) -> SwapState:
        """Current swap state."""
        return self._state

    def _transition(self, state: SwapState) -> None:
        log.debug(f"Build swap: {self._state.value} -> {state.value}")
        self._state = state

    def recover_interrupted(self) -> bool:
        """
        Restores `previous` as the active build if an earlier run died between
        the two renames. Returns True if a restore happened.
        """
        if self.active.exists() or not self.previous.is_dir():
            return False
        log.warning(
            f"'{self.active.name}' is missing but '{self.previous.name}' exists; "
            "restoring the previous build after an interrupted swap."
        )
        try:
            os.rename(self.previous, self.active)
        except OSError as e:
            raise SwapError(f"Could not restore '{self.previous}': {e}") from e
        return True

    def stage(self, payload_root: Path) -> None:
        """Moves the extracted payload to the staging path beside `active`."""
        if self._state is not SwapState.STABLE:
            raise SwapError(f"Cannot stage a build while {self._state.value}.")
        try:
            remove_path(self.staging)
            shutil.move(str(payload_root), str(self.staging))
        except OSError as e:
            raise SwapError(f"Could not stage new build at '{self.staging}': {e}") from e
        self._transition(SwapState.STAGING)

    def swap(self) -> None:
        """
        Performs the two renames. On failure of the second one, tries once to put
        the old build back before raising.

        Raises:
            SwapError: If the swap failed (whether or not rollback succeeded).
        """
        if self._state is not SwapState.STAGING:
            raise SwapError(f"Nothing staged to swap in (state: {self._state.value}).")

        if self.previous.exists():
            log.debug(f"Removing stale backup '{self.previous.name}'.")
            try:
                remove_path(self.previous)
            except OSError as e:
                raise SwapError(
                    f"Could not remove stale backup '{self.previous}': {e}"
                ) from e

        retired = False
        if self.active.exists():
            try:
                self._retire_active()
            except OSError as e:
                raise SwapError(
                    f"Could not move '{self.active.name}' aside: {e}"
                ) from e
            retired = True
        self._transition(SwapState.SWAPPING)

        try:
            self._promote_staged()
        except OSError as e:
            if retired:
                self._rollback()
            raise SwapError(
                f"Could not move new build into '{self.active.name}': {e}"
            ) from e
        self._transition(SwapState.STABLE)

    def discard_previous(self) -> None:
        """Best-effort removal of the backup left by a successful swap."""
        if self.previous.exists() and remove_path_quietly(self.previous):
            log.debug(f"Removed previous build '{self.previous.name}'.")

    def _retire_active(self) -> None:
        os.rename(self.active, self.previous)

    def _promote_staged(self) -> None:
        os.rename(self.staging, self.active)

    def _rollback(self) -> None:
        try:
            os.rename(self.previous, self.active)
        except OSError as e:
            log.error(
                f"Rollback failed; the previous build remains at '{self.previous}': {e}"
            )
            return
        self._transition(SwapState.ROLLED_BACK)
        log.warning(f"Swap failed; restored previous build into '{self.active.name}'.")
