"""
Persists the last fully applied manifest record under the installation root.
"""

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from build_updater.exceptions import StateIoError
from build_updater.models.manifest import LocalManifestRecord

log = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class LocalStateStore:
    """
    Reads and durably writes the local manifest record.

    Writes go to a sibling temporary file which is then renamed onto the real
    path, so a crash leaves either the old or the new record, never a torn one.
    """

    def __init__(self, state_path: Path):
        self.state_path = state_path

    @property
    def temp_path(self) -> Path:
        return self.state_path.with_name(self.state_path.name + TEMP_SUFFIX)

    def read(self) -> LocalManifestRecord:
        """
        Returns the persisted record, or an empty one if there is none yet or it
        cannot be parsed. Callers never need to special-case a missing record.
        """
        try:
            return self._load()
        except FileNotFoundError:
            log.info("No local manifest record yet; treating this as a first run.")
        except StateIoError as e:
            log.warning(f"Ignoring unreadable local manifest record: {e}")
        return LocalManifestRecord()

    def _load(self) -> LocalManifestRecord:
        try:
            with open(self.state_path, encoding="utf-8-sig") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise
        except (OSError, ValueError) as e:
            raise StateIoError(f"Could not read '{self.state_path}': {e}") from e

        if not isinstance(data, dict):
            raise StateIoError(f"'{self.state_path}' does not hold a JSON object.")
        try:
            return LocalManifestRecord.model_validate(data)
        except ValidationError as e:
            raise StateIoError(f"'{self.state_path}' has an invalid shape: {e}") from e

    def write(self, record: LocalManifestRecord) -> None:
        """
        Serializes and atomically replaces the persisted record.

        Raises:
            StateIoError: If the record cannot be written.
        """
        payload = json.dumps(record.to_wire(), indent=2)
        try:
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.temp_path, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(self.temp_path, self.state_path)
        except OSError as e:
            raise StateIoError(f"Failed to save '{self.state_path}': {e}") from e
        log.debug(f"Local manifest record saved to '{self.state_path}'.")
