"""
Appends a one-line JSON summary of every updater run to the log directory.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)


class RunHistory:
    """An append-only JSONL journal of run outcomes, kept for operators."""

    def __init__(self, history_path: Path):
        self.history_path = history_path

    def append(self, outcome: str, exit_code: int, **details: Any) -> None:
        """Records one run. Failing to write the journal never fails the run."""
        entry = {
            "timestamp": int(time.time()),
            "outcome": outcome,
            "exit_code": exit_code,
            **details,
        }
        try:
            self.history_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.history_path, "a", encoding="utf-8") as f:
                json.dump(entry, f)
                f.write("\n")
        except (OSError, TypeError) as e:
            log.warning(f"Could not save run history: {e}")

