"""
Storage Layer.

This package handles all data persistence: the local manifest record, the
optional INI configuration file, and the run history journal.
"""

from .config_manager import ConfigManager
from .run_history import RunHistory
from .state_store import LocalStateStore

__all__ = ["ConfigManager", "LocalStateStore", "RunHistory"]
