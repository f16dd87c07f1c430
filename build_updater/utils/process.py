"""
Process inspection and detached start of the managed application.
"""

import logging
import os
import subprocess
import sys
from pathlib import Path

import psutil

log = logging.getLogger(__name__)


def _process_key(name: str) -> str:
    """Compares process names case-insensitively and without an .exe suffix."""
    name = name.lower()
    return name[:-4] if name.endswith(".exe") else name


def is_process_running(executable_name: str) -> bool:
    """Returns True if any running process carries the given executable name."""
    wanted = _process_key(executable_name)
    for proc in psutil.process_iter(["name"]):
        try:
            name = proc.info.get("name") or ""
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
        if _process_key(name) == wanted:
            log.debug(f"Found running process '{name}' (pid {proc.pid}).")
            return True
    return False


def launch_detached(executable: Path) -> int:
    """
    Starts the executable in its own directory without waiting for it.

    Returns:
        The PID of the started process.
    """
    kwargs: dict = {"cwd": str(executable.parent), "close_fds": True}
    if os.name == "nt":
        kwargs["creationflags"] = (
            subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
        )
    else:
        kwargs["start_new_session"] = True

    process = subprocess.Popen(
        [str(executable)],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        **kwargs,
    )
    log.debug(f"Started '{executable.name}' with pid {process.pid} ({sys.platform}).")
    return process.pid
