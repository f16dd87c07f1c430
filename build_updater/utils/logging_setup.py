"""
Configures the updater's console and file logging.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "build_updater"
FILE_FORMAT = "[%(asctime)s][Updater] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    log_file: Path | None, verbose: bool = False, console: Console | None = None
) -> logging.Logger:
    """
    Attaches a Rich console handler and, if log_file is given, an append-only
    file handler to the package logger. Calling it again replaces both.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        show_level=False,
        markup=False,
        log_time_format="[%X]",
    )
    console_handler.setFormatter(logging.Formatter("[Updater] %(message)s"))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger
