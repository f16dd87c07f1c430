"""
Defines the command-line interface for the updater using Typer.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from build_updater import __version__
from build_updater.core.orchestrator import Orchestrator, RunOutcome
from build_updater.models.config import (
    CONFIG_FILE_NAME,
    LOG_DIR_NAME,
    LOG_FILE_NAME,
)
from build_updater.storage.config_manager import ConfigManager
from build_updater.utils.logging_setup import configure_logging

from .formatters import print_run_summary

console = Console(stderr=True)
log = logging.getLogger("build_updater")

app = typer.Typer(
    name="build-updater",
    help=(
        "Updates itself and a managed application build from a remote manifest,"
        " then launches the application."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def default_self_path() -> Path:
    """The updater's own code is the entry script this process was started from."""
    return Path(sys.argv[0]).resolve()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold]build-updater[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()


@app.command()
def run(
    manifest_url: str = typer.Argument(..., help="URL of the update manifest."),
    install_root: Optional[Path] = typer.Argument(
        None,
        help="Installation root. Defaults to the directory of the updater itself.",
    ),
    self_path: Optional[Path] = typer.Option(
        None,
        "--self-path",
        help="Location of the updater's own code (defaults to the entry script).",
    ),
    keep_previous: Optional[bool] = typer.Option(
        None,
        "--keep-previous/--discard-previous",
        help="Keep the replaced build in Build_old after a successful update.",
    ),
    no_launch: bool = typer.Option(
        False, "--no-launch", help="Update only; do not start the application."
    ),
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Enable debug logging."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Run one update cycle and launch the managed application."""
    resolved_self = (self_path or default_self_path()).expanduser()
    root = (install_root or resolved_self.parent).expanduser().resolve()

    configure_logging(root / LOG_DIR_NAME / LOG_FILE_NAME, verbose > 0, console)
    log.info(f"build-updater {__version__} starting in '{root}'.")

    config = ConfigManager(root / CONFIG_FILE_NAME).load_config(
        manifest_url,
        root,
        resolved_self,
        cli_options={
            "keep_previous_build": keep_previous,
            "launch": False if no_launch else None,
        },
    )

    report = asyncio.run(Orchestrator(config).run())
    if report.outcome is RunOutcome.LAUNCHED:
        print_run_summary(report, console)
    elif report.outcome is RunOutcome.RELAUNCH:
        log.info(f"Exiting with {report.outcome.exit_code} so the caller relaunches.")
    raise typer.Exit(code=report.outcome.exit_code)
