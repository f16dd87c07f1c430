"""
Main entry point for the build-updater application.
This module handles top-level exception handling and CLI invocation.
"""

import logging
import sys

import typer
from rich.console import Console

from build_updater.cli.app import app
from build_updater.cli.formatters import format_error_with_suggestions
from build_updater.core.orchestrator import RunOutcome
from build_updater.exceptions import UpdaterError


def main() -> None:
    """Main entry point function."""
    log = logging.getLogger("build_updater")
    console = Console(stderr=True)

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except KeyboardInterrupt:
        log.error("Update interrupted.")
        sys.exit(RunOutcome.FAILED.exit_code)
    except UpdaterError as e:
        log.error(f"Update failed: {e}", exc_info=True)
        console.print(format_error_with_suggestions(e))
        sys.exit(RunOutcome.FAILED.exit_code)
    except Exception as e:
        log.error(f"Unexpected error: {e}", exc_info=True)
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        sys.exit(RunOutcome.FAILED.exit_code)


if __name__ == "__main__":
    main()
