"""
Functions for formatting and displaying run results in the console using Rich.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from build_updater.core.orchestrator import RunReport
from build_updater.utils.formatting import describe_version, format_duration


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "TransferError": [
            "• Check the network connection and the manifest URL.",
            "• If the update server was moved, make sure the old manifest still resolves.",
        ],
        "HashMismatch": [
            "• The download was corrupted or the manifest digest is out of date.",
            "• Re-run the updater; if it persists, republish the manifest.",
        ],
        "AppRunningError": [
            "• Close the application and run the updater again.",
        ],
        "MissingRemoteFieldError": [
            "• The remote manifest is incomplete; it must have a 'build' section"
            " and a 'url' for every component that needs updating.",
        ],
        "SwapError": [
            "• Another program may be holding files in the build directory.",
            "• A backup of the previous build is kept in 'Build_old'.",
        ],
        "ConfigurationError": [
            "• Check the values in updater.ini and the command-line options.",
        ],
        "StateIoError": [
            "• Check that the installation directory is writable.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -v and check Log/updater.log."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]Update Failed[/bold red]",
        border_style="red",
        expand=False,
    )


def print_run_summary(report: RunReport, console: Console | None = None) -> None:
    """Displays what a successful run did."""
    console = console or Console(stderr=True)
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Manifest:", report.manifest_url)
    table.add_row("Build:", describe_version(report.build_version))
    table.add_row(
        "Build Updated:",
        "[green]Yes[/green]" if report.build_updated else "[dim]No[/dim]",
    )
    if report.executable is not None:
        table.add_row("Executable:", report.executable.name)
    if report.pid is not None:
        table.add_row("PID:", str(report.pid))
    table.add_row("Duration:", format_duration(report.duration_s))

    console.print(Panel(table, title="Update Complete", border_style="green"))
