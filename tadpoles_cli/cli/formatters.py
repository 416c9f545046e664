"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tadpoles_cli.models.config import ArchiveConfig
from tadpoles_cli.models.stats import IngestStats
from tadpoles_cli.utils.formatting import format_duration, format_size
from tadpoles_cli.utils.path import PLACEHOLDERS


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "AuthenticationError": [
            "• Verify your username and password in the configuration file.",
            "• Run `tadpoles-cli init --force` to store new credentials.",
        ],
        "AdmissionError": [
            "• The login succeeded but the session was not admitted.",
            "• Tadpoles may have changed its app API; try again later.",
        ],
        "ListingError": [
            "• The event feed could not be read.",
            "• Files archived so far are kept; rerun to continue where it stopped.",
        ],
        "ConfigurationError": [
            "• Run `tadpoles-cli validate` to check your settings.",
            "• Run `tadpoles-cli init` to create a configuration file.",
        ],
        "ClientResponseError": [
            "• A network connection issue occurred.",
            "• The Tadpoles API might be temporarily unavailable.",
            "• Please try again in a few minutes.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
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
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, hiding sensitive data."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        if key == "password":
            value = "[hidden]"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: ArchiveConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Username:", f"[green]{config.username}[/green]")
    table.add_row("Image Path:", f"[dim]{config.image_path}[/dim]")
    table.add_row("File Pattern:", f"[dim]{config.file_pattern}[/dim]")
    table.add_row("Placeholders:", ", ".join(PLACEHOLDERS))

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_summary_panel(stats: IngestStats, duration_s: float):
    """Displays the final summary of an ingestion run."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row("Pages:", str(stats.pages_fetched))
    stats_table.add_row("Events:", str(stats.events_seen))
    stats_table.add_row(
        "✓ Downloaded:", f"[bold green]{stats.attachments_downloaded}[/bold green]"
    )

    skip_sections = []
    if stats.attachments_skipped_exists > 0:
        skip_sections.append(
            f"[yellow]{stats.attachments_skipped_exists} (exists)[/yellow]"
        )
    if stats.attachments_skipped_filtered > 0:
        skip_sections.append(
            f"[yellow]{stats.attachments_skipped_filtered} (content type)[/yellow]"
        )
    if skip_sections:
        stats_table.add_row("○ Skipped:", " + ".join(skip_sections))

    if stats.files_renamed > 0:
        stats_table.add_row("↻ Renamed:", f"[cyan]{stats.files_renamed}[/cyan]")
    if stats.comments_written > 0:
        stats_table.add_row("✎ Comments:", f"[cyan]{stats.comments_written}[/cyan]")
    if stats.attachments_failed > 0:
        stats_table.add_row(
            "✗ Failed:", f"[bold red]{stats.attachments_failed}[/bold red]"
        )

    stats_table.add_row("", "")
    stats_table.add_row(
        "Total Size:", f"[cyan]{format_size(stats.total_size_downloaded)}[/cyan]"
    )
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")

    console.print()
    console.print(
        Panel(
            stats_table,
            title="📷 [bold]Sync Complete![/bold]",
            border_style="green",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
