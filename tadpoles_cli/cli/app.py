"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from tadpoles_cli import __version__
from tadpoles_cli.api.client import TadpolesAPIClient
from tadpoles_cli.core.ingestion import IngestionDriver
from tadpoles_cli.exceptions import TadpolesCliError
from tadpoles_cli.media import AttachmentFetcher, MediaTypeSniffer, MetadataRewriter
from tadpoles_cli.models.config import ArchiveConfig
from tadpoles_cli.models.stats import IngestStats
from tadpoles_cli.storage.config_manager import ConfigManager
from tadpoles_cli.utils.path import PathFormatter

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_summary_panel,
    print_validation_table,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("tadpoles_cli")

# Exit status for errors the application anticipates (bad config, login,
# listing) versus anything else.
EXIT_EXPECTED_ERROR = 1
EXIT_UNEXPECTED_ERROR = 2

app = typer.Typer(
    name="tadpoles-cli",
    help=(
        "Mirror your Tadpoles photos, videos and documents into a local archive."
        " Use 'tadpoles-cli <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "tadpoles-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """Tadpoles Archiver CLI"""
    if version:
        console.print(f"[bold]tadpoles-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("tadpoles_cli").setLevel(log_level)

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]tadpoles-cli init[/cyan]"
                " first."
            )
            raise typer.Exit(code=EXIT_EXPECTED_ERROR)
        config_manager = ConfigManager(CONFIG_FILE)
        config_manager.load_config()
        print_config(CONFIG_FILE, config_manager.get_config_as_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    username: str = typer.Argument(..., help="Tadpoles account email address."),
    password: str = typer.Argument(..., help="Tadpoles account password."),
    image_path: str | None = typer.Option(
        None,
        "--image-path",
        help="Directory template, e.g. 'tadpoles/%child%/%YYYY%/%MM%'.",
    ),
    file_pattern: str | None = typer.Option(
        None,
        "--file-pattern",
        help="File name template, e.g. '%YYYY%-%MM%-%DD%_%keymd5%'.",
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite existing configuration without asking."
    ),
):
    """Initialize configuration with Tadpoles credentials."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    settings = {
        "username": username,
        "password": password,
        "image_path": image_path,
        "file_pattern": file_pattern,
    }
    config_manager = ConfigManager(CONFIG_FILE)
    try:
        config_manager.save_new_config(settings)
        config_manager.load_config()
    except TadpolesCliError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=EXIT_EXPECTED_ERROR) from e

    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print("Ready to sync! Try: [cyan]tadpoles-cli sync[/cyan]")


def build_driver(
    config: ArchiveConfig, api_client: TadpolesAPIClient, stats: IngestStats
) -> IngestionDriver:
    """Wires the pipeline components around one shared stats object."""
    path_formatter = PathFormatter(config.image_path, config.file_pattern)
    return IngestionDriver(
        api_client,
        AttachmentFetcher(api_client, path_formatter, stats),
        MediaTypeSniffer(stats),
        MetadataRewriter(),
        stats,
    )


async def run_sync(config: ArchiveConfig) -> IngestStats:
    """Logs in and runs one ingestion over the whole feed."""
    api_client = TadpolesAPIClient(config.base_url)
    try:
        await api_client.authenticator.login(config.username, config.password)
        driver = build_driver(config, api_client, IngestStats())
        return await driver.run()
    finally:
        await api_client.close()


@app.command(name="sync")
def sync_command(
    image_path: str | None = typer.Option(
        None, "--image-path", help="Override the directory template for this run."
    ),
    file_pattern: str | None = typer.Option(
        None, "--file-pattern", help="Override the file name template for this run."
    ),
):
    """Download new attachments from the Tadpoles event feed."""
    cli_options = {
        key: value
        for key, value in {
            "image_path": image_path,
            "file_pattern": file_pattern,
        }.items()
        if value is not None
    }

    console.print("[bold cyan]📷 Starting Tadpoles sync...[/bold cyan]")
    start_time = time.monotonic()
    try:
        config = ConfigManager(CONFIG_FILE).load_config(cli_options)
        stats = asyncio.run(run_sync(config))
    except TadpolesCliError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=EXIT_EXPECTED_ERROR) from e
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        raise typer.Exit(code=EXIT_UNEXPECTED_ERROR) from e

    print_summary_panel(stats, time.monotonic() - start_time)


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config_manager = ConfigManager(CONFIG_FILE)
        config = config_manager.load_config()
        print_validation_table(config)
    except TadpolesCliError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=EXIT_EXPECTED_ERROR) from e
