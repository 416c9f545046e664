"""
Main entry point for the tadpoles-cli application.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import asyncio
import logging
import os
import sys

import typer
from rich.console import Console

from tadpoles_cli.cli.app import EXIT_EXPECTED_ERROR, EXIT_UNEXPECTED_ERROR, app
from tadpoles_cli.cli.formatters import format_error_with_suggestions
from tadpoles_cli.exceptions import TadpolesCliError


def main() -> None:
    """Main entry point function."""
    if os.name == "nt":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            sys.stderr.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass

    log = logging.getLogger("tadpoles_cli")
    console = Console()

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]⚠️  Operation cancelled by user.[/yellow]")
        sys.exit(0)
    except TadpolesCliError as e:
        console.print()
        console.print(format_error_with_suggestions(e))
        sys.exit(EXIT_EXPECTED_ERROR)
    except Exception as e:
        console.print()
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        sys.exit(EXIT_UNEXPECTED_ERROR)


if __name__ == "__main__":
    main()
