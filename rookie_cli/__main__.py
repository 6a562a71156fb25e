"""
Main entry point for the rookie-cli application.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import asyncio
import logging
import os
import sys

import click
import typer
from rich.console import Console

from rookie_cli.cli.app import EXIT_ERROR, EXIT_OK, EXIT_USAGE, app
from rookie_cli.cli.formatters import format_error_with_suggestions
from rookie_cli.exceptions import RookieError


def main() -> None:
    """Main entry point function."""
    if os.name == "nt":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            sys.stderr.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass

    log = logging.getLogger("rookie_cli")
    console = Console()

    try:
        exit_code = app(standalone_mode=False)
    except click.UsageError as e:
        e.show()
        sys.exit(EXIT_USAGE)
    except typer.Abort:
        console.print("[yellow]Aborted.[/yellow]")
        sys.exit(EXIT_USAGE)
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]⚠️  Operation cancelled by user.[/yellow]")
        sys.exit(130)
    except RookieError as e:
        console.print(format_error_with_suggestions(e))
        log.debug("Full traceback:", exc_info=True)
        sys.exit(EXIT_ERROR)
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        sys.exit(EXIT_ERROR)

    sys.exit(exit_code if isinstance(exit_code, int) else EXIT_OK)


if __name__ == "__main__":
    main()
