"""Unified CLI error handler for cyspec commands."""

from __future__ import annotations

import functools
import logging
import os
import traceback

import typer
from rich.markup import escape

from cyspec.errors import (
    AcquisitionError,
    ConfigError,
    CyspecError,
    InvalidRepositoryError,
    SaveError,
)
from cyspec.ui import console

logger = logging.getLogger("cyspec.error_handler")


def _debug_mode() -> bool:
    """Check if debug output is enabled via CYSPEC_DEBUG env var."""
    return os.environ.get("CYSPEC_DEBUG", "").lower() in ("1", "true", "yes")


def _render_cyspec_error(e: CyspecError) -> None:
    """Render a CyspecError with Rich formatting and context."""
    console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")

    if e.context and _debug_mode():
        context_parts = [
            f"  [dim]{key}:[/dim] {escape(str(value))}" for key, value in e.context.items() if value
        ]
        if context_parts:
            console.print("[dim]Context:[/dim]")
            for part in context_parts:
                console.print(part)

    # Actionable hints based on error type
    if isinstance(e, InvalidRepositoryError):
        console.print("[dim]Pass the path of a checked-out project directory.[/dim]")
    elif isinstance(e, AcquisitionError):
        console.print("[dim]Run 'cyspec doctor' to check that git is available.[/dim]")
    elif isinstance(e, SaveError):
        console.print("[dim]Check that the output directory is writable ('cyspec config path').[/dim]")
    elif isinstance(e, ConfigError):
        console.print("[dim]Run 'cyspec config show' to inspect the resolved configuration.[/dim]")


def handle_errors(func):
    """Decorator that catches CyspecError and renders formatted CLI output.

    Usage::

        @app.command()
        @handle_errors
        def my_command(...):
            ...  # no try/except needed
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CyspecError as e:
            _render_cyspec_error(e)
            if _debug_mode():
                console.print(f"\n[dim]{escape(traceback.format_exc())}[/dim]")
            raise typer.Exit(e.exit_code)
        except KeyboardInterrupt:
            console.print("\n[dim]Interrupted.[/dim]")
            raise typer.Exit(130)
        except (typer.Exit, typer.Abort, SystemExit):
            raise
        except Exception as e:
            logger.debug("Unexpected error", exc_info=True)
            console.print(f"\n[bold red]Unexpected error:[/bold red] {escape(str(e))}")
            if _debug_mode():
                console.print(f"\n[dim]{escape(traceback.format_exc())}[/dim]")
            else:
                console.print("[dim]Set CYSPEC_DEBUG=1 for full traceback.[/dim]")
            raise typer.Exit(1)

    return wrapper
