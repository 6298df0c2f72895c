"""CLI commands for configuration management."""
from __future__ import annotations

import typer
from cyspec.ui import console
from cyspec.error_handler import handle_errors

app = typer.Typer(
    name="config",
    help="Manage cyspec configuration.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.command()
@handle_errors
def show():
    """Display the resolved configuration (all layers merged)."""
    from rich.panel import Panel
    from rich.table import Table
    from cyspec.core.config_service import get_config_service

    svc = get_config_service()
    info = svc.show()

    sources = info["sources"]
    console.print(Panel(
        f"Global:  {sources['global_config'] or '[dim]not found[/dim]'}\n"
        f"Project: {sources['project_config'] or '[dim]not found[/dim]'}",
        title="Config Sources",
        border_style="cyan",
    ))

    for section, values in info["resolved"].items():
        if not isinstance(values, dict):
            continue
        table = Table(title=section.capitalize(), show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        for key, val in values.items():
            table.add_row(key, str(val) if val not in ("", None) else "[dim]not set[/dim]")
        console.print(table)


@app.command("set")
@handle_errors
def set_value(
    key: str = typer.Argument(..., help="Config key in dotted notation (e.g. paths.output_dir)"),
    value: str = typer.Argument(..., help="Value to set"),
):
    """Set a global configuration value."""
    from cyspec.core.config_service import coerce_value, get_config_service

    parsed_value = coerce_value(key, value)
    get_config_service().set_global(key, parsed_value)
    console.print(f"[green]Set[/green] {key} = {parsed_value}")


@app.command()
@handle_errors
def init():
    """Create a .cyspec.toml project config in the current directory."""
    from cyspec.core.config_service import get_config_service

    path = get_config_service().init_project_config()
    console.print(f"[green]Created project config:[/green] {path}")


@app.command()
@handle_errors
def path():
    """Show configuration files and working directories."""
    from rich.table import Table
    from cyspec.core.config_service import get_config_service

    paths = get_config_service().config_paths()

    table = Table(title="Config Paths", show_header=True)
    table.add_column("File", style="cyan")
    table.add_column("Location")
    for name, location in paths.items():
        table.add_row(name, location)
    console.print(table)
