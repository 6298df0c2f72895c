"""Diagnostic command: check the tools and directories the pipeline relies on."""
from __future__ import annotations

import logging
import shutil
import sys

import typer
from rich.table import Table

from cyspec.ui import console, ICONS

app = typer.Typer(no_args_is_help=False)
logger = logging.getLogger("cyspec.doctor")

# (executable, purpose, required)
TOOLS: list[tuple[str, str, bool]] = [
    ("git", "clone repositories", True),
    ("node", "run installed packages", False),
    ("npm", "install dependencies", False),
    ("yarn", "install yarn projects", False),
    ("pnpm", "install pnpm projects", False),
]


@app.callback(invoke_without_command=True)
def doctor():
    """Run diagnostic checks on the cyspec environment."""
    checks: list[tuple[str, bool, str, bool]] = []

    py_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    py_ok = sys.version_info >= (3, 11)
    checks.append(("Python version", py_ok, f"{py_version} {'(OK)' if py_ok else '(requires 3.11+)'}", True))

    for tool, purpose, required in TOOLS:
        location = shutil.which(tool)
        detail = f"{location} ({purpose})" if location else f"not found ({purpose})"
        checks.append((f"Tool: {tool}", location is not None, detail, required))

    from cyspec.core.config_service import get_config_service
    config_svc = get_config_service()
    for label, directory in (("Temp directory", config_svc.get_temp_dir()), ("Output directory", config_svc.get_output_dir())):
        exists = directory.is_dir()
        parent_ok = exists or directory.parent.is_dir()
        detail = f"{directory} ({'exists' if exists else 'will be created' if parent_ok else 'parent missing'})"
        checks.append((label, parent_ok, detail, True))

    table = Table(title="cyspec doctor", show_header=True, border_style="cyan")
    table.add_column("Check", min_width=20)
    table.add_column("Status", justify="center", width=6)
    table.add_column("Detail")

    all_ok = True
    for name, passed, detail, required in checks:
        table.add_row(name, ICONS["complete"] if passed else ICONS["error"], detail)
        if not passed and required:
            all_ok = False

    console.print(table)

    if all_ok:
        console.print("\n[green]All required checks passed.[/green]")
    else:
        console.print("\n[yellow]Some checks failed. See details above.[/yellow]")
        raise typer.Exit(1)
