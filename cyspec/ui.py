"""Shared UI theme, console, and display helpers for cyspec."""

import json
import logging

from rich.align import Align
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from cyspec.analyzers.models import Analysis
from cyspec.core import CypressCheck, PipelineResult, SpecSummary, Strategy

# ── Theme ──
CYSPEC_THEME = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "yellow",
    "error": "bold red",
    "brand": "bold cyan",
    "muted": "dim",
})

console = Console(theme=CYSPEC_THEME)

ICONS = {
    "complete": "[green]✔[/green]",
    "error": "[red]✘[/red]",
    "bullet": "[cyan]•[/cyan]",
}

SCRIPT_ICONS = {
    "test": "\U0001f9ea",
    "build": "\U0001f3d7",
    "start": "\U0001f680",
    "dev": "\U0001f4bb",
    "cypress": "⏱",
    "lint": "\U0001f4dd",
    "other": "⚡",
}


def configure_logging(verbose: bool = False) -> None:
    """Route the cyspec loggers through a Rich handler."""
    logger = logging.getLogger("cyspec")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_path=False, markup=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def print_json_output(data: dict | list) -> None:
    """Print data as formatted JSON to stdout."""
    print(json.dumps(data, indent=2, default=str))


def banner():
    """Display the cyspec welcome banner."""
    content = Text.from_markup(
        "\n"
        "[bold cyan]  c y s p e c[/bold cyan]\n"
        "[dim]  Autonomous Cypress spec generator[/dim]\n"
    )
    console.print(Panel(Align.center(content), border_style="cyan", padding=(0, 4)))


def _yes_no(value: bool, yes: str = "yes", no: str = "no") -> str:
    return f"{ICONS['complete']} {yes}" if value else f"{ICONS['error']} {no}"


def analysis_table(analysis: Analysis, name: str = "") -> Table:
    table = Table(title="Project", show_header=False, expand=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    if name:
        table.add_row("Name", escape(name))
    table.add_row("Type", f"[yellow]{analysis.project_type}[/yellow]")
    table.add_row("Framework", f"[yellow]{analysis.framework}[/yellow]")
    table.add_row("package.json", _yes_no(analysis.has_package_json))
    table.add_row("Dependencies", _yes_no(analysis.dependencies_installed, "installed", "not installed"))
    table.add_row("Cypress", _yes_no(analysis.cypress_installed, "detected", "not detected"))
    if analysis.package_info and analysis.package_info.name:
        table.add_row("Package", escape(f"{analysis.package_info.name} {analysis.package_info.version or 'N/A'}"))
    if analysis.entry_points:
        table.add_row("Entry points", escape(", ".join(analysis.entry_points[:5])))
    if analysis.build_tools:
        table.add_row("Build tools", ", ".join(b.name for b in analysis.build_tools))
    if analysis.testing_frameworks:
        table.add_row("Test libraries", ", ".join(analysis.testing_frameworks))
    table.add_row("Existing tests", str(len(analysis.test_files)))
    return table


def strategy_table(strategy: Strategy) -> Table:
    table = Table(title="Testing Strategy", show_header=False, expand=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Strategy", strategy.name)
    table.add_row("Recommended specs", str(strategy.recommended_specs))
    table.add_row("Focus areas", ", ".join(strategy.focus_areas))
    table.add_row("Patterns", ", ".join(strategy.test_patterns))
    table.add_row("Selectors", ", ".join(strategy.selector_strategy))
    return table


def summary_table(summary: SpecSummary) -> Table:
    table = Table(title="Generated Specs", show_header=True, expand=False)
    table.add_column("Type", style="cyan")
    table.add_column("Specs", justify="right")
    for spec_type, count in summary.spec_types.items():
        table.add_row(spec_type, str(count))
    table.add_row("[bold]total[/bold]", f"[bold]{summary.total_specs}[/bold]")
    table.caption = f"Estimated run time: {summary.estimated_execution_time}s"
    return table


def render_analysis(analysis: Analysis, strategy: Strategy) -> None:
    console.print(analysis_table(analysis))
    console.print(strategy_table(strategy))

    runnable = [(n, s) for n, s in analysis.executable_scripts.items() if s.can_execute][:4]
    if runnable:
        console.print("\n[bold]Runnable scripts:[/bold]")
        for name, script in runnable:
            icon = SCRIPT_ICONS.get(script.script_type, SCRIPT_ICONS["other"])
            console.print(f"  {icon} {escape(name)}: [dim]{escape(script.command)}[/dim]")


def render_cypress_check(check: CypressCheck) -> None:
    config = f"{ICONS['complete']} {check.cypress_config_path}" if check.has_cypress_config else _yes_no(False)
    console.print(Panel(
        f"Dependency:  {_yes_no(check.has_cypress_dependency)}\n"
        f"Config file: {config}",
        title="Cypress Setup",
        border_style="cyan",
        expand=False,
    ))


def render_pipeline_result(result: PipelineResult, name: str = "") -> None:
    """Full report for a successful pipeline run."""
    console.print()
    console.print(analysis_table(result.analysis, name=name))
    render_cypress_check(result.cypress_check)
    console.print(strategy_table(result.strategy))
    console.print(summary_table(result.spec_summary))

    console.print(Panel(
        f"Project:    {result.analysis.project_type}\n"
        f"Framework:  {result.analysis.framework}\n"
        f"Cypress:    {'configured' if result.cypress_check.has_cypress_dependency else 'to be configured'}\n"
        f"Specs:      {result.spec_summary.total_specs}\n"
        f"Strategy:   {result.strategy.name}\n"
        f"Saved to:   {escape(str(result.output_path))}",
        title="[bold green]Summary[/bold green]",
        border_style="green",
        expand=False,
    ))


def error_panel(title: str, content: str = ""):
    """Display an error panel."""
    console.print(Panel(escape(content), title=f"[bold red]{title}[/bold red]", border_style="red"))
