#!/usr/bin/env python3
"""
cyspec: analyze a front-end repository and generate Cypress spec skeletons
tailored to its stack.
"""
import typer
from rich.markup import escape
from cyspec.ui import console, banner, configure_logging
from cyspec.error_handler import handle_errors

app = typer.Typer(
    name="cyspec",
    help="Autonomous Cypress spec generator.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

from cyspec.commands import config_cmd, doctor_cmd

app.add_typer(config_cmd.app, name="config", help="Manage configuration", rich_help_panel="Advanced")
app.add_typer(doctor_cmd.app, name="doctor", help="Check environment setup", rich_help_panel="Advanced")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
):
    """Autonomous Cypress spec generator."""
    configure_logging(verbose)


def _build_agent(output: str = None):
    from dataclasses import replace
    from pathlib import Path
    from cyspec.core.config_service import get_config_service
    from cyspec.core.pipeline import CypressAgent

    config = get_config_service().pipeline_config()
    if output:
        config = replace(config, output_dir=Path(output).resolve())
    return CypressAgent(config)


@app.command(rich_help_panel="Modes")
@handle_errors
def standalone(
    url: str = typer.Argument(None, help="Repository URL (defaults to the configured demo repository)"),
):
    """[bold cyan]Run[/bold cyan] a repository through the full pipeline."""
    from cyspec.core.config_service import get_config_service

    banner()
    url = url or get_config_service().get_demo_repository()
    agent = _build_agent()
    agent.cleanup_stale_clones()

    console.print(f"[bold]Repository:[/bold] {escape(url)}")
    with console.status("[bold cyan]Cloning, analyzing and generating specs...[/bold cyan]"):
        result = agent.process_repository(url)

    if not result.success:
        from cyspec.ui import error_panel
        error_panel("Pipeline failed", result.error or "")
        raise typer.Exit(1)

    from cyspec.ui import render_pipeline_result
    render_pipeline_result(result, name=url.rstrip("/").split("/")[-1])

    files = agent.list_generated_files()
    if files:
        console.print("\n[bold]Generated files:[/bold]")
        for f in files:
            console.print(f"  [dim]-[/dim] {escape(f.name)} [dim]({f.lines} lines)[/dim]")

    agent.cleanup(result.temp_path)
    console.print("\n[green]Done.[/green]")


@app.command(rich_help_panel="Modes")
@handle_errors
def n8n(
    host: str = typer.Option(None, "--host", help="Interface to bind (default from config)"),
    port: int = typer.Option(None, "--port", "-p", help="Port to listen on (default from config)"),
):
    """[bold cyan]Serve[/bold cyan] the webhook for n8n and other workflow tools."""
    from cyspec.core.config_service import get_config_service
    from cyspec.webhook.server import run_server

    default_host, default_port = get_config_service().get_server_address()
    host = host or default_host
    port = port or default_port

    console.print(f"[bold green]Webhook listening on http://{host}:{port}[/bold green]")
    console.print(f"  POST /webhook/cypress-agent  [dim]{{\"githubUrl\": \"...\"}}[/dim]")
    console.print("  GET  /webhook/status")
    console.print("  GET  /webhook/generated-specs")
    run_server(host, port)


@app.command("help", rich_help_panel="Modes")
def show_help():
    """Explain the available modes."""
    console.print(
        "[bold cyan]cyspec modes[/bold cyan]\n\n"
        "  [bold]cyspec standalone [URL][/bold]\n"
        "      Clone a repository (the demo repository by default), analyze it,\n"
        "      and write generated specs to the output directory.\n\n"
        "  [bold]cyspec n8n [--port PORT][/bold]\n"
        "      Start the HTTP webhook.\n"
        "      POST /webhook/cypress-agent with {\"githubUrl\": \"https://github.com/user/repo\"}\n\n"
        "  [bold]cyspec analyze PATH[/bold] / [bold]cyspec generate PATH[/bold]\n"
        "      Work on a local checkout without cloning.\n"
    )


@app.command(rich_help_panel="Local Projects")
@handle_errors
def analyze(
    path: str = typer.Argument(".", help="Path to project directory"),
    as_json: bool = typer.Option(False, "--json", help="Print analysis and strategy as JSON"),
):
    """[bold cyan]Analyze[/bold cyan] a local project and show its testing strategy."""
    from pathlib import Path
    from cyspec.analyzers.project_analyzer import ProjectAnalyzer
    from cyspec.core.strategy_service import StrategyService
    from cyspec.errors import InvalidRepositoryError

    project_path = Path(path).resolve()
    if not project_path.is_dir():
        raise InvalidRepositoryError(str(project_path))

    analysis = ProjectAnalyzer().deep_analysis(project_path)
    strategies = StrategyService()
    strategy = strategies.generate_strategy(analysis)

    if as_json:
        from cyspec.ui import print_json_output
        print_json_output({
            "analysis": analysis.to_dict(),
            "strategy": strategy.to_dict(),
            "cypressConfig": strategies.generate_cypress_config(analysis),
        })
        return

    from cyspec.ui import render_analysis
    render_analysis(analysis, strategy)


@app.command(rich_help_panel="Local Projects")
@handle_errors
def generate(
    path: str = typer.Argument(".", help="Path to project directory"),
    output: str = typer.Option(None, "--output", "-o", help="Directory for generated specs"),
):
    """[bold cyan]Generate[/bold cyan] Cypress specs for a local project."""
    agent = _build_agent(output)
    result = agent.process_local(path)

    if not result.success:
        from cyspec.ui import error_panel
        error_panel("Pipeline failed", result.error or "")
        raise typer.Exit(1)

    from cyspec.ui import render_pipeline_result
    render_pipeline_result(result)


if __name__ == "__main__":
    app()
