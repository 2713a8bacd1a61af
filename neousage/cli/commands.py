"""CLI commands for neousage."""

import json
import sys
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from rich.console import Console

from neousage import __version__, __logo__

app = typer.Typer(
    name="neousage",
    help=f"{__logo__} neousage - Analyze Neovate Code usage statistics",
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} neousage v{__version__}")
        raise typer.Exit()


def _setup_logging(level: str) -> None:
    """Route loguru output to stderr at the requested level."""
    logger.remove()
    logger.add(sys.stderr, level=level)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
    path: Path = typer.Option(None, "--path", "-p", help="Session log directory (default: ~/.neovate/projects)"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
):
    """neousage - Analyze Neovate Code usage statistics."""
    from neousage.config.loader import load_config
    
    config = load_config()
    if path is not None:
        config.projects_dir = str(path)
    
    _setup_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config
    
    # Daily report is the default
    if ctx.invoked_subcommand is None:
        _run_report(config, "daily", as_json=False)


# ============================================================================
# Report Commands
# ============================================================================


@app.command()
def daily(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print statistics as JSON"),
):
    """Show daily token usage (default)."""
    _run_report(ctx.obj, "daily", as_json)


@app.command()
def monthly(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print statistics as JSON"),
):
    """Show monthly aggregated report."""
    _run_report(ctx.obj, "monthly", as_json)


@app.command()
def session(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print statistics as JSON"),
):
    """Show usage by conversation session."""
    _run_report(ctx.obj, "session", as_json)


def _run_report(config, command: str, as_json: bool) -> None:
    """Scan the log tree, aggregate, and print one report."""
    from neousage.cli import formatter
    from neousage.usage import SessionScanner, UsageAggregator, calculate_summary
    
    root = config.projects_path
    
    if not as_json:
        console.print(f"[{formatter.BRAND}]Loading Neovate usage data...[/{formatter.BRAND}]")
    
    try:
        scanner = SessionScanner(
            root,
            extension=config.session_extension,
            summary_max_length=config.summary_max_length,
        )
        sessions = scanner.list_sessions()
        
        aggregator = UsageAggregator(root, extension=config.session_extension)
        if command == "daily":
            result = aggregator.analyze_daily(sessions)
            rows = result
        elif command == "monthly":
            result = aggregator.analyze_monthly(sessions)
            rows = result.stats
        else:
            result = aggregator.analyze_sessions(sessions)
            rows = result
    except OSError as e:
        logger.debug(f"Report failed for {root}: {e!r}")
        console.print(f"\n[red]Error:[/red] {e}")
        console.print("[dim]\nUse --help for usage information.\n[/dim]")
        raise typer.Exit(1)
    
    if as_json:
        _print_json(command, result)
        return
    
    if not sessions:
        console.print("\n[yellow]No Neovate sessions found.[/yellow]")
        console.print("[dim]Make sure you have used Neovate Code before.\n[/dim]")
        return
    
    console.print(f"[dim]Found {len(sessions)} session(s)\n[/dim]")
    
    if not rows:
        console.print("\n[yellow]No usage data found in sessions.[/yellow]")
        console.print("[dim]Sessions may not contain any assistant messages with usage data.\n[/dim]")
        return
    
    if command == "daily":
        formatter.print_daily_stats(console, result, calculate_summary(result))
    elif command == "monthly":
        formatter.print_monthly_stats(console, result)
    else:
        formatter.print_session_stats(console, result)
    
    console.print()


def _print_json(command: str, result: Any) -> None:
    """Write a report to stdout as JSON."""
    from neousage.usage import calculate_summary
    
    if command == "daily":
        data = {
            "daily": [s.to_dict() for s in result],
            "summary": calculate_summary(result).to_dict(),
        }
    elif command == "monthly":
        data = result.to_dict()
    else:
        data = {"sessions": [s.to_dict() for s in result]}
    
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
