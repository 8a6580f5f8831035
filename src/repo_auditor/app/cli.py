from __future__ import annotations

import json
import logging

import typer
from dotenv import load_dotenv

from . import main
from .cli_formatter import (
    format_dependency_graph_events,
    format_digests,
    format_evaluation,
    format_remediations,
)
from ..core.domain.exceptions import ResultsNotFoundError, SnapshotNotFoundError
from ..shared.to_jsonable import to_jsonable

load_dotenv()

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _configure_logging(log_level: str) -> None:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s', force=True)


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(to_jsonable(payload), ensure_ascii=False, indent=2))


@app.command()
def evaluate(
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Evaluate every repository of the snapshot and persist verdicts and vulnerabilities."""
    _configure_logging(log_level)
    try:
        results = main.evaluate()
    except SnapshotNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        _echo_json({"count": len(results), "results": results})
    else:
        typer.echo(format_evaluation(results))


@app.command()
def digest(
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Compose vulnerability digests per team; send them on the first and third Tuesday in PROD."""
    _configure_logging(log_level)
    try:
        digests, sent = main.send_digests()
    except (ResultsNotFoundError, SnapshotNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        _echo_json({"sent": sent, "digests": digests})
    else:
        typer.echo(format_digests(digests, sent))


@app.command(name="protect-branches")
def protect_branches(
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Protect the default branch of a few unprotected production repositories."""
    _configure_logging(log_level)
    try:
        events = main.protect_branches()
    except (ResultsNotFoundError, SnapshotNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        _echo_json({"count": len(events), "events": events})
    else:
        typer.echo(format_remediations(events))


@app.command(name="dependency-graph")
def dependency_graph(
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Request dependency graph integration for Scala and Kotlin repositories missing it."""
    _configure_logging(log_level)
    try:
        events = main.dependency_graph()
    except SnapshotNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        _echo_json({"count": len(events), "events": events})
    else:
        typer.echo(format_dependency_graph_events(events))


@app.command()
def logs(
    run_id: str = typer.Argument(None, help="Optional run id. If omitted, lists summaries of all runs."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show raw log lines, or event counts per run."),
):
    """Show run logs - either for a specific run or a summary of all runs."""
    try:
        lines = main.logs(run_id, verbose)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    for line in lines:
        typer.echo(line)


if __name__ == "__main__":
    app()
