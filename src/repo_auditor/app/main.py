from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator

from .config import AppConfig, RuntimeConfig
from .container import Container
from ..core.domain.models import (
    DependencyGraphEvent,
    EvaluationResult,
    RemediationEvent,
    VulnerabilityDigest,
)
from ..shared.clock import utcnow


def new_run_id(command: str) -> str:
    return f"{command}-{utcnow():%Y%m%dT%H%M%S%fZ}"


def _create_container(
    config: AppConfig | None = None, *, run_id: str | None = None, command: str | None = None
) -> Container:
    """Create and initialize a container.

    Args:
        config: Optional config. If None, loads from environment variables.
        run_id: Run identifier naming the run log file. No log file is written when None.
        command: Command name added to every log record of the run.

    Returns:
        Initialized container instance
    """
    container = Container()

    if config is None:
        # Load from environment variables (BaseSettings default behavior)
        config = AppConfig()
    if run_id is not None or command is not None:
        config = config.model_copy(update={"runtime": RuntimeConfig(run_id=run_id, command=command)})

    container.config.from_pydantic(config)
    container.init_resources()

    return container


@contextmanager
def _run(command: str, config: AppConfig | None) -> Iterator[Container]:
    """Run one command with its own log file, recording how it ended."""
    run_id = new_run_id(command)
    container = _create_container(config, run_id=run_id, command=command)
    logger = container.logger()
    logger.info("run_started", type="run_started")
    try:
        yield container
    except Exception as e:
        logger.error("run_failed", type="run_failed", error=str(e))
        raise
    else:
        logger.info("run_finished", type="run_finished")
    finally:
        container.shutdown_resources()


def evaluate(*, now: datetime | None = None, config: AppConfig | None = None) -> list[EvaluationResult]:
    """Evaluate every repository of the snapshot and persist the results.

    Args:
        now: Evaluation time. Defaults to the current UTC time.
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        One result per evaluated repository

    Raises:
        SnapshotNotFoundError: If the snapshot has no repositories file
    """
    with _run("evaluate", config) as container:
        return container.evaluate_uc().execute(now=now)


def send_digests(
    *,
    today: date | None = None,
    config: AppConfig | None = None,
) -> tuple[list[VulnerabilityDigest], bool]:
    """Compose vulnerability digests for every team and send them when scheduled.

    Returns:
        The digests, and whether they were sent

    Raises:
        ResultsNotFoundError: If no evaluation has been run yet
    """
    with _run("digest", config) as container:
        return container.digest_uc().execute(today=today)


def protect_branches(*, config: AppConfig | None = None) -> list[RemediationEvent]:
    """Protect the default branch of a bounded random selection of repositories.

    Raises:
        ResultsNotFoundError: If no evaluation has been run yet
    """
    with _run("protect-branches", config) as container:
        return container.protect_branches_uc().execute()


def dependency_graph(*, config: AppConfig | None = None) -> list[DependencyGraphEvent]:
    """Request dependency graph integration for production repositories missing it."""
    with _run("dependency-graph", config) as container:
        return container.dependency_graph_uc().execute()


def logs(
    run_id: str | None = None,
    verbose: bool = False,
    config: AppConfig | None = None,
) -> list[str]:
    """Show run logs.

    Args:
        run_id: Optional run identifier. If None, shows a summary of all runs.
        verbose: Show raw lines for a single run, or event counts for the summary
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        List of log lines
    """
    container = _create_container(config)
    try:
        return container.logs_uc().execute(run_id, verbose)
    finally:
        container.shutdown_resources()
