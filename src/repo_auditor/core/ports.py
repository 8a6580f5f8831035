from __future__ import annotations

from typing import Any, Protocol

from .domain.models import (
    DependencyGraphEvent,
    EvaluationResult,
    RemediationEvent,
    RepositoryRules,
    Snapshot,
    Vulnerability,
    VulnerabilityDigest,
)


class SnapshotPort(Protocol):
    """Port for reading what the collectors gathered.

    The snapshot is fully materialised; nothing downstream performs I/O
    against GitHub or the scanners.
    """

    def load(self) -> Snapshot:
        """Load the whole snapshot.

        Raises:
            SnapshotNotFoundError: If a required snapshot file is missing
        """
        ...


class ResultStorePort(Protocol):
    """Port for persisting evaluation results between runs."""

    def save(self, results: list[EvaluationResult]) -> None:
        ...

    def load_rules(self) -> list[RepositoryRules]:
        """Raises ResultsNotFoundError when no evaluation has been saved."""
        ...

    def load_vulnerabilities(self) -> list[Vulnerability]:
        """Raises ResultsNotFoundError when no evaluation has been saved."""
        ...


class NotifierPort(Protocol):
    """Port for team notifications."""

    def send_digest(self, digest: VulnerabilityDigest) -> None:
        ...

    def notify_branch_protected(self, full_name: str, team_slug: str) -> None:
        ...


class RemediationSinkPort(Protocol):
    """Port for handing remediation actions to the transport that applies them."""

    def apply_branch_protection(self, event: RemediationEvent) -> None:
        ...

    def request_dependency_graph_integration(self, event: DependencyGraphEvent) -> None:
        ...


class LogStorePort(Protocol):
    """Port for reading run log files."""

    def read_log(self, run_id: str, verbose: bool) -> list[str]:
        """Read and format the log of a single run."""
        ...

    def summarize_all(self, verbose: bool) -> list[str]:
        """Summarize all runs as a table."""
        ...


class LoggerPort(Protocol):
    """Port for structured logging.

    The message is the event name; keyword arguments become structured fields
    of the log record.
    """

    def debug(self, message: str, **kwargs: Any) -> None:
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        ...

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        ...

    def exception(self, message: str, **kwargs: Any) -> None:
        ...
