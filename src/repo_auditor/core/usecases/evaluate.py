from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ...shared.clock import utcnow
from ..domain.models import EvaluationResult
from ..ports import LoggerPort, ResultStorePort, SnapshotPort
from ..services.augmenter import augment_repositories, unarchived_repositories
from ..services.rules import evaluate_repositories
from ..services.vulnerabilities import collect_urgent_dependabot_vulnerabilities


class EvaluateUseCase:
    """Use case for evaluating every repository of the current snapshot.

    Verdicts and vulnerabilities are persisted before returning, so later
    steps (digests, remediation) only ever read stored results.
    """

    def __init__(
        self,
        *,
        snapshot: SnapshotPort,
        result_store: ResultStorePort,
        logger: LoggerPort,
        ignored_prefixes: Sequence[str] = (),
    ) -> None:
        self._snapshot = snapshot
        self._result_store = result_store
        self._logger = logger
        self._ignored_prefixes = tuple(ignored_prefixes)

    def execute(self, *, now: Optional[datetime] = None) -> list[EvaluationResult]:
        now = now or utcnow()
        snapshot = self._snapshot.load()

        repositories = unarchived_repositories(snapshot.repositories, self._ignored_prefixes)
        self._logger.info(
            "snapshot_loaded",
            type="snapshot_loaded",
            repositories=len(snapshot.repositories),
            unarchived=len(repositories),
        )

        augmented = augment_repositories(
            repositories,
            snapshot.ownership,
            snapshot.languages,
            snapshot.workflow_usages,
        )
        dependabot_vulns = collect_urgent_dependabot_vulnerabilities(
            augmented, snapshot.dependabot_alerts, now=now
        )

        results = evaluate_repositories(
            augmented,
            snapshot.branches,
            dependabot_vulns,
            snapshot.snyk_issues,
            snapshot.snyk_projects,
            now=now,
        )
        self._result_store.save(results)

        self._logger.info(
            "evaluation_finished",
            type="evaluation_finished",
            evaluated=len(results),
            vulnerabilities=sum(len(r.vulnerabilities) for r in results),
            evaluated_on=now.isoformat(),
        )
        return results
