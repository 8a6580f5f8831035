from __future__ import annotations

import random
from typing import Optional, Sequence

from ..domain.models import DependencyGraphEvent
from ..ports import LoggerPort, RemediationSinkPort, SnapshotPort
from ..services.augmenter import augment_repositories, unarchived_repositories
from ..services.dependency_graph import (
    create_dependency_graph_events,
    get_repos_without_dep_submission_workflows,
)


class DependencyGraphUseCase:
    def __init__(
        self,
        *,
        snapshot: SnapshotPort,
        sink: RemediationSinkPort,
        logger: LoggerPort,
        max_count: int,
        ignored_prefixes: Sequence[str] = (),
        rng: Optional[random.Random] = None,
    ) -> None:
        self._snapshot = snapshot
        self._sink = sink
        self._logger = logger
        self._max_count = max_count
        self._ignored_prefixes = tuple(ignored_prefixes)
        self._rng = rng or random.Random()

    def execute(self) -> list[DependencyGraphEvent]:
        snapshot = self._snapshot.load()
        repositories = [
            r for r in unarchived_repositories(snapshot.repositories, self._ignored_prefixes) if r.is_production
        ]
        augmented = augment_repositories(
            repositories,
            snapshot.ownership,
            snapshot.languages,
            snapshot.workflow_usages,
        )

        pairs = get_repos_without_dep_submission_workflows(augmented)
        events = create_dependency_graph_events(pairs, self._max_count, self._rng)
        if not events:
            self._logger.info("dependency_graph_skipped", type="dependency_graph_skipped", reason="no suitable repos")
            return []

        for event in events:
            self._sink.request_dependency_graph_integration(event)
        self._logger.info(
            "dependency_graph_requested",
            type="dependency_graph_requested",
            candidates=len(pairs),
            repos=[e.name for e in events],
        )
        return events
