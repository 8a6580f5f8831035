from __future__ import annotations

import random
from typing import Optional

from ..domain.exceptions import BranchNotFoundError, InvalidProtectionError
from ..domain.models import BranchProtectionEvent, RemediationEvent, Snapshot
from ..domain.policy import PROTECTED_BRANCH_TOPICS
from ..ports import LoggerPort, NotifierPort, RemediationSinkPort, ResultStorePort, SnapshotPort
from ..services.augmenter import unarchived_repositories
from ..services.branch_protection import (
    construct_new_protection,
    create_branch_protection_events,
    parse_protection,
    sufficient_protection,
)


class ProtectBranchesUseCase:
    """Select unprotected repositories and hand protection updates to the sink.

    A failure on one repository is logged and does not stop the others.
    Sink or notifier failures are logged with their traceback.
    """

    def __init__(
        self,
        *,
        snapshot: SnapshotPort,
        result_store: ResultStorePort,
        sink: RemediationSinkPort,
        notifier: NotifierPort,
        logger: LoggerPort,
        max_count: int,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._snapshot = snapshot
        self._result_store = result_store
        self._sink = sink
        self._notifier = notifier
        self._logger = logger
        self._max_count = max_count
        self._rng = rng or random.Random()

    def execute(self) -> list[RemediationEvent]:
        rules = self._result_store.load_rules()
        snapshot = self._snapshot.load()

        production_or_docs = {
            r.full_name
            for r in unarchived_repositories(snapshot.repositories)
            if any(topic in PROTECTED_BRANCH_TOPICS for topic in r.topics)
        }
        relevant = [r for r in rules if r.full_name in production_or_docs]

        events = create_branch_protection_events(
            relevant, snapshot.ownership, snapshot.teams, self._max_count, rng=self._rng
        )
        self._logger.info(
            "remediation_selected",
            type="remediation_selected",
            candidates=len(relevant),
            selected=[e.full_name for e in events],
        )

        applied: list[RemediationEvent] = []
        for event in events:
            try:
                remediation = self._protect(snapshot, event)
            except (BranchNotFoundError, InvalidProtectionError) as e:
                self._logger.error(
                    "remediation_failed",
                    type="remediation_failed",
                    full_name=event.full_name,
                    error=str(e),
                )
                continue
            except Exception as e:
                # sink or notifier
                self._logger.exception(
                    "remediation_failed",
                    type="remediation_failed",
                    full_name=event.full_name,
                    error=f"{type(e).__name__}: {e}",
                )
                continue
            if remediation is not None:
                applied.append(remediation)
        return applied

    def _protect(self, snapshot: Snapshot, event: BranchProtectionEvent) -> Optional[RemediationEvent]:
        repo = next((r for r in snapshot.repositories if r.full_name == event.full_name), None)
        if repo is None or not repo.default_branch:
            raise BranchNotFoundError(event.full_name)

        branch = next(
            (b for b in snapshot.branches if b.repository_id == repo.id and b.name == repo.default_branch),
            None,
        )
        if branch is None:
            raise BranchNotFoundError(event.full_name, repo.default_branch)

        current = parse_protection(branch.protection, full_name=event.full_name)
        if sufficient_protection(current):
            self._logger.info(
                "remediation_skipped",
                type="remediation_skipped",
                full_name=event.full_name,
                branch=branch.name,
                reason="already protected",
            )
            return None

        remediation = RemediationEvent(
            full_name=event.full_name,
            branch=branch.name,
            new_protection=construct_new_protection(current),
            team_slugs=event.team_slugs,
        )
        self._sink.apply_branch_protection(remediation)
        for slug in event.team_slugs:
            self._notifier.notify_branch_protected(event.full_name, slug)

        self._logger.info(
            "remediation_applied",
            type="remediation_applied",
            full_name=event.full_name,
            branch=branch.name,
            team_slugs=list(event.team_slugs),
        )
        return remediation
