from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ...shared.clock import utcnow
from ..domain.models import Action, VulnerabilityDigest
from ..domain.policy import DIGEST_VULNERABILITY_LIMIT
from ..ports import LoggerPort, NotifierPort, ResultStorePort, SnapshotPort
from ..services.digest import create_digests, should_send_digests
from ..services.vulnerabilities import attach_owners


class DigestUseCase:
    """Compose a vulnerability digest per team and send them when scheduled.

    Digests are composed and logged on every run; they are only handed to the
    notifier on a production stage and on the first and third Tuesday.
    """

    def __init__(
        self,
        *,
        snapshot: SnapshotPort,
        result_store: ResultStorePort,
        notifier: NotifierPort,
        logger: LoggerPort,
        stage: str,
        actions: Sequence[Action] = (),
        limit: int = DIGEST_VULNERABILITY_LIMIT,
    ) -> None:
        self._snapshot = snapshot
        self._result_store = result_store
        self._notifier = notifier
        self._logger = logger
        self._stage = stage
        self._actions = tuple(actions)
        self._limit = limit

    def execute(self, *, today: Optional[date] = None) -> tuple[list[VulnerabilityDigest], bool]:
        """Execute the digest workflow.

        Args:
            today: Date used for the send schedule; defaults to the current UTC date

        Returns:
            The composed digests, and whether they were sent
        """
        today = today or utcnow().date()
        vulnerabilities = self._result_store.load_vulnerabilities()
        snapshot = self._snapshot.load()

        owned = attach_owners(vulnerabilities, snapshot.ownership)
        digests = create_digests(snapshot.teams, owned, limit=self._limit, actions=self._actions)

        for digest in digests:
            self._logger.info(
                "digest_composed",
                type="digest_composed",
                team_slug=digest.team_slug,
                subject=digest.subject,
                body=digest.message,
            )

        if not should_send_digests(self._stage, today):
            self._logger.info(
                "digests_skipped",
                type="digests_skipped",
                stage=self._stage,
                date=today.isoformat(),
                count=len(digests),
            )
            return digests, False

        for digest in digests:
            self._notifier.send_digest(digest)
        self._logger.info("digests_sent", type="digests_sent", count=len(digests))
        return digests, True
