from __future__ import annotations

import json
from pathlib import Path

from ..core.domain.models import DependencyGraphEvent, RemediationEvent, VulnerabilityDigest
from ..shared.to_jsonable import to_jsonable


DIGESTS_FILE = "digests.jsonl"
NOTIFICATIONS_FILE = "notifications.jsonl"
BRANCH_PROTECTION_FILE = "branch_protection.jsonl"
DEPENDENCY_GRAPH_FILE = "dependency_graph.jsonl"


class OutboxWriter:
    """Appends outbound messages as JSON lines for the delivery transport to pick up.

    One file per kind of message. Nothing here talks to GitHub or a
    notification service.
    """

    def __init__(self, *, outbox_dir: Path) -> None:
        self._outbox_dir = outbox_dir

    def _append(self, name: str, payload: dict) -> None:
        self._outbox_dir.mkdir(parents=True, exist_ok=True)
        with (self._outbox_dir / name).open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(payload, ensure_ascii=False) + "\n")

    def send_digest(self, digest: VulnerabilityDigest) -> None:
        self._append(DIGESTS_FILE, to_jsonable(digest))

    def notify_branch_protected(self, full_name: str, team_slug: str) -> None:
        self._append(
            NOTIFICATIONS_FILE,
            {
                "team_slug": team_slug,
                "subject": "Branch protection applied",
                "message": f"Branch protection has been applied to the default branch of {full_name}.",
                "full_name": full_name,
            },
        )

    def apply_branch_protection(self, event: RemediationEvent) -> None:
        self._append(BRANCH_PROTECTION_FILE, to_jsonable(event))

    def request_dependency_graph_integration(self, event: DependencyGraphEvent) -> None:
        self._append(DEPENDENCY_GRAPH_FILE, to_jsonable(event))

