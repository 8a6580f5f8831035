from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from ..core.domain.exceptions import SnapshotNotFoundError
from ..core.domain.models import (
    BranchRecord,
    RepoOwnership,
    Repository,
    RepositoryLanguages,
    Snapshot,
    Team,
    WorkflowUsage,
)
from ..core.domain.scanners import DependabotAlert, SnykIssue, SnykProject


logger = logging.getLogger(__name__)

# Files that must exist for a snapshot to be usable. The others describe
# optional facts and read as empty when absent.
REQUIRED_FILES = ("repositories",)

_ADAPTERS: dict[str, TypeAdapter] = {
    "repositories": TypeAdapter(tuple[Repository, ...]),
    "branches": TypeAdapter(tuple[BranchRecord, ...]),
    "ownership": TypeAdapter(tuple[RepoOwnership, ...]),
    "teams": TypeAdapter(tuple[Team, ...]),
    "languages": TypeAdapter(tuple[RepositoryLanguages, ...]),
    "workflows": TypeAdapter(tuple[WorkflowUsage, ...]),
    "dependabot_alerts": TypeAdapter(dict[str, tuple[DependabotAlert, ...]]),
    "snyk_issues": TypeAdapter(tuple[SnykIssue, ...]),
    "snyk_projects": TypeAdapter(tuple[SnykProject, ...]),
}


class JsonSnapshotReader:
    """Reads the collectors' output from `<snapshot_dir>/<name>.json` files."""

    def __init__(self, *, snapshot_dir: Path) -> None:
        self._snapshot_dir = snapshot_dir

    def _read(self, name: str) -> Any:
        fp = self._snapshot_dir / f"{name}.json"
        if not fp.exists():
            if name in REQUIRED_FILES:
                raise SnapshotNotFoundError(str(fp))
            logger.debug("Snapshot file %s is missing, treating it as empty", fp)
            return {} if name == "dependabot_alerts" else []
        return _ADAPTERS[name].validate_python(json.loads(fp.read_text(encoding="utf-8")))

    def load(self) -> Snapshot:
        return Snapshot(
            repositories=self._read("repositories"),
            branches=self._read("branches"),
            ownership=self._read("ownership"),
            teams=self._read("teams"),
            languages=self._read("languages"),
            workflow_usages=self._read("workflows"),
            dependabot_alerts=self._read("dependabot_alerts"),
            snyk_issues=self._read("snyk_issues"),
            snyk_projects=self._read("snyk_projects"),
        )
