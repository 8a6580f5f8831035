"""Fixtures writing a small collector snapshot into the data home."""
import json
from pathlib import Path

import pytest

from tests.repo_auditor.factories import dependabot_alert_payload


def write_snapshot(snapshot_dir: Path) -> None:
    snapshot_dir.mkdir(parents=True, exist_ok=True)
    files = {
        "repositories": [
            {
                "id": 1,
                "name": "service",
                "full_name": "guardian/service",
                "topics": ["production"],
                "default_branch": "main",
                "created_at": "2023-06-01T00:00:00Z",
                "pushed_at": "2024-01-20T00:00:00Z",
            },
            {
                "id": 2,
                "name": "docs",
                "full_name": "guardian/docs",
                "topics": ["documentation"],
                "default_branch": "main",
                "pushed_at": "2024-01-20T00:00:00Z",
            },
            {
                "id": 3,
                "name": "esd-tool",
                "full_name": "guardian/esd-tool",
                "topics": ["production"],
                "default_branch": "main",
            },
            {
                "id": 4,
                "name": "old",
                "full_name": "guardian/old",
                "archived": True,
                "topics": ["production"],
                "default_branch": "main",
            },
        ],
        "branches": [
            {"repository_id": 1, "name": "main", "protected": False},
            {"repository_id": 2, "name": "main", "protected": True},
        ],
        "teams": [{"id": 10, "name": "Team A", "slug": "team-a"}],
        "ownership": [
            {"team_id": 10, "team_name": "Team A", "team_slug": "team-a", "full_name": "guardian/service"},
            {"team_id": 10, "team_name": "Team A", "team_slug": "team-a", "full_name": "guardian/docs"},
        ],
        "languages": [{"full_name": "guardian/service", "languages": ["Scala"]}],
        "dependabot_alerts": {"guardian/service": [dependabot_alert_payload()]},
    }
    for name, data in files.items():
        (snapshot_dir / f"{name}.json").write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def home(tmp_path) -> Path:
    """Data home used by the environment-loaded config, with a snapshot in place."""
    home = tmp_path / "home"
    write_snapshot(home / "snapshot")
    return home
