import json
from datetime import datetime, timezone

import pytest

from repo_auditor.core.domain.exceptions import SnapshotNotFoundError
from repo_auditor.infra.snapshot import JsonSnapshotReader

from tests.repo_auditor.factories import dependabot_alert_payload, snyk_issue_payload, snyk_project_payload


def _write(snapshot_dir, name, data):
    (snapshot_dir / f"{name}.json").write_text(json.dumps(data), encoding="utf-8")


def test_snapshot_requires_repositories(tmp_path):
    reader = JsonSnapshotReader(snapshot_dir=tmp_path)

    with pytest.raises(SnapshotNotFoundError) as exc:
        reader.load()

    assert "repositories.json" in str(exc.value)


def test_snapshot_optional_files_read_as_empty(tmp_path):
    _write(tmp_path, "repositories", [])

    snapshot = JsonSnapshotReader(snapshot_dir=tmp_path).load()

    assert snapshot.repositories == ()
    assert snapshot.branches == ()
    assert snapshot.teams == ()
    assert snapshot.dependabot_alerts == {}
    assert snapshot.snyk_issues == ()


def test_snapshot_parses_all_files(tmp_path):
    _write(tmp_path, "repositories", [
        {
            "id": 1,
            "name": "service",
            "full_name": "guardian/service",
            "topics": ["production"],
            "default_branch": "main",
            "created_at": "2023-01-01T00:00:00Z",
            "pushed_at": None,
        }
    ])
    _write(tmp_path, "branches", [
        {"repository_id": 1, "name": "main", "protected": True, "protection": {"enforce_admins": {"enabled": True}}}
    ])
    _write(tmp_path, "teams", [{"id": 10, "name": "Team A", "slug": "team-a"}])
    _write(tmp_path, "ownership", [
        {"team_id": 10, "team_name": "Team A", "team_slug": "team-a", "full_name": "guardian/service"}
    ])
    _write(tmp_path, "languages", [{"full_name": "guardian/service", "languages": ["Scala"]}])
    _write(tmp_path, "workflows", [
        {"full_name": "guardian/service", "workflow_uses": ["scalacenter/sbt-dependency-submission"]}
    ])
    _write(tmp_path, "dependabot_alerts", {"guardian/service": [dependabot_alert_payload()]})
    _write(tmp_path, "snyk_issues", [snyk_issue_payload()])
    _write(tmp_path, "snyk_projects", [snyk_project_payload()])

    snapshot = JsonSnapshotReader(snapshot_dir=tmp_path).load()

    repo = snapshot.repositories[0]
    assert repo.topics == ("production",)
    assert repo.created_at == datetime(2023, 1, 1, tzinfo=timezone.utc)
    assert repo.pushed_at is None
    assert snapshot.branches[0].protection == {"enforce_admins": {"enabled": True}}
    assert snapshot.ownership[0].role == "admin"
    assert snapshot.languages[0].languages == ("Scala",)
    assert snapshot.workflow_usages[0].workflow_uses == ("scalacenter/sbt-dependency-submission",)
    assert len(snapshot.dependabot_alerts["guardian/service"]) == 1
    assert snapshot.snyk_issues[0].id == "issue-1"
    assert snapshot.snyk_projects[0].id == "project-1"
