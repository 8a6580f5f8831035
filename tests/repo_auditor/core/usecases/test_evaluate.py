"""Tests for EvaluateUseCase."""
from repo_auditor.core.domain.models import Snapshot
from repo_auditor.core.usecases.evaluate import EvaluateUseCase

from tests.repo_auditor.core.usecases.conftest import FakeLogger, FakeResultStore, FakeSnapshot
from tests.repo_auditor.factories import (
    NOW,
    make_branch,
    make_dependabot_alert,
    make_owner,
    make_plain_repo,
)


def _snapshot() -> Snapshot:
    return Snapshot(
        repositories=(
            make_plain_repo(id=1, full_name="guardian/service", name="service"),
            make_plain_repo(id=2, full_name="guardian/archived", name="archived", archived=True),
            make_plain_repo(id=3, full_name="guardian/esd-legacy", name="esd-legacy"),
            make_plain_repo(id=4, full_name="guardian/proto", name="proto", topics=("prototype",)),
        ),
        branches=(make_branch(repository_id=1, protected=False),),
        ownership=(make_owner("guardian/service"),),
        dependabot_alerts={
            "guardian/service": (make_dependabot_alert(),),
            "guardian/proto": (make_dependabot_alert(),),
        },
    )


def test_evaluate_persists_results_for_unarchived_repositories():
    store = FakeResultStore()
    logger = FakeLogger()
    uc = EvaluateUseCase(
        snapshot=FakeSnapshot(_snapshot()),
        result_store=store,
        logger=logger,
        ignored_prefixes=["guardian/esd-"],
    )

    results = uc.execute(now=NOW)

    assert [r.full_name for r in results] == ["guardian/service", "guardian/proto"]
    assert store.saved == [results]

    service = results[0]
    assert service.rules.branch_protection is False
    assert service.rules.admin_access is True
    assert [v.package for v in service.vulnerabilities] == ["lodash"]
    # alerts of non-production repositories are not collected
    assert results[1].vulnerabilities == ()


def test_evaluate_logs_summary():
    logger = FakeLogger()
    uc = EvaluateUseCase(snapshot=FakeSnapshot(_snapshot()), result_store=FakeResultStore(), logger=logger)

    uc.execute(now=NOW)

    assert logger.messages() == ["snapshot_loaded", "evaluation_finished"]
    _, _, finished = logger.events[-1]
    assert finished["evaluated"] == 3
    assert finished["vulnerabilities"] == 1


def test_evaluate_empty_snapshot():
    store = FakeResultStore()
    uc = EvaluateUseCase(snapshot=FakeSnapshot(), result_store=store, logger=FakeLogger())

    assert uc.execute(now=NOW) == []
    assert store.saved == [[]]
