"""Policy rules evaluated for every repository.

Each rule is independent and total: missing or ambiguous data resolves to a
passing verdict rather than an error, so an incomplete collection run never
produces a false "non-compliant" result.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ...shared.clock import as_utc, utcnow
from ..domain.languages import (
    DEPENDABOT_SUPPORTED_LANGUAGES,
    DEPENDENCY_SUBMISSION_WORKFLOWS,
    SNYK_SUPPORTED_LANGUAGES,
)
from ..domain.models import (
    AugmentedRepository,
    BranchRecord,
    EvaluationResult,
    RepositoryRules,
    Vulnerability,
)
from ..domain.policy import (
    ADMIN_EXEMPT_TOPICS,
    MAINTENANCE_WINDOW_YEARS,
    PROTECTED_BRANCH_TOPICS,
    STATUS_TOPICS,
)
from ..domain.scanners import SnykIssue, SnykProject
from .vulnerabilities import (
    collect_urgent_snyk_vulnerabilities,
    deduplicate_vulnerabilities_by_cve,
    has_old_alerts,
)


logger = logging.getLogger(__name__)


def has_default_branch_name_main(repo: AugmentedRepository) -> bool:
    """The default branch name should be "main"."""
    return repo.default_branch == "main"


def has_branch_protection(repo: AugmentedRepository, branches: Iterable[BranchRecord]) -> bool:
    """The default branch of production and documentation repositories should be protected."""
    exempt = not any(topic in PROTECTED_BRANCH_TOPICS for topic in repo.topics)

    branch = next(
        (b for b in branches if b.repository_id == repo.id and b.name == repo.default_branch),
        None,
    )
    if exempt or branch is None:
        return True
    return bool(branch.protected)


def has_admin_team(repo: AugmentedRepository) -> bool:
    """At least one GitHub team should have admin access, unless the repository is exempt by topic."""
    is_exempt = any(topic in ADMIN_EXEMPT_TOPICS for topic in repo.topics)
    return is_exempt or len(repo.admin_team_slugs) > 0


def has_status_topic(repo: AugmentedRepository) -> bool:
    """Exactly one recognised status topic should be present."""
    return len([topic for topic in repo.topics if topic in STATUS_TOPICS]) == 1


def most_recent_change(repo: AugmentedRepository) -> Optional[datetime]:
    dates = [as_utc(d) for d in (repo.created_at, repo.updated_at, repo.pushed_at) if d is not None]
    return max(dates, default=None)


def _years_before(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        # 29 February
        return moment.replace(year=moment.year - years, day=28)


def is_maintained(repo: AugmentedRepository, now: Optional[datetime] = None) -> bool:
    """The repository should have changed within the maintenance window.

    Interactive repositories are exempt. When no dates are known, the
    repository counts as changed just now.
    """
    now = as_utc(now or utcnow())
    cutoff = _years_before(now, MAINTENANCE_WINDOW_YEARS)
    update = most_recent_change(repo) or now
    return "interactive" in repo.topics or update > cutoff


def is_supported_by_snyk(repo: AugmentedRepository, repos_on_snyk: Sequence[str]) -> bool:
    repo_is_on_snyk = repo.full_name in repos_on_snyk
    unsupported = [language for language in repo.languages if language not in SNYK_SUPPORTED_LANGUAGES]
    if repo_is_on_snyk and unsupported:
        logger.debug(
            "%s is on Snyk, but contains the following languages not supported by Snyk: %s",
            repo.name,
            unsupported,
        )
    return repo_is_on_snyk and not unsupported


def has_dependency_submission_workflow(repo: AugmentedRepository, language: str) -> bool:
    workflow = DEPENDENCY_SUBMISSION_WORKFLOWS.get(language)
    return workflow is not None and workflow in repo.workflow_usages


def _supported_by_dependency_graph_with_workflows(
    repo: AugmentedRepository,
    languages_not_natively_supported: Sequence[str],
) -> bool:
    all_covered = all(
        language in DEPENDENCY_SUBMISSION_WORKFLOWS for language in languages_not_natively_supported
    )
    if not all_covered:
        logger.debug(
            "%s contains the following languages not supported by Dependabot or dependency graph submission: %s",
            repo.name,
            [l for l in languages_not_natively_supported if l not in DEPENDENCY_SUBMISSION_WORKFLOWS],
        )

    every_language_has_workflow = True
    for language in languages_not_natively_supported:
        if language not in DEPENDENCY_SUBMISSION_WORKFLOWS:
            continue
        if not has_dependency_submission_workflow(repo, language):
            logger.debug(
                "%s contains %s which is supported by dependency graph submission, "
                "but it doesn't have a dependency submission workflow",
                repo.name,
                language,
            )
            every_language_has_workflow = False

    return all_covered and every_language_has_workflow


def is_supported_by_dependabot(repo: AugmentedRepository) -> bool:
    not_native = [language for language in repo.languages if language not in DEPENDABOT_SUPPORTED_LANGUAGES]
    if not not_native:
        return True
    return _supported_by_dependency_graph_with_workflows(repo, not_native)


def has_dependency_tracking(repo: AugmentedRepository, repos_on_snyk: Sequence[str]) -> bool:
    """Production repositories should have their dependencies tracked by a scanner that understands them."""
    if not repo.is_production or repo.archived:
        return True
    return is_supported_by_snyk(repo, repos_on_snyk) or is_supported_by_dependabot(repo)


def find_repos_on_snyk(projects: Iterable[SnykProject]) -> list[str]:
    """Repositories whose main branch is monitored by the secondary scanner."""
    names: list[str] = []
    for project in projects:
        tags = project.attributes.tags
        if not any(t.key == "branch" and t.value in ("main", "master") for t in tags):
            continue
        repo = next((t.value for t in tags if t.key == "repo"), None)
        if repo is not None and repo not in names:
            names.append(repo)
    return names


def evaluate_repository(
    repo: AugmentedRepository,
    branches: Iterable[BranchRecord],
    *,
    repos_on_snyk: Sequence[str] = (),
    now: Optional[datetime] = None,
) -> RepositoryRules:
    now = now or utcnow()
    return RepositoryRules(
        full_name=repo.full_name,
        default_branch_name=has_default_branch_name_main(repo),
        branch_protection=has_branch_protection(repo, branches),
        admin_access=has_admin_team(repo),
        archiving=is_maintained(repo, now),
        topics=has_status_topic(repo),
        vulnerability_tracking=has_dependency_tracking(repo, repos_on_snyk),
        evaluated_on=now,
    )


def evaluate_repositories(
    repositories: Sequence[AugmentedRepository],
    branches: Sequence[BranchRecord],
    dependabot_vulnerabilities: Sequence[Vulnerability],
    snyk_issues: Sequence[SnykIssue],
    snyk_projects: Sequence[SnykProject],
    *,
    now: Optional[datetime] = None,
) -> list[EvaluationResult]:
    """Evaluate every repository of a snapshot and reconcile its vulnerabilities."""
    now = now or utcnow()
    on_snyk = find_repos_on_snyk(snyk_projects)

    results: list[EvaluationResult] = []
    for repo in repositories:
        branches_for_repo = [b for b in branches if b.repository_id == repo.id]
        vulns = collect_urgent_snyk_vulnerabilities(repo, snyk_issues, snyk_projects, now=now)
        vulns += [v for v in dependabot_vulnerabilities if v.full_name == repo.full_name]
        has_old_alerts(vulns, repo, now)  # logs overdue alerts

        results.append(
            EvaluationResult(
                full_name=repo.full_name,
                rules=evaluate_repository(repo, branches_for_repo, repos_on_snyk=on_snyk, now=now),
                vulnerabilities=tuple(deduplicate_vulnerabilities_by_cve(vulns)),
            )
        )

    unmaintained = sum(1 for r in results if not r.rules.archiving)
    logger.info("Found %d unmaintained repositories of %d.", unmaintained, len(results))
    return results
