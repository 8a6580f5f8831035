from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from .protection import BranchProtectionSettings
from .scanners import DependabotAlert, SnykIssue, SnykProject


Severity = Literal["critical", "high", "medium", "low", "unknown"]
VulnerabilitySource = Literal["Dependabot", "Snyk"]


@dataclass(frozen=True)
class Repository:
    """Repository metadata as collected from GitHub.

    Timestamps may be missing when the collector could not read them.
    """
    id: int
    name: str
    full_name: str
    archived: bool = False
    topics: tuple[str, ...] = ()
    default_branch: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None

    @property
    def is_production(self) -> bool:
        return "production" in self.topics


@dataclass(frozen=True)
class AugmentedRepository(Repository):
    """Repository joined with derived facts (admin teams, languages, CI usage)."""
    admin_team_slugs: tuple[str, ...] = ()
    languages: tuple[str, ...] = ()
    workflow_usages: tuple[str, ...] = ()


@dataclass(frozen=True)
class BranchRecord:
    repository_id: int
    name: str
    protected: bool | None = None
    protection: dict | None = None


@dataclass(frozen=True)
class Team:
    id: int
    name: str
    slug: str


@dataclass(frozen=True)
class RepoOwnership:
    """One (team, repository) pair from the ownership view."""
    team_id: int
    team_name: str
    team_slug: str
    full_name: str
    role: str = "admin"


@dataclass(frozen=True)
class RepositoryLanguages:
    full_name: str
    languages: tuple[str, ...] = ()


@dataclass(frozen=True)
class WorkflowUsage:
    full_name: str
    workflow_uses: tuple[str, ...] = ()


@dataclass(frozen=True)
class Vulnerability:
    """A scanner finding normalised into a single shape.

    `urls` is ordered most-authoritative first. `package` may be a
    comma-joined list when one finding covers several packages.
    """
    source: VulnerabilitySource
    full_name: str
    open: bool
    severity: Severity
    package: str
    urls: tuple[str, ...]
    ecosystem: str
    alert_issue_date: datetime
    is_patchable: bool
    cves: tuple[str, ...]
    within_sla: bool = True
    repo_owner: str | None = None


@dataclass(frozen=True)
class RepositoryRules:
    """Verdict record: one boolean per policy for one repository."""
    full_name: str
    default_branch_name: bool
    branch_protection: bool
    admin_access: bool
    archiving: bool
    topics: bool
    vulnerability_tracking: bool
    evaluated_on: datetime
    # No rule is defined for team based access; the column is kept for the schema.
    team_based_access: bool = False
    contents: bool | None = None


@dataclass(frozen=True)
class EvaluationResult:
    full_name: str
    rules: RepositoryRules
    vulnerabilities: tuple[Vulnerability, ...] = ()


@dataclass(frozen=True)
class Action:
    cta: str
    url: str


@dataclass(frozen=True)
class VulnerabilityDigest:
    team_slug: str
    subject: str
    message: str
    actions: tuple[Action, ...] = ()


@dataclass(frozen=True)
class BranchProtectionEvent:
    """A repository selected for branch protection and the teams to contact."""
    full_name: str
    team_slugs: tuple[str, ...]


@dataclass(frozen=True)
class RemediationEvent:
    full_name: str
    branch: str
    new_protection: BranchProtectionSettings
    team_slugs: tuple[str, ...]


@dataclass(frozen=True)
class DependencyGraphEvent:
    name: str
    language: str
    admins: tuple[str, ...]


@dataclass(frozen=True)
class Snapshot:
    """Everything the collectors gathered for one run, already in memory."""
    repositories: tuple[Repository, ...] = ()
    branches: tuple[BranchRecord, ...] = ()
    ownership: tuple[RepoOwnership, ...] = ()
    teams: tuple[Team, ...] = ()
    languages: tuple[RepositoryLanguages, ...] = ()
    workflow_usages: tuple[WorkflowUsage, ...] = ()
    # full_name -> raw Dependabot alerts for that repository
    dependabot_alerts: dict[str, tuple[DependabotAlert, ...]] = field(default_factory=dict)
    snyk_issues: tuple[SnykIssue, ...] = ()
    snyk_projects: tuple[SnykProject, ...] = ()

