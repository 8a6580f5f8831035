from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional, Sequence
from urllib.parse import urlsplit

from ...shared.clock import as_utc, utcnow
from ..domain.models import AugmentedRepository, RepoOwnership, Severity, Vulnerability
from ..domain.policy import SEVERITY_ORDER, SLA_DAYS, URGENT_SEVERITIES
from ..domain.scanners import DependabotAlert, SnykIssue, SnykProject


logger = logging.getLogger(__name__)

_SEVERITY_RANK = {severity: rank for rank, severity in enumerate(SEVERITY_ORDER)}


def string_to_severity(value: Optional[str]) -> Severity:
    normalised = (value or "").lower()
    if normalised in _SEVERITY_RANK:
        return normalised  # type: ignore[return-value]
    return "unknown"


def url_sort_key(maybe_url: str) -> int:
    """Rank advisory URLs: scanner advisories, then GitHub advisories, then the rest."""
    try:
        url = urlsplit(maybe_url)
        hostname = url.hostname
    except ValueError:
        logger.debug("Invalid url: %s", maybe_url)
        return 0

    if hostname in ("snyk.io", "security.snyk.io"):
        return -2
    if hostname == "github.com" and "advisories" in url.path:
        return -1
    return 0


def vuln_sort_key(vuln: Vulnerability) -> tuple[int, int]:
    """Most severe first, then patchable before unpatchable."""
    return (_SEVERITY_RANK.get(vuln.severity, len(SEVERITY_ORDER)), 0 if vuln.is_patchable else 1)


# --- SLA ------------------------------------------------------------------------

def is_within_sla(issue_date: datetime, severity: str, now: Optional[datetime] = None) -> bool:
    days_to_remediate = SLA_DAYS.get(severity)
    if days_to_remediate is None:
        return True
    now = now or utcnow()
    return as_utc(now) - as_utc(issue_date) <= timedelta(days=days_to_remediate)


def vulnerability_exceeds_sla(issue_date: datetime, severity: str, now: Optional[datetime] = None) -> bool:
    return not is_within_sla(issue_date, severity, now)


def has_old_alerts(
    vulns: Iterable[Vulnerability],
    repo: AugmentedRepository,
    now: Optional[datetime] = None,
) -> bool:
    if not repo.is_production:
        return False

    old_alerts = [v for v in vulns if vulnerability_exceeds_sla(v.alert_issue_date, v.severity, now)]
    if old_alerts:
        logger.info("%s: has %d alerts that need addressing", repo.name, len(old_alerts))
    return len(old_alerts) > 0


# --- Normalisation ----------------------------------------------------------------

def dependabot_alert_to_vulnerability(
    full_name: str,
    alert: DependabotAlert,
    *,
    now: Optional[datetime] = None,
) -> Vulnerability:
    advisory = alert.security_advisory
    cves = tuple(i.value for i in advisory.identifiers if i.type == "CVE")
    severity = string_to_severity(advisory.severity)
    urls = tuple(sorted((ref.url for ref in advisory.references), key=url_sort_key))

    return Vulnerability(
        source="Dependabot",
        full_name=full_name,
        open=alert.state == "open",
        severity=severity,
        package=alert.security_vulnerability.package.name,
        urls=urls,
        ecosystem=alert.security_vulnerability.package.ecosystem,
        alert_issue_date=alert.created_at,
        is_patchable=alert.security_vulnerability.first_patched_version is not None,
        cves=cves,
        within_sla=is_within_sla(alert.created_at, severity, now),
    )


def collect_urgent_dependabot_vulnerabilities(
    repos: Iterable[AugmentedRepository],
    alerts_by_repo: Mapping[str, Sequence[DependabotAlert]],
    *,
    now: Optional[datetime] = None,
) -> list[Vulnerability]:
    """Open high/critical alerts on runtime dependencies of production repositories."""
    vulns: list[Vulnerability] = []
    for repo in repos:
        if not repo.is_production:
            continue
        for alert in alerts_by_repo.get(repo.full_name, ()):
            if alert.is_development_dependency:
                continue
            vuln = dependabot_alert_to_vulnerability(repo.full_name, alert, now=now)
            if vuln.open and vuln.severity in URGENT_SEVERITIES:
                vulns.append(vuln)
    return vulns


def snyk_vuln_id_filter(ids: Sequence[str]) -> list[str]:
    """Keep only CVE identifiers when there is at least one; otherwise keep everything."""
    if any(i.startswith("CVE-") for i in ids):
        return [i for i in ids if i.startswith("CVE-")]
    return list(ids)


def snyk_issue_to_vulnerability(
    full_name: str,
    issue: SnykIssue,
    projects: Sequence[SnykProject],
    *,
    now: Optional[datetime] = None,
) -> Vulnerability:
    attributes = issue.attributes
    coordinates = attributes.coordinates or []

    package_names: list[str] = []
    for coordinate in coordinates:
        for representation in coordinate.representations:
            if representation is None:
                continue
            name = representation.dependency.package_name
            if name not in package_names:
                package_names.append(name)

    is_patchable = any(
        bool(c.is_patchable or c.is_upgradeable or c.is_pinnable) for c in coordinates
    )

    project = next((p for p in projects if p.id == issue.project_id), None)
    ecosystem = project.attributes.type if project is not None else None

    severity = string_to_severity(attributes.effective_severity_level)
    ids = snyk_vuln_id_filter([p.id for p in attributes.problems])

    return Vulnerability(
        source="Snyk",
        full_name=full_name,
        open=attributes.status == "open",
        severity=severity,
        package=", ".join(package_names),
        urls=tuple(p.url for p in attributes.problems if p.url),
        ecosystem=ecosystem or "unknown ecosystem",
        alert_issue_date=attributes.created_at,
        is_patchable=is_patchable,
        cves=tuple(sorted(ids, key=url_sort_key)),
        within_sla=is_within_sla(attributes.created_at, severity, now),
    )


def collect_urgent_snyk_vulnerabilities(
    repo: AugmentedRepository,
    issues: Sequence[SnykIssue],
    projects: Sequence[SnykProject],
    *,
    now: Optional[datetime] = None,
) -> list[Vulnerability]:
    """Open high/critical findings from the projects tagged with this production repository."""
    if not repo.is_production:
        return []

    project_ids = [p.id for p in projects if repo.full_name in p.tag_values()]
    issues_for_repo = [i for pid in project_ids for i in issues if i.project_id == pid]

    vulns = [snyk_issue_to_vulnerability(repo.full_name, i, projects, now=now) for i in issues_for_repo]
    return [v for v in vulns if v.severity in URGENT_SEVERITIES and v.open]


# --- Deduplication ----------------------------------------------------------------

def deduplicate_vulnerabilities_by_cve(vulns: Iterable[Vulnerability]) -> list[Vulnerability]:
    """Keep one record per distinct CVE set, preferring the most severe and patchable.

    Records without CVEs cannot be matched to anything and are all kept.
    """
    with_cves: list[Vulnerability] = []
    without_cves: list[Vulnerability] = []
    for v in vulns:
        if v.cves:
            with_cves.append(replace(v, cves=tuple(sorted(v.cves))))
        else:
            without_cves.append(v)

    deduped: dict[str, Vulnerability] = {}
    for v in sorted(with_cves, key=vuln_sort_key):
        deduped.setdefault(",".join(v.cves), v)

    return list(deduped.values()) + without_cves


# --- Ownership --------------------------------------------------------------------

def attach_owners(vulns: Iterable[Vulnerability], ownership: Iterable[RepoOwnership]) -> list[Vulnerability]:
    """Copy each vulnerability once per team owning its repository."""
    owners_by_repo: dict[str, list[str]] = {}
    for row in ownership:
        slugs = owners_by_repo.setdefault(row.full_name, [])
        if row.team_slug not in slugs:
            slugs.append(row.team_slug)

    owned: list[Vulnerability] = []
    for v in vulns:
        for slug in owners_by_repo.get(v.full_name, []):
            owned.append(replace(v, repo_owner=slug))
    return owned
