from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from ..domain.models import Action, Team, Vulnerability, VulnerabilityDigest
from ..domain.policy import DIGEST_VULNERABILITY_LIMIT
from .vulnerabilities import deduplicate_vulnerabilities_by_cve, vuln_sort_key


logger = logging.getLogger(__name__)

PRODUCTION_STAGE = "PROD"


def get_top_vulns(vulns: Iterable[Vulnerability], limit: int = DIGEST_VULNERABILITY_LIMIT) -> list[Vulnerability]:
    """The most urgent vulnerabilities, listed by repository name."""
    top = sorted(vulns, key=vuln_sort_key)[:limit]
    return sorted(top, key=lambda v: v.full_name.casefold())


def _display_ecosystem(ecosystem: str) -> str:
    # sbt projects report their dependencies as maven
    return "sbt or maven" if ecosystem == "maven" else ecosystem


def create_human_readable_vuln_message(vuln: Vulnerability) -> str:
    issue_date = vuln.alert_issue_date.strftime("%a %b %d %Y")
    url = vuln.urls[0] if vuln.urls else f"https://github.com/{vuln.full_name}/security"
    patchable = "is " if vuln.is_patchable else "may *not* be "

    return (
        f"[{vuln.full_name}](https://github.com/{vuln.full_name}) contains a "
        f"[{vuln.severity.upper()} vulnerability]({url}).\n"
        f"Introduced via **{vuln.package}** on {issue_date}, from {_display_ecosystem(vuln.ecosystem)}.\n"
        f"This vulnerability {patchable}patchable."
    )


def create_digest(
    team: Team,
    all_vulnerabilities: Iterable[Vulnerability],
    *,
    limit: int = DIGEST_VULNERABILITY_LIMIT,
    actions: Sequence[Action] = (),
) -> Optional[VulnerabilityDigest]:
    """Summarise the most urgent vulnerabilities owned by a team, or None if it owns none."""
    vulns = deduplicate_vulnerabilities_by_cve(v for v in all_vulnerabilities if v.repo_owner == team.slug)
    if not vulns:
        return None

    total_vulns_count = len(vulns)
    vulnerable_repos_count = len({v.full_name for v in vulns})

    top_vulns = get_top_vulns(vulns, limit)
    preamble = (
        f"Found {total_vulns_count} vulnerabilities across {vulnerable_repos_count} repositories.\n"
        f"Displaying the top {len(top_vulns)} most urgent.\n"
        "Note: vulnerability information is only aggregated for repositories with a production topic."
    )
    body = "\n\n".join(create_human_readable_vuln_message(v) for v in top_vulns)

    return VulnerabilityDigest(
        team_slug=team.slug,
        subject=f"Vulnerability Digest for {team.name}",
        message=f"{preamble}\n\n{body}",
        actions=tuple(actions),
    )


def create_digests(
    teams: Iterable[Team],
    all_vulnerabilities: Sequence[Vulnerability],
    *,
    limit: int = DIGEST_VULNERABILITY_LIMIT,
    actions: Sequence[Action] = (),
) -> list[VulnerabilityDigest]:
    digests = [create_digest(t, all_vulnerabilities, limit=limit, actions=actions) for t in teams]
    return [d for d in digests if d is not None]


def is_first_or_third_tuesday_of_month(day: date) -> bool:
    is_tuesday = day.weekday() == 1
    in_first_week = day.day <= 7
    in_third_week = 15 <= day.day <= 21
    return is_tuesday and (in_first_week or in_third_week)


def should_send_digests(stage: str, today: date) -> bool:
    """Digests are only transmitted from production, on the first and third Tuesday of the month."""
    return stage == PRODUCTION_STAGE and is_first_or_third_tuesday_of_month(today)
