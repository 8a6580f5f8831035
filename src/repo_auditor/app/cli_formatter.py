"""CLI output formatting utilities for human-readable display."""

from __future__ import annotations

from ..core.domain.models import (
    DependencyGraphEvent,
    EvaluationResult,
    RemediationEvent,
    VulnerabilityDigest,
)


RULE_COLUMNS = (
    ("default_branch_name", "Branch"),
    ("branch_protection", "Protect"),
    ("admin_access", "Admin"),
    ("archiving", "Maint"),
    ("topics", "Topic"),
    ("vulnerability_tracking", "Tracking"),
)


def format_evaluation(results: list[EvaluationResult]) -> str:
    """Format evaluation results as a table, one row per repository.

    Args:
        results: Evaluation results

    Returns:
        Formatted string for display
    """
    if not results:
        return "No repositories evaluated."

    name_w = max(len("Repository"), max(len(r.full_name) for r in results))
    header = ["Repository".ljust(name_w)] + [label for _, label in RULE_COLUMNS] + ["Vulns"]
    lines = ["  ".join(header)]

    for r in results:
        row = [r.full_name.ljust(name_w)]
        for attr, label in RULE_COLUMNS:
            row.append(("ok" if getattr(r.rules, attr) else "FAIL").ljust(len(label)))
        row.append(str(len(r.vulnerabilities)))
        lines.append("  ".join(row))

    failing = sum(1 for r in results if not all(getattr(r.rules, attr) for attr, _ in RULE_COLUMNS))
    vulns = sum(len(r.vulnerabilities) for r in results)
    lines.append("")
    lines.append(f"{len(results)} repositories evaluated, {failing} with failing rules, {vulns} vulnerabilities.")
    return "\n".join(lines)


def format_digests(digests: list[VulnerabilityDigest], sent: bool) -> str:
    if not digests:
        return "No digests to compose."

    lines = []
    for digest in digests:
        lines.append("=" * 80)
        lines.append(f"{digest.subject} ({digest.team_slug})")
        lines.append("=" * 80)
        lines.append(digest.message)
        for action in digest.actions:
            lines.append(f"\n-> {action.cta}: {action.url}")
        lines.append("")

    if sent:
        lines.append(f"Sent {len(digests)} digests.")
    else:
        lines.append(f"Composed {len(digests)} digests; not sending (only sent from PROD on the first and third Tuesday).")
    return "\n".join(lines)


def format_remediations(events: list[RemediationEvent]) -> str:
    if not events:
        return "No branches to protect."

    lines = []
    for event in events:
        p = event.new_protection
        reviews = p.required_pull_request_reviews
        lines.append(f"{event.full_name} ({event.branch})")
        lines.append(f"  Required reviewers: {reviews.required_approving_review_count}")
        lines.append(f"  Status checks: {', '.join(p.required_status_checks.contexts) or '-'}")
        lines.append(f"  Notified: {', '.join(event.team_slugs)}")
    return "\n".join(lines)


def format_dependency_graph_events(events: list[DependencyGraphEvent]) -> str:
    if not events:
        return "No suitable repos found to create events for."

    name_w = max(len(e.name) for e in events)
    return "\n".join(
        f"{e.name.ljust(name_w)}  {e.language:<7}  {', '.join(e.admins) or '-'}" for e in events
    )
