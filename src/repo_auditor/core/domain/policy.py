from __future__ import annotations

from .models import Severity


# Topics describing the lifecycle status of a repository. Exactly one is expected.
STATUS_TOPICS: frozenset[str] = frozenset({
    "prototype",
    "learning",
    "hackday",
    "testing",
    "documentation",
    "production",
    "interactive",
})

# Repositories with any of these topics need not be owned by an admin team.
ADMIN_EXEMPT_TOPICS: frozenset[str] = frozenset({"prototype", "learning", "hackday", "interactive"})

# Only repositories with one of these topics need a protected default branch.
PROTECTED_BRANCH_TOPICS: frozenset[str] = frozenset({"production", "documentation"})

MAINTENANCE_WINDOW_YEARS = 2

SEVERITY_ORDER: tuple[Severity, ...] = ("critical", "high", "medium", "low", "unknown")

# Days an open vulnerability may stay unfixed. Severities not listed have no deadline.
SLA_DAYS: dict[str, int] = {
    "critical": 2,
    "high": 30,
}

URGENT_SEVERITIES: frozenset[str] = frozenset({"critical", "high"})

DIGEST_VULNERABILITY_LIMIT = 10
