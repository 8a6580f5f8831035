from __future__ import annotations

from .augmenter import augment_repositories
from .branch_protection import (
    construct_new_protection,
    create_branch_protection_events,
    parse_protection,
    sufficient_protection,
)
from .dependency_graph import create_dependency_graph_events, get_repos_without_dep_submission_workflows
from .digest import create_digests, should_send_digests
from .rules import evaluate_repositories
from .vulnerabilities import attach_owners, dependabot_alert_to_vulnerability

__all__ = [
    "augment_repositories",
    "construct_new_protection",
    "create_branch_protection_events",
    "parse_protection",
    "sufficient_protection",
    "create_dependency_graph_events",
    "get_repos_without_dep_submission_workflows",
    "create_digests",
    "should_send_digests",
    "evaluate_repositories",
    "attach_owners",
    "dependabot_alert_to_vulnerability",
]
