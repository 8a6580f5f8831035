"""Selection and construction of branch protection remediations.

Unlike the policy rules, the sufficiency check fails closed: a setting that
is missing or null is treated as not protecting the branch.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, Optional, Sequence

from pydantic import ValidationError

from ..domain.exceptions import InvalidProtectionError
from ..domain.models import BranchProtectionEvent, RepoOwnership, RepositoryRules, Team
from ..domain.protection import (
    BranchProtectionSettings,
    CurrentBranchProtection,
    PullRequestReviews,
    StatusChecks,
)


logger = logging.getLogger(__name__)


def find_contactable_owners(
    full_name: str,
    ownership: Iterable[RepoOwnership],
    teams: Sequence[Team],
) -> list[str]:
    """Slugs of the teams owning a repository, resolved through the team id."""
    slugs_by_id = {team.id: team.slug for team in teams}
    slugs: list[str] = []
    for owner in ownership:
        if owner.full_name != full_name:
            continue
        slug = slugs_by_id.get(owner.team_id)
        if slug:
            slugs.append(slug)
    return slugs


def create_branch_protection_events(
    rules: Iterable[RepositoryRules],
    ownership: Sequence[RepoOwnership],
    teams: Sequence[Team],
    max_count: int,
    *,
    rng: Optional[random.Random] = None,
) -> list[BranchProtectionEvent]:
    """Pick at most `max_count` unprotected repositories that have someone to notify.

    Args:
        rules: Persisted verdicts to choose from.
        ownership: Ownership rows joining repositories to teams.
        teams: Known teams; owners whose team id is unknown are ignored.
        max_count: Upper bound on the number of events returned.
        rng: Source of randomness for the shuffle. Pass a seeded instance for
            a reproducible selection.

    Returns:
        A shuffled selection of events.
    """
    rng = rng or random.Random()

    candidates: list[BranchProtectionEvent] = []
    for verdict in rules:
        if verdict.branch_protection:
            continue
        slugs = find_contactable_owners(verdict.full_name, ownership, teams)
        if not slugs:
            logger.debug("%s has no contactable owners, skipping", verdict.full_name)
            continue
        candidates.append(BranchProtectionEvent(full_name=verdict.full_name, team_slugs=tuple(slugs)))

    rng.shuffle(candidates)
    return candidates[: max(0, min(len(candidates), max_count))]


def parse_protection(blob: Optional[dict], *, full_name: Optional[str] = None) -> CurrentBranchProtection:
    """Read a stored protection blob. A missing blob means nothing is configured.

    Raises:
        InvalidProtectionError: If the blob does not have the shape GitHub returns
    """
    try:
        return CurrentBranchProtection.model_validate(blob or {})
    except ValidationError as e:
        raise InvalidProtectionError(str(e), full_name) from e


def construct_new_protection(current: CurrentBranchProtection) -> BranchProtectionSettings:
    """Tighten the current protection without weakening any existing setting."""
    reviews = current.required_pull_request_reviews
    current_count = reviews.required_approving_review_count if reviews else None
    contexts = current.required_status_checks.contexts if current.required_status_checks else []
    restrictions = current.restrictions

    return BranchProtectionSettings(
        required_status_checks=StatusChecks(strict=True, contexts=list(contexts)),
        required_pull_request_reviews=PullRequestReviews(
            require_code_owner_reviews=True,
            required_approving_review_count=max(1, current_count or 0),
        ),
        restrictions={
            "users": [u.login for u in restrictions.users] if restrictions else [],
            "teams": [t.slug for t in restrictions.teams] if restrictions else [],
            "apps": [a.slug for a in restrictions.apps] if restrictions else [],
        },
        enforce_admins=True,
        allow_force_pushes=False,
        allow_deletions=False,
    )


def sufficient_protection(current: CurrentBranchProtection) -> bool:
    reviews = current.required_pull_request_reviews
    if reviews is None:
        return False

    code_owner_review = reviews.require_code_owner_reviews is True
    count = reviews.required_approving_review_count
    enough_reviewers = count is not None and count >= 1

    def _flag(setting) -> Optional[bool]:
        return setting.enabled if setting is not None else None

    force_push_blocked = _flag(current.allow_force_pushes) is False
    deletion_blocked = _flag(current.allow_deletions) is False
    admins_enforced = _flag(current.enforce_admins) is True

    return code_owner_review and enough_reviewers and force_push_blocked and deletion_blocked and admins_enforced
