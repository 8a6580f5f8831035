"""Branch protection as read from, and written back to, GitHub.

`CurrentBranchProtection` mirrors the GitHub "get branch protection"
response. Every setting is optional: GitHub omits sections that were never
configured, and the collector may store a partial blob.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class _Settings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class EnabledFlag(_Settings):
    enabled: Optional[bool] = None


class StatusChecks(_Settings):
    strict: Optional[bool] = None
    contexts: list[str] = []


class PullRequestReviews(_Settings):
    dismiss_stale_reviews: Optional[bool] = None
    require_code_owner_reviews: Optional[bool] = None
    required_approving_review_count: Optional[int] = None


class RestrictedUser(_Settings):
    login: str


class RestrictedTeam(_Settings):
    slug: str


class RestrictedApp(_Settings):
    slug: str


class Restrictions(_Settings):
    users: list[RestrictedUser] = []
    teams: list[RestrictedTeam] = []
    apps: list[RestrictedApp] = []


class CurrentBranchProtection(_Settings):
    required_status_checks: Optional[StatusChecks] = None
    required_pull_request_reviews: Optional[PullRequestReviews] = None
    enforce_admins: Optional[EnabledFlag] = None
    restrictions: Optional[Restrictions] = None
    allow_force_pushes: Optional[EnabledFlag] = None
    allow_deletions: Optional[EnabledFlag] = None


class BranchProtectionSettings(_Settings):
    """Payload for updating the protection of a branch."""

    required_status_checks: StatusChecks
    required_pull_request_reviews: PullRequestReviews
    restrictions: dict[str, list[str]]
    enforce_admins: bool
    allow_force_pushes: bool
    allow_deletions: bool
