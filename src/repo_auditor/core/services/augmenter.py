from __future__ import annotations

from typing import Iterable, Sequence

from ..domain.models import (
    AugmentedRepository,
    RepoOwnership,
    Repository,
    RepositoryLanguages,
    WorkflowUsage,
)


def augment_repository(
    repository: Repository,
    owners: Iterable[RepoOwnership],
    languages: Iterable[RepositoryLanguages],
    workflow_usages: Iterable[WorkflowUsage],
) -> AugmentedRepository:
    full_name = repository.full_name

    admin_team_slugs: list[str] = []
    for owner in owners:
        if owner.full_name == full_name and owner.role == "admin" and owner.team_slug not in admin_team_slugs:
            admin_team_slugs.append(owner.team_slug)

    languages_for_repo = next((l.languages for l in languages if l.full_name == full_name), ())

    workflows_for_repo = tuple(
        workflow
        for usage in workflow_usages
        if usage.full_name == full_name
        for workflow in usage.workflow_uses
    )

    return AugmentedRepository(
        id=repository.id,
        name=repository.name,
        full_name=full_name,
        archived=repository.archived,
        topics=repository.topics,
        default_branch=repository.default_branch,
        created_at=repository.created_at,
        updated_at=repository.updated_at,
        pushed_at=repository.pushed_at,
        admin_team_slugs=tuple(admin_team_slugs),
        languages=tuple(languages_for_repo),
        workflow_usages=workflows_for_repo,
    )


def augment_repositories(
    repositories: Iterable[Repository],
    owners: Sequence[RepoOwnership],
    languages: Sequence[RepositoryLanguages],
    workflow_usages: Sequence[WorkflowUsage],
) -> list[AugmentedRepository]:
    """Join repositories with their admin teams, detected languages and CI workflow references."""
    return [augment_repository(r, owners, languages, workflow_usages) for r in repositories]


def unarchived_repositories(repositories: Iterable[Repository], ignored_prefixes: Sequence[str] = ()) -> list[Repository]:
    """Repositories still in use, minus those whose full name starts with an ignored prefix."""
    return [
        r for r in repositories
        if not r.archived and not any(r.full_name.startswith(prefix) for prefix in ignored_prefixes)
    ]
