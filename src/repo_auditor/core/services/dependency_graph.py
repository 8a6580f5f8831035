from __future__ import annotations

import logging
import random
from typing import Iterable, Optional, Sequence

from ..domain.languages import DEPENDENCY_GRAPH_LANGUAGES
from ..domain.models import AugmentedRepository, DependencyGraphEvent
from .rules import has_dependency_submission_workflow


logger = logging.getLogger(__name__)


def get_repos_without_dep_submission_workflows(
    repos: Iterable[AugmentedRepository],
) -> list[tuple[AugmentedRepository, str]]:
    """Pairs of (repository, language) missing the submission workflow for that language."""
    repos = list(repos)
    pairs: list[tuple[AugmentedRepository, str]] = []
    for language in DEPENDENCY_GRAPH_LANGUAGES:
        with_language = [r for r in repos if language in r.languages]
        logger.info("Found %d %s repos in production", len(with_language), language)
        pairs.extend((r, language) for r in with_language if not has_dependency_submission_workflow(r, language))

    logger.info("Found %d production repos without dependency submission workflows", len(pairs))
    return pairs


def create_dependency_graph_events(
    pairs: Sequence[tuple[AugmentedRepository, str]],
    max_count: int,
    rng: Optional[random.Random] = None,
) -> list[DependencyGraphEvent]:
    rng = rng or random.Random()
    selected = list(pairs)
    rng.shuffle(selected)
    selected = selected[: max(0, max_count)]

    return [
        DependencyGraphEvent(name=repo.full_name.split("/", 1)[-1], language=language, admins=repo.admin_team_slugs)
        for repo, language in selected
    ]
