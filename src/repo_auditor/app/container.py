from __future__ import annotations

import random

from dependency_injector import containers, providers

from .config import AppConfig
from ..core.domain.models import Action
from ..core.usecases.dependency_graph import DependencyGraphUseCase
from ..core.usecases.digest import DigestUseCase
from ..core.usecases.evaluate import EvaluateUseCase
from ..core.usecases.logs import LogsUseCase
from ..core.usecases.protect_branches import ProtectBranchesUseCase
from ..infra.log_store import LogStore
from ..infra.logging import AuditLogger
from ..infra.outbox import OutboxWriter
from ..infra.result_store import JsonResultStore
from ..infra.snapshot import JsonSnapshotReader


class Container(containers.DeclarativeContainer):
    """DI container with Pydantic BaseSettings support."""

    config = providers.Configuration(pydantic_settings=[AppConfig()])

    # Adapters
    snapshot = providers.Singleton(
        JsonSnapshotReader,
        snapshot_dir=config.directories.snapshot_dir,
    )

    result_store = providers.Singleton(
        JsonResultStore,
        results_dir=config.directories.results_dir,
    )

    outbox = providers.Singleton(
        OutboxWriter,
        outbox_dir=config.directories.outbox_dir,
    )

    log_store = providers.Singleton(
        LogStore,
        logs_dir=config.directories.logs_dir,
    )

    # Logger (Resource: manages lifecycle with init/shutdown)
    logger = providers.Resource(
        AuditLogger,
        run_id=config.runtime.run_id,
        command=config.runtime.command,
        logs_dir=config.directories.logs_dir,
        logger_name=config.logging.logger_name,
        console_output=config.logging.console_output,
        level=config.logging.level,
    )

    rng = providers.Singleton(random.Random, config.remediation.random_seed)

    digest_actions = providers.List(
        providers.Factory(Action, cta=config.digest.cta, url=config.digest.cta_url),
    )

    # Use cases
    evaluate_uc = providers.Factory(
        EvaluateUseCase,
        snapshot=snapshot,
        result_store=result_store,
        logger=logger,
        ignored_prefixes=config.repositories.ignored_prefixes,
    )

    digest_uc = providers.Factory(
        DigestUseCase,
        snapshot=snapshot,
        result_store=result_store,
        notifier=outbox,
        logger=logger,
        stage=config.deployment.stage,
        actions=digest_actions,
        limit=config.digest.limit,
    )

    protect_branches_uc = providers.Factory(
        ProtectBranchesUseCase,
        snapshot=snapshot,
        result_store=result_store,
        sink=outbox,
        notifier=outbox,
        logger=logger,
        max_count=config.remediation.max_branch_protection_events,
        rng=rng,
    )

    dependency_graph_uc = providers.Factory(
        DependencyGraphUseCase,
        snapshot=snapshot,
        sink=outbox,
        logger=logger,
        max_count=config.remediation.max_dependency_graph_events,
        ignored_prefixes=config.repositories.ignored_prefixes,
        rng=rng,
    )

    logs_uc = providers.Factory(
        LogsUseCase,
        log_store=log_store,
    )
