from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_NAME = "repo_auditor"


def _default_home() -> Path:
    """Get default home directory using platformdirs."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_data_dir)


class DirectoryConfig(BaseSettings):
    """Directory configuration with computed paths."""

    model_config = SettingsConfigDict(env_prefix="REPO_AUDITOR_DIRECTORIES__")

    home: Path = Field(
        default_factory=_default_home,
        description="Base directory for all repo_auditor data",
    )

    @computed_field
    @property
    def snapshot_dir(self) -> Path:
        """Collector output read by every command."""
        path = self.home / "snapshot"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def results_dir(self) -> Path:
        """Persisted verdicts and vulnerabilities of the latest evaluation."""
        path = self.home / "results"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def outbox_dir(self) -> Path:
        """Outbound digests and remediation events."""
        path = self.home / "outbox"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def logs_dir(self) -> Path:
        """Run logs."""
        path = self.home / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path


class DeploymentConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REPO_AUDITOR_DEPLOYMENT__")

    app: str = Field(default="repo-auditor", description="Application name reported to the transport")
    stage: str = Field(
        default="DEV",
        description="Deployment stage (DEV, CODE, PROD). Digests are only sent from PROD.",
    )


class RemediationConfig(BaseSettings):
    """Remediation throttling."""

    model_config = SettingsConfigDict(env_prefix="REPO_AUDITOR_REMEDIATION__")

    max_branch_protection_events: int = Field(
        default=5,
        ge=0,
        description="Maximum number of repositories to protect per run",
    )
    max_dependency_graph_events: int = Field(
        default=5,
        ge=0,
        description="Maximum number of dependency graph integration requests per run",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for the remediation shuffle; unset means a different selection every run",
    )


class RepositoriesConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REPO_AUDITOR_REPOSITORIES__")

    ignored_prefixes: list[str] = Field(
        default_factory=lambda: ["guardian/esd-", "guardian/pluto-"],
        description="Repositories whose full name starts with one of these are never evaluated",
    )


class DigestConfig(BaseSettings):
    """Vulnerability digest content."""

    model_config = SettingsConfigDict(env_prefix="REPO_AUDITOR_DIGEST__")

    cta: str = Field(
        default="See 'Prioritise the vulnerabilities' of these docs for vulnerability obligations",
        description="Call-to-action text attached to every digest",
    )
    cta_url: str = Field(
        default="https://security-hq.gutools.co.uk/documentation/vulnerability-management",
        description="Call-to-action link attached to every digest",
    )
    limit: int = Field(default=10, ge=1, description="Number of vulnerabilities listed per digest")


class LoggingConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REPO_AUDITOR_LOGGING__")

    logger_name: str = Field(default="repo_auditor.audit", description="Name of the run logger")
    console_output: bool = Field(default=False, description="Also log run events to stderr")
    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")


class RuntimeConfig(BaseSettings):
    """Per-run values set by the application, not the environment."""

    model_config = SettingsConfigDict(env_prefix="REPO_AUDITOR_RUNTIME__")

    run_id: str | None = Field(default=None, description="Run identifier; names the run log file")
    command: str | None = Field(default=None, description="CLI command of the run, added to every log record")


class AppConfig(BaseSettings):
    """Root application configuration.

    All configuration is loaded from environment variables with REPO_AUDITOR_ prefix.
    Use double underscore for nested config: REPO_AUDITOR_DEPLOYMENT__STAGE

    Example env vars:
        export REPO_AUDITOR_DIRECTORIES__HOME=/srv/repo-auditor
        export REPO_AUDITOR_DEPLOYMENT__STAGE=PROD
        export REPO_AUDITOR_REMEDIATION__MAX_BRANCH_PROTECTION_EVENTS=5
        export REPO_AUDITOR_REMEDIATION__RANDOM_SEED=42
        export REPO_AUDITOR_REPOSITORIES__IGNORED_PREFIXES='["guardian/esd-"]'
        export REPO_AUDITOR_LOGGING__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="REPO_AUDITOR_",
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    deployment: DeploymentConfig = Field(default_factory=DeploymentConfig)
    remediation: RemediationConfig = Field(default_factory=RemediationConfig)
    repositories: RepositoriesConfig = Field(default_factory=RepositoriesConfig)
    digest: DigestConfig = Field(default_factory=DigestConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
