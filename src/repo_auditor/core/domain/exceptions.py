"""Domain exceptions for repo_auditor."""

from __future__ import annotations


class SnapshotNotFoundError(Exception):
    """Raised when a collector snapshot file is missing from the snapshot directory."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        if message is None:
            message = f"Snapshot not found: {name}"
        super().__init__(message)


class ResultsNotFoundError(Exception):
    """Raised when persisted evaluation results are required but no evaluation has run yet."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        if message is None:
            message = f"No evaluation results found: {name} (run 'evaluate' first)"
        super().__init__(message)


class BranchNotFoundError(Exception):
    """Raised when the default branch of a repository selected for remediation is unknown."""

    def __init__(self, full_name: str, branch: str | None = None) -> None:
        self.full_name = full_name
        self.branch = branch
        if branch is None:
            message = f"Could not find default branch for repo: {full_name}"
        else:
            message = f"Could not find branch '{branch}' for repo: {full_name}"
        super().__init__(message)


class InvalidProtectionError(Exception):
    """Raised when a stored branch protection blob cannot be read."""

    def __init__(self, detail: str, full_name: str | None = None) -> None:
        self.detail = detail
        self.full_name = full_name
        if full_name is None:
            message = f"Invalid branch protection: {detail}"
        else:
            message = f"Invalid branch protection for repo {full_name}: {detail}"
        super().__init__(message)
