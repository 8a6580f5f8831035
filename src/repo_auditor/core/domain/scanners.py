"""Raw payload shapes of the two dependency scanners.

These models only describe what the collectors hand over. They are turned
into `Vulnerability` records by `core.services.vulnerabilities` and are not
used anywhere past that point.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...shared.clock import as_utc


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


# --- Dependabot ---------------------------------------------------------------

class AdvisoryIdentifier(_Payload):
    type: str
    value: str


class AdvisoryReference(_Payload):
    url: str


class SecurityAdvisory(_Payload):
    severity: str = "unknown"
    identifiers: list[AdvisoryIdentifier] = []
    references: list[AdvisoryReference] = []


class DependabotPackage(_Payload):
    name: str
    ecosystem: str


class PatchedVersion(_Payload):
    identifier: str


class SecurityVulnerability(_Payload):
    package: DependabotPackage
    first_patched_version: Optional[PatchedVersion] = None


class DependabotDependency(_Payload):
    scope: Optional[str] = None


class DependabotAlert(_Payload):
    state: str
    created_at: datetime
    security_advisory: SecurityAdvisory
    security_vulnerability: SecurityVulnerability
    dependency: Optional[DependabotDependency] = None

    @property
    def is_development_dependency(self) -> bool:
        return self.dependency is not None and self.dependency.scope == "development"

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)


# --- Snyk ---------------------------------------------------------------------

class SnykDependency(_Payload):
    package_name: str
    package_version: Optional[str] = None


class SnykRepresentation(_Payload):
    dependency: SnykDependency


class SnykCoordinate(_Payload):
    is_upgradeable: Optional[bool] = None
    is_patchable: Optional[bool] = None
    is_pinnable: Optional[bool] = None
    representations: list[Optional[SnykRepresentation]] = []


class SnykProblem(_Payload):
    id: str
    url: Optional[str] = None
    type: Optional[str] = None
    source: Optional[str] = None


class SnykIssueAttributes(_Payload):
    status: str
    ignored: bool = False
    problems: list[SnykProblem] = []
    created_at: datetime
    coordinates: Optional[list[SnykCoordinate]] = None
    effective_severity_level: str = "unknown"

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class SnykRelationshipData(_Payload):
    id: str
    type: Optional[str] = None


class SnykRelationship(_Payload):
    data: SnykRelationshipData


class SnykIssueRelationships(_Payload):
    scan_item: SnykRelationship


class SnykIssue(_Payload):
    id: str
    attributes: SnykIssueAttributes
    relationships: SnykIssueRelationships

    @property
    def project_id(self) -> str:
        return self.relationships.scan_item.data.id


class SnykTag(_Payload):
    key: str
    value: str


class SnykProjectAttributes(_Payload):
    name: str = ""
    type: Optional[str] = None
    tags: list[SnykTag] = []


class SnykProject(_Payload):
    id: str
    attributes: SnykProjectAttributes

    def tag_values(self) -> list[str]:
        return [tag.value for tag in self.attributes.tags]
