"""Tool request models.

Each MCP tool validates its arguments with one of these models, and the
model's JSON schema is published as the tool's ``inputSchema``.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from npmplus.models.package import DownloadPeriod

PACKAGE_NAME_RE = re.compile(r"^(?:@[a-z0-9~][a-z0-9-*._~]*/)?[a-z0-9~][a-z0-9-._~]*$")

VERSION_RE = re.compile(
    r"^(?:\^|~|>=?|<=?|=)?"
    r"(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)"
    r"(?:-(?:(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?:[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# dist-tags such as "latest" or "next"
DIST_TAG_RE = re.compile(r"^[a-z][a-z0-9._-]*$")

MAX_PACKAGE_NAME_LENGTH = 214
MAX_PACKAGES_PER_REQUEST = 50


def validate_package_name(name: str) -> str:
    if not name:
        raise ValueError("Package name cannot be empty")
    if len(name) > MAX_PACKAGE_NAME_LENGTH:
        raise ValueError("Package name too long")
    if not PACKAGE_NAME_RE.match(name):
        raise ValueError(f"Invalid package name format: {name!r}")
    return name


def validate_version(version: str) -> str:
    if not (VERSION_RE.match(version) or DIST_TAG_RE.match(version)):
        raise ValueError(f"Invalid version format: {version!r}")
    return version


def split_package_spec(spec: str) -> Tuple[str, Optional[str]]:
    """Split ``name[@version]`` (scoped names allowed) into its parts.

    >>> split_package_spec("@types/node@20.1.0")
    ('@types/node', '20.1.0')
    >>> split_package_spec("lodash")
    ('lodash', None)
    """
    parts = spec.split("@")
    if len(parts) == 1:
        return spec, None
    if len(parts) == 2 and parts[0]:
        return parts[0], parts[1]
    if len(parts) == 2 and not parts[0]:
        return spec, None
    if len(parts) == 3 and not parts[0]:
        return f"@{parts[1]}", parts[2]
    raise ValueError(f"Invalid package specification format: {spec!r}")


def validate_package_spec(spec: str) -> str:
    name, version = split_package_spec(spec)
    validate_package_name(name)
    if version is not None:
        validate_version(version)
    return spec


class ToolRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class PackageRequest(ToolRequest):
    package_name: str = Field(alias="packageName", description="Package name")
    version: Optional[str] = Field(default=None, description="Specific version (default: latest)")

    @field_validator("package_name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        return validate_package_name(v)

    @field_validator("version")
    @classmethod
    def _check_version(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else validate_version(v)


class SearchPackagesRequest(ToolRequest):
    query: str = Field(min_length=1, max_length=100, description="Search query string")
    limit: int = Field(default=25, ge=1, le=100, description="Maximum number of results")
    offset: int = Field(default=0, ge=0, alias="from", description="Offset for pagination")

    @field_validator("query", mode="before")
    @classmethod
    def _strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class DownloadStatsRequest(ToolRequest):
    package_name: str = Field(alias="packageName", description="Package name")
    period: DownloadPeriod = Field(default="last-month", description="Time period for statistics")

    @field_validator("package_name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        return validate_package_name(v)


class ProjectRequest(ToolRequest):
    cwd: str = Field(default=".", min_length=1, description="Project working directory")


class PackagesRequest(ProjectRequest):
    packages: List[str] = Field(
        min_length=1,
        max_length=MAX_PACKAGES_PER_REQUEST,
        description="Packages as name or name@version",
    )

    @field_validator("packages")
    @classmethod
    def _check_specs(cls, v: List[str]) -> List[str]:
        return [validate_package_spec(spec) for spec in v]


class InstallPackagesRequest(PackagesRequest):
    dev: bool = Field(default=False, description="Install as dev dependency")
    global_: bool = Field(default=False, alias="global", description="Install globally")


class UpdatePackagesRequest(ProjectRequest):
    packages: Optional[List[str]] = Field(
        default=None,
        max_length=MAX_PACKAGES_PER_REQUEST,
        description="Packages to update (default: all)",
    )

    @field_validator("packages")
    @classmethod
    def _check_specs(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return None if v is None else [validate_package_spec(spec) for spec in v]


class RemovePackagesRequest(PackagesRequest):
    global_: bool = Field(default=False, alias="global", description="Remove global packages")


class CheckOutdatedRequest(ProjectRequest):
    global_: bool = Field(default=False, alias="global", description="Check global packages")


class AuditDependenciesRequest(ProjectRequest):
    fix: bool = Field(default=False, description="Attempt to fix vulnerabilities")
    force: bool = Field(default=False, description="Force fixes including breaking changes")
    production: bool = Field(default=False, description="Only audit production dependencies")


class CleanCacheRequest(ProjectRequest):
    global_: bool = Field(default=False, alias="global", description="Clean global cache")


class ListLicensesRequest(ProjectRequest):
    production: bool = Field(default=False, description="Only check production dependencies")
    summary: bool = Field(default=True, description="Group packages by license type")


class DependencyTreeRequest(ProjectRequest):
    depth: int = Field(default=3, ge=0, le=20, description="Maximum depth of tree")
    production: bool = Field(default=False, description="Only show production dependencies")


class AnalyzeDependenciesRequest(ToolRequest):
    cwd: str = Field(default=".", min_length=1, description="Directory to scan")
    circular: bool = Field(default=True, description="Check for circular dependencies")
    orphans: bool = Field(default=True, description="Check for orphaned modules")
    entry_points: List[str] = Field(
        default_factory=list,
        alias="entryPoints",
        description="Extra entry modules (root-relative paths) never reported as orphans",
    )

