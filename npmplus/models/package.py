"""Package domain models returned by the services."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

PackageManagerType = Literal["npm", "yarn", "pnpm"]
DownloadPeriod = Literal["last-day", "last-week", "last-month", "last-year"]
SecuritySeverity = Literal["critical", "high", "moderate", "low", "info"]
PackageOperation = Literal["install", "update", "remove", "outdated", "audit", "clean_cache", "list"]


class Person(BaseModel):
    name: str
    email: Optional[str] = None
    url: Optional[str] = None


class Repository(BaseModel):
    type: str = "git"
    url: str
    directory: Optional[str] = None


class Bugs(BaseModel):
    url: Optional[str] = None
    email: Optional[str] = None


class SearchScore(BaseModel):
    final: float = 0.0
    quality: float = 0.0
    popularity: float = 0.0
    maintenance: float = 0.0


class PackageSearchResult(BaseModel):
    name: str
    version: str
    description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    author: Optional[Person] = None
    published_at: Optional[str] = None
    score: SearchScore = Field(default_factory=SearchScore)
    search_score: Optional[float] = None


class SearchResults(BaseModel):
    query: str
    total: int
    results: List[PackageSearchResult]


class DownloadStats(BaseModel):
    package: str
    downloads: int = 0
    period: DownloadPeriod
    start: str = ""
    end: str = ""
    daily_average: int = 0


class BundleSize(BaseModel):
    package: str
    version: Optional[str] = None
    size: int = 0
    gzip: int = 0
    dependency_count: int = 0
    has_js_module: Optional[bool] = None
    has_side_effects: Optional[bool] = None
    unpacked_size: Optional[int] = None
    file_count: Optional[int] = None
    source: Literal["bundlephobia", "registry"] = "bundlephobia"


class Vulnerability(BaseModel):
    id: str
    title: str
    severity: SecuritySeverity
    url: str
    overview: Optional[str] = None
    recommendation: Optional[str] = None
    versions: List[str] = Field(default_factory=list)
    published: Optional[str] = None
    updated: Optional[str] = None
    source: Literal["github", "osv"]


class SecurityInfo(BaseModel):
    package: str
    version: Optional[str] = None
    vulnerabilities: List[Vulnerability] = Field(default_factory=list)
    has_vulnerabilities: bool = False
    severity: SecuritySeverity = "info"


class Dist(BaseModel):
    tarball: Optional[str] = None
    unpacked_size: Optional[int] = None
    file_count: Optional[int] = None


class PackageInfo(BaseModel):
    name: str
    version: str
    description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    homepage: Optional[str] = None
    repository: Optional[Repository] = None
    bugs: Optional[Bugs] = None
    license: Optional[str] = None
    author: Optional[Person] = None
    maintainers: List[Person] = Field(default_factory=list)
    dependencies: Dict[str, str] = Field(default_factory=dict)
    dev_dependencies: Dict[str, str] = Field(default_factory=dict)
    peer_dependencies: Dict[str, str] = Field(default_factory=dict)
    engines: Dict[str, str] = Field(default_factory=dict)
    published_at: Optional[str] = None
    dist: Optional[Dist] = None
    download_stats: Optional[DownloadStats] = None
    bundle_size: Optional[BundleSize] = None
    security_info: Optional[SecurityInfo] = None


class LicenseInfo(BaseModel):
    package: str
    version: str
    license: str
    repository: Optional[str] = None
    author: Optional[Person] = None
    maintainers: List[Person] = Field(default_factory=list)


class PackageOperationResult(BaseModel):
    success: bool
    packages: List[str]
    operation: PackageOperation
    package_manager: PackageManagerType
    output: str = ""
    errors: List[str] = Field(default_factory=list)
    duration_ms: int = 0
    exit_code: Optional[int] = None
