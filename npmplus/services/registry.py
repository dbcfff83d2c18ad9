"""npm registry, npm API and bundlephobia client."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from npmplus.constants import DOWNLOAD_PERIOD_DAYS, URLS
from npmplus.exceptions import NpmPlusError, ResourceNotFoundError
from npmplus.logger import session_logger as logger
from npmplus.models.package import (
    BundleSize,
    Bugs,
    Dist,
    DownloadStats,
    PackageInfo,
    PackageSearchResult,
    Person,
    Repository,
    SearchResults,
    SearchScore,
)
from npmplus.services.http_client import HttpClient
from npmplus.services.semver import RANGE_PREFIX_RE, sort_versions_desc

# "Name <email> (url)"
_AUTHOR_RE = re.compile(r"^([^<(]+?)(?:\s*<([^>]+)>)?(?:\s*\(([^)]+)\))?$")


def encode_package_name(name: str) -> str:
    """URL-encode a package name for registry paths (``@scope%2Fname``)."""
    return quote(name, safe="@")


def parse_person(raw: Any) -> Optional[Person]:
    """Normalize an npm author/maintainer field into a Person."""
    if not raw:
        return None
    if isinstance(raw, str):
        match = _AUTHOR_RE.match(raw.strip())
        if match:
            name, email, url = match.groups()
            return Person(
                name=name.strip(),
                email=email.strip() if email else None,
                url=url.strip() if url else None,
            )
        return Person(name=raw)
    if isinstance(raw, dict) and raw.get("name"):
        return Person(name=raw["name"], email=raw.get("email"), url=raw.get("url"))
    return None


def normalize_license(raw: Any) -> Optional[str]:
    """Flatten the legacy ``license``/``licenses`` object forms into a string."""
    if not raw:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        names = [item.get("type", "Unknown") if isinstance(item, dict) else str(item) for item in raw]
        return ", ".join(names)
    if isinstance(raw, dict):
        return raw.get("type") or "Unknown"
    return str(raw)


class RegistryService:
    """Service for interacting with the npm registry and related APIs."""

    def __init__(
        self,
        http: HttpClient,
        registry_url: str = URLS["NPM_REGISTRY"],
        npm_api_url: str = URLS["NPM_API"],
        bundlephobia_url: str = URLS["BUNDLEPHOBIA_API"],
    ):
        self._http = http
        self.registry_url = registry_url.rstrip("/")
        self.npm_api_url = npm_api_url.rstrip("/")
        self.bundlephobia_url = bundlephobia_url.rstrip("/")

    async def search(self, query: str, limit: int = 25, offset: int = 0) -> SearchResults:
        """Search packages using the registry's v1 search endpoint."""
        data = await self._http.get_json(
            f"{self.registry_url}/-/v1/search",
            params={
                "text": query,
                "size": limit,
                "from": offset,
                "quality": 0.9,
                "popularity": 0.8,
                "maintenance": 0.7,
            },
        )
        objects = data.get("objects") or []
        results = [self._transform_search_result(item) for item in objects]
        logger.debug("Registry search", query=query, results=len(results))
        return SearchResults(query=query, total=data.get("total", len(results)), results=results)

    async def get_package_metadata(self, package_name: str) -> Dict[str, Any]:
        """Fetch the full packument for a package."""
        try:
            return await self._http.get_json(f"{self.registry_url}/{encode_package_name(package_name)}")
        except ResourceNotFoundError as e:
            raise ResourceNotFoundError(
                f"Package not found: {package_name}", details={"package": package_name}
            ) from e

    async def get_package_versions(self, package_name: str) -> List[str]:
        metadata = await self.get_package_metadata(package_name)
        return sort_versions_desc((metadata.get("versions") or {}).keys())

    async def get_package_info(self, package_name: str, version: Optional[str] = None) -> PackageInfo:
        """Get manifest details for a version (default: the ``latest`` dist-tag)."""
        metadata = await self.get_package_metadata(package_name)
        manifest = self._select_manifest(metadata, package_name, version)
        return self._transform_manifest(manifest, metadata)

    async def get_download_stats(self, package_name: str, period: str = "last-week") -> DownloadStats:
        data = await self._http.get_json(
            f"{self.npm_api_url}/downloads/point/{period}/{encode_package_name(package_name)}"
        )
        downloads = int(data.get("downloads") or 0)
        return DownloadStats(
            package=package_name,
            downloads=downloads,
            period=period,  # type: ignore[arg-type]
            start=data.get("start") or "",
            end=data.get("end") or "",
            daily_average=round(downloads / DOWNLOAD_PERIOD_DAYS.get(period, 1)),
        )

    async def get_bundle_size(self, package_name: str, version: Optional[str] = None) -> BundleSize:
        """Bundle size from bundlephobia, falling back to registry dist data."""
        spec = f"{package_name}@{version}" if version else package_name
        try:
            data = await self._http.get_json(f"{self.bundlephobia_url}/size", params={"package": spec})
            return BundleSize(
                package=package_name,
                version=data.get("version") or version,
                size=int(data.get("size") or 0),
                gzip=int(data.get("gzip") or 0),
                dependency_count=int(data.get("dependencyCount") or 0),
                has_js_module=bool(data["hasJSModule"]) if "hasJSModule" in data else None,
                has_side_effects=bool(data["hasSideEffects"]) if "hasSideEffects" in data else None,
                source="bundlephobia",
            )
        except NpmPlusError as e:
            logger.info("Bundlephobia unavailable, using registry data", package=spec, error=str(e))

        info = await self.get_package_info(package_name, version)
        dist = info.dist or Dist()
        return BundleSize(
            package=package_name,
            version=info.version,
            dependency_count=len(info.dependencies),
            unpacked_size=dist.unpacked_size,
            file_count=dist.file_count,
            source="registry",
        )

    async def package_exists(self, package_name: str) -> bool:
        try:
            response = await self._http.request("HEAD", f"{self.registry_url}/{encode_package_name(package_name)}")
        except NpmPlusError:
            return False
        return response.is_success

    @staticmethod
    def _select_manifest(metadata: Dict[str, Any], package_name: str, version: Optional[str]) -> Dict[str, Any]:
        versions = metadata.get("versions") or {}
        dist_tags = metadata.get("dist-tags") or {}
        if version is None:
            wanted = dist_tags.get("latest")
        elif version in dist_tags:
            wanted = dist_tags[version]
        else:
            wanted = RANGE_PREFIX_RE.sub("", version)

        manifest = versions.get(wanted) if wanted else None
        if manifest is None:
            raise ResourceNotFoundError(
                f"Version not found: {package_name}@{version or 'latest'}",
                details={"package": package_name, "version": version},
            )
        return manifest

    @staticmethod
    def _transform_search_result(item: Dict[str, Any]) -> PackageSearchResult:
        pkg = item.get("package") or {}
        score = item.get("score") or {}
        detail = score.get("detail") or {}
        return PackageSearchResult(
            name=pkg.get("name", ""),
            version=pkg.get("version", ""),
            description=pkg.get("description"),
            keywords=pkg.get("keywords") or [],
            author=parse_person(pkg.get("author")),
            published_at=pkg.get("date"),
            score=SearchScore(
                final=score.get("final", 0.0),
                quality=detail.get("quality", 0.0),
                popularity=detail.get("popularity", 0.0),
                maintenance=detail.get("maintenance", 0.0),
            ),
            search_score=item.get("searchScore"),
        )

    @staticmethod
    def _transform_manifest(manifest: Dict[str, Any], metadata: Dict[str, Any]) -> PackageInfo:
        repository = manifest.get("repository")
        if isinstance(repository, str):
            repo = Repository(url=repository)
        elif isinstance(repository, dict) and repository.get("url"):
            repo = Repository(
                type=repository.get("type") or "git",
                url=repository["url"],
                directory=repository.get("directory"),
            )
        else:
            repo = None

        bugs_raw = manifest.get("bugs")
        if isinstance(bugs_raw, str):
            bugs: Optional[Bugs] = Bugs(url=bugs_raw)
        elif isinstance(bugs_raw, dict):
            bugs = Bugs(url=bugs_raw.get("url"), email=bugs_raw.get("email"))
        else:
            bugs = None

        dist_raw = manifest.get("dist") or {}
        version = manifest.get("version", "")
        maintainers = [p for p in (parse_person(m) for m in manifest.get("maintainers") or []) if p]

        return PackageInfo(
            name=manifest.get("name", ""),
            version=version,
            description=manifest.get("description"),
            keywords=manifest.get("keywords") or [],
            homepage=manifest.get("homepage"),
            repository=repo,
            bugs=bugs,
            license=normalize_license(manifest.get("license") or manifest.get("licenses")),
            author=parse_person(manifest.get("author")),
            maintainers=maintainers,
            dependencies=manifest.get("dependencies") or {},
            dev_dependencies=manifest.get("devDependencies") or {},
            peer_dependencies=manifest.get("peerDependencies") or {},
            engines=manifest.get("engines") if isinstance(manifest.get("engines"), dict) else {},
            published_at=(metadata.get("time") or {}).get(version),
            dist=Dist(
                tarball=dist_raw.get("tarball"),
                unpacked_size=dist_raw.get("unpackedSize"),
                file_count=dist_raw.get("fileCount"),
            ),
        )
