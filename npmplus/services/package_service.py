"""Caching facade over the registry, security and package manager services."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from npmplus.constants import (
    BUNDLE_SIZE_CACHE_TTL,
    DOWNLOAD_STATS_CACHE_TTL,
    PACKAGE_INFO_CACHE_TTL,
    SEARCH_CACHE_TTL,
    VULNERABILITY_CACHE_TTL,
)
from npmplus.logger import session_logger as logger
from npmplus.models.package import (
    BundleSize,
    DownloadStats,
    LicenseInfo,
    PackageInfo,
    PackageOperationResult,
    SearchResults,
    SecurityInfo,
)
from npmplus.services.cache import CacheService
from npmplus.services.package_manager import PackageManagerService, detect_package_manager
from npmplus.services.project import read_package_json
from npmplus.services.registry import RegistryService, normalize_license
from npmplus.services.security import SecurityService
from npmplus.services.semver import exact_version


class PackageService:
    """Main service for package operations."""

    def __init__(
        self,
        cache: CacheService,
        registry: RegistryService,
        security: SecurityService,
        package_manager: PackageManagerService,
    ):
        self.cache = cache
        self.registry = registry
        self.security = security
        self.package_manager = package_manager

    # ------------------------------------------------------------------ #
    # Registry lookups (cached)
    # ------------------------------------------------------------------ #

    async def search_packages(self, query: str, limit: int = 25, offset: int = 0) -> SearchResults:
        key = CacheService.create_key("search", query, limit, offset)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        results = await self.registry.search(query, limit, offset)
        self.cache.set(key, results, SEARCH_CACHE_TTL)
        return results

    async def get_package_info(self, package_name: str, version: Optional[str] = None) -> PackageInfo:
        """Package manifest enriched with weekly downloads, bundle size and vulnerabilities."""
        key = CacheService.create_key("package", package_name, version or "latest")
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        info = await self.registry.get_package_info(package_name, version)
        downloads, bundle, security = await asyncio.gather(
            self.registry.get_download_stats(package_name, "last-week"),
            self.registry.get_bundle_size(package_name, info.version),
            self.security.check_vulnerabilities(package_name, info.version),
            return_exceptions=True,
        )
        for label, result in (("downloads", downloads), ("bundle_size", bundle), ("security", security)):
            if isinstance(result, BaseException):
                logger.warning(
                    "Package enrichment failed",
                    package=package_name,
                    part=label,
                    error=str(result),
                    error_type=type(result).__name__,
                )

        enriched = info.model_copy(
            update={
                "download_stats": None if isinstance(downloads, BaseException) else downloads,
                "bundle_size": None if isinstance(bundle, BaseException) else bundle,
                "security_info": None if isinstance(security, BaseException) else security,
            }
        )
        self.cache.set(key, enriched, PACKAGE_INFO_CACHE_TTL)
        return enriched

    async def get_bundle_size(self, package_name: str, version: Optional[str] = None) -> BundleSize:
        key = CacheService.create_key("bundle", package_name, version or "latest")
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        size = await self.registry.get_bundle_size(package_name, version)
        self.cache.set(key, size, BUNDLE_SIZE_CACHE_TTL)
        return size

    async def get_download_stats(self, package_name: str, period: str = "last-month") -> DownloadStats:
        key = CacheService.create_key("downloads", package_name, period)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        stats = await self.registry.get_download_stats(package_name, period)
        self.cache.set(key, stats, DOWNLOAD_STATS_CACHE_TTL)
        return stats

    async def check_vulnerabilities(self, package_name: str, version: Optional[str] = None) -> SecurityInfo:
        version = await self._resolve_version(package_name, version)
        key = CacheService.create_key("vuln", package_name, version or "any")
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        info = await self.security.check_vulnerabilities(package_name, version)
        self.cache.set(key, info, VULNERABILITY_CACHE_TTL)
        return info

    async def _resolve_version(self, package_name: str, version: Optional[str]) -> Optional[str]:
        """Map a dist-tag or range to the published version it names."""
        if version is None or exact_version(version) == version:
            return version
        info = await self.registry.get_package_info(package_name, version)
        return info.version

    async def check_license(self, package_name: str, version: Optional[str] = None) -> LicenseInfo:
        info = await self.registry.get_package_info(package_name, version)
        return LicenseInfo(
            package=info.name or package_name,
            version=info.version,
            license=info.license or "Unknown",
            repository=info.repository.url if info.repository else None,
            author=info.author,
            maintainers=info.maintainers,
        )

    # ------------------------------------------------------------------ #
    # Local project operations
    # ------------------------------------------------------------------ #

    @staticmethod
    def list_licenses(project_dir: Path, production: bool = False) -> Dict[str, Any]:
        """Group installed dependencies by license.

        Reads ``node_modules/<dep>/package.json`` for every dependency listed
        in the project's package.json; packages that are not installed are
        reported under ``missing``.
        """
        manifest = read_package_json(project_dir)
        dependencies: Dict[str, str] = {}
        if not production:
            dependencies.update(manifest.get("devDependencies") or {})
        dependencies.update(manifest.get("dependencies") or {})

        packages: List[Dict[str, str]] = []
        by_license: Dict[str, List[str]] = defaultdict(list)
        missing: List[str] = []
        for name in sorted(dependencies):
            installed = project_dir / "node_modules" / name
            if not (installed / "package.json").is_file():
                missing.append(name)
                continue
            data = read_package_json(installed)
            license_name = normalize_license(data.get("license") or data.get("licenses")) or "Unknown"
            version = str(data.get("version") or "")
            packages.append({"name": name, "version": version, "license": license_name})
            by_license[license_name].append(f"{name}@{version}")

        return {
            "total": len(packages),
            "licenses": dict(sorted(by_license.items(), key=lambda item: (-len(item[1]), item[0]))),
            "packages": packages,
            "missing": missing,
        }

    async def install_packages(
        self, packages: List[str], project_dir: Path, dev: bool = False, global_: bool = False
    ) -> PackageOperationResult:
        manager = detect_package_manager(project_dir)
        return await self.package_manager.install(packages, project_dir, manager, dev=dev, global_=global_)

    async def update_packages(self, packages: Optional[List[str]], project_dir: Path) -> PackageOperationResult:
        manager = detect_package_manager(project_dir)
        return await self.package_manager.update(packages, project_dir, manager)

    async def remove_packages(
        self, packages: List[str], project_dir: Path, global_: bool = False
    ) -> PackageOperationResult:
        manager = detect_package_manager(project_dir)
        return await self.package_manager.remove(packages, project_dir, manager, global_=global_)

    async def check_outdated(self, project_dir: Path, global_: bool = False) -> PackageOperationResult:
        manager = detect_package_manager(project_dir)
        return await self.package_manager.check_outdated(project_dir, manager, global_=global_)

    async def audit_dependencies(
        self, project_dir: Path, fix: bool = False, force: bool = False, production: bool = False
    ) -> PackageOperationResult:
        manager = detect_package_manager(project_dir)
        return await self.package_manager.audit(project_dir, manager, fix=fix, force=force, production=production)

    async def clean_cache(self, project_dir: Path, global_: bool = False) -> PackageOperationResult:
        manager = detect_package_manager(project_dir)
        return await self.package_manager.clean_cache(project_dir, manager, global_=global_)

    async def dependency_tree(
        self, project_dir: Path, depth: int = 3, production: bool = False
    ) -> PackageOperationResult:
        manager = detect_package_manager(project_dir)
        return await self.package_manager.list_dependencies(
            project_dir, manager, depth=depth, production=production
        )
