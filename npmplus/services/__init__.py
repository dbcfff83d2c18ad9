"""Services shared by the MCP and web servers."""

from dataclasses import dataclass
from typing import Optional

import httpx

from npmplus.config import Settings, get_settings
from npmplus.services.analytics import AnalyticsService
from npmplus.services.cache import CacheService
from npmplus.services.http_client import HttpClient
from npmplus.services.package_manager import PackageManagerService, detect_package_manager
from npmplus.services.package_service import PackageService
from npmplus.services.registry import RegistryService
from npmplus.services.security import SecurityService


@dataclass
class Services:
    http: HttpClient
    cache: CacheService
    registry: RegistryService
    security: SecurityService
    package_manager: PackageManagerService
    packages: PackageService
    analytics: AnalyticsService

    async def aclose(self) -> None:
        await self.http.aclose()


def create_services(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    retry_delay: float = 1.0,
) -> Services:
    """Wire up every service from settings."""
    settings = settings or get_settings()
    http = HttpClient(client=http_client, timeout=settings.http_timeout_seconds, retry_delay=retry_delay)
    cache = CacheService(default_ttl=settings.cache_ttl_seconds, max_keys=settings.cache_max_keys)
    registry = RegistryService(
        http,
        registry_url=settings.npm_registry_url,
        npm_api_url=settings.npm_api_url,
        bundlephobia_url=settings.bundlephobia_url,
    )
    security = SecurityService(http, github_advisory_url=settings.github_advisory_url, osv_url=settings.osv_url)
    package_manager = PackageManagerService(timeout=settings.package_manager_timeout_seconds)
    return Services(
        http=http,
        cache=cache,
        registry=registry,
        security=security,
        package_manager=package_manager,
        packages=PackageService(cache, registry, security, package_manager),
        analytics=AnalyticsService(enabled=settings.enable_analytics, salt=settings.analytics_salt),
    )


__all__ = [
    "AnalyticsService",
    "CacheService",
    "HttpClient",
    "PackageManagerService",
    "PackageService",
    "RegistryService",
    "SecurityService",
    "Services",
    "create_services",
    "detect_package_manager",
]
