"""Package information capability: details, bundle size, downloads, license."""

from __future__ import annotations

from typing import Any, Dict, List

from npmplus.exceptions import InvalidInputError
from npmplus.logger.decorators import log_execution_time
from npmplus.models.requests import DownloadStatsRequest, PackageRequest
from npmplus.services.package_service import PackageService
from npmplus.tools.base import ToolCapability, ToolDefinition, ToolResult, parse_arguments


def format_size(num_bytes: int) -> str:
    """Human-readable size, e.g. ``format_size(2048) == "2.00 KB"``."""
    kb = num_bytes / 1024
    if kb > 1024:
        return f"{kb / 1024:.2f} MB"
    return f"{kb:.2f} KB"


class PackagesCapability(ToolCapability):
    """Registry lookups for a single package."""

    def __init__(self, packages: PackageService):
        self._packages = packages

    @property
    def name(self) -> str:
        return "packages"

    @property
    def description(self) -> str:
        return "Package details, bundle size, download statistics and licensing"

    def get_tools(self) -> List[ToolDefinition]:
        return [
            ToolDefinition.from_model(
                "package_info",
                "Get detailed information about a package",
                PackageRequest,
            ),
            ToolDefinition.from_model(
                "check_bundle_size",
                "Check the bundle size of a package before installing",
                PackageRequest,
            ),
            ToolDefinition.from_model(
                "download_stats",
                "Get download statistics for a package",
                DownloadStatsRequest,
            ),
            ToolDefinition.from_model(
                "check_license",
                "Check the license of a specific package",
                PackageRequest,
            ),
        ]

    @log_execution_time
    async def handle(self, tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
        if tool_name == "package_info":
            request = parse_arguments(PackageRequest, arguments)
            info = await self._packages.get_package_info(request.package_name, request.version)
            return ToolResult(data=info, summary=f"{info.name}@{info.version}: {info.description or ''}".strip())

        elif tool_name == "check_bundle_size":
            request = parse_arguments(PackageRequest, arguments)
            size = await self._packages.get_bundle_size(request.package_name, request.version)
            if size.source == "bundlephobia":
                summary = (
                    f"{request.package_name}@{size.version}: "
                    f"{format_size(size.size)} minified, {format_size(size.gzip)} gzipped"
                )
            else:
                unpacked = format_size(size.unpacked_size) if size.unpacked_size else "unknown"
                summary = f"{request.package_name}@{size.version}: {unpacked} unpacked (registry data)"
            return ToolResult(data=size, summary=summary)

        elif tool_name == "download_stats":
            request = parse_arguments(DownloadStatsRequest, arguments)
            stats = await self._packages.get_download_stats(request.package_name, request.period)
            return ToolResult(
                data=stats,
                summary=f"{stats.package}: {stats.downloads:,} downloads ({stats.period})",
            )

        elif tool_name == "check_license":
            request = parse_arguments(PackageRequest, arguments)
            license_info = await self._packages.check_license(request.package_name, request.version)
            return ToolResult(
                data=license_info,
                summary=f"{license_info.package}@{license_info.version}: {license_info.license}",
            )

        else:
            raise InvalidInputError(f"Unknown tool: {tool_name}")
