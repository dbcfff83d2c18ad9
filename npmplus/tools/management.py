"""Project management capability: install, update, remove, outdated, cache, licenses."""

from __future__ import annotations

from typing import Any, Dict, List

from npmplus.exceptions import InvalidInputError
from npmplus.logger.decorators import log_execution_time
from npmplus.models.package import PackageOperationResult
from npmplus.models.requests import (
    CheckOutdatedRequest,
    CleanCacheRequest,
    InstallPackagesRequest,
    ListLicensesRequest,
    RemovePackagesRequest,
    UpdatePackagesRequest,
)
from npmplus.services.package_service import PackageService
from npmplus.services.project import resolve_cwd, resolve_project_dir
from npmplus.tools.base import ToolCapability, ToolDefinition, ToolResult, parse_arguments

_VERBS = {
    "install": "Installed",
    "update": "Updated",
    "remove": "Removed",
    "outdated": "Checked",
    "clean_cache": "Cleaned",
}


def operation_result(result: PackageOperationResult) -> ToolResult:
    if result.success:
        summary = f"{_VERBS.get(result.operation, 'Ran')} {', '.join(result.packages)} with {result.package_manager}"
    else:
        summary = f"{result.package_manager} {result.operation} failed"
    return ToolResult(data=result, summary=summary, warnings=result.errors)


class ManagementCapability(ToolCapability):
    """Runs the project's package manager."""

    def __init__(self, packages: PackageService):
        self._packages = packages

    @property
    def name(self) -> str:
        return "management"

    @property
    def description(self) -> str:
        return "Install, update and remove packages; inspect outdated packages and licenses"

    def get_tools(self) -> List[ToolDefinition]:
        return [
            ToolDefinition.from_model(
                "install_packages",
                "Install npm packages in your project",
                InstallPackagesRequest,
            ),
            ToolDefinition.from_model(
                "update_packages",
                "Update packages to their latest versions",
                UpdatePackagesRequest,
            ),
            ToolDefinition.from_model(
                "remove_packages",
                "Remove packages from your project",
                RemovePackagesRequest,
            ),
            ToolDefinition.from_model(
                "check_outdated",
                "Check for outdated packages",
                CheckOutdatedRequest,
            ),
            ToolDefinition.from_model(
                "clean_cache",
                "Clean the package manager cache",
                CleanCacheRequest,
            ),
            ToolDefinition.from_model(
                "list_licenses",
                "List licenses of all dependencies in a project",
                ListLicensesRequest,
            ),
        ]

    @log_execution_time
    async def handle(self, tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
        if tool_name == "install_packages":
            request = parse_arguments(InstallPackagesRequest, arguments)
            project_dir = resolve_project_dir(request.cwd)
            result = await self._packages.install_packages(
                request.packages, project_dir, dev=request.dev, global_=request.global_
            )
            return operation_result(result)

        elif tool_name == "update_packages":
            request = parse_arguments(UpdatePackagesRequest, arguments)
            project_dir = resolve_project_dir(request.cwd)
            return operation_result(await self._packages.update_packages(request.packages, project_dir))

        elif tool_name == "remove_packages":
            request = parse_arguments(RemovePackagesRequest, arguments)
            project_dir = resolve_project_dir(request.cwd)
            result = await self._packages.remove_packages(request.packages, project_dir, global_=request.global_)
            return operation_result(result)

        elif tool_name == "check_outdated":
            request = parse_arguments(CheckOutdatedRequest, arguments)
            # global checks do not need a project
            project_dir = resolve_cwd(request.cwd) if request.global_ else resolve_project_dir(request.cwd)
            result = await self._packages.check_outdated(project_dir, global_=request.global_)
            if result.success and not result.output.strip():
                return ToolResult(data=result, summary="All packages are up to date")
            return operation_result(result)

        elif tool_name == "clean_cache":
            request = parse_arguments(CleanCacheRequest, arguments)
            project_dir = resolve_cwd(request.cwd)
            return operation_result(await self._packages.clean_cache(project_dir, global_=request.global_))

        elif tool_name == "list_licenses":
            request = parse_arguments(ListLicensesRequest, arguments)
            project_dir = resolve_project_dir(request.cwd)
            report = self._packages.list_licenses(project_dir, production=request.production)
            if not request.summary:
                report.pop("licenses")
            counts = ", ".join(f"{name}: {len(pkgs)}" for name, pkgs in report.get("licenses", {}).items())
            summary = f"{report['total']} packages" + (f" ({counts})" if counts else "")
            return ToolResult(data=report, summary=summary)

        else:
            raise InvalidInputError(f"Unknown tool: {tool_name}")
