"""Dependency analysis capability."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from npmplus.analysis import analyze
from npmplus.exceptions import InvalidInputError
from npmplus.logger.decorators import log_execution_time
from npmplus.models.requests import AnalyzeDependenciesRequest, DependencyTreeRequest
from npmplus.services.package_service import PackageService
from npmplus.services.project import resolve_cwd, resolve_project_dir
from npmplus.tools.base import ToolCapability, ToolDefinition, ToolResult, parse_arguments


class AnalysisCapability(ToolCapability):
    """Dependency trees and source import graph analysis."""

    def __init__(self, packages: PackageService):
        self._packages = packages

    @property
    def name(self) -> str:
        return "analysis"

    @property
    def description(self) -> str:
        return "Dependency trees, circular imports and orphaned modules"

    def get_tools(self) -> List[ToolDefinition]:
        return [
            ToolDefinition.from_model(
                "dependency_tree",
                "Display the dependency tree of a project",
                DependencyTreeRequest,
            ),
            ToolDefinition.from_model(
                "analyze_dependencies",
                "Analyze project sources for circular imports and orphaned modules",
                AnalyzeDependenciesRequest,
            ),
        ]

    @log_execution_time
    async def handle(self, tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
        if tool_name == "dependency_tree":
            request = parse_arguments(DependencyTreeRequest, arguments)
            project_dir = resolve_project_dir(request.cwd)
            result = await self._packages.dependency_tree(
                project_dir, depth=request.depth, production=request.production
            )
            return ToolResult(
                data=result,
                summary=f"Dependency tree (depth: {request.depth})",
                warnings=result.errors,
            )

        elif tool_name == "analyze_dependencies":
            request = parse_arguments(AnalyzeDependenciesRequest, arguments)
            root = resolve_cwd(request.cwd)
            # file walking and parsing is blocking
            report = await asyncio.to_thread(
                analyze,
                root,
                request.entry_points,
                request.circular,
                request.orphans,
            )
            issues = []
            if report["circular"]:
                issues.append(f"{len(report['circular'])} circular import groups")
            if report["orphans"]:
                issues.append(f"{len(report['orphans'])} orphaned modules")
            summary = f"Scanned {report['module_count']} modules: " + (", ".join(issues) or "no issues found")
            return ToolResult(data=report, summary=summary)

        else:
            raise InvalidInputError(f"Unknown tool: {tool_name}")
