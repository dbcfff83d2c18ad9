"""Package search capability."""

from __future__ import annotations

from typing import Any, Dict, List

from npmplus.exceptions import InvalidInputError
from npmplus.logger.decorators import log_execution_time
from npmplus.models.requests import SearchPackagesRequest
from npmplus.services.package_service import PackageService
from npmplus.tools.base import ToolCapability, ToolDefinition, ToolResult, parse_arguments


class SearchCapability(ToolCapability):
    """Search the npm registry."""

    def __init__(self, packages: PackageService):
        self._packages = packages

    @property
    def name(self) -> str:
        return "search"

    @property
    def description(self) -> str:
        return "Search the npm registry for packages"

    def get_tools(self) -> List[ToolDefinition]:
        return [
            ToolDefinition.from_model(
                "search_packages",
                "Search for packages in the npm registry",
                SearchPackagesRequest,
            )
        ]

    @log_execution_time
    async def handle(self, tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
        if tool_name != "search_packages":
            raise InvalidInputError(f"Unknown tool: {tool_name}")

        request = parse_arguments(SearchPackagesRequest, arguments)
        results = await self._packages.search_packages(request.query, request.limit, request.offset)
        if not results.results:
            summary = f"No packages found matching '{request.query}'"
        else:
            summary = f"Found {len(results.results)} of {results.total} packages matching '{request.query}'"
        return ToolResult(data=results, summary=summary)
