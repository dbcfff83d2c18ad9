"""Security capability: registry vulnerability lookups and project audits."""

from __future__ import annotations

from typing import Any, Dict, List

from npmplus.constants import NPM
from npmplus.exceptions import InvalidInputError
from npmplus.logger.decorators import log_execution_time
from npmplus.models.requests import AuditDependenciesRequest, PackageRequest
from npmplus.services.package_manager import summarize_npm_audit
from npmplus.services.package_service import PackageService
from npmplus.services.project import resolve_project_dir
from npmplus.tools.base import ToolCapability, ToolDefinition, ToolResult, parse_arguments


class SecurityCapability(ToolCapability):
    """Vulnerability checks."""

    def __init__(self, packages: PackageService):
        self._packages = packages

    @property
    def name(self) -> str:
        return "security"

    @property
    def description(self) -> str:
        return "Vulnerability checks against GitHub Advisories, OSV and package manager audits"

    def get_tools(self) -> List[ToolDefinition]:
        return [
            ToolDefinition.from_model(
                "check_vulnerability",
                "Check a specific package for known vulnerabilities",
                PackageRequest,
            ),
            ToolDefinition.from_model(
                "audit_dependencies",
                "Audit project dependencies for vulnerabilities",
                AuditDependenciesRequest,
            ),
        ]

    @log_execution_time
    async def handle(self, tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
        if tool_name == "check_vulnerability":
            request = parse_arguments(PackageRequest, arguments)
            info = await self._packages.check_vulnerabilities(request.package_name, request.version)
            target = f"{info.package}@{info.version}" if info.version else info.package
            if info.has_vulnerabilities:
                summary = f"{target}: {len(info.vulnerabilities)} vulnerabilities (highest: {info.severity})"
            else:
                summary = f"{target}: no known vulnerabilities"
            return ToolResult(data=info, summary=summary)

        elif tool_name == "audit_dependencies":
            request = parse_arguments(AuditDependenciesRequest, arguments)
            project_dir = resolve_project_dir(request.cwd)
            result = await self._packages.audit_dependencies(
                project_dir, fix=request.fix, force=request.force, production=request.production
            )
            data: Dict[str, Any] = result.model_dump(mode="json")
            audit_summary = summarize_npm_audit(result.output) if result.package_manager == NPM else None
            if audit_summary is not None:
                data["audit"] = audit_summary
                summary = f"Audit found {audit_summary['total']} vulnerabilities"
            elif result.success:
                summary = "Audit completed"
            else:
                summary = "Audit failed"
            return ToolResult(data=data, summary=summary, warnings=result.errors)

        else:
            raise InvalidInputError(f"Unknown tool: {tool_name}")
