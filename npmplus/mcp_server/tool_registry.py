"""Tool Registry for MCP Server.

Central registry that collects tools from all capabilities and provides
them to the MCP server.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.types import Tool

from npmplus.exceptions import RegistryError
from npmplus.logger import session_logger as logger
from npmplus.services import Services
from npmplus.tools.base import ToolCapability, ToolDefinition, ToolResult


class ToolRegistry:
    """Registry for MCP tools from capabilities.

    Collects tool definitions from capability modules and provides:
    - MCP Tool objects for list_tools()
    - Routing of tool calls to appropriate capability handlers
    """

    def __init__(self):
        self._capabilities: Dict[str, ToolCapability] = {}
        self._tool_to_capability: Dict[str, str] = {}
        self._tools: Dict[str, ToolDefinition] = {}

    def register_capability(self, capability: ToolCapability) -> None:
        """Register a capability and its tools.

        Raises:
            RegistryError: If the capability name or a tool name is already taken
        """
        cap_name = capability.name
        if cap_name in self._capabilities:
            raise RegistryError(f"Capability '{cap_name}' already registered")

        tools = capability.get_tools()
        for tool_def in tools:
            if tool_def.name in self._tools:
                existing_cap = self._tool_to_capability[tool_def.name]
                raise RegistryError(
                    f"Tool '{tool_def.name}' already registered by capability '{existing_cap}'",
                    details={"tool": tool_def.name, "capability": existing_cap},
                )

        self._capabilities[cap_name] = capability
        for tool_def in tools:
            self._tools[tool_def.name] = tool_def
            self._tool_to_capability[tool_def.name] = cap_name

        logger.info("Capability registered", capability=cap_name, tools=[t.name for t in tools])

    def get_mcp_tools(self) -> List[Tool]:
        """Get all registered tools as MCP Tool objects."""
        return [
            Tool(name=tool_def.name, description=tool_def.description, inputSchema=tool_def.input_schema)
            for tool_def in self._tools.values()
        ]

    def get_tool_names(self) -> List[str]:
        return list(self._tools.keys())

    def has_tool(self, tool_name: str) -> bool:
        return tool_name in self._tools

    async def handle_tool(self, tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
        """Route a tool call to the appropriate capability.

        Raises:
            RegistryError: If tool is not registered
        """
        if tool_name not in self._tools:
            raise RegistryError(f"Unknown tool: '{tool_name}'", details={"tool": tool_name})

        cap_name = self._tool_to_capability[tool_name]
        logger.debug("Routing tool call", tool=tool_name, capability=cap_name)
        return await self._capabilities[cap_name].handle(tool_name, arguments)

    def list_capabilities(self) -> Dict[str, str]:
        """Map capability names to descriptions."""
        return {name: cap.description for name, cap in self._capabilities.items()}

    def get_capability(self, name: str) -> Optional[ToolCapability]:
        return self._capabilities.get(name)


def initialize_registry(services: Services, registry: Optional[ToolRegistry] = None) -> ToolRegistry:
    """Build a registry holding every capability, wired to ``services``."""
    from npmplus.tools import (
        AnalysisCapability,
        ManagementCapability,
        PackagesCapability,
        SearchCapability,
        SecurityCapability,
    )

    registry = registry or ToolRegistry()
    registry.register_capability(SearchCapability(services.packages))
    registry.register_capability(PackagesCapability(services.packages))
    registry.register_capability(SecurityCapability(services.packages))
    registry.register_capability(ManagementCapability(services.packages))
    registry.register_capability(AnalysisCapability(services.packages))

    logger.info(
        "Registry initialized",
        capabilities=list(registry.list_capabilities().keys()),
        tools=registry.get_tool_names(),
    )
    return registry
