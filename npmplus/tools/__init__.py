"""MCP tool capabilities.

Each module provides one capability: a group of tools sharing services.
"""

from npmplus.tools.analysis import AnalysisCapability
from npmplus.tools.base import ToolCapability, ToolDefinition, ToolResult
from npmplus.tools.management import ManagementCapability
from npmplus.tools.packages import PackagesCapability
from npmplus.tools.search import SearchCapability
from npmplus.tools.security import SecurityCapability

__all__ = [
    "AnalysisCapability",
    "ManagementCapability",
    "PackagesCapability",
    "SearchCapability",
    "SecurityCapability",
    "ToolCapability",
    "ToolDefinition",
    "ToolResult",
]
