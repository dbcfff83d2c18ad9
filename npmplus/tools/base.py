"""Base classes for MCP tool capabilities.

All capability modules inherit from ToolCapability and implement the
interface used for tool registration and invocation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel

RequestT = TypeVar("RequestT", bound=BaseModel)


@dataclass
class ToolResult:
    """Result of a tool invocation."""

    data: Any
    summary: str = ""
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = self.data.model_dump(mode="json") if isinstance(self.data, BaseModel) else self.data
        payload: Dict[str, Any] = {"status": "success", "summary": self.summary, "data": data}
        if self.warnings:
            payload["warnings"] = self.warnings
        return payload


@dataclass
class ToolDefinition:
    """Definition of an MCP tool provided by a capability."""

    name: str
    description: str
    input_schema: Dict[str, Any]

    @classmethod
    def from_model(cls, name: str, description: str, model: Type[BaseModel]) -> "ToolDefinition":
        """Build a definition whose input schema is the request model's JSON schema."""
        return cls(name=name, description=description, input_schema=model.model_json_schema(by_alias=True))


def parse_arguments(model: Type[RequestT], arguments: Dict[str, Any]) -> RequestT:
    """Validate raw MCP arguments; raises pydantic.ValidationError."""
    return model.model_validate(arguments or {})


class ToolCapability(ABC):
    """Base class for all tool capabilities.

    Each capability module (search, packages, security, ...) should:
    1. Inherit from this class
    2. Implement get_tools() to declare its MCP tools
    3. Implement handle() to route calls to its handlers
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this capability (e.g., 'search', 'security')."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of this capability."""

    @abstractmethod
    def get_tools(self) -> List[ToolDefinition]:
        """Return the tool definitions this capability provides."""

    @abstractmethod
    async def handle(self, tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
        """Handle a tool invocation.

        Args:
            tool_name: Name of the tool being called
            arguments: Tool arguments from MCP

        Returns:
            ToolResult with the tool's data

        Raises:
            InvalidInputError: If tool_name is unknown
            pydantic.ValidationError: If arguments are invalid
        """
