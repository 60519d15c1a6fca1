"""
restbridge tools (MCP-aligned).

Resource tools wrap catalog entries; system tools handle discovery and
per-session API selection. Both are built per session by
SessionToolFactory.

Usage:
    factory = SessionToolFactory(catalog, dispatcher)
    registry = factory.build_registry(session)

    result = await registry.get_required("get_book_by_id").execute({"id": 1})
"""

from .base import TextContent, Tool, ToolAnnotations, ToolResult
from .factory import SessionToolFactory, ToolFactory
from .registry import ToolRegistry, ToolRegistryError, tool_problems
from .resource import ResourceOperationTool
from .system import (
    ConfigureApiTool,
    GetApiInfoTool,
    ListApisTool,
    ListToolsTool,
    SwitchApiTool,
    describe_tool,
)

__all__ = [
    # Core Tool Protocol
    "Tool",
    "ToolResult",
    "ToolAnnotations",
    "TextContent",
    "ToolRegistry",
    "ToolRegistryError",
    "tool_problems",
    # Tools
    "ResourceOperationTool",
    "ListToolsTool",
    "ListApisTool",
    "GetApiInfoTool",
    "SwitchApiTool",
    "ConfigureApiTool",
    "describe_tool",
    # Factory
    "ToolFactory",
    "SessionToolFactory",
]
