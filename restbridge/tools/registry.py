"""
Per-session tool registry.

One ToolRegistry holds the tools a single session can call, in the order
tools/list reports them. Tools are checked on the way in so a malformed
schema fails at build time rather than in a client.

Usage:
    registry = ToolRegistry()
    registry.register_all(factory.build_tools(session))

    registry.get("get_books")        # Tool or None
    registry.to_mcp_schemas()        # tools/list payload
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .base import Tool

logger = logging.getLogger(__name__)


class ToolRegistryError(Exception):
    """Raised for duplicate, missing or malformed tools."""


def tool_problems(tool: Tool) -> list[str]:
    """Everything wrong with a tool's published metadata (empty if valid)."""
    problems: list[str] = []

    name = getattr(tool, "name", None)
    if not isinstance(name, str) or not name:
        problems.append("name must be a non-empty string")
    description = getattr(tool, "description", None)
    if not isinstance(description, str) or not description:
        problems.append("description must be a non-empty string")

    schema = getattr(tool, "input_schema", None)
    if not isinstance(schema, dict):
        problems.append("input_schema must be a dict")
        return problems
    if schema.get("type") != "object":
        problems.append("input_schema type must be 'object'")
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        problems.append("input_schema must declare 'properties'")
    else:
        unknown = [r for r in schema.get("required", []) if r not in properties]
        if unknown:
            problems.append(f"required names undeclared properties: {unknown}")
    return problems


class ToolRegistry:
    """
    Name -> Tool mapping, in registration order.

    Example:
        registry = ToolRegistry()
        registry.register(SwitchApiTool(session))

        result = await registry.get_required("switch_api").execute(
            {"api_name": "ChargeNET"}
        )
    """

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """
        Add a tool.

        Raises:
            ToolRegistryError: If the metadata is invalid or the name is taken
        """
        problems = tool_problems(tool)
        if problems:
            raise ToolRegistryError(f"Invalid tool {type(tool).__name__}: {'; '.join(problems)}")
        if tool.name in self._tools:
            raise ToolRegistryError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.debug(f"[tool_registry] Registered {tool.name}")

    def register_all(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            self.register(tool)

    def unregister(self, name: str) -> bool:
        """Remove a tool; False if it was not registered."""
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def get_required(self, name: str) -> Tool:
        """
        Raises:
            ToolRegistryError: If no tool has this name
        """
        try:
            return self._tools[name]
        except KeyError:
            raise ToolRegistryError(f"Tool '{name}' not found") from None

    def list_tools(self) -> list[Tool]:
        return list(self._tools.values())

    def list_names(self) -> list[str]:
        return list(self._tools)

    def to_mcp_schemas(self) -> list[dict[str, Any]]:
        return [tool.to_mcp_schema() for tool in self._tools.values()]

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __repr__(self) -> str:
        return f"<ToolRegistry {self.list_names()}>"
