"""
Tool base types, shaped after the MCP tools/list and tools/call payloads.

    Tool            - named, schema-described async action
    ToolResult      - what tools/call returns: text blocks, error flag,
                      optional structured content
    TextContent     - the only content block the bridge produces
    ToolAnnotations - read-only / destructive / idempotent hints

A tool reports backend and validation failures through
ToolResult.error(); raising is reserved for bugs.

Example:
    class EchoTool(Tool):
        name = "echo"
        description = "Return the message unchanged"
        input_schema = {
            "type": "object",
            "properties": {"message": {"type": "string"}},
            "required": ["message"],
        }

        async def execute(self, arguments):
            return ToolResult.success(arguments["message"])
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

_SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
_IDEMPOTENT_METHODS = _SAFE_METHODS | {"PUT", "DELETE"}


@dataclass(frozen=True, slots=True)
class TextContent:
    """A text content block."""

    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True, slots=True)
class ToolAnnotations:
    """
    Advisory behaviour hints published with each tool.

    Every hint is serialized explicitly; clients should not have to know
    the MCP defaults to read them.
    """

    title: str | None = None
    read_only: bool = False
    destructive: bool = False
    idempotent: bool = False
    open_world: bool = False

    @classmethod
    def for_http_method(cls, method: str, title: str | None = None) -> ToolAnnotations:
        """Hints for a tool that issues one request with this HTTP method."""
        method = method.upper()
        return cls(
            title=title,
            read_only=method in _SAFE_METHODS,
            destructive=method == "DELETE",
            idempotent=method in _IDEMPOTENT_METHODS,
            open_world=True,
        )

    def to_dict(self) -> dict[str, Any]:
        hints: dict[str, Any] = {
            "readOnlyHint": self.read_only,
            "destructiveHint": self.destructive,
            "idempotentHint": self.idempotent,
            "openWorldHint": self.open_world,
        }
        if self.title:
            hints["title"] = self.title
        return hints


@dataclass(frozen=True, slots=True)
class ToolResult:
    """
    Outcome of one tools/call.

    Attributes:
        content: Text blocks shown to the caller
        is_error: True when the call failed (backend, validation, lookup)
        structured_content: Machine-readable companion of the text
    """

    content: tuple[TextContent, ...]
    is_error: bool = False
    structured_content: dict[str, Any] | None = None

    @classmethod
    def success(cls, text: str, *, structured: dict[str, Any] | None = None) -> ToolResult:
        return cls((TextContent(text),), False, structured)

    @classmethod
    def error(cls, text: str, *, structured: dict[str, Any] | None = None) -> ToolResult:
        """Failed call; the text is shown to the caller unchanged."""
        return cls((TextContent(text),), True, structured)

    @property
    def text(self) -> str:
        """All text blocks joined by blank lines."""
        return "\n\n".join(block.text for block in self.content)

    def to_dict(self) -> dict[str, Any]:
        """tools/call result payload."""
        payload: dict[str, Any] = {"content": [block.to_dict() for block in self.content]}
        if self.is_error:
            payload["isError"] = True
        if self.structured_content is not None:
            payload["structuredContent"] = self.structured_content
        return payload


class Tool(ABC):
    """
    A callable exposed through tools/list and tools/call.

    Subclasses provide name, description and input_schema (a JSON Schema
    object with "type": "object" and "properties"), either as class
    attributes or properties, and implement execute().
    """

    name: str
    description: str
    input_schema: dict[str, Any]

    @property
    def annotations(self) -> ToolAnnotations:
        return ToolAnnotations(title=self.description)

    @abstractmethod
    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        """Run the tool. Failures come back as ToolResult.error()."""

    def to_mcp_schema(self) -> dict[str, Any]:
        """tools/list entry."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
            "annotations": self.annotations.to_dict(),
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
