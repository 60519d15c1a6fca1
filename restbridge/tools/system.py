"""
System tools: discovery and per-session API selection.

    list_tools     - every tool available in this session
    list_apis      - registered API profiles
    get_api_info   - the session's active API, auth and usage examples
    switch_api     - activate another profile for this session
    configure_api  - overlay base URL / auth type / credential for this session

switch_api and configure_api only touch the caller's ApiSession; other
sessions keep their own configuration.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from restbridge.auth import AuthKind, AuthTemplateRegistry
from restbridge.errors import UnknownAuthKind, UnknownProfile
from restbridge.tools.base import Tool, ToolAnnotations, ToolResult

if TYPE_CHECKING:
    from restbridge.session import ApiSession

logger = logging.getLogger(__name__)


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def describe_tool(tool: Tool) -> dict[str, Any]:
    """Discovery entry: name, description and "type - text" parameters."""
    entry: dict[str, Any] = {"name": tool.name, "description": tool.description}
    schema = tool.input_schema
    required = set(schema.get("required", []))
    parameters = {}
    for name, prop in schema.get("properties", {}).items():
        text = f"{prop.get('type', 'string')} - {prop.get('description', name)}"
        if name not in required:
            text += " (optional)"
        parameters[name] = text
    if parameters:
        entry["parameters"] = parameters
    return entry


class _SystemTool(Tool):
    """A tool that answers locally and never calls the backend API."""

    #: True for tools that change the session's active configuration
    changes_session = False

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    @property
    def annotations(self) -> ToolAnnotations:
        return ToolAnnotations(
            title=self.description,
            read_only=not self.changes_session,
            idempotent=True,
        )


class ListToolsTool(_SystemTool):
    """
    List all available tools and their descriptions.

    Takes a callable rather than a list so the output always reflects the
    session's current tool set, including list_tools itself.
    """

    name = "list_tools"
    description = "List all available tools and their descriptions"

    def __init__(self, tools: Callable[[], list[Tool]]) -> None:
        self._tools = tools

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        available = [describe_tool(tool) for tool in self._tools()]
        return ToolResult.success(
            _dump({"available_tools": available}),
            structured={"available_tools": available},
        )


class ListApisTool(_SystemTool):
    """List registered API profiles, marking the session's active one."""

    name = "list_apis"
    description = "List all configured APIs that can be selected with switch_api"

    def __init__(self, session: ApiSession) -> None:
        self._session = session

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        active_name = self._session.active.name
        apis = [
            {**profile.to_dict(), "active": profile.name == active_name}
            for profile in self._session.registry.list()
        ]
        return ToolResult.success(
            f"Available APIs ({len(apis)}):\n\n{_dump(apis)}",
            structured={"apis": apis},
        )


class GetApiInfoTool(_SystemTool):
    """Describe the session's active API."""

    name = "get_api_info"
    description = "Get information about the currently active API configuration"

    def __init__(self, session: ApiSession, auth_templates: AuthTemplateRegistry) -> None:
        self._session = session
        self._auth_templates = auth_templates

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        active = self._session.active
        info: dict[str, Any] = active.to_dict()

        if active.auth_kind is not AuthKind.NONE:
            template = self._auth_templates.resolve(active.auth_kind)
            info["auth"] = {
                "headerName": template.header_name,
                "valuePrefix": template.value_prefix,
                "description": template.description,
            }

        usage = active.profile.usage
        if usage.quick_start or usage.common_operations:
            info["usageExamples"] = {
                "quickStart": usage.quick_start,
                "commonOperations": usage.common_operations,
            }

        return ToolResult.success(
            f"Current API: {active.profile.display_name}\n\n{_dump(info)}",
            structured=info,
        )


class SwitchApiTool(_SystemTool):
    """Activate another registered profile for this session."""

    name = "switch_api"
    description = "Switch the active API for this session"
    changes_session = True

    def __init__(self, session: ApiSession) -> None:
        self._session = session

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "api_name": {
                    "type": "string",
                    "description": "Name of the API to switch to",
                    "enum": self._session.registry.names(),
                },
            },
            "required": ["api_name"],
        }

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        api_name = arguments.get("api_name")
        if not isinstance(api_name, str) or not api_name:
            return ToolResult.error("Error switching API: api_name is required")

        try:
            active = self._session.activate(api_name)
        except UnknownProfile as e:
            return ToolResult.error(
                f"Error switching API: {e.message}",
                structured={"kind": "unknown_profile", "available": e.available},
            )

        return ToolResult.success(
            f"Switched to {active.profile.display_name} ({active.base_url})",
            structured=active.to_dict(),
        )


class ConfigureApiTool(_SystemTool):
    """Overlay base URL, auth type or credential for this session's API."""

    name = "configure_api"
    description = (
        "Configure the active API for this session (base URL, auth type, auth credential)"
    )
    changes_session = True

    def __init__(self, session: ApiSession) -> None:
        self._session = session

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "base_url": {
                    "type": "string",
                    "description": "Base URL of the API",
                },
                "auth_type": {
                    "type": "string",
                    "description": "Authentication type",
                    "enum": [kind.value for kind in AuthKind],
                },
                "auth_header": {
                    "type": "string",
                    "description": "Credential (token, API key or base64 user:password)",
                },
            },
            "required": [],
        }

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        base_url = arguments.get("base_url")
        auth_type = arguments.get("auth_type")
        credential = arguments.get("auth_header")

        if base_url is None and auth_type is None and credential is None:
            return ToolResult.error(
                "Error configuring API: provide at least one of base_url, auth_type, auth_header"
            )
        not_strings = [
            key
            for key, value in (("base_url", base_url), ("auth_type", auth_type), ("auth_header", credential))
            if value is not None and not isinstance(value, str)
        ]
        if not_strings:
            return ToolResult.error(
                f"Error configuring API: expected string for {', '.join(not_strings)}"
            )
        if base_url is not None and not base_url.startswith(("http://", "https://")):
            return ToolResult.error(
                f"Error configuring API: base_url must be an absolute http(s) URL: {base_url}"
            )

        try:
            active = self._session.overlay(
                base_url=base_url,
                auth_kind=auth_type,
                credential=credential,
            )
        except UnknownAuthKind as e:
            logger.info(f"[configure_api] Rejected auth type {auth_type!r}")
            return ToolResult.error(f"Error configuring API: {e.message}")

        return ToolResult.success(
            f"Configured {active.profile.display_name}:\n\n{_dump(active.to_dict())}",
            structured=active.to_dict(),
        )
