"""
Tool Factory (per-session tool sets).

Tools are not built once at startup with a fixed API configuration.
They are built per session, bound to that session's ApiSession, so
switching or reconfiguring the API in one session never leaks into
another.

    SessionToolFactory (startup, stateless)
          ↓
    build_registry(session)        ← per session
          ↓
    ToolRegistry[get_books, ..., switch_api, configure_api, list_tools]

Usage:
    factory = SessionToolFactory(catalog, dispatcher)

    registry = factory.build_registry(session)
    result = await registry.get_required("get_books").execute({})
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from restbridge.auth import AuthTemplateRegistry
from restbridge.tools.registry import ToolRegistry
from restbridge.tools.resource import ResourceOperationTool
from restbridge.tools.system import (
    ConfigureApiTool,
    GetApiInfoTool,
    ListApisTool,
    ListToolsTool,
    SwitchApiTool,
)

if TYPE_CHECKING:
    from restbridge.catalog import ToolCatalog
    from restbridge.dispatcher import OperationDispatcher
    from restbridge.session import ApiSession
    from restbridge.tools.base import Tool

logger = logging.getLogger(__name__)


@runtime_checkable
class ToolFactory(Protocol):
    """
    Protocol for tool factories.

    A ToolFactory builds tools at runtime for one session.

    Example:
        class PingToolFactory:
            def build_tools(self, session: ApiSession) -> Sequence[Tool]:
                return [PingTool()]
    """

    def build_tools(self, session: ApiSession) -> Sequence[Tool]:
        ...


class SessionToolFactory:
    """
    Builds the resource and system tools for a session.

    The catalog, dispatcher and auth templates are shared, read-only
    collaborators; only the ApiSession differs between sessions.
    """

    def __init__(
        self,
        catalog: ToolCatalog,
        dispatcher: OperationDispatcher,
        *,
        auth_templates: AuthTemplateRegistry | None = None,
    ) -> None:
        self._catalog = catalog
        self._dispatcher = dispatcher
        self._auth_templates = auth_templates or AuthTemplateRegistry()

    def build_tools(self, session: ApiSession) -> Sequence[Tool]:
        """Resource tools in catalog order, followed by system tools."""
        tools: list[Tool] = [
            ResourceOperationTool(entry, session, self._catalog, self._dispatcher)
            for entry in self._catalog.entries()
        ]
        tools += [
            ListApisTool(session),
            GetApiInfoTool(session, self._auth_templates),
            SwitchApiTool(session),
            ConfigureApiTool(session),
            ListToolsTool(lambda: tools),
        ]
        logger.debug(
            f"[tool_factory] Built {len(tools)} tools for session {session.session_id[:8]}"
        )
        return tools

    def build_registry(self, session: ApiSession) -> ToolRegistry:
        registry = ToolRegistry()
        registry.register_all(list(self.build_tools(session)))
        return registry
