"""
MCP server wiring.

The protocol itself (initialize, capability negotiation, ping, JSON-RPC
framing and error codes, session ids) is handled by the `mcp` SDK. This
module plugs restbridge's tools into a low-level `mcp.server.lowlevel.Server`
and exposes its two HTTP transports:

    streamable HTTP   /mcp       StreamableHTTPSessionManager (stateful)
    SSE               /sse       SseServerTransport, messages on /messages/

Every transport session is mapped onto one ApiSession plus the ToolRegistry
built for it, so per-session API selection flows into every tool call. The
session key is the id the transport issued (Mcp-Session-Id header, or the
SSE session_id query parameter); unknown ids are rejected by the transport
before a handler runs.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.datastructures import Headers
from starlette.responses import PlainTextResponse
from starlette.types import Message, Receive, Scope, Send

from restbridge import __version__
from restbridge.session import SessionStore
from restbridge.tools.factory import SessionToolFactory
from restbridge.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

SESSION_HEADER = "mcp-session-id"
SSE_MESSAGE_PATH = "/messages/"


class McpBridge:
    """
    Serves restbridge tools over MCP.

    Example:
        bridge = McpBridge(store, factory, server_name="restbridge")

        async with bridge.running():
            ...  # route /mcp to bridge.handle_streamable_http
    """

    def __init__(
        self,
        store: SessionStore,
        factory: SessionToolFactory,
        *,
        server_name: str = "restbridge",
    ) -> None:
        self._store = store
        self._factory = factory
        self._registries: dict[str, ToolRegistry] = {}
        self._http: StreamableHTTPSessionManager | None = None
        self._sse = SseServerTransport(SSE_MESSAGE_PATH)

        self.server: Server[Any, Any] = Server(server_name, version=__version__)
        self.server.list_tools()(self.list_tools)
        # Arguments are checked by the catalog, which reports every issue
        self.server.call_tool(validate_input=False)(self.call_tool)

    @property
    def store(self) -> SessionStore:
        return self._store

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def _current_session_key(self) -> str:
        """Transport session id of the request being handled."""
        ctx = self.server.request_context
        request = getattr(ctx, "request", None)
        if request is not None:
            key = request.headers.get(SESSION_HEADER) or request.query_params.get("session_id")
            if key:
                return key
        # In-process transports carry no HTTP request; the connection is the session
        return f"connection-{id(ctx.session):x}"

    def registry_for(self, session_key: str) -> ToolRegistry:
        """Tool registry of one session, built on first use."""
        # get() also evicts idle sessions and refreshes this one
        session = self._store.get(session_key)
        registry = self._registries.get(session_key) if session is not None else None
        if registry is None:
            if session is None:
                session = self._store.create(session_key)
                logger.info(f"[mcp] Opened session {session_key[:8]}")
            registry = self._factory.build_registry(session)
            self._registries[session_key] = registry
        self._forget_evicted()
        return registry

    def close_session(self, session_key: str) -> bool:
        self._registries.pop(session_key, None)
        closed = self._store.drop(session_key)
        if closed:
            logger.info(f"[mcp] Closed session {session_key[:8]}")
        return closed

    def _forget_evicted(self) -> None:
        if len(self._registries) > len(self._store):
            self._registries = {
                key: registry
                for key, registry in self._registries.items()
                if key in self._store
            }

    # ------------------------------------------------------------------
    # MCP handlers
    # ------------------------------------------------------------------

    async def list_tools(self) -> list[types.Tool]:
        registry = self.registry_for(self._current_session_key())
        return [types.Tool.model_validate(schema) for schema in registry.to_mcp_schemas()]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        """
        Run one tool for the calling session.

        Unknown tools and tool crashes come back as isError results, which
        is how the SDK reports handler exceptions as well.
        """
        registry = self.registry_for(self._current_session_key())
        tool = registry.get(name)
        if tool is None:
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=f"Unknown tool: {name}")],
                isError=True,
            )

        try:
            result = await tool.execute(arguments or {})
        except Exception as e:
            logger.error(f"[mcp] Tool {name} raised: {e}", exc_info=True)
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=f"Tool {name} failed: {e}")],
                isError=True,
            )

        return types.CallToolResult.model_validate(result.to_dict())

    # ------------------------------------------------------------------
    # Transports
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def running(self) -> AsyncIterator[None]:
        """
        Run the streamable HTTP session manager.

        A session manager can only run once, so each application start
        gets a fresh one.
        """
        self._http = StreamableHTTPSessionManager(app=self.server, json_response=True)
        try:
            async with self._http.run():
                logger.info("[mcp] Streamable HTTP transport started")
                yield
        finally:
            self._http = None
            logger.info("[mcp] Streamable HTTP transport stopped")

    async def handle_streamable_http(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self._http is None:
            response = PlainTextResponse("MCP transport is not running", status_code=503)
            await response(scope, receive, send)
            return

        session_key = Headers(scope=scope).get(SESSION_HEADER)
        status: int | None = None

        async def send_and_record(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        await self._http.handle_request(scope, receive, send_and_record)

        if scope["method"] == "DELETE" and session_key and status is not None and status < 300:
            self.close_session(session_key)

    async def handle_sse(self, scope: Scope, receive: Receive, send: Send) -> None:
        async with self._sse.connect_sse(scope, receive, send) as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

    async def handle_sse_message(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._sse.handle_post_message(scope, receive, send)


class McpEndpoint:
    """
    ASGI route target that forwards to one of the bridge's transports.

    The bridge is looked up per request, so a restarted application picks
    up the bridge built for it.
    """

    def __init__(
        self,
        get_bridge: Callable[[], McpBridge],
        handler: Callable[[McpBridge, Scope, Receive, Send], Awaitable[None]],
    ) -> None:
        self._get_bridge = get_bridge
        self._handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._handler(self._get_bridge(), scope, receive, send)
