"""
Dependency Injection for restbridge.

Provides singleton instances of the registry, catalog, dispatcher, session
store and MCP bridge.

The shared httpx.AsyncClient is created in initialize_services() (called
from the FastAPI lifespan) and closed in shutdown_services(). Until then,
get_dispatcher() returns a dispatcher that opens one client per request.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

import httpx

from restbridge.app.mcp import McpBridge
from restbridge.catalog import ToolCatalog
from restbridge.config import AppSettings, load_settings
from restbridge.dispatcher import OperationDispatcher
from restbridge.profiles import DEFAULT_PROFILES, ApiProfileRegistry
from restbridge.resources import DEFAULT_SCHEMAS
from restbridge.session import SessionStore
from restbridge.tools.factory import SessionToolFactory

logger = logging.getLogger(__name__)


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern.
    """
    return load_settings([profile.name for profile in DEFAULT_PROFILES])


@lru_cache()
def get_profile_registry() -> ApiProfileRegistry:
    return ApiProfileRegistry.default(get_settings().default_api)


@lru_cache()
def get_catalog() -> ToolCatalog:
    return ToolCatalog(DEFAULT_SCHEMAS)


# Global instances (initialized on first access)
_http_client: Optional[httpx.AsyncClient] = None
_dispatcher: Optional[OperationDispatcher] = None
_session_store: Optional[SessionStore] = None
_mcp_bridge: Optional[McpBridge] = None


def get_dispatcher() -> OperationDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = OperationDispatcher(
            timeout=get_settings().request_timeout,
            http_client=_http_client,
        )
    return _dispatcher


def get_session_store() -> SessionStore:
    """
    Get the session store.

    Sessions are seeded with the credentials from RESTBRIDGE_CREDENTIAL_*
    and evicted after RESTBRIDGE_SESSION_TTL idle seconds.
    """
    global _session_store
    if _session_store is None:
        settings = get_settings()
        _session_store = SessionStore(
            get_profile_registry(),
            credentials=settings.credential_values(),
            max_sessions=settings.max_sessions,
            idle_ttl=settings.session_ttl,
        )
    return _session_store


def get_mcp_bridge() -> McpBridge:
    global _mcp_bridge
    if _mcp_bridge is None:
        factory = SessionToolFactory(get_catalog(), get_dispatcher())
        _mcp_bridge = McpBridge(
            get_session_store(),
            factory,
            server_name=get_settings().service_name,
        )
    return _mcp_bridge


async def initialize_services() -> None:
    """
    Initialize all services on application startup.

    Called from FastAPI lifespan.
    """
    global _http_client, _dispatcher, _mcp_bridge
    settings = get_settings()

    _http_client = httpx.AsyncClient(timeout=settings.request_timeout)
    # Rebuild so the dispatcher picks up the shared client
    _dispatcher = None
    _mcp_bridge = None
    get_mcp_bridge()

    registry = get_profile_registry()
    logger.info(
        f"[dependencies] {len(get_catalog())} resource tools, "
        f"{len(registry)} APIs, default={registry.default_profile.name}"
    )


async def shutdown_services() -> None:
    """
    Cleanup all services on application shutdown.

    Called from FastAPI lifespan.
    """
    global _http_client, _dispatcher, _mcp_bridge
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
    _dispatcher = None
    _mcp_bridge = None


def reset_services() -> None:
    """Drop every cached instance. Used by tests that change the environment."""
    global _http_client, _dispatcher, _session_store, _mcp_bridge
    _http_client = None
    _dispatcher = None
    _session_store = None
    _mcp_bridge = None
    get_settings.cache_clear()
    get_profile_registry.cache_clear()
    get_catalog.cache_clear()
