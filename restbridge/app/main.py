"""
restbridge - REST resource API exposed as MCP tools.

FastAPI application entry point.

    GET/POST/DELETE /mcp        MCP streamable HTTP transport
    GET             /sse        MCP SSE transport (messages on /messages/)
    GET             /health     liveness and configured APIs
    GET             /           service info
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from restbridge import __version__
from restbridge.app.dependencies import (
    get_catalog,
    get_mcp_bridge,
    get_profile_registry,
    get_session_store,
    get_settings,
    initialize_services,
    shutdown_services,
)
from restbridge.app.mcp import McpBridge, McpEndpoint

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events. The MCP session manager runs for
    as long as the application does.
    """
    logger.info("Starting restbridge services...")
    try:
        await initialize_services()
        logger.info("restbridge services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise

    try:
        async with get_mcp_bridge().running():
            yield
    finally:
        logger.info("Shutting down restbridge services...")
        try:
            await shutdown_services()
            logger.info("restbridge services shut down successfully")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}", exc_info=True)


app = FastAPI(
    title="restbridge",
    description="Expose a REST resource API as MCP tools, with per-session API selection",
    version=__version__,
    lifespan=lifespan,
    debug=settings.debug,
)

app.add_route(
    "/mcp",
    McpEndpoint(get_mcp_bridge, McpBridge.handle_streamable_http),
    methods=["GET", "POST", "DELETE"],
)
app.add_route("/sse", McpEndpoint(get_mcp_bridge, McpBridge.handle_sse), methods=["GET"])
app.mount("/messages", McpEndpoint(get_mcp_bridge, McpBridge.handle_sse_message))


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint with service info."""
    return {
        "service": settings.service_name,
        "version": __version__,
        "status": "running",
    }


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, Any]:
    registry = get_profile_registry()
    return {
        "status": "healthy",
        "apis": registry.names(),
        "default_api": registry.default_profile.name,
        "resource_tools": len(get_catalog()),
        "sessions": len(get_session_store()),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "restbridge.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
