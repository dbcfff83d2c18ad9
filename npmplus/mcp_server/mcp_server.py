#!/usr/bin/env python3
"""NPM Plus MCP Server - JavaScript package management tools.

This module provides the MCP server implementation with tool routing
handled by the centralized tool registry.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import time
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from mcp.server import Server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.types import TextContent, Tool
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from npmplus.constants import SERVICE_NAME, VERSION
from npmplus.errors import map_error_for_mcp
from npmplus.logger import session_logger as logger
from npmplus.mcp_server.tool_registry import ToolRegistry, initialize_registry
from npmplus.services import Services, create_services

app = Server(SERVICE_NAME)

# Set by configure() (or lazily on first use)
_services: Optional[Services] = None
_registry: Optional[ToolRegistry] = None


def _json_text(data: Dict[str, Any]) -> TextContent:
    return TextContent(type="text", text=json.dumps(data, indent=2, default=str))


# Built-in tools (not from a capability)
BUILTIN_TOOLS = [
    Tool(
        name="ping",
        description="Health check - returns server status",
        inputSchema={"type": "object", "properties": {}},
    ),
]


def configure(services: Optional[Services] = None) -> ToolRegistry:
    """Install the services used by tool handlers and build the registry."""
    global _services, _registry
    _services = services or create_services()
    _registry = initialize_registry(_services)
    return _registry


def get_registry() -> ToolRegistry:
    if _registry is None:
        return configure()
    return _registry


def get_services() -> Services:
    if _services is None:
        configure()
    assert _services is not None
    return _services


def _client_info() -> Tuple[Optional[str], Optional[str]]:
    """Client IP and User-Agent of the HTTP request behind the current call."""
    try:
        request = app.request_context.request
    except LookupError:
        # Called outside a request (tests, stdio)
        return None, None
    if not isinstance(request, Request):
        return None, None
    client_ip = request.client.host if request.client else None
    return client_ip, request.headers.get("user-agent")


@app.list_tools()
async def handle_list_tools() -> List[Tool]:
    """List available tools."""
    return BUILTIN_TOOLS + get_registry().get_mcp_tools()


@app.call_tool()
async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
    """Handle tool invocations."""
    logger.info("Tool called", tool=name, args=arguments)

    if name == "ping":
        return [_json_text({"status": "ok", "service": SERVICE_NAME, "version": VERSION})]

    start = time.perf_counter()
    error: Optional[Exception] = None
    try:
        result = await get_registry().handle_tool(name, arguments or {})
        payload = result.to_dict()
    except Exception as e:
        logger.error("Tool execution failed", tool=name, error=str(e), error_type=type(e).__name__)
        error = e
        payload = map_error_for_mcp(e)

    client_ip, user_agent = _client_info()
    get_services().analytics.track_tool_usage(
        name,
        success=error is None,
        response_time_ms=(time.perf_counter() - start) * 1000,
        client_ip=client_ip,
        user_agent=user_agent,
        error=error,
        package_name=(arguments or {}).get("packageName"),
    )
    return [_json_text(payload)]


# Streamable HTTP setup
session_manager_http = StreamableHTTPSessionManager(
    app=app,
    event_store=None,
    json_response=False,
    stateless=False,
)


async def handle_streamable_http(scope, receive, send) -> None:
    """Handle HTTP requests."""
    await session_manager_http.handle_request(scope, receive, send)


async def health(request: Request) -> JSONResponse:
    return JSONResponse(
        {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "tools": len(BUILTIN_TOOLS) + len(get_registry().get_tool_names()),
        }
    )


@contextlib.asynccontextmanager
async def lifespan(starlette_app) -> AsyncIterator[None]:
    """Manage server lifecycle."""
    logger.info("Starting NPM Plus MCP server")
    if _registry is None:
        configure()
    try:
        async with session_manager_http.run():
            yield
    finally:
        await get_services().aclose()
        logger.info("NPM Plus MCP server stopped")


starlette_app = Starlette(
    debug=False,
    routes=[
        Route("/health", health, methods=["GET"]),
        Mount("/mcp/", app=handle_streamable_http),
    ],
    middleware=[
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "DELETE"],
            allow_headers=["*"],
            expose_headers=["Mcp-Session-Id"],
        )
    ],
    lifespan=lifespan,
)


async def main(host: str = "0.0.0.0", port: int = 8020) -> None:
    """Run the server."""
    import uvicorn

    config = uvicorn.Config(starlette_app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    asyncio.run(main())
