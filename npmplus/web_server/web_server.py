"""NPM Plus Web Server - health and analytics endpoints."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from npmplus.constants import MCP_PROTOCOL_VERSION, SERVER_NAME, SERVICE_NAME, VERSION
from npmplus.errors import get_http_status_for_error, map_error_for_web
from npmplus.exceptions import ValidationError
from npmplus.logger import session_logger as logger
from npmplus.services.analytics import AnalyticsService

MAX_ANALYTICS_DAYS = 365


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_days(raw: Optional[str], default: int = 7) -> int:
    """Validate the ``days`` query parameter (1..365)."""
    if raw is None or raw == "":
        return default
    try:
        days = int(raw)
    except ValueError as e:
        raise ValidationError(f"days must be an integer, got {raw!r}", details={"days": raw}) from e
    if not 1 <= days <= MAX_ANALYTICS_DAYS:
        raise ValidationError(
            f"days must be between 1 and {MAX_ANALYTICS_DAYS}", details={"days": days}
        )
    return days


class NpmPlusWebServer:
    """Web server exposing service health and usage analytics."""

    ENDPOINTS = {
        "health": "/health",
        "ping": "/ping",
        "analytics": "/analytics?days=7",
        "mcp": "/mcp/",
    }

    def __init__(
        self,
        analytics: Optional[AnalyticsService] = None,
        host: str = "0.0.0.0",
        port: int = 8022,
    ):
        self.analytics = analytics or AnalyticsService()
        self.host = host
        self.port = port
        self.app = self._create_app()

    def _create_app(self) -> Any:
        routes = [
            Route("/", endpoint=self.root, methods=["GET"]),
            Route("/ping", endpoint=self.ping, methods=["GET"]),
            Route("/health", endpoint=self.health, methods=["GET"]),
            Route("/analytics", endpoint=self.analytics_summary, methods=["GET"]),
        ]
        app = Starlette(debug=False, routes=routes)
        return CORSMiddleware(app, allow_origins=["*"], allow_methods=["GET"], allow_headers=["*"])

    async def root(self, request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "service": SERVICE_NAME,
                "status": "ok",
                "version": VERSION,
                "message": "NPM Plus - JavaScript package management for AI assistants",
                "mcp": {"server_name": SERVER_NAME, "protocol_version": MCP_PROTOCOL_VERSION},
                "endpoints": self.ENDPOINTS,
            }
        )

    async def ping(self, request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "service": SERVICE_NAME, "timestamp": _timestamp()})

    async def health(self, request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "status": "healthy",
                "service": SERVICE_NAME,
                "version": VERSION,
                "timestamp": _timestamp(),
                "analytics_enabled": self.analytics.is_enabled(),
                "endpoints": self.ENDPOINTS,
            }
        )

    async def analytics_summary(self, request: Request) -> JSONResponse:
        try:
            days = parse_days(request.query_params.get("days"))
        except ValidationError as e:
            logger.warning("Rejected analytics request", error=e.message)
            return JSONResponse(map_error_for_web(e), status_code=get_http_status_for_error(e))

        summary: Dict[str, Any] = self.analytics.get_analytics_summary(days)
        summary["timestamp"] = _timestamp()
        return JSONResponse(summary)

    def get_app(self) -> Any:
        """Return the ASGI application."""
        return self.app
