"""Example web server.

Wires a web framework, a random number and an HTTP client together and loads
the two mutually-importing sibling modules. Used as a target for dependency
analysis rather than as a production code path.
"""

import random
from typing import Any, Optional

import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from npmplus.example import module_a, module_b
from npmplus.logger import Logger, session_logger

GREETING = "Hello from example project!"


class ExampleWebServer:
    """Example server with a greeting route and an upstream fetch proxy."""

    def __init__(
        self,
        fetch_url: str = "https://api.github.com",
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Logger = session_logger,
        host: str = "0.0.0.0",
        port: int = 3000,
    ):
        self.fetch_url = fetch_url
        self.timeout = timeout
        self.host = host
        self.port = port
        self._http_client = http_client
        self._logger = logger
        self.app = self._create_app()

    def _create_app(self) -> Any:
        """Create the Starlette application."""
        routes = [
            Route("/", endpoint=self.root, methods=["GET"]),
            Route("/fetch", endpoint=self.fetch, methods=["GET"]),
        ]
        return Starlette(debug=False, routes=routes)

    async def root(self, request: Request) -> JSONResponse:
        return JSONResponse({
            "message": GREETING,
            "random": random.randint(1, 100),
            "modules": {
                "a": module_a.get_name(),
                "b": module_b.get_name(),
            },
        })

    async def fetch(self, request: Request) -> JSONResponse:
        """Proxy one GET to the upstream URL; any failure becomes a 500."""
        try:
            data = await self._get_upstream()
        except Exception as e:
            message = str(e) or type(e).__name__
            self._logger.error(
                "Upstream fetch failed",
                url=self.fetch_url,
                error=message,
                error_type=type(e).__name__,
            )
            return JSONResponse({"status": "error", "message": message}, status_code=500)

        return JSONResponse({"status": "success", "github": data})

    async def _get_upstream(self) -> Any:
        if self._http_client is not None:
            response = await self._http_client.get(self.fetch_url)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.fetch_url)
        response.raise_for_status()
        return response.json()

    def get_app(self) -> Any:
        """Return the ASGI application."""
        return self.app
