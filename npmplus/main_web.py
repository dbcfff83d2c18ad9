"""NPM Plus Web Server entry point."""

import argparse
import sys

import uvicorn

from npmplus.config import get_settings
from npmplus.logger import Logger, session_logger
from npmplus.services.analytics import AnalyticsService
from npmplus.web_server.web_server import NpmPlusWebServer

logger: Logger = session_logger


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="NPM Plus Web Server - health and analytics REST API")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help=f"Host address to bind to (default: {settings.host}, or NPMPLUS_HOST env var)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.web_port,
        help=f"Port number to listen on (default: {settings.web_port}, or NPMPLUS_WEB_PORT env var)",
    )
    args = parser.parse_args()

    server = NpmPlusWebServer(
        analytics=AnalyticsService(enabled=settings.enable_analytics, salt=settings.analytics_salt),
        host=args.host,
        port=args.port,
    )

    try:
        logger.info("=" * 70)
        logger.info("STARTING NPM PLUS WEB SERVER")
        logger.info("=" * 70)
        logger.info(
            "Configuration",
            host=args.host,
            port=args.port,
            analytics_enabled=settings.enable_analytics,
        )
        logger.info("=" * 70)
        logger.info(f"API endpoint: http://{args.host}:{args.port}")
        logger.info(f"Ping: http://{args.host}:{args.port}/ping")
        logger.info(f"Health check: http://{args.host}:{args.port}/health")
        logger.info(f"Analytics: http://{args.host}:{args.port}/analytics")
        logger.info("=" * 70)
        uvicorn.run(server.app, host=args.host, port=args.port, log_level="info")
        logger.info("=" * 70)
        logger.info("Web server shutdown complete")
        logger.info("=" * 70)
    except KeyboardInterrupt:
        logger.info("Web server stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error("Failed to start web server", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
