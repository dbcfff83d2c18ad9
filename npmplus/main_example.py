"""Example server entry point."""

import argparse
import sys

import uvicorn

from npmplus.config import get_settings
from npmplus.example.server import ExampleWebServer
from npmplus.logger import Logger, session_logger

logger: Logger = session_logger


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Example server - greeting and upstream fetch routes")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help=f"Host address to bind to (default: {settings.host}, or NPMPLUS_HOST env var)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.example_port,
        help=f"Port number to listen on (default: {settings.example_port}, or NPMPLUS_EXAMPLE_PORT env var)",
    )
    args = parser.parse_args()

    server = ExampleWebServer(
        fetch_url=settings.example_fetch_url,
        timeout=settings.http_timeout_seconds,
        host=args.host,
        port=args.port,
    )

    try:
        logger.info("=" * 70)
        logger.info("STARTING EXAMPLE SERVER")
        logger.info("=" * 70)
        logger.info("Configuration", host=args.host, port=args.port, fetch_url=settings.example_fetch_url)
        logger.info(f"Server running on port {args.port}")
        logger.info("=" * 70)
        uvicorn.run(server.app, host=args.host, port=args.port, log_level="info")
        logger.info("Example server shutdown complete")
    except KeyboardInterrupt:
        logger.info("Example server stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error("Failed to start example server", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
