"""NPM Plus MCP Server entry point."""

import argparse
import asyncio
import sys

from npmplus.config import get_settings
from npmplus.logger import Logger, session_logger

logger: Logger = session_logger


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="NPM Plus MCP Server - JavaScript package management via Model Context Protocol"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help=f"Host address to bind to (default: {settings.host}, or NPMPLUS_HOST env var)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.mcp_port,
        help=f"Port number to listen on (default: {settings.mcp_port}, or NPMPLUS_MCP_PORT env var)",
    )
    args = parser.parse_args()

    import npmplus.mcp_server.mcp_server as mcp_server_module

    try:
        mcp_server_module.configure()
        logger.info("=" * 70)
        logger.info("STARTING NPM PLUS MCP SERVER")
        logger.info("=" * 70)
        logger.info(
            "Configuration",
            host=args.host,
            port=args.port,
            transport="HTTP Streamable",
            registry=settings.npm_registry_url,
            analytics_enabled=settings.enable_analytics,
            cache_ttl_seconds=settings.cache_ttl_seconds,
        )
        logger.info("=" * 70)
        logger.info(f"MCP endpoint: http://{args.host}:{args.port}/mcp")
        logger.info(f"Health check: http://{args.host}:{args.port}/health")
        logger.info("=" * 70)
        asyncio.run(mcp_server_module.main(host=args.host, port=args.port))
        logger.info("=" * 70)
        logger.info("MCP server shutdown complete")
        logger.info("=" * 70)
    except KeyboardInterrupt:
        logger.info("Shutdown complete")
        sys.exit(0)
    except Exception as e:
        logger.error("Failed to start server", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
