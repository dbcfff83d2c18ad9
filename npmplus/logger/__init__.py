"""Logger module for npmplus

Components log through the ``Logger`` interface; ``session_logger`` is the
process-wide instance configured from the environment.

Usage:
    from npmplus.logger import session_logger as logger

    logger.info("Package searched", query="react", results=25)
"""

import logging
import os

from .interface import Logger
from .structured_logger import StructuredLogger

# Configuration from environment
LOG_LEVEL_STR = os.environ.get("NPMPLUS_LOG_LEVEL", "INFO").upper()
LOG_FILE = os.environ.get("NPMPLUS_LOG_FILE")
LOG_JSON = os.environ.get("NPMPLUS_LOG_JSON", "false").lower() == "true"

# Map string level to logging constant
LOG_LEVEL = getattr(logging, LOG_LEVEL_STR, logging.INFO)

# Shared logger instance
session_logger: Logger = StructuredLogger(
    level=LOG_LEVEL,
    log_file=LOG_FILE,
    json_format=LOG_JSON,
)

__all__ = [
    "Logger",
    "StructuredLogger",
    "session_logger",
]
