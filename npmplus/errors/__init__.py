"""Error handling utilities for npmplus."""

from npmplus.errors.mapper import (
    ErrorResponse,
    get_http_status_for_error,
    get_recovery_strategy,
    map_error_for_mcp,
    map_error_for_web,
    map_exception_to_response,
)

__all__ = [
    "ErrorResponse",
    "map_exception_to_response",
    "map_error_for_mcp",
    "map_error_for_web",
    "get_http_status_for_error",
    "get_recovery_strategy",
]
