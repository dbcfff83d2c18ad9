"""Error response mapping for MCP and web interfaces.

Converts structured NpmPlusError exceptions into standardized error responses
with machine-readable error codes and recovery strategies.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from npmplus.exceptions import (
    NpmPlusError,
    ResourceNotFoundError,
    UpstreamError,
    ValidationError,
)


@dataclass
class ErrorResponse:
    """Structured error response for API consumers."""

    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    recovery_strategy: Optional[str] = None


# Recovery strategy templates for common error types
RECOVERY_STRATEGIES: Dict[str, str] = {
    "REGISTRY_ERROR": "Check that the tool name is valid. Use list_tools to see available tools.",
    "VALIDATION_ERROR": "Review the error message and adjust the request parameters accordingly.",
    "INVALID_INPUT": "The option combination is not supported by this package manager. Adjust the request.",
    "RESOURCE_NOT_FOUND": "Verify the package name and version are spelled correctly and published to the registry.",
    "UPSTREAM_ERROR": "An external service (npm registry, bundlephobia, OSV) failed. Retry later.",
    "PACKAGE_MANAGER_ERROR": "Ensure npm, yarn or pnpm is installed and available on PATH.",
    "CONFIGURATION_ERROR": "Check the NPMPLUS_* environment variables.",
}


def get_recovery_strategy(error_code: str) -> str:
    """Get recovery strategy for an error code."""
    return RECOVERY_STRATEGIES.get(
        error_code, "Review the error message, adjust the request, and try again."
    )


def map_exception_to_response(error: Exception) -> ErrorResponse:
    """Convert an exception to a structured ErrorResponse.

    Args:
        error: The exception to convert

    Returns:
        ErrorResponse with structured error information
    """
    if isinstance(error, NpmPlusError):
        return ErrorResponse(
            error_code=error.code,
            message=error.message,
            details=error.details if error.details else None,
            recovery_strategy=get_recovery_strategy(error.code),
        )

    if isinstance(error, PydanticValidationError):
        errors = error.errors(include_url=False)
        return ErrorResponse(
            error_code="VALIDATION_ERROR",
            message=f"Validation failed: {len(errors)} error(s)",
            details={
                "errors": [
                    {
                        "field": ".".join(str(part) for part in e["loc"]),
                        "message": e["msg"],
                        "type": e["type"],
                    }
                    for e in errors
                ]
            },
            recovery_strategy="Check the error details and provide valid input according to the tool's input schema.",
        )

    # Generic exceptions - wrap with minimal structure
    return ErrorResponse(
        error_code="INTERNAL_ERROR",
        message=str(error) or type(error).__name__,
        details={"exception_type": type(error).__name__},
        recovery_strategy="An unexpected error occurred. Please report this issue if it persists.",
    )


def map_error_for_mcp(error: Exception) -> Dict[str, Any]:
    """Map exception to MCP tool response format."""
    response = map_exception_to_response(error)

    return {
        "status": "error",
        "error_code": response.error_code,
        "message": response.message,
        "details": response.details,
        "recovery_strategy": response.recovery_strategy,
    }


def map_error_for_web(error: Exception) -> Dict[str, Any]:
    """Map exception to web API response format."""
    response = map_exception_to_response(error)

    return {
        "status": "error",
        "error": {
            "code": response.error_code,
            "message": response.message,
            "details": response.details,
            "recovery": response.recovery_strategy,
        },
    }


def get_http_status_for_error(error: Exception) -> int:
    """Determine appropriate HTTP status code for an error."""
    if isinstance(error, ResourceNotFoundError):
        return 404
    elif isinstance(error, (ValidationError, PydanticValidationError)):
        return 400
    elif isinstance(error, UpstreamError):
        return 502
    elif isinstance(error, NpmPlusError):
        return 400
    else:
        return 500
