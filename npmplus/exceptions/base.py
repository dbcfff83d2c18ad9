"""Exception classes for the npmplus application.

Every error carries a machine-readable ``code``, a human message and optional
structured ``details`` so it can be mapped to MCP and web responses without
losing context.
"""

from typing import Any, Dict, Optional


class NpmPlusError(Exception):
    """Base for all npmplus errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ValidationError(NpmPlusError):
    """Raised when a request fails validation (bad path, malformed spec, ...)."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: str = "VALIDATION_ERROR",
    ):
        super().__init__(code=code, message=message, details=details)


class InvalidInputError(ValidationError):
    """Raised when an option combination is not supported by the target tool."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details, code="INVALID_INPUT")


class ResourceNotFoundError(NpmPlusError):
    """Raised when a package, version or project cannot be found."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="RESOURCE_NOT_FOUND", message=message, details=details)


class ConfigurationError(NpmPlusError):
    """Raised when settings are missing or inconsistent."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="CONFIGURATION_ERROR", message=message, details=details)


class RegistryError(NpmPlusError):
    """Raised for tool registry problems (unknown tool, duplicate registration)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="REGISTRY_ERROR", message=message, details=details)


class UpstreamError(NpmPlusError):
    """Raised when an external API (npm, bundlephobia, OSV, GitHub) fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if status_code is not None:
            merged["status_code"] = status_code
        super().__init__(code="UPSTREAM_ERROR", message=message, details=merged)
        self.status_code = status_code


class PackageManagerError(NpmPlusError):
    """Raised when the package manager executable cannot be run."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="PACKAGE_MANAGER_ERROR", message=message, details=details)
