"""Custom exceptions for npmplus.

All exceptions include detailed error messages designed for LLM processing,
enabling intelligent error recovery and decision-making.
"""

from npmplus.exceptions.base import (
    ConfigurationError,
    InvalidInputError,
    NpmPlusError,
    PackageManagerError,
    RegistryError,
    ResourceNotFoundError,
    UpstreamError,
    ValidationError,
)

__all__ = [
    "NpmPlusError",
    "ValidationError",
    "InvalidInputError",
    "ResourceNotFoundError",
    "ConfigurationError",
    "RegistryError",
    "UpstreamError",
    "PackageManagerError",
]
