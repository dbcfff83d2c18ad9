"""Data models for npmplus services and tool requests."""

from npmplus.models.package import (
    BundleSize,
    DownloadStats,
    LicenseInfo,
    PackageInfo,
    PackageOperationResult,
    PackageSearchResult,
    Person,
    SearchResults,
    SecurityInfo,
    Vulnerability,
)
from npmplus.models.requests import split_package_spec, validate_package_name

__all__ = [
    "BundleSize",
    "DownloadStats",
    "LicenseInfo",
    "PackageInfo",
    "PackageOperationResult",
    "PackageSearchResult",
    "Person",
    "SearchResults",
    "SecurityInfo",
    "Vulnerability",
    "split_package_spec",
    "validate_package_name",
]
