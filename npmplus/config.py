"""Application configuration

Settings are read from ``NPMPLUS_*`` environment variables (and an optional
``.env`` file) via pydantic-settings. ``get_settings()`` caches the loaded
instance; tests call ``reset_settings()`` after patching the environment.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from npmplus.constants import URLS

_ENV_PREFIX = "NPMPLUS_"


class Settings(BaseSettings):
    """Runtime settings for all npmplus servers."""

    model_config = SettingsConfigDict(
        env_prefix=_ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Servers
    host: str = "0.0.0.0"
    example_port: int = Field(default=3000, ge=1, le=65535)
    web_port: int = Field(default=8022, ge=1, le=65535)
    mcp_port: int = Field(default=8020, ge=1, le=65535)

    # Example server
    example_fetch_url: str = URLS["GITHUB_API"]

    # Outbound HTTP
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    npm_registry_url: str = URLS["NPM_REGISTRY"]
    npm_api_url: str = URLS["NPM_API"]
    bundlephobia_url: str = URLS["BUNDLEPHOBIA_API"]
    github_advisory_url: str = URLS["GITHUB_ADVISORY_API"]
    osv_url: str = URLS["OSV_API"]

    # Caching
    cache_ttl_seconds: int = Field(default=600, gt=0)
    cache_max_keys: int = Field(default=1000, gt=0)

    # Package manager subprocesses
    package_manager_timeout_seconds: float = Field(default=60.0, gt=0)

    # Analytics
    enable_analytics: bool = False
    analytics_salt: str = "npmplus-2025"


_settings: Optional[Settings] = None


def get_settings(reload: bool = False) -> Settings:
    """Get the cached settings, loading them on first use or when reload=True."""
    global _settings
    if _settings is None or reload:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
]
