"""Pytest configuration and fixtures

Provides shared fixtures for all tests: isolated settings, an HTTP client
without retry delays, service wiring and temporary Node.js projects.
"""

import json
import os
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from npmplus.config import Settings, reset_settings  # noqa: E402 - after sys.path setup
from npmplus.services import create_services  # noqa: E402
from npmplus.services.cache import CacheService  # noqa: E402
from npmplus.services.http_client import HttpClient  # noqa: E402
from npmplus.services.package_manager import PackageManagerService  # noqa: E402
from npmplus.services.package_service import PackageService  # noqa: E402
from npmplus.services.registry import RegistryService  # noqa: E402
from npmplus.services.security import SecurityService  # noqa: E402


# ============================================================================
# CONFIGURATION
# ============================================================================


@pytest.fixture(scope="function", autouse=True)
def isolated_settings(monkeypatch):
    """Drop cached settings and any NPMPLUS_* variables around every test."""
    for key in list(os.environ):
        if key.startswith("NPMPLUS_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings():
    return Settings(_env_file=None)


# ============================================================================
# SERVICES
# ============================================================================


@pytest_asyncio.fixture
async def http():
    """HttpClient that retries 429s immediately."""
    async with httpx.AsyncClient() as client:
        yield HttpClient(client=client, retry_delay=0)


@pytest.fixture
def registry(http):
    return RegistryService(http)


@pytest.fixture
def security(http):
    return SecurityService(http)


@pytest.fixture
def package_service(http):
    registry = RegistryService(http)
    security = SecurityService(http)
    return PackageService(CacheService(), registry, security, PackageManagerService(timeout=5))


@pytest_asyncio.fixture
async def services(settings):
    wired = create_services(settings, retry_delay=0)
    yield wired
    await wired.aclose()


# ============================================================================
# PROJECTS
# ============================================================================


@pytest.fixture
def node_project(tmp_path):
    """A minimal Node.js project directory with a package.json."""
    project = tmp_path / "project"
    project.mkdir()
    (project / "package.json").write_text(
        json.dumps(
            {
                "name": "demo",
                "version": "1.0.0",
                "dependencies": {"lodash": "^4.17.21", "express": "^4.18.0"},
                "devDependencies": {"jest": "^29.0.0"},
            }
        )
    )
    return project


@pytest.fixture
def fake_module():
    """Write ``node_modules/<name>/package.json`` into a project."""

    def install(project: Path, name: str, version: str, license_value=None) -> None:
        module_dir = project / "node_modules" / name
        module_dir.mkdir(parents=True)
        manifest = {"name": name, "version": version}
        if license_value is not None:
            manifest["license"] = license_value
        (module_dir / "package.json").write_text(json.dumps(manifest))

    return install
