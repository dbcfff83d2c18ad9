"""Test the MCP server handlers and tool registry in-process."""

import contextlib
import json

import httpx
import pytest
from mcp.shared.memory import create_connected_server_and_client_session

from npmplus.config import Settings
from npmplus.exceptions import RegistryError
from npmplus.mcp_server import mcp_server
from npmplus.mcp_server.tool_registry import ToolRegistry, initialize_registry
from npmplus.services import create_services
from npmplus.tools import SearchCapability

EXPECTED_TOOLS = {
    "search_packages",
    "package_info",
    "check_bundle_size",
    "download_stats",
    "check_license",
    "check_vulnerability",
    "audit_dependencies",
    "install_packages",
    "update_packages",
    "remove_packages",
    "check_outdated",
    "clean_cache",
    "list_licenses",
    "dependency_tree",
    "analyze_dependencies",
}


def extract_text(result) -> str:
    """Extract text from MCP result."""
    if result and len(result) > 0:
        return result[0].text
    return ""


def parse_json(result) -> dict:
    """Parse JSON from MCP result."""
    return json.loads(extract_text(result))


@pytest.fixture
def configured(services, monkeypatch):
    """Point the module-level server at test services."""
    monkeypatch.setattr(mcp_server, "_services", None)
    monkeypatch.setattr(mcp_server, "_registry", None)
    mcp_server.configure(services)
    return services


class TestToolRegistry:
    @pytest.mark.asyncio
    async def test_all_capabilities_registered(self, services):
        registry = initialize_registry(services)
        assert set(registry.get_tool_names()) == EXPECTED_TOOLS
        assert set(registry.list_capabilities()) == {"search", "packages", "security", "management", "analysis"}
        assert registry.has_tool("package_info")
        assert registry.get_capability("search") is not None

    @pytest.mark.asyncio
    async def test_duplicate_capability_rejected(self, services):
        registry = ToolRegistry()
        registry.register_capability(SearchCapability(services.packages))
        with pytest.raises(RegistryError, match="already registered"):
            registry.register_capability(SearchCapability(services.packages))
        assert registry.get_tool_names() == ["search_packages"]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, services):
        with pytest.raises(RegistryError, match="Unknown tool"):
            await ToolRegistry().handle_tool("nope", {})


class TestHandlers:
    @pytest.mark.asyncio
    async def test_list_tools(self, configured):
        tools = await mcp_server.handle_list_tools()
        names = [t.name for t in tools]
        assert names[0] == "ping"
        assert set(names[1:]) == EXPECTED_TOOLS

    @pytest.mark.asyncio
    async def test_ping(self, configured):
        data = parse_json(await mcp_server.handle_call_tool("ping", {}))
        assert data == {"status": "ok", "service": "npm-plus-mcp-server", "version": "1.0.0"}

    @pytest.mark.asyncio
    async def test_unknown_tool_is_error_payload(self, configured):
        data = parse_json(await mcp_server.handle_call_tool("does_not_exist", {}))
        assert data["status"] == "error"
        assert data["error_code"] == "REGISTRY_ERROR"
        assert data["recovery_strategy"]

    @pytest.mark.asyncio
    async def test_validation_error_payload(self, configured):
        data = parse_json(await mcp_server.handle_call_tool("package_info", {"packageName": "../etc/passwd"}))
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["details"]["errors"][0]["field"] == "packageName"

    @pytest.mark.asyncio
    async def test_not_found_payload(self, configured, respx_mock):
        respx_mock.get("https://registry.npmjs.org/no-such-pkg").mock(return_value=httpx.Response(404))
        data = parse_json(await mcp_server.handle_call_tool("check_license", {"packageName": "no-such-pkg"}))
        assert data["error_code"] == "RESOURCE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_analytics_disabled_by_default(self, configured):
        await mcp_server.handle_call_tool("does_not_exist", {})
        assert configured.analytics.get_analytics_summary()["total_calls"] == 0


class TestAnalyticsTracking:
    @pytest.mark.asyncio
    async def test_calls_are_tracked(self, monkeypatch, respx_mock):
        services = create_services(Settings(_env_file=None, enable_analytics=True), retry_delay=0)
        monkeypatch.setattr(mcp_server, "_services", None)
        monkeypatch.setattr(mcp_server, "_registry", None)
        mcp_server.configure(services)
        respx_mock.get("https://api.npmjs.org/downloads/point/last-month/lodash").mock(
            return_value=httpx.Response(200, json={"downloads": 30, "start": "a", "end": "b"})
        )
        try:
            await mcp_server.handle_call_tool("download_stats", {"packageName": "lodash"})
            await mcp_server.handle_call_tool("does_not_exist", {})
        finally:
            await services.aclose()

        summary = services.analytics.get_analytics_summary()
        assert summary["total_calls"] == 2
        assert summary["success_rate"] == 50.0
        assert summary["top_tools"] == {"download_stats": 1, "does_not_exist": 1}


class TestProtocol:
    @pytest.mark.asyncio
    async def test_list_and_ping_over_session(self, configured):
        async with create_connected_server_and_client_session(mcp_server.app) as session:
            tools = await session.list_tools()
            assert {t.name for t in tools.tools} == EXPECTED_TOOLS | {"ping"}

            result = await session.call_tool("ping", {})
            assert json.loads(result.content[0].text)["status"] == "ok"


class TestHealthRoute:
    @pytest.mark.asyncio
    async def test_health(self, configured):
        transport = httpx.ASGITransport(app=mcp_server.starlette_app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["tools"] == len(EXPECTED_TOOLS) + 1


class _StubSessionManager:
    def __init__(self, fail_on_enter: bool = False):
        self.fail_on_enter = fail_on_enter

    @contextlib.asynccontextmanager
    async def run(self):
        if self.fail_on_enter:
            raise RuntimeError("session manager failed to start")
        yield


class TestLifespan:
    @pytest.fixture
    def closed(self, configured, monkeypatch):
        calls = []

        async def aclose():
            calls.append(True)

        monkeypatch.setattr(configured, "aclose", aclose)
        return calls

    @pytest.mark.asyncio
    async def test_services_closed_on_clean_shutdown(self, closed, monkeypatch):
        monkeypatch.setattr(mcp_server, "session_manager_http", _StubSessionManager())
        async with mcp_server.lifespan(None):
            assert closed == []
        assert closed == [True]

    @pytest.mark.asyncio
    async def test_services_closed_when_server_fails(self, closed, monkeypatch):
        monkeypatch.setattr(mcp_server, "session_manager_http", _StubSessionManager())
        with pytest.raises(RuntimeError, match="crashed"):
            async with mcp_server.lifespan(None):
                raise RuntimeError("crashed")
        assert closed == [True]

    @pytest.mark.asyncio
    async def test_services_closed_when_session_manager_fails(self, closed, monkeypatch):
        monkeypatch.setattr(mcp_server, "session_manager_http", _StubSessionManager(fail_on_enter=True))
        with pytest.raises(RuntimeError, match="failed to start"):
            async with mcp_server.lifespan(None):
                pass
        assert closed == [True]
