"""Test the health and analytics web server."""

import pytest
from starlette.testclient import TestClient

from npmplus.exceptions import ValidationError
from npmplus.services.analytics import AnalyticsService
from npmplus.web_server.web_server import NpmPlusWebServer, parse_days


@pytest.fixture
def analytics():
    return AnalyticsService(enabled=True)


@pytest.fixture
def client(analytics):
    return TestClient(NpmPlusWebServer(analytics=analytics).get_app())


class TestInfoRoutes:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["service"] == "npm-plus-mcp-server"
        assert body["status"] == "ok"
        assert body["endpoints"]["analytics"] == "/analytics?days=7"
        assert body["mcp"] == {"server_name": "javascript-package-manager", "protocol_version": "2024-11-05"}

    def test_ping(self, client):
        body = client.get("/ping").json()
        assert body["status"] == "ok"
        assert "timestamp" in body

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"
        assert body["analytics_enabled"] is True

    def test_health_reports_disabled_analytics(self):
        body = TestClient(NpmPlusWebServer().get_app()).get("/health").json()
        assert body["analytics_enabled"] is False

    def test_cors_header(self, client):
        response = client.get("/ping", headers={"Origin": "https://example.com"})
        assert response.headers["access-control-allow-origin"] == "*"


class TestAnalyticsRoute:
    def test_summary(self, client, analytics):
        analytics.track_tool_usage("search_packages", True, 10.0)
        analytics.track_tool_usage("package_info", False, 30.0)

        response = client.get("/analytics", params={"days": "30"})

        assert response.status_code == 200
        body = response.json()
        assert body["period"] == "30 days"
        assert body["total_calls"] == 2
        assert body["success_rate"] == 50.0
        assert "timestamp" in body

    def test_default_window(self, client):
        assert client.get("/analytics").json()["period"] == "7 days"

    @pytest.mark.parametrize("days", ["abc", "0", "366", "-1"])
    def test_invalid_days(self, client, days):
        response = client.get("/analytics", params={"days": days})
        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "error"
        assert body["error"]["code"] == "VALIDATION_ERROR"


class TestParseDays:
    def test_bounds(self):
        assert parse_days(None) == 7
        assert parse_days("1") == 1
        assert parse_days("365") == 365
        with pytest.raises(ValidationError):
            parse_days("1.5")
