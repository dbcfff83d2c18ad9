"""Tests for HttpClient error translation and retry."""

import json

import httpx
import pytest

from npmplus.exceptions import ResourceNotFoundError, UpstreamError

URL = "https://registry.npmjs.org/lodash"


class TestGetJson:
    @pytest.mark.asyncio
    async def test_returns_json(self, http, respx_mock):
        route = respx_mock.get(URL).mock(return_value=httpx.Response(200, json={"name": "lodash"}))
        assert await http.get_json(URL) == {"name": "lodash"}
        assert route.calls.last.request.headers["user-agent"].startswith("npmplus-mcp-server/")

    @pytest.mark.asyncio
    async def test_404_is_not_found(self, http, respx_mock):
        respx_mock.get(URL).mock(return_value=httpx.Response(404))
        with pytest.raises(ResourceNotFoundError):
            await http.get_json(URL)

    @pytest.mark.asyncio
    async def test_5xx_is_upstream_error(self, http, respx_mock):
        respx_mock.get(URL).mock(return_value=httpx.Response(502))
        with pytest.raises(UpstreamError) as exc_info:
            await http.get_json(URL)
        assert exc_info.value.details["status_code"] == 502

    @pytest.mark.asyncio
    async def test_transport_error_is_upstream_error(self, http, respx_mock):
        respx_mock.get(URL).mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(UpstreamError):
            await http.get_json(URL)

    @pytest.mark.asyncio
    async def test_timeout_is_upstream_error(self, http, respx_mock):
        respx_mock.get(URL).mock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(UpstreamError, match="timed out"):
            await http.get_json(URL)

    @pytest.mark.asyncio
    async def test_invalid_json(self, http, respx_mock):
        respx_mock.get(URL).mock(return_value=httpx.Response(200, text="not json"))
        with pytest.raises(UpstreamError, match="Invalid JSON"):
            await http.get_json(URL)


class TestRateLimitRetry:
    @pytest.mark.asyncio
    async def test_retries_once_after_429(self, http, respx_mock):
        route = respx_mock.get(URL).mock(
            side_effect=[httpx.Response(429), httpx.Response(200, json={"ok": True})]
        )
        assert await http.get_json(URL) == {"ok": True}
        assert route.call_count == 2

    @pytest.mark.asyncio
    async def test_second_429_fails(self, http, respx_mock):
        route = respx_mock.get(URL).mock(return_value=httpx.Response(429))
        with pytest.raises(UpstreamError):
            await http.get_json(URL)
        assert route.call_count == 2


class TestPostJson:
    @pytest.mark.asyncio
    async def test_sends_body(self, http, respx_mock):
        route = respx_mock.post("https://api.osv.dev/v1/query").mock(
            return_value=httpx.Response(200, json={"vulns": []})
        )
        assert await http.post_json("https://api.osv.dev/v1/query", {"package": {"name": "x"}}) == {"vulns": []}
        assert json.loads(route.calls.last.request.content) == {"package": {"name": "x"}}
