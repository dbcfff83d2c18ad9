"""Tests for mapping exceptions to MCP and web error payloads."""

import pydantic
import pytest

from npmplus.errors import get_http_status_for_error, map_error_for_mcp, map_error_for_web
from npmplus.exceptions import (
    InvalidInputError,
    PackageManagerError,
    RegistryError,
    ResourceNotFoundError,
    UpstreamError,
    ValidationError,
)
from npmplus.models.requests import PackageRequest


def pydantic_error() -> pydantic.ValidationError:
    with pytest.raises(pydantic.ValidationError) as exc_info:
        PackageRequest.model_validate({})
    return exc_info.value


class TestMcpPayload:
    def test_structured_error(self):
        payload = map_error_for_mcp(ResourceNotFoundError("Package not found: x", details={"package": "x"}))
        assert payload == {
            "status": "error",
            "error_code": "RESOURCE_NOT_FOUND",
            "message": "Package not found: x",
            "details": {"package": "x"},
            "recovery_strategy": payload["recovery_strategy"],
        }
        assert "registry" in payload["recovery_strategy"]

    def test_empty_details_become_none(self):
        assert map_error_for_mcp(RegistryError("Unknown tool: 'x'"))["details"] is None

    def test_pydantic_errors_listed_by_field(self):
        payload = map_error_for_mcp(pydantic_error())
        assert payload["error_code"] == "VALIDATION_ERROR"
        assert payload["details"]["errors"][0]["field"] == "packageName"
        assert payload["details"]["errors"][0]["type"] == "missing"

    def test_unexpected_exception(self):
        payload = map_error_for_mcp(RuntimeError("boom"))
        assert payload["error_code"] == "INTERNAL_ERROR"
        assert payload["details"] == {"exception_type": "RuntimeError"}


class TestWebPayload:
    def test_shape(self):
        body = map_error_for_web(UpstreamError("HTTP 503", status_code=503))
        assert body["status"] == "error"
        assert body["error"]["code"] == "UPSTREAM_ERROR"
        assert body["error"]["details"] == {"status_code": 503}


class TestHttpStatus:
    @pytest.mark.parametrize(
        "error, status",
        [
            (ResourceNotFoundError("x"), 404),
            (ValidationError("x"), 400),
            (InvalidInputError("x"), 400),
            (UpstreamError("x"), 502),
            (PackageManagerError("x"), 400),
            (RuntimeError("x"), 500),
        ],
    )
    def test_status(self, error, status):
        assert get_http_status_for_error(error) == status

    def test_pydantic_is_bad_request(self):
        assert get_http_status_for_error(pydantic_error()) == 400
