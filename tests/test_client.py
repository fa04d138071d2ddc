"""Tests for the edge function client."""

import httpx
import pytest

from conftest import BASE_URL, system_row

from posbot.api.errors import (
    ApiError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    ResponseFormatError,
)
from posbot.api.schemas import SystemCountPage


class TestRequests:
    @pytest.mark.asyncio
    async def test_call_parses_schema(self, fake_backend, edge_client):
        fake_backend.add(
            "GET", "/functions/v1/count", {"items": [system_row("v1", 10)], "count": 1}
        )

        page = await edge_client.call("GET", "count", SystemCountPage, params={"store_id": "s1"})

        assert page.count == 1
        assert page.items[0].variant_id == "v1"
        assert page.items[0].system_qty == 10

    @pytest.mark.asyncio
    async def test_sends_bearer_and_apikey(self, fake_backend, edge_client, token_source):
        fake_backend.add("GET", "/functions/v1/count", {"items": [], "count": 0})

        await edge_client.request("GET", "count")

        request = fake_backend.requests[0]
        assert request.headers["Authorization"] == f"Bearer {token_source.token}"
        assert request.headers["apikey"] == "anon-key"
        assert str(request.url).startswith(f"{BASE_URL}/functions/v1/count")

    @pytest.mark.asyncio
    async def test_none_params_are_dropped(self, fake_backend, edge_client):
        fake_backend.add("GET", "/functions/v1/count", {"items": [], "count": 0})

        await edge_client.request("GET", "count", params={"store_id": "s1", "search": None})

        params = fake_backend.requests[0].url.params
        assert params["store_id"] == "s1"
        assert "search" not in params


class TestErrorMapping:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_failures(self, fake_backend, edge_client, status):
        fake_backend.add("GET", "/functions/v1/count", {"error": "Invalid JWT"}, status=status)

        with pytest.raises(AuthenticationError) as exc_info:
            await edge_client.request("GET", "count")

        assert exc_info.value.status_code == status
        assert exc_info.value.message == "Invalid JWT"

    @pytest.mark.asyncio
    async def test_missing_function_is_not_found(self, edge_client):
        with pytest.raises(NotFoundError):
            await edge_client.request("GET", "draft")

    @pytest.mark.asyncio
    async def test_server_message_is_kept(self, fake_backend, edge_client):
        fake_backend.add("POST", "/functions/v1/count", {"message": "store_id required"}, status=400)

        with pytest.raises(ApiError) as exc_info:
            await edge_client.request("POST", "count", json_data={})

        assert exc_info.value.message == "store_id required"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_status_line_when_body_is_empty(self, fake_backend, edge_client):
        fake_backend.add(
            "GET", "/functions/v1/count", handler=lambda request: httpx.Response(502)
        )

        with pytest.raises(ApiError) as exc_info:
            await edge_client.request("GET", "count")

        assert exc_info.value.message == "HTTP 502: Bad Gateway"

    @pytest.mark.asyncio
    async def test_connection_failure_is_network_error(self, fake_backend, edge_client):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        fake_backend.add("GET", "/functions/v1/count", handler=refuse)

        with pytest.raises(NetworkError):
            await edge_client.request("GET", "count")

    @pytest.mark.asyncio
    async def test_timeout_is_network_error(self, fake_backend, edge_client):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        fake_backend.add("GET", "/functions/v1/count", handler=slow)

        with pytest.raises(NetworkError) as exc_info:
            await edge_client.request("GET", "count")

        assert "timeout" in exc_info.value.message.lower()

    @pytest.mark.asyncio
    async def test_undecodable_body_is_network_error(self, fake_backend, edge_client):
        def garbled(request):
            return httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all"
            )

        fake_backend.add("POST", "/functions/v1/inventory", handler=garbled)

        with pytest.raises(NetworkError):
            await edge_client.request("POST", "inventory", json_data={"action": "adjust"})

    @pytest.mark.asyncio
    async def test_unexpected_shape_is_format_error(self, fake_backend, edge_client):
        fake_backend.add("GET", "/functions/v1/count", {"items": [{"sku": "no-variant"}]})

        with pytest.raises(ResponseFormatError):
            await edge_client.call("GET", "count", SystemCountPage)

    @pytest.mark.asyncio
    async def test_non_json_success_is_format_error(self, fake_backend, edge_client):
        fake_backend.add(
            "GET", "/functions/v1/count", handler=lambda request: httpx.Response(200, text="<html>")
        )

        with pytest.raises(ResponseFormatError):
            await edge_client.request("GET", "count")
