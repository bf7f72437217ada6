"""Tests for the httpx-backed transport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from gw2api.client.transport import HttpxTransport, Transport, TransportResponse
from gw2api.exceptions import InvalidArgumentError, TransportError


def _client_from_handler(handler) -> httpx.AsyncClient:
    """Create an httpx.AsyncClient backed by a MockTransport."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestGet:
    def test_returns_status_headers_and_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(206, json=[1, 2], headers={"X-Page-Total": "4"})

        async def run() -> TransportResponse:
            async with HttpxTransport(client=_client_from_handler(handler)) as transport:
                return await transport.get("https://api.example.com/v2/items", {"page": 0})

        response = asyncio.run(run())
        assert response.status_code == 206
        assert response.header("X-Page-Total") == "4"
        assert json.loads(response.body) == [1, 2]

    def test_sends_params_and_headers(self) -> None:
        seen: dict[str, httpx.Request] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={})

        async def run() -> None:
            transport = HttpxTransport(client=_client_from_handler(handler))
            await transport.get(
                "https://api.example.com/v2/account",
                {"lang": "en", "ids": "1,2"},
                {"Authorization": "Bearer KEY"},
            )

        asyncio.run(run())
        request = seen["request"]
        assert request.url.params["lang"] == "en"
        assert request.url.params["ids"] == "1,2"
        assert request.headers["authorization"] == "Bearer KEY"

    def test_error_statuses_are_returned_not_raised(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="maintenance")

        async def run() -> TransportResponse:
            return await HttpxTransport(client=_client_from_handler(handler)).get("https://x/v2/build", {})

        response = asyncio.run(run())
        assert response.status_code == 503
        assert response.body == "maintenance"

    def test_network_error_becomes_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async def run() -> None:
            await HttpxTransport(client=_client_from_handler(handler)).get("https://x/v2/build", {})

        with pytest.raises(TransportError, match="connection refused"):
            asyncio.run(run())

    def test_timeout_becomes_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async def run() -> None:
            await HttpxTransport(client=_client_from_handler(handler)).get("https://x/v2/build", {})

        with pytest.raises(TransportError):
            asyncio.run(run())

    def test_unparsable_url_becomes_invalid_argument(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={})

        async def run() -> None:
            transport = HttpxTransport(client=_client_from_handler(handler))
            await transport.get("https://api.example.com/v2/guild/abc\x00def", {})

        with pytest.raises(InvalidArgumentError, match="Invalid request URL"):
            asyncio.run(run())
        assert calls == []


class TestLifecycle:
    def test_injected_client_left_open(self) -> None:
        client = _client_from_handler(lambda request: httpx.Response(200, json={}))

        async def run() -> None:
            async with HttpxTransport(client=client):
                pass
            assert not client.is_closed
            await client.aclose()

        asyncio.run(run())

    def test_owned_client_created_lazily_and_closed(self) -> None:
        async def run() -> None:
            transport = HttpxTransport(timeout=5)
            assert transport._client is None
            async with transport:
                assert transport._client is not None
            assert transport._client is None

        asyncio.run(run())

    def test_satisfies_protocol(self) -> None:
        assert isinstance(HttpxTransport(), Transport)

    def test_header_lookup_case_insensitive(self) -> None:
        response = TransportResponse(200, {"x-result-total": "7"}, "")
        assert response.header("X-Result-Total") == "7"
        assert response.header("X-Missing") is None
