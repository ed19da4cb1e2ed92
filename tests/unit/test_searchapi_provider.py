"""Unit tests for the SearchAPI.io web search provider."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from src.providers.search.searchapi_provider import SearchApiProvider
from src.utils.errors import MalformedResponse, ProviderError


def _client(status: int = 200, payload: Any = None, seen: list[httpx.Request] | None = None) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=payload)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _failing_client() -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestSearchApiProvider:
    @pytest.mark.asyncio
    async def test_maps_organic_results(self) -> None:
        payload = {
            "organic_results": [
                {"title": "Jane Lift", "link": "https://instagram.com/janelift", "snippet": "48K followers"},
                {"title": "No link"},
                {"title": "Yoga Max", "link": "https://instagram.com/yogamax"},
            ]
        }
        seen: list[httpx.Request] = []
        async with _client(payload=payload, seen=seen) as client:
            results = await SearchApiProvider(api_key="key", http_client=client).search(
                "site:instagram.com yoga", num_results=5
            )

        assert [r.url for r in results] == ["https://instagram.com/janelift", "https://instagram.com/yogamax"]
        assert results[0].snippet == "48K followers"
        params = seen[0].url.params
        assert params["engine"] == "google"
        assert params["num"] == "5"
        assert params["q"] == "site:instagram.com yoga"

    @pytest.mark.asyncio
    async def test_http_error(self) -> None:
        async with _client(status=429, payload={}) as client:
            with pytest.raises(ProviderError, match="HTTP 429"):
                await SearchApiProvider(api_key="key", http_client=client).search("q")

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        async with _failing_client() as client:
            with pytest.raises(ProviderError, match="request failed"):
                await SearchApiProvider(api_key="key", http_client=client).search("q")

    @pytest.mark.asyncio
    async def test_non_object_payload(self) -> None:
        async with _client(payload=["not", "a", "dict"]) as client:
            with pytest.raises(MalformedResponse):
                await SearchApiProvider(api_key="key", http_client=client).search("q")

    @pytest.mark.asyncio
    async def test_not_configured(self) -> None:
        async with _client(payload={}) as client:
            provider = SearchApiProvider(api_key="", http_client=client)
            assert provider.is_available() is False
            with pytest.raises(ProviderError):
                await provider.search("q")
