"""SearchAPI.io Google-engine provider implementing IWebSearchProvider.

Calls ``https://www.searchapi.io/api/v1/search`` with ``engine=google`` and
maps ``organic_results`` to :class:`SearchResult`.  The shared
``httpx.AsyncClient`` is injected so connection pooling and test transports
are controlled by the caller.
"""

from __future__ import annotations

from typing import Any

import httpx

from src.interfaces.web_search_provider import IWebSearchProvider, SearchResult
from src.utils.errors import MalformedResponse, ProviderError
from src.utils.logging import get_logger

_API_URL = "https://www.searchapi.io/api/v1/search"


class SearchApiProvider(IWebSearchProvider):
    """Google results through SearchAPI.io (requires ``SEARCHAPI_API_KEY``)."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        country: str = "us",
        language: str = "en",
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._country = country
        self._language = language
        self._logger = get_logger(__name__)

    async def search(self, query: str, num_results: int = 10) -> list[SearchResult]:
        if not self._api_key:
            raise ProviderError(message="SearchAPI not configured", provider_name="searchapi")

        params = {
            "api_key": self._api_key,
            "engine": "google",
            "q": query,
            "num": str(num_results),
            "gl": self._country,
            "hl": self._language,
        }
        try:
            response = await self._http.get(_API_URL, params=params)
            response.raise_for_status()
            payload: Any = response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                message=f"SearchAPI returned HTTP {exc.response.status_code}",
                provider_name="searchapi",
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                message=f"SearchAPI request failed: {exc}",
                provider_name="searchapi",
            ) from exc
        except ValueError as exc:
            raise MalformedResponse(
                message="SearchAPI returned non-JSON body",
                provider_name="searchapi",
            ) from exc

        if not isinstance(payload, dict):
            raise MalformedResponse(
                message="SearchAPI payload is not an object",
                provider_name="searchapi",
            )

        results = [
            SearchResult(
                title=item.get("title", ""),
                url=item.get("link", ""),
                snippet=item.get("snippet"),
            )
            for item in payload.get("organic_results") or []
            if isinstance(item, dict) and item.get("link")
        ]
        self._logger.debug("searchapi_search_complete", query=query, result_count=len(results))
        return results[:num_results]

    def get_provider_name(self) -> str:
        return "searchapi"

    def is_available(self) -> bool:
        return bool(self._api_key)
