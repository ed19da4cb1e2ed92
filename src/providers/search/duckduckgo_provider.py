"""DuckDuckGo web-search provider implementing IWebSearchProvider.

Uses the duckduckgo_search library for free, keyless web searches.  The
synchronous ``DDGS`` client is run in a worker thread via
``asyncio.to_thread`` so it never blocks the event loop.  Failures
(including DDG's rate-limit exceptions) are raised as ProviderError so the
fallback chain can record them and move on.
"""

from __future__ import annotations

import asyncio

import structlog
from duckduckgo_search import DDGS
from duckduckgo_search.exceptions import DuckDuckGoSearchException

from src.interfaces.web_search_provider import IWebSearchProvider, SearchResult
from src.utils.errors import ProviderError

logger = structlog.get_logger(logger_name=__name__)


class DuckDuckGoSearchProvider(IWebSearchProvider):
    """Keyless DuckDuckGo text search."""

    async def search(self, query: str, num_results: int = 10) -> list[SearchResult]:
        try:
            raw_results = await asyncio.to_thread(self._sync_search, query, num_results)
        except DuckDuckGoSearchException as exc:
            raise ProviderError(
                message=f"DuckDuckGo search failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        results = [
            SearchResult(
                title=item.get("title", ""),
                url=item.get("href", item.get("url", "")),
                snippet=item.get("body"),
            )
            for item in raw_results or []
        ]
        logger.debug("duckduckgo_search_complete", query=query, result_count=len(results))
        return results

    @staticmethod
    def _sync_search(query: str, max_results: int) -> list[dict]:
        """Run the synchronous DDGS search (called via to_thread)."""
        with DDGS() as ddgs:
            return list(ddgs.text(query, max_results=max_results))

    def get_provider_name(self) -> str:
        return "duckduckgo"

    def is_available(self) -> bool:
        return True
