"""Abstract base class for web-search service providers.

The search tier of the fallback chain runs ``site:`` restricted queries
through this contract and parses profile URLs out of the results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SearchResult:
    """A single web-search result.

    Attributes
    ----------
    title:
        The page title as returned by the search engine.
    url:
        The canonical URL of the result page.
    snippet:
        An optional text excerpt from the result, often containing the
        follower count for social profiles.
    """

    title: str
    url: str
    snippet: str | None = None


# Concrete implementations: SearchApiProvider, DuckDuckGoSearchProvider
# Located in: src/providers/search/
class IWebSearchProvider(ABC):
    """Contract for web-search services."""

    @abstractmethod
    async def search(self, query: str, num_results: int = 10) -> list[SearchResult]:
        """Execute a web search and return the top results.

        Raises
        ------
        src.utils.errors.ProviderError
            If the search API call fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"searchapi"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured."""
