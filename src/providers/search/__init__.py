"""Web-search provider implementations.

- SearchApiProvider        -- Google results via SearchAPI.io (paid, keyed)
- DuckDuckGoSearchProvider -- keyless fallback used when no SearchAPI key is set
"""

from src.providers.search.duckduckgo_provider import DuckDuckGoSearchProvider
from src.providers.search.searchapi_provider import SearchApiProvider

__all__ = ["DuckDuckGoSearchProvider", "SearchApiProvider"]
