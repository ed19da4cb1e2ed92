"""Public interface definitions for all external service providers.

Every external API or storage backend used by the discovery engine is
accessed exclusively through the abstract base classes defined in this
package.  Concrete adapters implement these interfaces and are injected at
runtime.

ADAPTER PATTERN:
    The engine never calls ``openai`` or the Apify REST API directly; it
    calls ``llm.complete(...)`` or ``scraper.discover_profiles(...)`` on
    whatever object implements the interface.  Swapping a vendor is a
    one-line change in ``src/main.py``, and tests inject mocks.

CONCRETE PROVIDER MAP:
    Interface                  →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────────
    ILLMProvider               →  OpenAILLMProvider, AnthropicLLMProvider
    IWebSearchProvider         →  SearchApiProvider, DuckDuckGoSearchProvider
    ISocialScrapeProvider      →  ApifyScrapeProvider
    IArtifactStore             →  MemoryArtifactStore, SQLiteArtifactStore
    ICacheProvider             →  MemoryCacheProvider

Re-exports
----------
ILLMProvider
    Text-generation contract.
IWebSearchProvider, SearchResult
    Web-search contract and helper dataclass.
ISocialScrapeProvider
    Social-platform profile discovery and recent-post contract.
IArtifactStore
    Cache-entry persistence contract.
ICacheProvider
    Short-lived key-value response cache contract.
"""

from src.interfaces.artifact_store import IArtifactStore
from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.social_scrape_provider import ISocialScrapeProvider
from src.interfaces.web_search_provider import IWebSearchProvider, SearchResult

__all__ = [
    "IArtifactStore",
    "ICacheProvider",
    "ILLMProvider",
    "ISocialScrapeProvider",
    "IWebSearchProvider",
    "SearchResult",
]
