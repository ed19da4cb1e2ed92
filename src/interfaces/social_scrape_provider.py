"""Abstract base class for social-platform scrape providers.

Scrapers are the first tier of the fallback chain: they search a platform
directly for profiles matching a keyword and can fetch an account's recent
posts.  Implementations typically drive hosted scraping actors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.candidate import Candidate, Post


# Concrete implementation: ApifyScrapeProvider (src/providers/social/)
class ISocialScrapeProvider(ABC):
    """Contract for direct social-platform scraping."""

    @abstractmethod
    async def discover_profiles(
        self,
        keyword: str,
        platform: str,
        limit: int = 10,
    ) -> list[Candidate]:
        """Search ``platform`` for profiles matching ``keyword``.

        Returns
        -------
        list[Candidate]
            Zero or more profiles.  An empty list is a normal "no match".

        Raises
        ------
        src.utils.errors.ProviderError
            If the platform is unsupported or the scrape fails.
        """

    @abstractmethod
    async def fetch_recent_posts(
        self,
        handles: list[str],
        platform: str,
        limit: int = 5,
    ) -> list[Post]:
        """Fetch up to ``limit`` recent posts per handle on ``platform``."""

    @abstractmethod
    def supported_platforms(self) -> frozenset[str]:
        """Platforms this scraper can search."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"apify"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured."""
