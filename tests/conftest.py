"""Shared pytest fixtures for the Gravity discovery engine test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config.engine_config import EngineConfig
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.social_scrape_provider import ISocialScrapeProvider
from src.interfaces.web_search_provider import IWebSearchProvider, SearchResult
from src.models.business import BusinessContext
from src.models.candidate import Candidate
from src.providers.cache.memory_store import MemoryArtifactStore
from src.services.cache_manager import CacheManager
from src.services.provider_adapters import ProviderAdapters

# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Injectable ``now_fn`` that only moves when a test advances it."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fitness_context() -> BusinessContext:
    """A small fitness studio, the profile most scenarios run against."""
    return BusinessContext(
        name="Iron Lotus Studio",
        industry="fitness",
        niche="yoga strength training",
        description="Boutique studio mixing yoga with strength work.",
        target_audience="busy professionals",
        brand_voice="encouraging",
        city="Austin",
        country="US",
        marketing_goals=["brand awareness", "lead generation"],
        competitors=["Peak Fitness"],
    )


@pytest.fixture
def engine_config() -> EngineConfig:
    """Engine tuning with short timeouts and no stream pacing."""
    return EngineConfig(
        scrape_timeout_seconds=1.0,
        search_timeout_seconds=1.0,
        synthesis_timeout_seconds=1.0,
        scoring_timeout_seconds=1.0,
        campaign_timeout_seconds=1.0,
        posts_timeout_seconds=1.0,
        request_deadline_seconds=5.0,
        default_platforms=("instagram", "twitter", "youtube"),
        stream_pacing_seconds=0.0,
        use_ai_scoring=False,
    )


@pytest.fixture
def make_candidate() -> Callable[..., Candidate]:
    """Factory for candidates with sensible defaults."""

    def _make(handle: str = "fitjane", platform: str = "instagram", **overrides: Any) -> Candidate:
        fields: dict[str, Any] = {
            "platform": platform,
            "handle": handle,
            "display_name": handle.title(),
            "bio": "Strength coach and yoga teacher",
            "audience_size": 25_000,
            "engagement_rate": 3.5,
        }
        fields.update(overrides)
        return Candidate(**fields)

    return _make


# ---------------------------------------------------------------------------
# Mock provider fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm_provider() -> ILLMProvider:
    """Mock ILLMProvider.

    Override with ``mock_llm_provider.complete.return_value = "..."`` or
    ``mock_llm_provider.complete.side_effect = [...]`` in specific tests.
    """
    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.is_available.return_value = True
    mock.complete = AsyncMock(return_value="[]")
    return mock


@pytest.fixture
def mock_search_provider() -> IWebSearchProvider:
    """Mock IWebSearchProvider returning two Instagram profiles and one non-profile page."""
    mock = MagicMock(spec=IWebSearchProvider)
    mock.get_provider_name.return_value = "mock-search"
    mock.is_available.return_value = True
    mock.search = AsyncMock(
        return_value=[
            SearchResult(
                title="Jane Lift (@janelift) • Instagram photos and videos",
                url="https://www.instagram.com/janelift/",
                snippet="48.2K followers · Strength coach for busy professionals",
            ),
            SearchResult(
                title="Yoga Max - Instagram",
                url="https://instagram.com/yogamax",
                snippet="12,400 followers. Yoga flows and mobility tips",
            ),
            SearchResult(
                title="Explore #fitness",
                url="https://www.instagram.com/explore/tags/fitness/",
                snippet="Top posts",
            ),
        ]
    )
    return mock


@pytest.fixture
def mock_scrape_provider(make_candidate: Callable[..., Candidate]) -> ISocialScrapeProvider:
    """Mock ISocialScrapeProvider supporting instagram and twitter."""
    mock = MagicMock(spec=ISocialScrapeProvider)
    mock.get_provider_name.return_value = "mock-scrape"
    mock.is_available.return_value = True
    mock.supported_platforms.return_value = frozenset({"instagram", "twitter"})
    mock.discover_profiles = AsyncMock(
        side_effect=lambda keyword, platform, limit=10: [
            make_candidate("coach_amy", platform, audience_size=80_000),
            make_candidate("liftwithleo", platform, audience_size=15_000),
        ]
    )
    mock.fetch_recent_posts = AsyncMock(return_value=[])
    return mock


# ---------------------------------------------------------------------------
# Service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_store() -> MemoryArtifactStore:
    return MemoryArtifactStore()


@pytest.fixture
def cache_manager(memory_store: MemoryArtifactStore, engine_config: EngineConfig, clock: FakeClock) -> CacheManager:
    return CacheManager(memory_store, engine_config, now_fn=clock)


@pytest.fixture
def no_providers(engine_config: EngineConfig) -> ProviderAdapters:
    """Adapters with nothing configured: every tier fails fast."""
    return ProviderAdapters(engine_config)
