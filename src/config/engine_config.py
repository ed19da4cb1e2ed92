"""Frozen tuning struct handed to the discovery engine at construction.

Nothing inside the engine reads environment variables or module-level
settings; every timeout, TTL and limit arrives through this object.  Build
it from the ``engine`` section of config/config.yaml with
:meth:`EngineConfig.from_mapping`, or construct it directly in tests.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from src.models.cache import ArtifactKind

DEFAULT_PLATFORMS: tuple[str, ...] = ("instagram", "twitter", "youtube", "linkedin", "facebook")


class EngineConfig(BaseModel):
    """Timeouts, TTLs and limits for one engine instance."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # --- Per-call timeouts (seconds) ---
    scrape_timeout_seconds: float = Field(default=90.0, gt=0)
    search_timeout_seconds: float = Field(default=15.0, gt=0)
    synthesis_timeout_seconds: float = Field(default=30.0, gt=0)
    scoring_timeout_seconds: float = Field(default=20.0, gt=0)
    campaign_timeout_seconds: float = Field(default=60.0, gt=0)
    posts_timeout_seconds: float = Field(default=60.0, gt=0)
    # Budget for one uncached discovery: fan-out, scoring, competitor posts.
    request_deadline_seconds: float | None = Field(default=150.0, gt=0)

    # --- Cache freshness ---
    discovery_ttl_hours: float = Field(default=6.0, gt=0)
    campaign_ttl_hours: float = Field(default=24.0, gt=0)
    # A discovery cache hit needs at least min(limit, this) artifacts.
    discovery_min_cached: int = Field(default=5, ge=1)

    # --- Fan-out ---
    default_platforms: tuple[str, ...] = DEFAULT_PLATFORMS
    scrape_keywords_per_dimension: int = Field(default=2, ge=1)
    # Platforms whose scrapes are slow enough that only the top keyword is tried.
    narrow_platforms: frozenset[str] = frozenset({"linkedin", "facebook"})
    scrape_results_per_keyword: int = Field(default=15, ge=1)
    search_results_per_query: int = Field(default=10, ge=1)
    synthesis_candidates: int = Field(default=8, ge=1)
    max_keywords: int = Field(default=8, ge=1)

    # --- Scoring ---
    use_ai_scoring: bool = True
    scoring_concurrency: int = Field(default=4, ge=1)

    # --- Competitor enrichment ---
    competitor_post_handles: int = Field(default=3, ge=0)
    competitor_posts_per_handle: int = Field(default=5, ge=1)

    # --- Streaming ---
    stream_pacing_seconds: float = Field(default=0.05, ge=0)
    default_stream_count: int = Field(default=6, ge=1)

    # --- Concurrency policy ---
    single_flight: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> EngineConfig:
        """Build from a plain mapping (e.g. YAML), ignoring unknown keys."""
        return cls.model_validate(dict(data or {}))

    def ttl_for(self, kind: ArtifactKind) -> timedelta:
        """Freshness window for entries of ``kind``."""
        if kind is ArtifactKind.CAMPAIGNS:
            return timedelta(hours=self.campaign_ttl_hours)
        return timedelta(hours=self.discovery_ttl_hours)

    def min_cached_for(self, kind: ArtifactKind, limit: int) -> int:
        """Artifacts a cache entry must hold to answer a request for ``limit``."""
        if kind is ArtifactKind.CAMPAIGNS:
            return max(limit, 1)
        return max(min(limit, self.discovery_min_cached), 1)

    def keywords_for(self, platform: str) -> int:
        """How many keywords the scrape and search tiers try on ``platform``."""
        if platform in self.narrow_platforms:
            return 1
        return self.scrape_keywords_per_dimension
