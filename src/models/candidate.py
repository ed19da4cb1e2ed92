"""Candidate, post, and relevance-score models.

A Candidate is one social profile surfaced by a provider tier (an
influencer or a competitor account).  Scoring wraps it in a
ScoredCandidate together with a RelevanceScore.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ScoreSource(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Where a relevance score came from."""

    AI = "ai"
    HEURISTIC = "heuristic"


class Provenance(BaseModel):
    """Which provider and tier produced a candidate, for which dimension."""

    model_config = ConfigDict(frozen=True)

    provider: str
    tier: str
    dimension: str
    keyword: str = ""


class Post(BaseModel):
    """A recent public post by a candidate account."""

    model_config = ConfigDict(frozen=True)

    platform: str
    author_handle: str
    content: str = ""
    likes: int = 0
    comments: int = 0
    posted_at: datetime | None = None
    url: str = ""
    sentiment: str = "neutral"
    post_type: str = "general"


class Candidate(BaseModel):
    """One social profile found for a platform (dimension)."""

    model_config = ConfigDict(frozen=True)

    platform: str
    # Source identifier on the platform -- the username without a leading "@".
    handle: str
    display_name: str = ""
    bio: str = ""
    audience_size: int = Field(default=0, ge=0)
    # Percent, e.g. 3.5 means 3.5% of followers engage per post.
    engagement_rate: float = Field(default=0.0, ge=0.0)
    avg_likes: int = 0
    avg_comments: int = 0
    verified: bool = False
    profile_url: str = ""
    provenance: Provenance | None = None
    recent_posts: list[Post] = Field(default_factory=list)

    def identity(self) -> tuple[str, str]:
        """Dedup key: platform plus the case-folded handle."""
        return (self.platform.lower(), self.handle.lstrip("@").casefold())


class ScoreFactor(BaseModel):
    """One named component of a relevance score."""

    model_config = ConfigDict(frozen=True)

    name: str
    achieved: float = Field(ge=0.0)
    max: float = Field(gt=0.0)

    @model_validator(mode="after")
    def _achieved_within_max(self) -> ScoreFactor:
        if self.achieved > self.max:
            raise ValueError(f"factor {self.name!r} achieved {self.achieved} > max {self.max}")
        return self


class RelevanceScore(BaseModel):
    """0-100 fit score with the factor breakdown it was derived from."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    reason: str = ""
    factors: list[ScoreFactor] = Field(default_factory=list)
    source: ScoreSource = ScoreSource.HEURISTIC


class ScoredCandidate(BaseModel):
    """A candidate with its relevance score and commercial estimates."""

    model_config = ConfigDict(frozen=True)

    candidate: Candidate
    relevance: RelevanceScore
    audience_tier: str = "nano"
    price_range: tuple[int, int] = (50, 200)
    estimated_reach: int = 0
