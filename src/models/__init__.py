"""Gravity domain models — re-exports all public model classes.

Other parts of the codebase can import from ``src.models`` instead of the
individual submodules.  The models are organized by concern:
    - business.py   — the business profile a request is made for
    - candidate.py  — discovered profiles, posts and relevance scores
    - campaign.py   — generated campaign ideas
    - cache.py      — cache entries and their lifecycle
    - discovery.py  — tier chain states, results and stream events

If you add a new model class, add it to ``__all__`` too.
"""

from __future__ import annotations

from src.models.business import BusinessContext
from src.models.cache import ArtifactKind, CacheEntry, LifecycleStatus
from src.models.campaign import CampaignIdea
from src.models.candidate import (
    Candidate,
    Post,
    Provenance,
    RelevanceScore,
    ScoredCandidate,
    ScoreFactor,
    ScoreSource,
)
from src.models.discovery import (
    TIER_ORDER,
    DimensionOutcome,
    DimensionState,
    DiscoveryResult,
    StreamEvent,
    StreamEventType,
    Tier,
    TierAttempt,
)

__all__ = [
    "ArtifactKind",
    "BusinessContext",
    "CacheEntry",
    "CampaignIdea",
    "Candidate",
    "DimensionOutcome",
    "DimensionState",
    "DiscoveryResult",
    "LifecycleStatus",
    "Post",
    "Provenance",
    "RelevanceScore",
    "ScoreFactor",
    "ScoreSource",
    "ScoredCandidate",
    "StreamEvent",
    "StreamEventType",
    "TIER_ORDER",
    "Tier",
    "TierAttempt",
]
