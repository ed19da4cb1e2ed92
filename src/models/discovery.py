"""Discovery request / result models and the per-dimension state machine states.

Architecture note:
    A *dimension* is one platform (instagram, youtube, ...) searched for a
    request.  Each dimension walks its own tier chain; DimensionOutcome is
    the frozen record of how that walk ended.  DiscoveryResult is what the
    engine hands back to callers, and StreamEvent is the incremental form
    of the same data.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.cache import ArtifactKind
from src.models.candidate import Candidate


# ---------------------------------------------------------------------------
# Tier chain
# ---------------------------------------------------------------------------
class Tier(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Provider tiers in priority order."""

    SCRAPE = "scrape"        # Direct social-platform scrape
    SEARCH = "search"        # Web search restricted to the platform's domain
    SYNTHESIS = "synthesis"  # LLM-generated candidate list


TIER_ORDER: tuple[Tier, ...] = (Tier.SCRAPE, Tier.SEARCH, Tier.SYNTHESIS)


class DimensionState(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """States of one dimension run.

        PENDING -> SCRAPE -> SEARCH -> SYNTHESIS -> SUCCESS | EXHAUSTED

    A tier that yields at least one candidate moves straight to SUCCESS.
    """

    PENDING = "pending"
    SCRAPE = "scrape"
    SEARCH = "search"
    SYNTHESIS = "synthesis"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


class TierAttempt(BaseModel):
    """Outcome of one tier for one dimension."""

    model_config = ConfigDict(frozen=True)

    tier: Tier
    provider: str
    ok: bool
    candidate_count: int = 0
    error: str | None = None
    elapsed_ms: float = 0.0


class DimensionOutcome(BaseModel):
    """Final record of a dimension run."""

    model_config = ConfigDict(frozen=True)

    dimension: str
    state: DimensionState
    candidates: list[Candidate] = Field(default_factory=list)
    attempts: list[TierAttempt] = Field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is DimensionState.SUCCESS


# ---------------------------------------------------------------------------
# Engine results
# ---------------------------------------------------------------------------
class DiscoveryResult(BaseModel):
    """What ``DiscoveryEngine.discover`` returns.

    ``artifacts`` are JSON-ready dicts (scored candidates or campaign ideas).
    An empty list with populated ``errors`` is a normal "nothing found"
    answer, not a failure.
    """

    model_config = ConfigDict(frozen=True)

    kind: ArtifactKind
    fingerprint: str
    artifacts: list[dict[str, Any]] = Field(default_factory=list)
    cached: bool = False
    errors: list[str] = Field(default_factory=list)
    search_keywords: list[str] = Field(default_factory=list)
    cache_entry_id: str | None = None


class StreamEventType(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    START = "start"
    ITEM = "item"
    ITEM_ERROR = "item-error"
    COMPLETE = "complete"


class StreamEvent(BaseModel):
    """One event of an incremental result stream."""

    model_config = ConfigDict(frozen=True)

    type: StreamEventType
    index: int | None = None
    total: int | None = None
    item: dict[str, Any] | None = None
    message: str | None = None
    cached: bool = False

    def to_sse(self) -> str:
        """Render as a Server-Sent-Events ``data:`` frame."""
        payload = self.model_dump(mode="json", exclude_none=True)
        return f"data: {json.dumps(payload)}\n\n"
