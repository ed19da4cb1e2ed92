"""Artifact cache models.

A CacheEntry holds one generated batch of artifacts for an owner,
fingerprint and kind.  Entries are never deleted: superseding or
invalidating an entry demotes its status to STALE so history stays
inspectable.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ArtifactKind(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """What a cache entry contains."""

    COMPETITORS = "competitors"
    INFLUENCERS = "influencers"
    CAMPAIGNS = "campaigns"


class LifecycleStatus(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Lifecycle of a cache entry: FRESH -> VIEWED -> STALE."""

    FRESH = "fresh"
    VIEWED = "viewed"
    STALE = "stale"


class CacheEntry(BaseModel):
    """One cached batch of artifacts."""

    model_config = ConfigDict(frozen=True)

    entry_id: str
    owner_id: str
    fingerprint: str
    kind: ArtifactKind
    # Serialized artifacts (model_dump(mode="json") of the domain objects).
    artifacts: list[dict[str, Any]] = Field(default_factory=list)
    generated_at: datetime
    expires_at: datetime
    status: LifecycleStatus = LifecycleStatus.FRESH

    def is_servable(self, now: datetime) -> bool:
        """Not stale and not yet expired at ``now``."""
        return self.status is not LifecycleStatus.STALE and now < self.expires_at
