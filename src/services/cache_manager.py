"""Artifact cache lifecycle: freshness lookups, saves, invalidation, history.

Entries move FRESH -> VIEWED -> STALE and are never deleted.  Expiry is
lazy: an entry past ``expires_at`` keeps its stored status but is simply
not served.  ``save`` demotes the previous servable entries for the same
(owner, fingerprint, kind) to STALE before inserting the new one, so there
is at most one servable entry per key after any completed save.

The clock is injected (``now_fn``) so TTL boundaries can be tested
exactly.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from src.config.engine_config import EngineConfig
from src.interfaces.artifact_store import IArtifactStore
from src.models.cache import ArtifactKind, CacheEntry, LifecycleStatus
from src.utils.logging import get_logger

_SERVABLE = frozenset({LifecycleStatus.FRESH, LifecycleStatus.VIEWED})


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class CacheManager:
    """Freshness and lifecycle rules on top of an :class:`IArtifactStore`."""

    def __init__(
        self,
        store: IArtifactStore,
        config: EngineConfig,
        now_fn: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._config = config
        self._now = now_fn
        self._logger = get_logger(__name__)

    async def get_fresh(
        self,
        owner_id: str,
        fingerprint: str,
        kind: ArtifactKind,
        min_count: int = 1,
    ) -> CacheEntry | None:
        """Most recent servable entry with at least ``min_count`` artifacts.

        Servable means not STALE and ``now < expires_at``.
        """
        now = self._now()
        for entry in await self._store.list_entries(owner_id, fingerprint, kind):
            if not entry.is_servable(now):
                continue
            # Only the newest servable entry counts; an older one would be
            # stale by construction after any save.
            if len(entry.artifacts) >= min_count:
                self._logger.debug(
                    "cache_hit",
                    owner_id=owner_id,
                    fingerprint=fingerprint,
                    kind=kind.value,
                    artifacts=len(entry.artifacts),
                )
                return entry
            break
        self._logger.debug("cache_miss", owner_id=owner_id, fingerprint=fingerprint, kind=kind.value)
        return None

    async def save(
        self,
        owner_id: str,
        fingerprint: str,
        kind: ArtifactKind,
        artifacts: list[dict[str, Any]],
    ) -> CacheEntry:
        """Demote the key's servable entries to STALE and insert a FRESH one."""
        now = self._now()
        demoted = await self._store.set_status(
            owner_id, fingerprint, kind, LifecycleStatus.STALE, only_from=_SERVABLE
        )
        entry = CacheEntry(
            entry_id=uuid.uuid4().hex,
            owner_id=owner_id,
            fingerprint=fingerprint,
            kind=kind,
            artifacts=artifacts,
            generated_at=now,
            expires_at=now + self._config.ttl_for(kind),
            status=LifecycleStatus.FRESH,
        )
        await self._store.insert(entry)
        self._logger.info(
            "cache_saved",
            owner_id=owner_id,
            fingerprint=fingerprint,
            kind=kind.value,
            artifacts=len(artifacts),
            demoted=demoted,
        )
        return entry

    async def invalidate(self, owner_id: str, fingerprint: str, kind: ArtifactKind) -> int:
        """Demote the key's servable entries without a replacement."""
        demoted = await self._store.set_status(
            owner_id, fingerprint, kind, LifecycleStatus.STALE, only_from=_SERVABLE
        )
        self._logger.info(
            "cache_invalidated",
            owner_id=owner_id,
            fingerprint=fingerprint,
            kind=kind.value,
            demoted=demoted,
        )
        return demoted

    async def mark_viewed(self, entry_id: str) -> bool:
        """FRESH -> VIEWED.  Viewed entries are still served until they expire."""
        return await self._store.set_entry_status(
            entry_id, LifecycleStatus.VIEWED, only_from=frozenset({LifecycleStatus.FRESH})
        )

    async def history(self, owner_id: str, fingerprint: str, kind: ArtifactKind) -> list[CacheEntry]:
        """Every entry for the key, newest first, stale ones included."""
        return await self._store.list_entries(owner_id, fingerprint, kind)
