"""Abstract base class for artifact cache storage backends.

The cache manager owns the freshness and lifecycle rules; stores only
persist and query :class:`CacheEntry` rows.  Implementations may keep
entries in memory or in SQLite.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.cache import ArtifactKind, CacheEntry, LifecycleStatus


# Concrete implementations: MemoryArtifactStore, SQLiteArtifactStore
# Located in: src/providers/cache/
class IArtifactStore(ABC):
    """Contract for persisting cache entries.

    Stores never delete entries; status changes are the only mutation.
    """

    @abstractmethod
    async def insert(self, entry: CacheEntry) -> None:
        """Persist a new entry."""

    @abstractmethod
    async def list_entries(
        self,
        owner_id: str,
        fingerprint: str,
        kind: ArtifactKind,
    ) -> list[CacheEntry]:
        """Return every entry for the key, newest ``generated_at`` first."""

    @abstractmethod
    async def set_status(
        self,
        owner_id: str,
        fingerprint: str,
        kind: ArtifactKind,
        status: LifecycleStatus,
        only_from: frozenset[LifecycleStatus] | None = None,
    ) -> int:
        """Set ``status`` on entries for the key.

        Parameters
        ----------
        only_from:
            When given, only entries currently in one of these statuses are
            updated.

        Returns
        -------
        int
            Number of entries updated.
        """

    @abstractmethod
    async def set_entry_status(
        self,
        entry_id: str,
        status: LifecycleStatus,
        only_from: frozenset[LifecycleStatus] | None = None,
    ) -> bool:
        """Set ``status`` on a single entry.

        Returns ``False`` if the entry is unknown or its current status is
        not in ``only_from``.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"memory"`` or ``"sqlite"``."""
