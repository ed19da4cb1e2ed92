"""In-memory artifact store.

Entries live in a dict keyed by (owner, fingerprint, kind).  Nothing is
ever evicted, so history queries see every entry ever inserted for the
life of the process.
"""

from __future__ import annotations

from collections import defaultdict

from src.interfaces.artifact_store import IArtifactStore
from src.models.cache import ArtifactKind, CacheEntry, LifecycleStatus

_Key = tuple[str, str, ArtifactKind]


class MemoryArtifactStore(IArtifactStore):
    """Process-local artifact store for development and tests."""

    def __init__(self) -> None:
        self._entries: dict[_Key, list[CacheEntry]] = defaultdict(list)
        self._index: dict[str, _Key] = {}

    async def insert(self, entry: CacheEntry) -> None:
        key = (entry.owner_id, entry.fingerprint, entry.kind)
        self._entries[key].append(entry)
        self._index[entry.entry_id] = key

    async def list_entries(
        self,
        owner_id: str,
        fingerprint: str,
        kind: ArtifactKind,
    ) -> list[CacheEntry]:
        entries = self._entries.get((owner_id, fingerprint, kind), [])
        # Insertion order breaks generated_at ties: later insert is newer.
        indexed = list(enumerate(entries))
        indexed.sort(key=lambda pair: (pair[1].generated_at, pair[0]), reverse=True)
        return [entry for _, entry in indexed]

    async def set_status(
        self,
        owner_id: str,
        fingerprint: str,
        kind: ArtifactKind,
        status: LifecycleStatus,
        only_from: frozenset[LifecycleStatus] | None = None,
    ) -> int:
        entries = self._entries.get((owner_id, fingerprint, kind), [])
        updated = 0
        for i, entry in enumerate(entries):
            if only_from is not None and entry.status not in only_from:
                continue
            if entry.status is status:
                continue
            entries[i] = entry.model_copy(update={"status": status})
            updated += 1
        return updated

    async def set_entry_status(
        self,
        entry_id: str,
        status: LifecycleStatus,
        only_from: frozenset[LifecycleStatus] | None = None,
    ) -> bool:
        key = self._index.get(entry_id)
        if key is None:
            return False
        entries = self._entries[key]
        for i, entry in enumerate(entries):
            if entry.entry_id == entry_id:
                if only_from is not None and entry.status not in only_from:
                    return False
                entries[i] = entry.model_copy(update={"status": status})
                return True
        return False

    def get_provider_name(self) -> str:
        return "memory"
