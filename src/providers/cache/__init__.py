"""Cache providers.

Two kinds of cache live here:

- MemoryCacheProvider -- a short-lived TTL cache for raw provider responses
  (implements ICacheProvider).
- MemoryArtifactStore / SQLiteArtifactStore -- persistent storage for
  artifact cache entries (implement IArtifactStore).  The cache manager
  owns freshness and lifecycle; the stores only persist rows.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.cache.memory_store import MemoryArtifactStore
from src.providers.cache.sqlite_store import SQLiteArtifactStore

__all__ = ["MemoryArtifactStore", "MemoryCacheProvider", "SQLiteArtifactStore"]
