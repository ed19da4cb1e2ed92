"""Abstract base class for short-lived provider response caches.

Vendor adapters memoize raw responses (e.g. an Apify scrape for one
keyword) for a few minutes so repeated requests inside that window do not
re-run expensive jobs.  This is separate from the artifact cache, whose
lifecycle rules live in the cache manager.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value response caches."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value under *key*, or ``None`` if missing or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key* for the cache's TTL."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key* (no-op if absent)."""
