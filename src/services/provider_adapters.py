"""Uniform, time-bounded access to the three provider capabilities.

Every call made through :class:`ProviderAdapters` is wrapped by
:func:`call_provider`, which

- bounds the call with ``asyncio.wait_for`` (expiry -> ProviderTimeout),
- converts any raised error into a failed :class:`ProviderResult`
  (domain errors keep their type, anything else becomes ProviderError),
- records the elapsed time for logging.

Nothing here retries.  Retry and fallback belong to the orchestrator,
which reads ``ProviderResult.ok`` and moves on to the next tier.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

from src.config.engine_config import EngineConfig
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.social_scrape_provider import ISocialScrapeProvider
from src.interfaces.web_search_provider import IWebSearchProvider, SearchResult
from src.models.candidate import Candidate, Post
from src.utils.errors import GravityError, ProviderError, ProviderTimeout
from src.utils.logging import get_logger

_T = TypeVar("_T")

_logger = get_logger(__name__)


@dataclass(frozen=True)
class ProviderResult(Generic[_T]):
    """Outcome of one provider call: a value or an error, never both."""

    ok: bool
    provider_name: str
    value: _T | None = None
    error: GravityError | None = None
    elapsed_ms: float = 0.0

    @property
    def error_message(self) -> str:
        return str(self.error) if self.error is not None else ""


async def call_provider(
    provider_name: str,
    awaitable: Awaitable[_T],
    timeout: float,
) -> ProviderResult[_T]:
    """Await ``awaitable`` under ``timeout`` and wrap the outcome."""
    started = time.monotonic()
    try:
        value = await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        error: GravityError = ProviderTimeout(
            message=f"no response within {timeout:g}s", provider_name=provider_name
        )
    except GravityError as exc:
        error = exc
    except Exception as exc:  # noqa: BLE001 — vendor SDKs raise arbitrary types
        error = ProviderError(message=f"{type(exc).__name__}: {exc}", provider_name=provider_name)
    else:
        return ProviderResult(
            ok=True,
            provider_name=provider_name,
            value=value,
            elapsed_ms=(time.monotonic() - started) * 1000,
        )

    elapsed_ms = (time.monotonic() - started) * 1000
    _logger.debug(
        "provider_call_failed",
        provider=provider_name,
        error_type=type(error).__name__,
        error=str(error),
        elapsed_ms=round(elapsed_ms, 1),
    )
    return ProviderResult(ok=False, provider_name=provider_name, error=error, elapsed_ms=elapsed_ms)


def _not_configured(capability: str) -> ProviderResult[Any]:
    return ProviderResult(
        ok=False,
        provider_name=capability,
        error=ProviderError(message=f"{capability} provider not configured", provider_name=capability),
    )


class ProviderAdapters:
    """Bundle of optional providers exposed through time-bounded calls.

    Any provider may be ``None`` (or report ``is_available() == False``);
    calls to it return a failed result without touching the network.
    """

    def __init__(
        self,
        config: EngineConfig,
        scraper: ISocialScrapeProvider | None = None,
        search: IWebSearchProvider | None = None,
        llm: ILLMProvider | None = None,
    ) -> None:
        self._config = config
        self._scraper = scraper if scraper is not None and scraper.is_available() else None
        self._search = search if search is not None and search.is_available() else None
        self._llm = llm if llm is not None and llm.is_available() else None

    @property
    def has_scraper(self) -> bool:
        return self._scraper is not None

    @property
    def has_search(self) -> bool:
        return self._search is not None

    @property
    def has_llm(self) -> bool:
        return self._llm is not None

    def scraper_supports(self, platform: str) -> bool:
        return self._scraper is not None and platform in self._scraper.supported_platforms()

    async def discover_profiles(
        self, keyword: str, platform: str, limit: int
    ) -> ProviderResult[list[Candidate]]:
        if self._scraper is None:
            return _not_configured("social scrape")
        return await call_provider(
            self._scraper.get_provider_name(),
            self._scraper.discover_profiles(keyword, platform, limit),
            self._config.scrape_timeout_seconds,
        )

    async def fetch_recent_posts(
        self, handles: list[str], platform: str, limit: int
    ) -> ProviderResult[list[Post]]:
        if self._scraper is None:
            return _not_configured("social scrape")
        return await call_provider(
            self._scraper.get_provider_name(),
            self._scraper.fetch_recent_posts(handles, platform, limit),
            self._config.posts_timeout_seconds,
        )

    async def web_search(self, query: str, num_results: int) -> ProviderResult[list[SearchResult]]:
        if self._search is None:
            return _not_configured("web search")
        return await call_provider(
            self._search.get_provider_name(),
            self._search.search(query, num_results),
            self._config.search_timeout_seconds,
        )

    async def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        timeout: float,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> ProviderResult[str]:
        if self._llm is None:
            return _not_configured("text generation")
        return await call_provider(
            self._llm.get_provider_name(),
            self._llm.complete(system_prompt, user_prompt, temperature, max_tokens),
            timeout,
        )
