"""Gravity discovery engine composition root.

Wires providers, the artifact store and the engine together via dependency
injection.  Loads secrets from ``.env`` / the environment and engine tuning
from ``config/config.yaml``.  Nothing here runs at import time; callers
(the CLI, tests, an embedding application) call :func:`build_engine`.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from src.config.engine_config import EngineConfig
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.artifact_store import IArtifactStore
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.social_scrape_provider import ISocialScrapeProvider
from src.interfaces.web_search_provider import IWebSearchProvider
from src.pipeline.discovery_engine import DiscoveryEngine
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.cache.memory_store import MemoryArtifactStore
from src.providers.cache.sqlite_store import SQLiteArtifactStore
from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider
from src.providers.search.duckduckgo_provider import DuckDuckGoSearchProvider
from src.providers.search.searchapi_provider import SearchApiProvider
from src.providers.social.apify_provider import ApifyScrapeProvider
from src.services.cache_manager import CacheManager
from src.services.provider_adapters import ProviderAdapters
from src.utils.errors import ConfigurationError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider | None:
    """Select the first LLM provider with a configured API key.

    Priority order: OpenAI (or an OpenAI-compatible endpoint) -> Anthropic.
    Returns ``None`` when no key is set; the synthesis tier then fails
    fast and scoring uses the heuristic.
    """
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    return None


def _build_search_provider(
    app_settings: Settings, http_client: httpx.AsyncClient
) -> IWebSearchProvider | None:
    """SearchAPI.io when keyed, else DuckDuckGo unless disabled."""
    if app_settings.searchapi_api_key:
        return SearchApiProvider(api_key=app_settings.searchapi_api_key, http_client=http_client)
    if app_settings.duckduckgo_enabled:
        return DuckDuckGoSearchProvider()
    return None


def _build_scrape_provider(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
    raw_config: dict[str, Any],
) -> ISocialScrapeProvider | None:
    if not app_settings.apify_api_key:
        return None
    providers_cfg = raw_config.get("providers", {})
    apify_cfg = providers_cfg.get("apify", {})
    cache_cfg = providers_cfg.get("response_cache", {})
    return ApifyScrapeProvider(
        api_key=app_settings.apify_api_key,
        http_client=http_client,
        response_cache=MemoryCacheProvider(
            max_size=int(cache_cfg.get("max_size", 512)),
            ttl=int(cache_cfg.get("ttl_seconds", 300)),
        ),
        poll_interval=float(apify_cfg.get("poll_interval_seconds", 3.0)),
        max_wait=float(apify_cfg.get("max_wait_seconds", 120.0)),
    )


async def _build_artifact_store(app_settings: Settings) -> IArtifactStore:
    backend = app_settings.cache_backend.lower()
    if backend == "memory":
        return MemoryArtifactStore()
    if backend == "sqlite":
        store = SQLiteArtifactStore(db_path=app_settings.cache_db_path)
        await store.initialize()
        return store
    raise ConfigurationError(message=f"unknown CACHE_BACKEND {app_settings.cache_backend!r}")


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


async def build_engine(
    custom_settings: Settings | None = None,
    raw_config: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Construct the discovery engine and everything it depends on.

    Parameters
    ----------
    custom_settings:
        Application settings.  Read from the environment if not provided.
    raw_config:
        Resolved configuration mapping (see :func:`load_config`).  Loaded
        from ``settings.config_path`` if not provided.

    Returns
    -------
    dict
        ``engine``, ``http_client`` (close it when done), ``settings``,
        ``config`` (the :class:`EngineConfig`) and ``provider_names``.
    """
    s = custom_settings or Settings()
    cfg = raw_config if raw_config is not None else load_config(settings=s)
    engine_config = EngineConfig.from_mapping(cfg.get("engine"))

    store = await _build_artifact_store(s)
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0, connect=10.0))

    llm = _build_llm_provider(s)
    search = _build_search_provider(s, http_client)
    scraper = _build_scrape_provider(s, http_client, cfg)

    adapters = ProviderAdapters(engine_config, scraper=scraper, search=search, llm=llm)
    engine = DiscoveryEngine(
        adapters=adapters,
        cache=CacheManager(store, engine_config),
        config=engine_config,
    )

    provider_names = {
        "scrape": scraper.get_provider_name() if scraper else None,
        "search": search.get_provider_name() if search else None,
        "llm": llm.get_provider_name() if llm else None,
        "store": store.get_provider_name(),
    }
    _logger.info("engine_built", environment=s.app_env, **provider_names)

    return {
        "engine": engine,
        "http_client": http_client,
        "settings": s,
        "config": engine_config,
        "provider_names": provider_names,
    }
