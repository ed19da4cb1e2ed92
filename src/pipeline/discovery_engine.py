"""Discovery engine facade: cache lookup, fan-out, scoring, persistence.

ARCHITECTURE NOTE:
    ``discover`` and ``stream`` share one flow:

        fingerprint(context)
          -> cache lookup (skipped on force_refresh)
          -> hit:  return / replay the cached artifacts
          -> miss: build keywords
                   -> FallbackOrchestrator fans out over the platforms
                   -> dedup.merge -> RelevanceScorer.score_many (ranked)
                   -> competitor post enrichment (competitors only)
                   -> CacheManager.save (best effort)

    ``EngineConfig.request_deadline_seconds`` bounds a miss end to end.
    Candidates still unscored when it runs out keep the heuristic score,
    and competitor posts not yet fetched are skipped.  Every cache hit,
    returned or replayed, marks the entry viewed.

    Campaigns skip the fan-out; each campaign is one LLM call through the
    CampaignGenerator.

    Only this class decides what reaches the caller.  Provider problems
    become ``DiscoveryResult.errors`` or ``item-error`` events, and cache
    failures are logged and ignored so fresh results are always returned.

    Concurrency: by default two concurrent misses for the same
    (owner, fingerprint, kind) both generate and both save; the later save
    wins and the earlier entry becomes stale.  With
    ``EngineConfig.single_flight`` a per-key lock makes the second caller
    wait and reuse the first caller's entry.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog

from src.config.engine_config import EngineConfig
from src.models.business import BusinessContext
from src.models.cache import ArtifactKind, CacheEntry
from src.models.candidate import Post, ScoredCandidate
from src.models.discovery import DiscoveryResult, StreamEvent, StreamEventType
from src.pipeline.fallback_orchestrator import FallbackOrchestrator
from src.pipeline.stream_emitter import StreamEmitter
from src.services import dedup
from src.services.cache_manager import CacheManager
from src.services.campaign_generator import CampaignGenerator
from src.services.fingerprint import fingerprint as compute_fingerprint
from src.services.keyword_builder import build_keywords
from src.services.provider_adapters import ProviderAdapters
from src.services.relevance_scorer import RelevanceScorer
from src.utils.audience import analyze_sentiment, detect_post_type
from src.utils.concurrency import run_with_deadline, throttled_gather
from src.utils.errors import CacheError, ConfigurationError
from src.utils.logging import get_logger

DEFAULT_OWNER = "default"

_LockKey = tuple[str, str, ArtifactKind]


class DiscoveryEngine:
    """Entry point for influencer, competitor and campaign discovery.

    All collaborators are injected; the engine reads no global settings.
    """

    def __init__(
        self,
        adapters: ProviderAdapters,
        cache: CacheManager,
        config: EngineConfig,
        orchestrator: FallbackOrchestrator | None = None,
        scorer: RelevanceScorer | None = None,
        campaigns: CampaignGenerator | None = None,
        emitter: StreamEmitter | None = None,
    ) -> None:
        self._adapters = adapters
        self._cache = cache
        self._config = config
        self._orchestrator = orchestrator or FallbackOrchestrator(adapters, config)
        self._scorer = scorer or RelevanceScorer(adapters, config)
        self._campaigns = campaigns or CampaignGenerator(adapters, config)
        self._emitter = emitter or StreamEmitter(config.stream_pacing_seconds)
        # Single-flight locks, dropped once no caller holds or awaits them.
        self._locks: dict[_LockKey, asyncio.Lock] = {}
        self._lock_users: dict[_LockKey, int] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def discover(
        self,
        context: BusinessContext,
        kind: ArtifactKind,
        limit: int,
        force_refresh: bool = False,
        owner_id: str = DEFAULT_OWNER,
        platforms: list[str] | None = None,
    ) -> DiscoveryResult:
        """Return up to ``limit`` ranked artifacts of ``kind`` for ``context``.

        Parameters
        ----------
        context:
            The business profile.  Its fingerprint keys the cache.
        kind:
            Influencers, competitors or campaigns.
        limit:
            Maximum number of artifacts returned.
        force_refresh:
            Skip the cache lookup and regenerate.  The new entry still
            replaces the old one.
        owner_id:
            Cache partition.
        platforms:
            Dimensions to search; defaults to ``EngineConfig.default_platforms``.
            Ignored for campaigns.
        """
        if limit < 1:
            raise ConfigurationError(message=f"limit must be at least 1, got {limit}")

        fp = compute_fingerprint(context)
        log = self._logger.bind(kind=kind.value, fingerprint=fp, owner_id=owner_id)

        if not force_refresh:
            cached = await self._lookup(owner_id, fp, kind, limit)
            if cached is not None:
                log.info("discover_cache_hit", artifacts=len(cached.artifacts))
                return await self._serve_cached(cached, kind, fp, limit)

        if not self._config.single_flight:
            return await self._generate(context, kind, limit, fp, owner_id, platforms)

        async with self._key_lock((owner_id, fp, kind)):
            # Another caller may have filled the cache while we waited.
            if not force_refresh:
                cached = await self._lookup(owner_id, fp, kind, limit)
                if cached is not None:
                    log.info("discover_single_flight_reuse", artifacts=len(cached.artifacts))
                    return await self._serve_cached(cached, kind, fp, limit)
            return await self._generate(context, kind, limit, fp, owner_id, platforms)

    async def stream(
        self,
        context: BusinessContext,
        kind: ArtifactKind,
        limit: int | None = None,
        force_refresh: bool = False,
        owner_id: str = DEFAULT_OWNER,
        platforms: list[str] | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Yield ``start``, then one event per artifact, then ``complete``.

        Cached artifacts are replayed with pacing.  Campaigns are generated
        one at a time and each is emitted as soon as it exists; a failed
        campaign yields ``item-error`` and generation continues.  Candidate
        kinds run the full discovery and then emit the ranked list.
        """
        count = limit if limit is not None else self._config.default_stream_count
        if count < 1:
            raise ConfigurationError(message=f"limit must be at least 1, got {count}")

        fp = compute_fingerprint(context)

        if not force_refresh:
            cached = await self._lookup(owner_id, fp, kind, count)
            if cached is not None:
                self._logger.info(
                    "stream_cache_replay", kind=kind.value, fingerprint=fp, artifacts=len(cached.artifacts)
                )
                await self._mark_viewed(cached)
                async for event in self._emitter.replay(cached.artifacts[:count], cached=True):
                    yield event
                return

        if kind is not ArtifactKind.CAMPAIGNS:
            result = await self.discover(
                context, kind, count, force_refresh=True, owner_id=owner_id, platforms=platforms
            )
            async for event in self._emitter.replay(result.artifacts, cached=False, paced=False):
                yield event
            return

        produced: list[dict[str, Any]] = []

        async def _produce(index: int) -> dict[str, Any]:
            campaign = await self._campaigns.generate_one(context, index)
            item = campaign.model_dump(mode="json")
            produced.append(item)
            return item

        async for event in self._emitter.generate(count, _produce):
            if event.type is StreamEventType.COMPLETE and produced:
                # Persist before the client sees completion.
                await self._save(owner_id, fp, kind, produced)
            yield event

    async def invalidate(
        self,
        context_or_fingerprint: BusinessContext | str,
        kind: ArtifactKind,
        owner_id: str = DEFAULT_OWNER,
    ) -> int:
        """Mark the servable entries for the key stale.  Returns how many."""
        return await self._cache.invalidate(owner_id, self._resolve(context_or_fingerprint), kind)

    async def history(
        self,
        context_or_fingerprint: BusinessContext | str,
        kind: ArtifactKind,
        owner_id: str = DEFAULT_OWNER,
    ) -> list[CacheEntry]:
        """Every cache entry for the key, newest first, stale ones included."""
        return await self._cache.history(owner_id, self._resolve(context_or_fingerprint), kind)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def _generate(
        self,
        context: BusinessContext,
        kind: ArtifactKind,
        limit: int,
        fp: str,
        owner_id: str,
        platforms: list[str] | None,
    ) -> DiscoveryResult:
        if kind is ArtifactKind.CAMPAIGNS:
            artifacts, errors = await self._generate_campaigns(context, limit)
            keywords: list[str] = []
        else:
            keywords = build_keywords(context, kind, self._config.max_keywords)
            artifacts, errors = await self._generate_candidates(
                context, kind, limit, keywords, list(platforms or self._config.default_platforms)
            )

        entry_id = None
        if artifacts:
            entry = await self._save(owner_id, fp, kind, artifacts)
            entry_id = entry.entry_id if entry is not None else None

        self._logger.info(
            "discover_complete",
            kind=kind.value,
            fingerprint=fp,
            artifacts=len(artifacts),
            errors=len(errors),
        )
        return DiscoveryResult(
            kind=kind,
            fingerprint=fp,
            artifacts=artifacts,
            cached=False,
            errors=errors,
            search_keywords=keywords,
            cache_entry_id=entry_id,
        )

    async def _generate_candidates(
        self,
        context: BusinessContext,
        kind: ArtifactKind,
        limit: int,
        keywords: list[str],
        platforms: list[str],
    ) -> tuple[list[dict[str, Any]], list[str]]:
        # One budget covers fan-out, scoring and enrichment.
        loop = asyncio.get_running_loop()
        budget = self._config.request_deadline_seconds
        deadline = loop.time() + budget if budget is not None else None

        def remaining() -> float | None:
            return None if deadline is None else max(deadline - loop.time(), 0.0)

        outcomes = await self._orchestrator.run(context, kind, keywords, platforms)
        errors = [o.error for o in outcomes if not o.succeeded and o.error]

        merged = dedup.merge((o.candidates for o in outcomes), limit=limit)
        if not merged:
            return [], errors

        ranked = await self._scorer.score_many(merged, context, deadline_seconds=remaining())
        if kind is ArtifactKind.COMPETITORS:
            ranked = await self._attach_recent_posts(ranked, remaining())
        return [s.model_dump(mode="json") for s in ranked], errors

    async def _generate_campaigns(
        self, context: BusinessContext, limit: int
    ) -> tuple[list[dict[str, Any]], list[str]]:
        semaphore = asyncio.Semaphore(self._config.scoring_concurrency)
        outcomes = await throttled_gather(
            [self._campaigns.generate_one(context, i) for i in range(limit)],
            semaphore=semaphore,
        )
        artifacts: list[dict[str, Any]] = []
        errors: list[str] = []
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, BaseException):
                self._logger.warning("campaign_failed", index=index, error=str(outcome))
                errors.append(f"campaign {index + 1}: {outcome}")
                continue
            artifacts.append(outcome.model_dump(mode="json"))
        return artifacts, errors

    async def _attach_recent_posts(
        self, ranked: list[ScoredCandidate], deadline_seconds: float | None = None
    ) -> list[ScoredCandidate]:
        """Best-effort recent posts for the top competitor handles.

        Platforms whose posts are not back within ``deadline_seconds`` are
        left without posts.
        """
        top = ranked[: self._config.competitor_post_handles]
        by_platform: dict[str, list[str]] = {}
        for scored in top:
            c = scored.candidate
            if self._adapters.scraper_supports(c.platform):
                by_platform.setdefault(c.platform, []).append(c.handle)
        if not by_platform:
            return ranked
        if deadline_seconds is not None and deadline_seconds <= 0:
            self._logger.info("competitor_posts_skipped_deadline", platforms=list(by_platform))
            return ranked

        settled, timed_out = await run_with_deadline(
            {
                platform: self._adapters.fetch_recent_posts(
                    handles, platform, self._config.competitor_posts_per_handle
                )
                for platform, handles in by_platform.items()
            },
            deadline_seconds,
        )
        for platform in timed_out:
            self._logger.info("competitor_posts_unavailable", platform=platform, error="deadline exceeded")

        posts_by_handle: dict[tuple[str, str], list[Post]] = {}
        for platform, result in settled.items():
            if isinstance(result, BaseException):
                self._logger.warning("competitor_posts_failed", platform=platform, error=str(result))
                continue
            if not result.ok:
                self._logger.info("competitor_posts_unavailable", platform=platform, error=result.error_message)
                continue
            for post in result.value or []:
                tagged = post.model_copy(
                    update={
                        "sentiment": analyze_sentiment(post.content),
                        "post_type": detect_post_type(post.content),
                    }
                )
                key = (platform, post.author_handle.lstrip("@").casefold())
                posts_by_handle.setdefault(key, []).append(tagged)

        enriched: list[ScoredCandidate] = []
        for scored in ranked:
            posts = posts_by_handle.get(scored.candidate.identity())
            if posts:
                candidate = scored.candidate.model_copy(update={"recent_posts": posts})
                scored = scored.model_copy(update={"candidate": candidate})
            enriched.append(scored)
        return enriched

    # ------------------------------------------------------------------
    # Cache helpers
    # ------------------------------------------------------------------

    async def _lookup(self, owner_id: str, fp: str, kind: ArtifactKind, limit: int) -> CacheEntry | None:
        try:
            return await self._cache.get_fresh(owner_id, fp, kind, self._config.min_cached_for(kind, limit))
        except CacheError as exc:
            self._logger.warning("cache_lookup_failed", kind=kind.value, fingerprint=fp, error=str(exc))
            return None

    async def _save(
        self, owner_id: str, fp: str, kind: ArtifactKind, artifacts: list[dict[str, Any]]
    ) -> CacheEntry | None:
        try:
            return await self._cache.save(owner_id, fp, kind, artifacts)
        except CacheError as exc:
            self._logger.warning("cache_save_failed", kind=kind.value, fingerprint=fp, error=str(exc))
            return None

    async def _mark_viewed(self, entry: CacheEntry) -> None:
        try:
            await self._cache.mark_viewed(entry.entry_id)
        except CacheError as exc:
            self._logger.warning("cache_mark_viewed_failed", entry_id=entry.entry_id, error=str(exc))

    @asynccontextmanager
    async def _key_lock(self, key: _LockKey) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def _serve_cached(self, entry: CacheEntry, kind: ArtifactKind, fp: str, limit: int) -> DiscoveryResult:
        await self._mark_viewed(entry)
        return DiscoveryResult(
            kind=kind,
            fingerprint=fp,
            artifacts=entry.artifacts[:limit],
            cached=True,
            cache_entry_id=entry.entry_id,
        )

    @staticmethod
    def _resolve(context_or_fingerprint: BusinessContext | str) -> str:
        if isinstance(context_or_fingerprint, BusinessContext):
            return compute_fingerprint(context_or_fingerprint)
        return context_or_fingerprint
