"""Per-dimension provider fallback for discovery requests.

ARCHITECTURE NOTE:
    A request names a set of *dimensions* (platforms).  Each dimension runs
    as its own asyncio task and walks the tier chain

        scrape  ->  search  ->  synthesis

    stopping at the first tier that yields at least one candidate.  A tier
    that times out, errors, returns a malformed payload or returns nothing
    is recorded as a failed :class:`TierAttempt` and the next tier runs.
    When every tier fails the dimension ends EXHAUSTED and contributes one
    error message; the request as a whole still succeeds.

    All dimensions are collected with all-settled semantics under one
    overall deadline.  Dimensions still running at the deadline are
    cancelled and reported as exhausted, keeping whatever attempts they
    had already recorded.

    :class:`DimensionRun` is the explicit state machine for one dimension;
    it refuses transitions that skip or reorder tiers.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.config.engine_config import EngineConfig
from src.models.business import BusinessContext
from src.models.cache import ArtifactKind
from src.models.candidate import Candidate, Provenance
from src.models.discovery import (
    DimensionOutcome,
    DimensionState,
    Tier,
    TierAttempt,
)
from src.services.candidate_extraction import (
    SYNTHESIS_SYSTEM_PROMPT,
    build_search_query,
    build_synthesis_prompt,
    candidates_from_search,
    parse_synthesized_candidates,
)
from src.services.provider_adapters import ProviderAdapters
from src.utils.concurrency import run_with_deadline
from src.utils.errors import NoCandidatesFound
from src.utils.logging import get_logger

_TIER_STATE: dict[Tier, DimensionState] = {
    Tier.SCRAPE: DimensionState.SCRAPE,
    Tier.SEARCH: DimensionState.SEARCH,
    Tier.SYNTHESIS: DimensionState.SYNTHESIS,
}

# Legal transitions of the per-dimension state machine.
_TRANSITIONS: dict[DimensionState, frozenset[DimensionState]] = {
    DimensionState.PENDING: frozenset({DimensionState.SCRAPE, DimensionState.EXHAUSTED}),
    DimensionState.SCRAPE: frozenset(
        {DimensionState.SEARCH, DimensionState.SUCCESS, DimensionState.EXHAUSTED}
    ),
    DimensionState.SEARCH: frozenset(
        {DimensionState.SYNTHESIS, DimensionState.SUCCESS, DimensionState.EXHAUSTED}
    ),
    DimensionState.SYNTHESIS: frozenset({DimensionState.SUCCESS, DimensionState.EXHAUSTED}),
    DimensionState.SUCCESS: frozenset(),
    DimensionState.EXHAUSTED: frozenset(),
}


class DimensionRun:
    """Mutable state machine for one dimension of one request."""

    def __init__(self, dimension: str) -> None:
        self.dimension = dimension
        self.state = DimensionState.PENDING
        self.attempts: list[TierAttempt] = []
        self.candidates: list[Candidate] = []
        self.error: str | None = None

    def _move(self, target: DimensionState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise ValueError(f"{self.dimension}: illegal transition {self.state.value} -> {target.value}")
        self.state = target

    def enter(self, tier: Tier) -> None:
        self._move(_TIER_STATE[tier])

    def record(self, attempt: TierAttempt) -> None:
        self.attempts.append(attempt)

    def succeed(self, candidates: list[Candidate]) -> None:
        if not candidates:
            raise ValueError(f"{self.dimension}: success requires at least one candidate")
        self._move(DimensionState.SUCCESS)
        self.candidates = candidates

    def exhaust(self, reason: str | None = None) -> None:
        self._move(DimensionState.EXHAUSTED)
        failures = "; ".join(
            f"{a.tier.value}: {a.error}" for a in self.attempts if a.error
        )
        detail = reason or failures or "no results"
        if reason and failures:
            detail = f"{reason} ({failures})"
        self.error = f"{self.dimension.capitalize()} search returned no results: {detail}"

    @property
    def finished(self) -> bool:
        return self.state in (DimensionState.SUCCESS, DimensionState.EXHAUSTED)

    def outcome(self) -> DimensionOutcome:
        return DimensionOutcome(
            dimension=self.dimension,
            state=self.state,
            candidates=self.candidates,
            attempts=self.attempts,
            error=self.error,
        )


@dataclass
class _TierOutcome:
    provider: str
    candidates: list[Candidate] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0
    keyword: str = ""


class FallbackOrchestrator:
    """Runs every dimension of a discovery request through the tier chain."""

    def __init__(self, adapters: ProviderAdapters, config: EngineConfig) -> None:
        self._adapters = adapters
        self._config = config
        self._logger = get_logger(__name__)

    async def run(
        self,
        context: BusinessContext,
        kind: ArtifactKind,
        keywords: list[str],
        platforms: list[str],
    ) -> list[DimensionOutcome]:
        """Run all dimensions concurrently; outcomes follow ``platforms`` order."""
        runs = {platform: DimensionRun(platform) for platform in platforms}
        coros = {
            platform: self._run_dimension(runs[platform], context, kind, keywords)
            for platform in platforms
        }
        settled, timed_out = await run_with_deadline(coros, self._config.request_deadline_seconds)

        for platform in timed_out:
            run = runs[platform]
            if not run.finished:
                run.exhaust("deadline exceeded")

        for platform, result in settled.items():
            run = runs[platform]
            if isinstance(result, BaseException) and not run.finished:
                self._logger.error(
                    "dimension_crashed",
                    dimension=platform,
                    error=str(result),
                    exc_info=result,
                )
                run.exhaust(f"internal error: {type(result).__name__}")

        outcomes = [runs[p].outcome() for p in platforms]
        self._logger.info(
            "fanout_complete",
            kind=kind.value,
            succeeded=[o.dimension for o in outcomes if o.succeeded],
            exhausted=[o.dimension for o in outcomes if not o.succeeded],
            candidates=sum(len(o.candidates) for o in outcomes),
        )
        return outcomes

    async def _run_dimension(
        self,
        run: DimensionRun,
        context: BusinessContext,
        kind: ArtifactKind,
        keywords: list[str],
    ) -> None:
        platform = run.dimension
        tier_keywords = keywords[: self._config.keywords_for(platform)]

        for tier in (Tier.SCRAPE, Tier.SEARCH, Tier.SYNTHESIS):
            run.enter(tier)
            try:
                if tier is Tier.SCRAPE:
                    outcome = await self._scrape(platform, tier_keywords)
                elif tier is Tier.SEARCH:
                    outcome = await self._search(platform, tier_keywords, kind)
                else:
                    outcome = await self._synthesize(platform, context, kind, keywords)
            except Exception as exc:  # noqa: BLE001 — recorded as a failed tier
                self._logger.error(
                    "dimension_tier_crashed",
                    dimension=platform,
                    tier=tier.value,
                    error=str(exc),
                    exc_info=exc,
                )
                outcome = _TierOutcome(
                    provider=tier.value,
                    errors=[f"internal error: {type(exc).__name__}"],
                )

            ok = bool(outcome.candidates)
            error = None if ok else (
                "; ".join(dict.fromkeys(outcome.errors))
                or str(NoCandidatesFound(provider_name=outcome.provider))
            )
            run.record(
                TierAttempt(
                    tier=tier,
                    provider=outcome.provider,
                    ok=ok,
                    candidate_count=len(outcome.candidates),
                    error=error,
                    elapsed_ms=round(outcome.elapsed_ms, 1),
                )
            )
            if ok:
                provenance = Provenance(
                    provider=outcome.provider,
                    tier=tier.value,
                    dimension=platform,
                    keyword=outcome.keyword,
                )
                run.succeed(
                    [c.model_copy(update={"provenance": provenance}) for c in outcome.candidates]
                )
                self._logger.debug(
                    "dimension_succeeded",
                    dimension=platform,
                    tier=tier.value,
                    candidates=len(outcome.candidates),
                )
                return

            self._logger.info(
                "dimension_tier_failed", dimension=platform, tier=tier.value, error=error
            )

        run.exhaust()
        self._logger.warning("dimension_exhausted", dimension=platform, error=run.error)

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    async def _scrape(self, platform: str, keywords: list[str]) -> _TierOutcome:
        if not self._adapters.has_scraper:
            return _TierOutcome(provider="social scrape", errors=["social scrape provider not configured"])
        if not self._adapters.scraper_supports(platform):
            return _TierOutcome(provider="social scrape", errors=[f"platform {platform} not supported"])

        outcome = _TierOutcome(provider="scrape")
        for keyword in keywords:
            result = await self._adapters.discover_profiles(
                keyword, platform, self._config.scrape_results_per_keyword
            )
            outcome.provider = result.provider_name
            outcome.elapsed_ms += result.elapsed_ms
            if not result.ok:
                outcome.errors.append(result.error_message)
                continue
            if result.value:
                outcome.candidates = list(result.value)
                outcome.keyword = keyword
                return outcome
        return outcome

    async def _search(self, platform: str, keywords: list[str], kind: ArtifactKind) -> _TierOutcome:
        if not self._adapters.has_search:
            return _TierOutcome(provider="web search", errors=["web search provider not configured"])

        outcome = _TierOutcome(provider="web search")
        for keyword in keywords:
            result = await self._adapters.web_search(
                build_search_query(platform, keyword, kind),
                self._config.search_results_per_query,
            )
            outcome.provider = result.provider_name
            outcome.elapsed_ms += result.elapsed_ms
            if not result.ok:
                outcome.errors.append(result.error_message)
                continue
            candidates = candidates_from_search(platform, result.value or [])
            if candidates:
                outcome.candidates = candidates
                outcome.keyword = keyword
                return outcome
        return outcome

    async def _synthesize(
        self,
        platform: str,
        context: BusinessContext,
        kind: ArtifactKind,
        keywords: list[str],
    ) -> _TierOutcome:
        result = await self._adapters.generate_text(
            SYNTHESIS_SYSTEM_PROMPT,
            build_synthesis_prompt(context, platform, keywords, kind, self._config.synthesis_candidates),
            timeout=self._config.synthesis_timeout_seconds,
            temperature=0.5,
            max_tokens=1500,
        )
        outcome = _TierOutcome(provider=result.provider_name, elapsed_ms=result.elapsed_ms)
        if not result.ok:
            outcome.errors.append(result.error_message)
            return outcome

        candidates = parse_synthesized_candidates(platform, result.value)
        if candidates is None:
            outcome.errors.append(f"[{result.provider_name}] malformed candidate list")
            return outcome
        outcome.candidates = candidates
        outcome.keyword = ", ".join(keywords)
        return outcome
