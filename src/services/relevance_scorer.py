"""Relevance scoring of candidates against a business profile.

Each candidate gets a 0-100 score broken down into five weighted factors:

    Audience Alignment    25
    Engagement Quality    25
    Content Relevance     25
    Reach Potential       15
    Value for Investment  10

The AI path asks the text-generation provider for the breakdown.  Its
answer is accepted only when the factor list is complete and consistent
(every ``achieved`` within ``[0, max]``, maxima summing to 100); the
overall score is then derived as ``round(sum(achieved))``, whatever score
the model claimed.  Anything else (provider failure, timeout, unparseable
or inconsistent JSON) falls back to the deterministic heuristic wholesale.
The two are never blended, so every score's factors add up to it.
"""

from __future__ import annotations

import asyncio
import math
import re
from typing import Any

from src.config.engine_config import EngineConfig
from src.config.industry_keywords import NICHE_STOPWORDS, PLATFORM_AFFINITY
from src.models.business import BusinessContext
from src.models.candidate import (
    Candidate,
    RelevanceScore,
    ScoredCandidate,
    ScoreFactor,
    ScoreSource,
)
from src.services.provider_adapters import ProviderAdapters
from src.utils.audience import audience_tier, estimate_price_range, estimated_reach
from src.utils.concurrency import run_with_deadline
from src.utils.json_extraction import extract_json
from src.utils.logging import get_logger

AUDIENCE_ALIGNMENT = "Audience Alignment"
ENGAGEMENT_QUALITY = "Engagement Quality"
CONTENT_RELEVANCE = "Content Relevance"
REACH_POTENTIAL = "Reach Potential"
VALUE_FOR_INVESTMENT = "Value for Investment"

FACTOR_MAXIMA: dict[str, int] = {
    AUDIENCE_ALIGNMENT: 25,
    ENGAGEMENT_QUALITY: 25,
    CONTENT_RELEVANCE: 25,
    REACH_POTENTIAL: 15,
    VALUE_FOR_INVESTMENT: 10,
}

_WORD_RE = re.compile(r"[a-z0-9]+")

_SCORING_SYSTEM_PROMPT = (
    "You are an expert marketing analyst. You score how relevant a social "
    "media account is to a brand. Answer with JSON only."
)


# ---------------------------------------------------------------------------
# Heuristic scoring
# ---------------------------------------------------------------------------

def _engagement_points(rate: float) -> tuple[int, str | None]:
    if rate >= 6:
        return 25, "Exceptional engagement rate"
    if rate >= 4:
        return 20, "Strong engagement"
    if rate >= 2:
        return 15, "Good engagement"
    if rate >= 1:
        return 10, None
    return 5, None


def _reach_points(followers: int) -> tuple[int, str | None]:
    if followers >= 100_000:
        return 15, "Large audience reach"
    if followers >= 50_000:
        return 12, None
    if followers >= 10_000:
        return 10, "Quality micro-influencer reach"
    if followers >= 5_000:
        return 8, None
    return 5, None


def _audience_points(platform: str, industry: str) -> tuple[int, str | None]:
    industry = industry.lower()
    for cues, platforms in PLATFORM_AFFINITY:
        if platform in platforms and any(cue in industry for cue in cues):
            return 22, "Ideal platform for industry"
    return 15, None


def _terms(*texts: str) -> set[str]:
    words: set[str] = set()
    for text in texts:
        for word in _WORD_RE.findall(text.lower()):
            if len(word) > 3 and word not in NICHE_STOPWORDS:
                words.add(word)
    return words


def _content_points(candidate: Candidate, context: BusinessContext) -> tuple[int, str | None]:
    bio_terms = _terms(candidate.bio, candidate.display_name)
    if not bio_terms:
        return 12, None
    brand_terms = _terms(
        context.industry, context.niche, context.target_audience, *context.marketing_goals
    )
    matches = len(bio_terms & brand_terms)
    if matches == 0:
        return 10, None
    return min(25, 10 + 5 * matches), "Content overlaps brand themes"


def _value_points(followers: int) -> int:
    if followers > 100_000:
        return 6
    if followers > 10_000:
        return 8
    return 10


def heuristic_score(candidate: Candidate, context: BusinessContext) -> RelevanceScore:
    """Deterministic score from the candidate's numbers and profile text."""
    reasons: list[str] = []

    def keep(points_and_reason: tuple[int, str | None]) -> int:
        points, reason = points_and_reason
        if reason:
            reasons.append(reason)
        return points

    audience = keep(_audience_points(candidate.platform, context.industry))
    engagement = keep(_engagement_points(candidate.engagement_rate))
    content = keep(_content_points(candidate, context))
    reach = keep(_reach_points(candidate.audience_size))
    value = _value_points(candidate.audience_size)

    factors = [
        ScoreFactor(name=AUDIENCE_ALIGNMENT, achieved=audience, max=25),
        ScoreFactor(name=ENGAGEMENT_QUALITY, achieved=engagement, max=25),
        ScoreFactor(name=CONTENT_RELEVANCE, achieved=content, max=25),
        ScoreFactor(name=REACH_POTENTIAL, achieved=reach, max=15),
        ScoreFactor(name=VALUE_FOR_INVESTMENT, achieved=value, max=10),
    ]
    reason = (
        ". ".join(reasons) + "."
        if reasons
        else "Scored based on engagement, reach, and platform fit."
    )
    return RelevanceScore(
        score=round(sum(f.achieved for f in factors)),
        reason=reason,
        factors=factors,
        source=ScoreSource.HEURISTIC,
    )


# ---------------------------------------------------------------------------
# AI scoring
# ---------------------------------------------------------------------------

def build_scoring_prompt(candidate: Candidate, context: BusinessContext) -> str:
    goals = ", ".join(context.marketing_goals) or "Brand awareness"
    followers = f"{candidate.audience_size:,}" if candidate.audience_size else "Unknown"
    factor_lines = "\n".join(
        f"{i}. {name} ({points} points)" for i, (name, points) in enumerate(FACTOR_MAXIMA.items(), 1)
    )
    example = ",\n    ".join(
        f'{{"name": "{name}", "score": 0, "max": {points}}}' for name, points in FACTOR_MAXIMA.items()
    )
    return (
        "Calculate a relevance score (0-100) for this account for the given brand.\n\n"
        "ACCOUNT:\n"
        f"- Name: {candidate.display_name or candidate.handle}\n"
        f"- Platform: {candidate.platform}\n"
        f"- Followers: {followers}\n"
        f"- Engagement Rate: {candidate.engagement_rate or 'Unknown'}%\n"
        f"- Bio: {candidate.bio or 'Not available'}\n"
        f"- Verified: {'Yes' if candidate.verified else 'No'}\n\n"
        "BRAND:\n"
        f"- Company: {context.name or 'Unknown'}\n"
        f"- Industry: {context.industry or 'General'}\n"
        f"- Niche: {context.niche or 'Not specified'}\n"
        f"- Target Audience: {context.target_audience or 'General consumers'}\n"
        f"- Marketing Goals: {goals}\n\n"
        f"Evaluate on:\n{factor_lines}\n\n"
        "Return ONLY valid JSON:\n"
        '{\n  "score": 0,\n  "reason": "2-3 sentence explanation",\n'
        f'  "factors": [\n    {example}\n  ]\n}}'
    )


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def validate_ai_score(payload: Any) -> RelevanceScore | None:
    """Accept an AI breakdown only if it is complete and self-consistent."""
    if not isinstance(payload, dict):
        return None
    raw_factors = payload.get("factors")
    if not isinstance(raw_factors, list) or not raw_factors:
        return None

    factors: list[ScoreFactor] = []
    for raw in raw_factors:
        if not isinstance(raw, dict):
            return None
        name = raw.get("name")
        achieved = _number(raw.get("score", raw.get("achieved")))
        maximum = _number(raw.get("max"))
        if not isinstance(name, str) or not name.strip():
            return None
        if achieved is None or maximum is None or maximum <= 0:
            return None
        if achieved < 0 or achieved > maximum:
            return None
        factors.append(ScoreFactor(name=name.strip(), achieved=achieved, max=maximum))

    if not math.isclose(sum(f.max for f in factors), 100.0, abs_tol=1e-6):
        return None

    reason = payload.get("reason")
    return RelevanceScore(
        score=round(sum(f.achieved for f in factors)),
        reason=reason.strip() if isinstance(reason, str) and reason.strip()
        else "AI-calculated relevance score based on multiple factors.",
        factors=factors,
        source=ScoreSource.AI,
    )


class RelevanceScorer:
    """Scores candidates with the AI path when available, else the heuristic."""

    def __init__(self, adapters: ProviderAdapters, config: EngineConfig) -> None:
        self._adapters = adapters
        self._config = config
        self._logger = get_logger(__name__)

    async def score(self, candidate: Candidate, context: BusinessContext) -> RelevanceScore:
        """Return a score in [0, 100].  Never raises for provider problems."""
        if not (self._config.use_ai_scoring and self._adapters.has_llm):
            return heuristic_score(candidate, context)

        result = await self._adapters.generate_text(
            _SCORING_SYSTEM_PROMPT,
            build_scoring_prompt(candidate, context),
            timeout=self._config.scoring_timeout_seconds,
            temperature=0.2,
            max_tokens=500,
        )
        if not result.ok:
            self._logger.info(
                "ai_scoring_unavailable",
                handle=candidate.handle,
                platform=candidate.platform,
                error=result.error_message,
            )
            return heuristic_score(candidate, context)

        ai_score = validate_ai_score(extract_json(result.value, expect=dict))
        if ai_score is None:
            self._logger.info(
                "ai_scoring_rejected",
                handle=candidate.handle,
                platform=candidate.platform,
            )
            return heuristic_score(candidate, context)
        return ai_score

    async def score_many(
        self,
        candidates: list[Candidate],
        context: BusinessContext,
        deadline_seconds: float | None = None,
    ) -> list[ScoredCandidate]:
        """Score concurrently (bounded) and rank by score, highest first.

        Ties keep the input order, which is audience size descending.
        Candidates still unscored when ``deadline_seconds`` runs out get
        the heuristic score.
        """
        settled: dict[str, RelevanceScore | BaseException] = {}
        if deadline_seconds is not None and deadline_seconds <= 0:
            self._logger.info("scoring_skipped_deadline", candidates=len(candidates))
        else:
            semaphore = asyncio.Semaphore(self._config.scoring_concurrency)

            async def _bounded(candidate: Candidate) -> RelevanceScore:
                async with semaphore:
                    return await self.score(candidate, context)

            settled, _timed_out = await run_with_deadline(
                {str(i): _bounded(c) for i, c in enumerate(candidates)}, deadline_seconds
            )

        scored: list[ScoredCandidate] = []
        for index, candidate in enumerate(candidates):
            outcome = settled.get(str(index))
            if isinstance(outcome, BaseException):
                self._logger.warning(
                    "scoring_failed", handle=candidate.handle, error=str(outcome)
                )
                outcome = None
            if outcome is None:
                outcome = heuristic_score(candidate, context)
            scored.append(
                ScoredCandidate(
                    candidate=candidate,
                    relevance=outcome,
                    audience_tier=audience_tier(candidate.audience_size),
                    price_range=estimate_price_range(candidate.audience_size),
                    estimated_reach=estimated_reach(candidate.audience_size),
                )
            )
        scored.sort(key=lambda s: s.relevance.score, reverse=True)
        return scored
