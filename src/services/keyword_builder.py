"""Search keyword construction from a BusinessContext.

Keywords seed every tier of the fallback chain.  The builder always
returns at least one keyword: when the industry matches nothing in the
lookup table (or is blank) the generic set is used.
"""

from __future__ import annotations

import re

from src.config.industry_keywords import (
    AUDIENCE_KEYWORDS,
    GENERIC_KEYWORDS,
    INDUSTRY_KEYWORDS,
    NICHE_STOPWORDS,
)
from src.models.business import BusinessContext
from src.models.cache import ArtifactKind

_NON_WORD_RE = re.compile(r"[^\w\s]")


def _niche_words(niche: str, limit: int = 2) -> list[str]:
    words = _NON_WORD_RE.sub(" ", niche).split()
    picked = [w.lower() for w in words if len(w) > 3 and w.lower() not in NICHE_STOPWORDS]
    return picked[:limit]


def _dedupe(keywords: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for keyword in keywords:
        folded = keyword.strip().casefold()
        if folded and folded not in seen:
            seen.add(folded)
            unique.append(keyword.strip())
    return unique


def build_influencer_keywords(context: BusinessContext, max_keywords: int = 8) -> list[str]:
    """Influencer search keywords, most specific (longest) first."""
    keywords: list[str] = []
    industry = context.industry.lower()

    if industry:
        for key, values in INDUSTRY_KEYWORDS.items():
            if key in industry:
                keywords.extend(values)

    for word in _niche_words(context.niche):
        keywords.append(f"{word} expert verified")

    audience = context.target_audience.lower()
    for cues, values in AUDIENCE_KEYWORDS:
        if any(cue in audience for cue in cues):
            keywords.extend(values)

    if not keywords:
        keywords.extend(GENERIC_KEYWORDS)

    unique = _dedupe(keywords)
    # Stable sort keeps table order among equal lengths.
    unique.sort(key=len, reverse=True)
    return unique[:max_keywords]


def build_competitor_keywords(context: BusinessContext, max_keywords: int = 8) -> list[str]:
    """Competitor search keywords: declared competitors first, then market terms."""
    declared = [c for c in context.competitors if c.strip()]
    market: list[str] = []
    industry = context.industry.strip()
    location = context.city or context.country
    if industry:
        if context.niche:
            market.append(f"{context.niche} {industry}")
        if location:
            market.append(f"{industry} brand {location}")
        market.append(f"{industry} brand")
        market.append(f"top {industry} companies")
    for word in _niche_words(context.niche):
        market.append(f"{word} brand")

    market = _dedupe(market)
    market.sort(key=len, reverse=True)
    keywords = _dedupe(declared + market)
    if not keywords:
        keywords = list(GENERIC_KEYWORDS)
    return keywords[:max_keywords]


def build_keywords(context: BusinessContext, kind: ArtifactKind, max_keywords: int = 8) -> list[str]:
    """Dispatch to the keyword builder for ``kind``."""
    if kind is ArtifactKind.COMPETITORS:
        return build_competitor_keywords(context, max_keywords)
    return build_influencer_keywords(context, max_keywords)
