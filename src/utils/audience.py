"""Audience and post heuristics shared by the scrape adapters and the scorer.

Pure functions only: tiering a creator by follower count, estimating a
collaboration price band, deriving engagement figures, and tagging posts
with a sentiment and a post type.
"""

from __future__ import annotations

import math
import re

# (minimum followers, tier) from largest to smallest.
_TIERS: tuple[tuple[int, str], ...] = (
    (1_000_000, "mega"),
    (500_000, "macro"),
    (100_000, "mid-tier"),
    (10_000, "micro"),
)

# (minimum followers, low, high) in USD per sponsored post.
_PRICE_BANDS: tuple[tuple[int, int, int], ...] = (
    (1_000_000, 10_000, 50_000),
    (500_000, 5_000, 15_000),
    (100_000, 1_000, 5_000),
    (50_000, 500, 2_000),
    (10_000, 200, 800),
)

_SUFFIX_MULTIPLIER = {"": 1, "K": 1_000, "M": 1_000_000, "B": 1_000_000_000}

_THOUSANDS_RE = re.compile(r"(?<=\d),(?=\d{3})")
_FOLLOWER_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*([KMB]?)\s*(?:followers|subscribers)",
    re.IGNORECASE,
)

_POSITIVE_WORDS = frozenset({
    "love", "great", "amazing", "awesome", "excellent", "happy", "best",
    "beautiful", "thank", "thanks", "excited", "wonderful", "fantastic",
    "perfect", "win", "success",
})
_NEGATIVE_WORDS = frozenset({
    "hate", "bad", "terrible", "awful", "worst", "sad", "angry",
    "disappointed", "poor", "fail", "problem", "issue", "broken", "sorry",
})

_PROMO_RE = re.compile(r"\b(sale|discount|offer|buy|shop|promo|deal|% off|limited time)\b", re.I)
_EDU_RE = re.compile(r"\b(how to|tips?|learn|guide|tutorial|steps?|did you know)\b", re.I)
_ENGAGE_RE = re.compile(r"(\?|\b(comment|tag|share|vote|tell us|what do you think)\b)", re.I)
_ANNOUNCE_RE = re.compile(r"\b(announc\w*|launch\w*|introducing|new|coming soon|now available)\b", re.I)


def audience_tier(followers: int | None) -> str:
    """Bucket a follower count into nano / micro / mid-tier / macro / mega."""
    count = followers or 0
    for minimum, tier in _TIERS:
        if count >= minimum:
            return tier
    return "nano"


def estimate_price_range(followers: int | None) -> tuple[int, int]:
    """Rough USD price band for one sponsored post."""
    if not followers:
        return (50, 200)
    for minimum, low, high in _PRICE_BANDS:
        if followers >= minimum:
            return (low, high)
    return (50, 300)


def engagement_rate(likes: float, comments: float, followers: int | None) -> float:
    """Engagement as a percentage of followers, rounded to two places."""
    if not followers:
        return 0.0
    return round((likes + comments) / followers * 100, 2)


def estimate_followers_from_engagement(likes: float, comments: float) -> int:
    """Back out a follower estimate assuming a 4% engagement rate."""
    return int(round((likes + comments) / 0.04))


def estimated_reach(followers: int | None) -> int:
    """Typical organic reach: 40% of the follower base."""
    return int((followers or 0) * 0.4)


def parse_follower_count(text: str | None) -> int:
    """Parse ``"12.5K followers"`` style snippets into an integer, 0 if absent."""
    if not text:
        return 0
    match = _FOLLOWER_RE.search(_THOUSANDS_RE.sub("", text))
    if not match:
        return 0
    number = float(match.group(1)) * _SUFFIX_MULTIPLIER[match.group(2).upper()]
    # Digit runs too long for a float parse to inf.
    if not math.isfinite(number):
        return 0
    return int(round(number))


def analyze_sentiment(text: str | None) -> str:
    """Word-list sentiment: ``positive``, ``negative`` or ``neutral``."""
    words = re.findall(r"[a-z']+", (text or "").lower())
    positive = sum(1 for w in words if w in _POSITIVE_WORDS)
    negative = sum(1 for w in words if w in _NEGATIVE_WORDS)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def detect_post_type(text: str | None) -> str:
    """Classify a post caption by its dominant intent."""
    content = text or ""
    if _PROMO_RE.search(content):
        return "promotional"
    if _EDU_RE.search(content):
        return "educational"
    if _ENGAGE_RE.search(content):
        return "engagement"
    if _ANNOUNCE_RE.search(content):
        return "announcement"
    return "general"
