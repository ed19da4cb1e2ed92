"""Turn tier-2 search results and tier-3 LLM output into candidates.

Search results become candidates when their URL points at a profile on
the dimension's platform: the handle is cut from the URL, the display
name from the page title, and the follower count (when present) from the
snippet.  Synthesized candidates are parsed from a JSON list with the
lenient strategies in :mod:`src.utils.json_extraction`.
"""

from __future__ import annotations

import math
import re
from typing import Any

from pydantic import ValidationError

from src.interfaces.web_search_provider import SearchResult
from src.models.business import BusinessContext
from src.models.cache import ArtifactKind
from src.models.candidate import Candidate
from src.utils.audience import parse_follower_count
from src.utils.json_extraction import extract_json
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Query fragment restricting a Google search to a platform's profiles.
PLATFORM_SITES: dict[str, str] = {
    "instagram": "instagram.com",
    "twitter": "twitter.com OR site:x.com",
    "youtube": "youtube.com",
    "linkedin": "linkedin.com/in",
    "facebook": "facebook.com",
    "tiktok": "tiktok.com",
}

_HANDLE_PATTERNS: dict[str, re.Pattern[str]] = {
    "instagram": re.compile(r"instagram\.com/([^/?#]+)", re.I),
    "twitter": re.compile(r"(?:twitter|x)\.com/([^/?#]+)", re.I),
    "youtube": re.compile(r"youtube\.com/(?:@|channel/|c/|user/)([^/?#]+)", re.I),
    "linkedin": re.compile(r"linkedin\.com/(?:in|company)/([^/?#]+)", re.I),
    "facebook": re.compile(r"facebook\.com/([^/?#]+)", re.I),
    "tiktok": re.compile(r"tiktok\.com/@([^/?#]+)", re.I),
}

# Path segments that are site pages, not profiles.
_GENERIC_PATHS = frozenset(
    {"explore", "search", "watch", "trending", "login", "signup", "hashtag", "p", "reel", "reels",
     "home", "i", "intent", "share", "groups", "pages", "events", "results", "stories"}
)

_TITLE_SPLIT_RE = re.compile(r"\s*[-–|•@(]\s*")
_MAX_NAME_LEN = 50


def build_search_query(platform: str, keyword: str, kind: ArtifactKind) -> str:
    """Google query for profiles matching ``keyword`` on ``platform``."""
    site = PLATFORM_SITES.get(platform, f"{platform}.com")
    if kind is ArtifactKind.COMPETITORS:
        return f'site:{site} "{keyword}" official'
    return f'site:{site} "{keyword}" influencer OR creator followers'


def extract_handle(platform: str, url: str) -> str | None:
    """Profile handle from ``url``, or ``None`` for non-profile pages."""
    pattern = _HANDLE_PATTERNS.get(platform)
    if pattern is None or not url:
        return None
    match = pattern.search(url)
    if not match:
        return None
    handle = match.group(1).lstrip("@").strip()
    if not handle or handle.lower() in _GENERIC_PATHS:
        return None
    return handle


def _display_name(title: str, handle: str) -> str:
    name = _TITLE_SPLIT_RE.split(title.strip(), maxsplit=1)[0].strip()
    return (name or handle)[:_MAX_NAME_LEN]


def candidates_from_search(platform: str, results: list[SearchResult]) -> list[Candidate]:
    """Map search results to candidates; results without a profile URL are dropped."""
    candidates: list[Candidate] = []
    for result in results:
        handle = extract_handle(platform, result.url)
        if handle is None:
            continue
        snippet = result.snippet or ""
        try:
            candidate = Candidate(
                platform=platform,
                handle=handle,
                display_name=_display_name(result.title or "", handle),
                bio=snippet[:200],
                audience_size=parse_follower_count(snippet) or parse_follower_count(result.title),
                profile_url=result.url,
            )
        except ValidationError as exc:
            logger.debug("search_result_skipped", platform=platform, url=result.url, error=str(exc))
            continue
        candidates.append(candidate)
    return candidates


# ---------------------------------------------------------------------------
# Synthesis (LLM) tier
# ---------------------------------------------------------------------------

SYNTHESIS_SYSTEM_PROMPT = (
    "You are a social media research assistant. You only answer with JSON. "
    "Suggest real, publicly known accounts when you are confident they exist."
)


def build_synthesis_prompt(
    context: BusinessContext,
    platform: str,
    keywords: list[str],
    kind: ArtifactKind,
    count: int,
) -> str:
    """User prompt asking the model for ``count`` candidate profiles as JSON."""
    subject = "competitor brands" if kind is ArtifactKind.COMPETITORS else "influencers or creators"
    location = context.location() or "any region"
    return (
        f"List {count} {platform} {subject} relevant to this business.\n"
        f"Business: {context.name or 'unnamed'}\n"
        f"Industry: {context.industry or 'unspecified'}\n"
        f"Niche: {context.niche or 'unspecified'}\n"
        f"Target audience: {context.target_audience or 'unspecified'}\n"
        f"Location: {location}\n"
        f"Search terms: {', '.join(keywords)}\n\n"
        "Respond with a JSON array only. Each element must have: "
        '"handle" (username without @), "name", "bio", "followers" (integer), '
        '"engagement_rate" (percent, number), "verified" (boolean).'
    )


def _coerce_float(value: Any) -> float:
    """Non-negative finite float from a model-supplied value, 0.0 otherwise."""
    try:
        number = float(str(value).strip().rstrip("%"))
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(number, 0.0)


def _coerce_int(value: Any) -> int:
    if isinstance(value, str):
        parsed = parse_follower_count(f"{value} followers")
        if parsed:
            return parsed
    return int(_coerce_float(value))


def parse_synthesized_candidates(platform: str, text: str | None) -> list[Candidate] | None:
    """Parse an LLM candidate list.

    Returns ``None`` when no JSON list can be extracted (a malformed
    response); an empty list when the JSON is valid but holds no usable
    profiles.
    """
    data = extract_json(text, expect=list)
    if data is None:
        wrapped = extract_json(text, expect=dict)
        if isinstance(wrapped, dict):
            data = next((v for v in wrapped.values() if isinstance(v, list)), None)
    if data is None:
        return None

    candidates: list[Candidate] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        handle = str(item.get("handle") or item.get("username") or "").lstrip("@").strip()
        if not handle:
            continue
        try:
            candidate = Candidate(
                platform=platform,
                handle=handle,
                display_name=str(item.get("name") or handle)[:_MAX_NAME_LEN],
                bio=str(item.get("bio") or ""),
                audience_size=_coerce_int(item.get("followers") or item.get("follower_count")),
                engagement_rate=_coerce_float(item.get("engagement_rate")),
                verified=bool(item.get("verified")),
            )
        except ValidationError as exc:
            logger.debug("synthesized_candidate_skipped", platform=platform, handle=handle, error=str(exc))
            continue
        candidates.append(candidate)
    return candidates
