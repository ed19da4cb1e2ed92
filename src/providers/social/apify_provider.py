"""Apify actor-backed social scrape provider implementing ISocialScrapeProvider.

Every platform search is an Apify *actor run*:

    1. POST /v2/acts/{actor}/runs          -> run id (HTTP 201)
    2. GET  /v2/actor-runs/{run id}         -> poll until SUCCEEDED / FAILED
    3. GET  /v2/datasets/{dataset}/items    -> raw items

Raw items are mapped to :class:`Candidate` / :class:`Post` per platform.
Hashtag and tweet scrapers return posts rather than profiles, so those
mappers collapse posts to their unique authors and keep only accounts with
meaningful engagement.

Mapped responses are memoized in an injected :class:`ICacheProvider` for a
few minutes so a retried request does not start a second actor run.
"""

from __future__ import annotations

import asyncio
import re
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

import httpx

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.social_scrape_provider import ISocialScrapeProvider
from src.models.candidate import Candidate, Post
from src.utils.audience import (
    analyze_sentiment,
    detect_post_type,
    engagement_rate,
    estimate_followers_from_engagement,
)
from src.utils.errors import MalformedResponse, ProviderError, ProviderTimeout
from src.utils.logging import get_logger

_API_BASE = "https://api.apify.com/v2"
_PROVIDER = "apify"

# Actor ids per platform for keyword discovery.
_DISCOVERY_ACTORS: dict[str, str] = {
    "instagram": "apify~instagram-hashtag-scraper",
    "twitter": "apidojo~tweet-scraper",
    "youtube": "streamers~youtube-channel-scraper",
    "linkedin": "anchor~linkedin-people-search",
    "facebook": "apify~facebook-pages-scraper",
    "tiktok": "clockworks~tiktok-scraper",
}

# Actor ids per platform for recent-post fetches.
_POST_ACTORS: dict[str, str] = {
    "instagram": "apify~instagram-profile-scraper",
    "twitter": "apify~twitter-scraper",
    "tiktok": "clockworks~tiktok-scraper",
}

_TERMINAL_FAILURES = frozenset({"FAILED", "ABORTED", "TIMED-OUT"})
_HASHTAG_STRIP_RE = re.compile(r"[#\s]+")


def _as_int(value: Any) -> int:
    try:
        return max(int(float(value)), 0)
    except (TypeError, ValueError):
        return 0


def _first(item: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first truthy value among ``keys``."""
    for key in keys:
        value = item.get(key)
        if value:
            return value
    return default


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse epoch seconds/milliseconds, ISO-8601, or Twitter's legacy format."""
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > 1e12 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    text = str(value)
    for parse in (
        lambda t: datetime.fromisoformat(t.replace("Z", "+00:00")),
        lambda t: datetime.strptime(t, "%a %b %d %H:%M:%S %z %Y"),
    ):
        try:
            parsed = parse(text)
        except ValueError:
            continue
        # Naive timestamps are assumed UTC so posts stay comparable.
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


class ApifyScrapeProvider(ISocialScrapeProvider):
    """Social profile discovery and post fetching through Apify actors.

    Parameters
    ----------
    api_key:
        Apify API token.  Empty means "not configured".
    http_client:
        Shared ``httpx.AsyncClient``.
    response_cache:
        Optional short-lived cache for mapped results.
    poll_interval:
        Seconds between run-status polls.
    max_wait:
        Seconds to wait for a run before giving up with ProviderTimeout.
    sleep:
        Awaitable sleep function, injectable for tests.
    """

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        response_cache: ICacheProvider | None = None,
        poll_interval: float = 3.0,
        max_wait: float = 120.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._cache = response_cache
        self._poll_interval = poll_interval
        self._max_wait = max_wait
        self._sleep = sleep
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # ISocialScrapeProvider implementation
    # ------------------------------------------------------------------

    async def discover_profiles(
        self,
        keyword: str,
        platform: str,
        limit: int = 10,
    ) -> list[Candidate]:
        actor = _DISCOVERY_ACTORS.get(platform)
        if actor is None:
            raise ProviderError(
                message=f"platform {platform!r} not supported", provider_name=_PROVIDER
            )

        cache_key = f"apify:profiles:{platform}:{keyword.lower()}:{limit}"
        cached = await self._cache_get(cache_key)
        if cached is not None:
            return [Candidate.model_validate(c) for c in cached]

        items = await self._run_actor(actor, self._discovery_input(platform, keyword, limit))
        mapper = getattr(self, f"_map_{platform}_profiles")
        candidates: list[Candidate] = mapper(items)[:limit]

        self._logger.info(
            "apify_profiles_found",
            platform=platform,
            keyword=keyword,
            raw_items=len(items),
            candidates=len(candidates),
        )
        await self._cache_set(cache_key, [c.model_dump(mode="json") for c in candidates])
        return candidates

    async def fetch_recent_posts(
        self,
        handles: list[str],
        platform: str,
        limit: int = 5,
    ) -> list[Post]:
        actor = _POST_ACTORS.get(platform)
        if actor is None:
            raise ProviderError(
                message=f"recent posts not supported on {platform!r}", provider_name=_PROVIDER
            )

        posts: list[Post] = []
        for raw_handle in handles:
            handle = raw_handle.lstrip("@")
            cache_key = f"apify:posts:{platform}:{handle.lower()}:{limit}"
            cached = await self._cache_get(cache_key)
            if cached is not None:
                posts.extend(Post.model_validate(p) for p in cached)
                continue

            items = await self._run_actor(actor, self._posts_input(platform, handle, limit))
            handle_posts = self._map_posts(platform, handle, items)[:limit]
            await self._cache_set(cache_key, [p.model_dump(mode="json") for p in handle_posts])
            posts.extend(handle_posts)

        epoch = datetime.min.replace(tzinfo=timezone.utc)
        posts.sort(key=lambda p: p.posted_at or epoch, reverse=True)
        return posts

    def supported_platforms(self) -> frozenset[str]:
        return frozenset(_DISCOVERY_ACTORS)

    def get_provider_name(self) -> str:
        return _PROVIDER

    def is_available(self) -> bool:
        return bool(self._api_key)

    # ------------------------------------------------------------------
    # Actor runs
    # ------------------------------------------------------------------

    async def _run_actor(self, actor_id: str, run_input: dict[str, Any]) -> list[dict[str, Any]]:
        """Start an actor, poll it to completion, and return its dataset items."""
        if not self._api_key:
            raise ProviderError(message="Apify API key not configured", provider_name=_PROVIDER)

        started = await self._request("POST", f"/acts/{actor_id}/runs", json=run_input)
        run_id = (started.get("data") or {}).get("id")
        if not run_id:
            raise MalformedResponse(message="actor run returned no id", provider_name=_PROVIDER)

        elapsed = 0.0
        while elapsed < self._max_wait:
            await self._sleep(self._poll_interval)
            elapsed += self._poll_interval

            run = (await self._request("GET", f"/actor-runs/{run_id}")).get("data") or {}
            status = run.get("status")
            if status == "SUCCEEDED":
                dataset_id = run.get("defaultDatasetId")
                if not dataset_id:
                    return []
                items = await self._request("GET", f"/datasets/{dataset_id}/items")
                if not isinstance(items, list):
                    raise MalformedResponse(
                        message="dataset items is not a list", provider_name=_PROVIDER
                    )
                return [i for i in items if isinstance(i, dict)]
            if status in _TERMINAL_FAILURES:
                raise ProviderError(message=f"actor run {status}", provider_name=_PROVIDER)

        raise ProviderTimeout(
            message=f"actor {actor_id} did not finish within {self._max_wait:.0f}s",
            provider_name=_PROVIDER,
        )

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            response = await self._http.request(
                method,
                f"{_API_BASE}{path}",
                params={"token": self._api_key},
                json=json,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                message=f"Apify HTTP {exc.response.status_code} for {path.split('?')[0]}",
                provider_name=_PROVIDER,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                message=f"Apify request failed: {exc}", provider_name=_PROVIDER
            ) from exc
        except ValueError as exc:
            raise MalformedResponse(
                message="Apify returned non-JSON body", provider_name=_PROVIDER
            ) from exc

    async def _cache_get(self, key: str) -> Any | None:
        if self._cache is None:
            return None
        return await self._cache.get(key)

    async def _cache_set(self, key: str, value: Any) -> None:
        if self._cache is not None and value:
            await self._cache.set(key, value)

    # ------------------------------------------------------------------
    # Actor inputs
    # ------------------------------------------------------------------

    @staticmethod
    def _discovery_input(platform: str, keyword: str, limit: int) -> dict[str, Any]:
        hashtag = _HASHTAG_STRIP_RE.sub("", keyword)
        if platform == "instagram":
            return {"hashtags": [hashtag], "resultsLimit": limit * 2, "resultsType": "posts"}
        if platform == "twitter":
            return {"searchTerms": [f"{keyword} influencer"], "maxItems": limit * 3, "sort": "Top"}
        if platform == "youtube":
            return {"searchKeywords": [keyword], "maxResults": limit}
        if platform == "linkedin":
            query = httpx.QueryParams({"keywords": f"{keyword} influencer", "origin": "GLOBAL_SEARCH_HEADER"})
            return {
                "searchUrl": f"https://www.linkedin.com/search/results/people/?{query}",
                "maxProfiles": limit,
            }
        if platform == "facebook":
            return {"searchQueries": [keyword], "maxPages": limit}
        return {"hashtags": [hashtag], "resultsPerPage": limit * 2}

    @staticmethod
    def _posts_input(platform: str, handle: str, limit: int) -> dict[str, Any]:
        if platform == "instagram":
            return {"usernames": [handle], "resultsLimit": limit}
        if platform == "twitter":
            return {"searchTerms": [f"from:{handle}"], "maxTweets": limit, "addUserInfo": True}
        return {"profiles": [handle], "resultsPerPage": limit}

    # ------------------------------------------------------------------
    # Profile mappers (one per platform)
    # ------------------------------------------------------------------

    @staticmethod
    def _map_instagram_profiles(items: list[dict[str, Any]]) -> list[Candidate]:
        seen: set[str] = set()
        candidates: list[Candidate] = []
        for post in items:
            owner = post.get("owner") or {}
            username = post.get("ownerUsername") or owner.get("username")
            if not username or username in seen:
                continue
            seen.add(username)
            likes = _as_int(_first(post, "likesCount", "likes", default=0))
            comments = _as_int(_first(post, "commentsCount", "comments", default=0))
            if likes < 100 and comments < 10:
                continue
            followers = _as_int(owner.get("followersCount"))
            candidates.append(
                Candidate(
                    platform="instagram",
                    handle=username,
                    display_name=post.get("ownerFullName") or owner.get("fullName") or username,
                    bio=owner.get("biography") or "",
                    audience_size=followers or estimate_followers_from_engagement(likes, comments),
                    engagement_rate=engagement_rate(likes, comments, followers),
                    avg_likes=likes,
                    avg_comments=comments,
                    verified=bool(owner.get("isVerified")),
                    profile_url=f"https://instagram.com/{username}",
                )
            )
        return candidates

    @staticmethod
    def _map_twitter_profiles(items: list[dict[str, Any]]) -> list[Candidate]:
        seen: set[str] = set()
        candidates: list[Candidate] = []
        for tweet in items:
            user = tweet.get("user") or tweet.get("author") or {}
            username = user.get("screen_name") or user.get("userName") or user.get("username")
            if not username or username in seen:
                continue
            seen.add(username)
            followers = _as_int(_first(user, "followers_count", "followers", default=0))
            likes = _as_int(_first(tweet, "favorite_count", "likeCount", "likes", default=0))
            retweets = _as_int(_first(tweet, "retweet_count", "retweetCount", default=0))
            if followers < 1000 and likes < 50:
                continue
            candidates.append(
                Candidate(
                    platform="twitter",
                    handle=username,
                    display_name=user.get("name") or username,
                    bio=user.get("description") or "",
                    audience_size=followers,
                    engagement_rate=engagement_rate(likes, retweets, followers),
                    avg_likes=likes,
                    verified=bool(user.get("verified") or user.get("isVerified")),
                    profile_url=f"https://twitter.com/{username}",
                )
            )
        return candidates

    @staticmethod
    def _map_youtube_profiles(items: list[dict[str, Any]]) -> list[Candidate]:
        candidates: list[Candidate] = []
        for channel in items:
            channel_id = _first(channel, "channelId", "id")
            if not channel_id:
                continue
            candidates.append(
                Candidate(
                    platform="youtube",
                    handle=str(channel_id),
                    display_name=_first(channel, "channelName", "title", default=str(channel_id)),
                    bio=channel.get("description") or "",
                    audience_size=_as_int(_first(channel, "subscriberCount", "subscribers", default=0)),
                    verified=bool(channel.get("isVerified")),
                    profile_url=_first(
                        channel, "channelUrl", "url",
                        default=f"https://youtube.com/channel/{channel_id}",
                    ),
                )
            )
        return candidates

    @staticmethod
    def _map_linkedin_profiles(items: list[dict[str, Any]]) -> list[Candidate]:
        candidates: list[Candidate] = []
        for profile in items:
            identifier = profile.get("publicIdentifier")
            url = profile.get("profileUrl") or ""
            if not identifier and "/in/" in url:
                identifier = url.split("/in/", 1)[1].strip("/")
            if not identifier:
                continue
            full_name = profile.get("fullName") or " ".join(
                p for p in (profile.get("firstName"), profile.get("lastName")) if p
            )
            candidates.append(
                Candidate(
                    platform="linkedin",
                    handle=identifier,
                    display_name=full_name or identifier,
                    bio=_first(profile, "headline", "summary", default=""),
                    audience_size=_as_int(_first(profile, "followers", "connectionsCount", default=0)),
                    profile_url=url or f"https://linkedin.com/in/{identifier}",
                )
            )
        return candidates

    @staticmethod
    def _map_facebook_profiles(items: list[dict[str, Any]]) -> list[Candidate]:
        candidates: list[Candidate] = []
        for page in items:
            page_id = _first(page, "pageId", "id")
            name = _first(page, "title", "name")
            if not page_id and not name:
                continue
            handle = str(page_id or name)
            candidates.append(
                Candidate(
                    platform="facebook",
                    handle=handle,
                    display_name=name or handle,
                    bio=_first(page, "about", "description", "intro", default=""),
                    audience_size=_as_int(_first(page, "followers", "likes", default=0)),
                    verified=bool(page.get("isVerified")),
                    profile_url=_first(page, "url", "pageUrl", default=f"https://facebook.com/{handle}"),
                )
            )
        return candidates

    @staticmethod
    def _map_tiktok_profiles(items: list[dict[str, Any]]) -> list[Candidate]:
        seen: set[str] = set()
        candidates: list[Candidate] = []
        for video in items:
            author = video.get("authorMeta") or video.get("author") or {}
            username = author.get("name") or author.get("uniqueId")
            if not username or username in seen:
                continue
            seen.add(username)
            likes = _as_int(_first(video, "diggCount", "likes", default=0))
            comments = _as_int(_first(video, "commentCount", "comments", default=0))
            views = _as_int(_first(video, "playCount", "views", default=0))
            if views < 1000 and likes < 100:
                continue
            followers = _as_int(_first(author, "fans", "followers", default=0))
            candidates.append(
                Candidate(
                    platform="tiktok",
                    handle=username,
                    display_name=_first(author, "nickName", "nickname", default=username),
                    bio=author.get("signature") or "",
                    audience_size=followers or estimate_followers_from_engagement(likes, comments),
                    engagement_rate=engagement_rate(likes, comments, views),
                    avg_likes=likes,
                    avg_comments=comments,
                    verified=bool(author.get("verified")),
                    profile_url=f"https://tiktok.com/@{username}",
                )
            )
        return candidates

    # ------------------------------------------------------------------
    # Post mapper
    # ------------------------------------------------------------------

    @staticmethod
    def _map_posts(platform: str, handle: str, items: list[dict[str, Any]]) -> list[Post]:
        if platform == "instagram":
            raw_posts = []
            for profile in items[:1]:
                raw_posts = profile.get("latestPosts") or profile.get("posts") or []
        else:
            raw_posts = items

        posts: list[Post] = []
        for raw in raw_posts:
            if not isinstance(raw, dict):
                continue
            if platform == "instagram":
                content = _first(raw, "caption", "text", "description", default="")
                likes = _first(raw, "likesCount", "likes", default=0)
                comments = _first(raw, "commentsCount", "comments", default=0)
                posted = _first(raw, "timestamp", "takenAt")
                url = raw.get("url") or f"https://instagram.com/p/{_first(raw, 'shortCode', 'id', default='')}"
            elif platform == "twitter":
                content = _first(raw, "text", "full_text", default="")
                likes = _first(raw, "favorite_count", "likes", default=0)
                comments = _first(raw, "reply_count", "replies", default=0)
                posted = raw.get("created_at")
                url = raw.get("url") or f"https://twitter.com/{handle}/status/{_first(raw, 'id_str', 'id', default='')}"
            else:
                content = _first(raw, "text", "desc", "description", default="")
                likes = _first(raw, "diggCount", "likes", default=0)
                comments = _first(raw, "commentCount", "comments", default=0)
                posted = raw.get("createTime")
                url = raw.get("webVideoUrl") or f"https://tiktok.com/@{handle}/video/{raw.get('id', '')}"

            posts.append(
                Post(
                    platform=platform,
                    author_handle=handle,
                    content=content,
                    likes=_as_int(likes),
                    comments=_as_int(comments),
                    posted_at=_parse_timestamp(posted),
                    url=url,
                    sentiment=analyze_sentiment(content),
                    post_type=detect_post_type(content),
                )
            )
        return posts
