"""
Reddit public JSON client: the fetch collaborator for report ingestion.

Endpoints (no authentication):
  /r/{sub}/{sort}.json      latest posts in a subreddit
  /r/{sub}/search.json      search restricted to a subreddit
  /search.json              global search
  /r/{sub}/about.json       availability check

Politeness:
  - fixed minimum interval between requests (default 3s)
  - HTTP 429 retried with exponential backoff from 60s, capped at 300s,
    at most 3 retries, then the request yields nothing
  - error / quarantined / private payloads are treated as empty

No method raises on transport failure. Listing helpers return [] and
the collection entrypoints return a FetchResult with `error` set.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from services.api.config import Settings, settings as default_settings
from services.api.reports.types import RawPost
from services.api.scrapers.base import (
    FetchResult,
    MinIntervalRateLimiter,
    SourceRegistry,
    backoff_delay,
)

logger = logging.getLogger(__name__)

# Reddit returns at most 25 items per listing/search request here
MAX_LISTING_LIMIT = 25

# English-speaking subreddits known not to be quarantined
SAFE_SUBREDDITS: tuple[str, ...] = (
    "nyc", "LosAngeles", "chicago", "sanfrancisco", "boston",
    "unitedkingdom", "london", "toronto", "melbourne", "sydney", "seattle",
    "philadelphia", "mildlyinfuriating", "CrappyDesign", "UrbanPlanning",
    "transit", "PublicFreakout",
)

COMPLAINT_QUERIES: tuple[str, ...] = (
    "traffic jam problem", "subway delay", "bus late problem",
    "parking nightmare", "road construction issue", "power outage",
    "water problem", "heating issue", "trash collection", "broken elevator",
    "pothole problem", "broken streetlight", "sidewalk repair",
    "noise complaint", "neighborhood issue", "city problem",
    "municipal issue", "local government", "urban planning fail",
)

# get_city_complaints budget
COMPLAINT_SUBREDDITS = 3
POSTS_PER_SUBREDDIT = 5
SEARCH_RESULTS_PER_SUBREDDIT = 3
GLOBAL_SEARCH_RESULTS = 5
MAX_COMPLAINTS = 30
AVAILABILITY_CHECK_SUBREDDITS = 5

# Complaint quality gate
REMOVED_MARKERS = frozenset({"[removed]", "[deleted]"})
MIN_TITLE_LENGTH = 10
MIN_SCORE = -10

BLOCKED_REASONS = frozenset({"quarantined", "private"})


class RedditClient:
    """Rate-limited async client for Reddit's public JSON endpoints."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        config = config or default_settings
        self.registry = SourceRegistry(
            name="reddit",
            base_url=config.reddit_base_url.rstrip("/"),
            user_agent=config.reddit_user_agent,
            min_request_interval_s=config.reddit_min_request_interval_s,
        )
        self.rate_limit_retry_delay_s = config.reddit_rate_limit_retry_delay_s
        self.max_backoff_s = config.reddit_max_backoff_s
        self.max_retries = config.reddit_max_retries
        self.rate_limiter = MinIntervalRateLimiter(
            self.registry.min_request_interval_s, clock=clock, sleep=sleep,
        )
        self._sleep = sleep

        self._own_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            headers={"User-Agent": self.registry.user_agent},
            timeout=httpx.Timeout(config.reddit_timeout_s, connect=10.0),
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        if self._own_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RedditClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Optional[dict]:
        """
        GET a JSON document with rate limiting and 429 backoff.

        Returns None on exhausted retries, HTTP errors, transport errors,
        undecodable bodies and blocked-subreddit payloads.
        """
        for attempt in range(self.max_retries + 1):
            await self.rate_limiter.acquire()
            try:
                resp = await self._client.get(
                    url, params=params, headers={"User-Agent": self.registry.user_agent},
                )
            except httpx.HTTPError as exc:
                logger.error("Reddit request failed for %s: %s", url, exc)
                return None

            if resp.status_code == 429:
                if attempt < self.max_retries:
                    wait = backoff_delay(attempt, self.rate_limit_retry_delay_s, self.max_backoff_s)
                    logger.warning(
                        "Rate limited (429) on %s. Retry %d/%d in %.0fs",
                        url, attempt + 1, self.max_retries, wait,
                    )
                    await self._sleep(wait)
                    continue
                logger.error("Max retries reached for rate limiting on %s", url)
                return None

            if resp.status_code != 200:
                logger.error("HTTP %d from %s", resp.status_code, url)
                return None

            try:
                data = resp.json()
            except ValueError:
                logger.error("Non-JSON response from %s", url)
                return None

            if not isinstance(data, dict):
                logger.warning("Unexpected payload type from %s", url)
                return None
            if data.get("error") or data.get("reason") in BLOCKED_REASONS:
                logger.warning(
                    "Subreddit blocked or quarantined: %s",
                    data.get("message") or data.get("reason"),
                )
                return None
            return data

        return None

    @staticmethod
    def _parse_listing(data: Optional[dict]) -> list[RawPost]:
        """Extract posts from a listing payload, skipping malformed children."""
        if not data:
            return []
        children = (data.get("data") or {}).get("children") or []
        posts: list[RawPost] = []
        for child in children:
            raw = child.get("data") if isinstance(child, dict) else None
            if not isinstance(raw, dict):
                continue
            try:
                posts.append(RawPost.model_validate(raw))
            except ValidationError:
                logger.debug("Skipping malformed listing child: %r", raw.get("id"))
        return posts

    # ------------------------------------------------------------------
    # Listing / search
    # ------------------------------------------------------------------

    async def get_subreddit_posts(
        self, subreddit: str, sort: str = "new", limit: int = MAX_LISTING_LIMIT,
    ) -> list[RawPost]:
        if sort not in ("hot", "new", "top"):
            raise ValueError(f"sort must be hot, new or top, got {sort!r}")
        url = f"{self.registry.base_url}/r/{subreddit}/{sort}.json"
        data = await self._get_json(url, params={"limit": min(limit, MAX_LISTING_LIMIT)})
        return self._parse_listing(data)

    async def search_posts(
        self, query: str, subreddit: Optional[str] = None, limit: int = MAX_LISTING_LIMIT,
    ) -> list[RawPost]:
        if subreddit:
            url = f"{self.registry.base_url}/r/{subreddit}/search.json"
        else:
            url = f"{self.registry.base_url}/search.json"
        params = {
            "q": query,
            "sort": "new",
            "limit": min(limit, MAX_LISTING_LIMIT),
            "restrict_sr": "true" if subreddit else "false",
            "t": "week",
        }
        return self._parse_listing(await self._get_json(url, params=params))

    async def check_subreddit_availability(self, subreddit: str) -> bool:
        """True when about.json answers 200 with a non-quarantined subreddit."""
        await self.rate_limiter.acquire()
        url = f"{self.registry.base_url}/r/{subreddit}/about.json"
        try:
            resp = await self._client.get(url, headers={"User-Agent": self.registry.user_agent})
        except httpx.HTTPError as exc:
            logger.warning("Failed to check availability of r/%s: %s", subreddit, exc)
            return False

        if resp.status_code == 429:
            logger.warning("Rate limited while checking r/%s availability", subreddit)
            return False
        if resp.status_code != 200:
            return False
        try:
            data = resp.json()
        except ValueError:
            return False
        if not isinstance(data, dict) or data.get("error"):
            return False
        about = data.get("data")
        return bool(isinstance(about, dict) and about and not about.get("quarantine"))

    async def get_available_subreddits(self) -> list[str]:
        available = []
        for subreddit in SAFE_SUBREDDITS[:AVAILABILITY_CHECK_SUBREDDITS]:
            if await self.check_subreddit_availability(subreddit):
                available.append(subreddit)
        return available

    # ------------------------------------------------------------------
    # Collection entrypoints
    # ------------------------------------------------------------------

    async def get_city_complaints(self) -> FetchResult:
        """
        Newest posts plus one complaint search per city subreddit, then a
        global search. Deduped by id (first wins), quality-gated, capped.
        """
        all_posts: list[RawPost] = []
        query = COMPLAINT_QUERIES[0]

        for subreddit in SAFE_SUBREDDITS[:COMPLAINT_SUBREDDITS]:
            logger.info("Searching in r/%s", subreddit)
            all_posts.extend(await self.get_subreddit_posts(subreddit, "new", POSTS_PER_SUBREDDIT))
            all_posts.extend(await self.search_posts(query, subreddit, SEARCH_RESULTS_PER_SUBREDDIT))

        logger.info("Performing limited global search")
        all_posts.extend(await self.search_posts(query, None, GLOBAL_SEARCH_RESULTS))

        seen: set[str] = set()
        kept: list[RawPost] = []
        for post in all_posts:
            if post.id in seen:
                continue
            seen.add(post.id)
            if passes_quality_gate(post):
                kept.append(post)

        kept = kept[:MAX_COMPLAINTS]
        logger.info("Found %d unique posts (%d fetched)", len(kept), len(all_posts))

        if not all_posts:
            return FetchResult(posts=[], error="No posts fetched from Reddit")
        return FetchResult(posts=kept)

    async def get_mock_city_complaints(self) -> FetchResult:
        logger.info("Using mock data for development")
        return FetchResult(posts=mock_city_complaints())

    def reset_rate_limit(self) -> None:
        self.rate_limiter.reset()

    def is_rate_limited(self) -> bool:
        return self.rate_limiter.is_limited()


def passes_quality_gate(post: RawPost) -> bool:
    """Drop removed/deleted bodies, very short titles and buried posts."""
    if post.selftext in REMOVED_MARKERS:
        return False
    if len(post.title) < MIN_TITLE_LENGTH:
        return False
    if post.score < MIN_SCORE:
        return False
    return True


# ---------------------------------------------------------------------------
# Development fixtures
# ---------------------------------------------------------------------------

# (id, title, selftext, author, age_s, score, num_comments, subreddit, slug)
_MOCK_POSTS = (
    (
        "mock1",
        "Subway delays on Line 2 this morning - 20 minute wait",
        "Anyone else experiencing major delays on the subway? Been waiting for "
        "20 minutes and no announcements.",
        "commuter123", 3600, 45, 12, "nyc", "subway_delays_on_line_2",
    ),
    (
        "mock2",
        "Huge pothole on Main Street - damaged my tire",
        "The pothole near the intersection of Main and 5th has gotten massive. "
        "Just damaged my tire going through it. City needs to fix this ASAP.",
        "driver456", 7200, 78, 23, "LosAngeles", "huge_pothole_on_main_street",
    ),
    (
        "mock3",
        "Water main break on Oak Avenue - no water for 6 hours",
        "Water main broke early this morning on Oak Avenue. Whole block has been "
        "without water since 6 AM. City crews are on site but no ETA for repairs.",
        "resident789", 21600, 156, 45, "chicago", "water_main_break_on_oak_avenue",
    ),
    (
        "mock4",
        "Parking meters broken downtown - getting tickets anyway",
        "Half the parking meters on 3rd Street are out of order but parking "
        "enforcement is still giving tickets. This is ridiculous.",
        "downtown_parker", 14400, 92, 31, "sanfrancisco", "parking_meters_broken",
    ),
    (
        "mock5",
        "Construction noise starting at 5 AM every day",
        "The construction crew next to my building starts heavy machinery at 5 AM "
        "every morning. Is this even legal? How do I complain to the city?",
        "sleepy_neighbor", 10800, 67, 18, "boston", "construction_noise_5am",
    ),
)


def mock_city_complaints(now: Optional[float] = None) -> list[RawPost]:
    """The five fixed development posts, timestamped relative to now."""
    now = time.time() if now is None else now
    posts = []
    for post_id, title, body, author, age_s, score, comments, sub, slug in _MOCK_POSTS:
        permalink = f"/r/{sub}/comments/{post_id}/{slug}/"
        posts.append(RawPost(
            id=post_id,
            title=title,
            selftext=body,
            author=author,
            created_utc=now - age_s,
            score=score,
            num_comments=comments,
            subreddit=sub,
            permalink=permalink,
            url=f"https://www.reddit.com{permalink}",
        ))
    return posts
