"""
File: listening/sources/reddit.py
Reddit forum adapter: app-only OAuth, one search per target subreddit.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List

import httpx

from listening.config import (
    MAX_FORUM_POSTS,
    SUBREDDIT_SEARCH_LIMIT,
    TARGET_SUBREDDITS,
    settings,
)
from listening.models import ForumPost, Platform, SourceResult
from listening.sources.common import (
    clean_text,
    deduplicate_by_url,
    describe_http_error,
    from_unix_timestamp,
    truncate_snippet,
)

logger = logging.getLogger(__name__)

REDDIT_AUTH_URL = "https://www.reddit.com/api/v1/access_token"
REDDIT_API_URL = "https://oauth.reddit.com"

DELETED_AUTHOR = "[deleted]"
REMOVED_MARKER = "[removed]"


@dataclass(frozen=True)
class ForumSentiment:
    avg_score: float = 0.0
    total_engagement: int = 0
    label: str = "neutral"


def parse_time_range(time_range: str) -> str:
    """Map a free-form window ("24 hours", "7 days", "last month") to Reddit's `t` filter."""
    range_lower = (time_range or "").lower()

    if "24" in range_lower or "hour" in range_lower:
        return "day"
    if "7" in range_lower or "week" in range_lower:
        return "week"
    if "30" in range_lower or "month" in range_lower:
        return "month"
    if "year" in range_lower:
        return "year"
    return "week"


def post_from_listing(data: dict, subreddit: str) -> ForumPost:
    """Normalize one `children[].data` entry of a Reddit listing."""
    permalink = data.get("permalink") or ""
    return ForumPost(
        title=clean_text(data.get("title")),
        url=f"https://reddit.com{permalink}" if permalink else clean_text(data.get("url")),
        snippet=data.get("selftext") or "",
        platform=Platform.REDDIT,
        published_at=from_unix_timestamp(data.get("created_utc")),
        score=int(data.get("score") or 0),
        num_comments=int(data.get("num_comments") or 0),
        community=subreddit,
        author=data.get("author") or DELETED_AUTHOR,
    )


def filter_by_relevance(posts: Iterable[ForumPost], brand: str) -> List[ForumPost]:
    """Drop deleted/removed posts, posts not mentioning the brand, and near-zero engagement."""
    brand_lower = brand.lower()
    relevant: List[ForumPost] = []

    for post in posts:
        if post.author == DELETED_AUTHOR or REMOVED_MARKER in post.title:
            continue

        if brand_lower not in post.title.lower() and brand_lower not in post.snippet.lower():
            continue

        if post.score < 1 and post.num_comments == 0:
            continue

        relevant.append(post)

    return relevant


def sort_by_engagement(posts: Iterable[ForumPost]) -> List[ForumPost]:
    return sorted(posts, key=lambda post: post.engagement, reverse=True)


def summarize_sentiment(posts: List[ForumPost]) -> ForumSentiment:
    """Coarse engagement-based mood of the forum bucket."""
    if not posts:
        return ForumSentiment()

    avg_score = sum(post.score for post in posts) / len(posts)
    total_engagement = sum(post.num_comments for post in posts)

    label = "neutral"
    if avg_score > 10:
        label = "positive"
    elif avg_score < 0:
        label = "negative"

    return ForumSentiment(
        avg_score=round(avg_score, 1),
        total_engagement=total_engagement,
        label=label,
    )


def format_posts(posts: List[ForumPost]) -> str:
    """Render posts as the numbered plain-text block embedded in the prompt."""
    if not posts:
        return "No Reddit posts found for this brand."

    sentiment = summarize_sentiment(posts)
    lines = [
        f"REDDIT DATA ({len(posts)} posts, avg score: {sentiment.avg_score}, "
        f"sentiment: {sentiment.label}):",
        "",
    ]

    for index, post in enumerate(posts, start=1):
        lines.append(f"{index}. [r/{post.community}] {post.title}")
        lines.append(f"   Score: {post.score} | Comments: {post.num_comments} | {post.url}")
        if post.snippet:
            lines.append(f'   Snippet: "{truncate_snippet(post.snippet)}"')
        lines.append("")

    return "\n".join(lines)


class RedditFetcher:
    """Searches a fixed set of subreddits for brand mentions."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        user_agent: str,
        subreddits: Iterable[str] = TARGET_SUBREDDITS,
        timeout: float = 15.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.user_agent = user_agent
        self.subreddits = tuple(subreddits)
        self.timeout = timeout

    async def get_token(self, client: httpx.AsyncClient) -> str:
        """Get an app-only bearer token."""
        response = await client.post(
            REDDIT_AUTH_URL,
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
            headers={"User-Agent": self.user_agent},
        )
        response.raise_for_status()
        return response.json()["access_token"]

    async def search_subreddit(
        self,
        client: httpx.AsyncClient,
        token: str,
        brand: str,
        subreddit: str,
        time_filter: str,
    ) -> List[ForumPost]:
        """Search one subreddit; failures are logged and yield no posts."""
        params = {
            "q": brand,
            "restrict_sr": "on",
            "sort": "relevance",
            "t": time_filter,
            "limit": SUBREDDIT_SEARCH_LIMIT,
        }
        headers = {"Authorization": f"Bearer {token}", "User-Agent": self.user_agent}

        try:
            response = await client.get(
                f"{REDDIT_API_URL}/r/{subreddit}/search", params=params, headers=headers
            )
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            logger.warning("Could not search r/%s: %s", subreddit, describe_http_error(e))
            return []

        posts: List[ForumPost] = []
        for child in data.get("data", {}).get("children", []):
            try:
                posts.append(post_from_listing(child.get("data", {}), subreddit))
            except (TypeError, ValueError) as e:
                logger.debug("Skipping malformed post in r/%s: %s", subreddit, e)
        return posts

    async def fetch(self, brand: str, time_range: str) -> List[ForumPost]:
        """
        Fetch the most engaging relevant posts for a brand.

        Args:
            brand: Brand or product name used as the search query
            time_range: Free-form time window, see parse_time_range

        Returns:
            Up to MAX_FORUM_POSTS posts, highest engagement first

        Raises:
            httpx.HTTPError: If the OAuth token cannot be obtained
        """
        time_filter = parse_time_range(time_range)
        logger.info("Searching Reddit for %r (t=%s)", brand, time_filter)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            token = await self.get_token(client)
            results = await asyncio.gather(
                *(
                    self.search_subreddit(client, token, brand, subreddit, time_filter)
                    for subreddit in self.subreddits
                )
            )

        all_posts = deduplicate_by_url(post for batch in results for post in batch)
        relevant = filter_by_relevance(all_posts, brand)
        logger.info("Reddit: %d unique posts found, %d relevant", len(all_posts), len(relevant))

        return sort_by_engagement(relevant)[:MAX_FORUM_POSTS]


async def fetch_forum_mentions(brand: str, time_range: str) -> SourceResult:
    """Forum adapter entry point. Never raises."""
    if not settings.REDDIT_CLIENT_ID or not settings.REDDIT_CLIENT_SECRET:
        logger.warning("Reddit API credentials not configured, skipping Reddit search")
        return SourceResult(
            rendered_text="Reddit data unavailable (API credentials not configured)",
            status="credentials missing",
        )

    try:
        fetcher = RedditFetcher(
            settings.REDDIT_CLIENT_ID,
            settings.REDDIT_CLIENT_SECRET,
            settings.REDDIT_USER_AGENT,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        posts = await fetcher.fetch(brand, time_range)
    except Exception as e:
        reason = describe_http_error(e)
        logger.error("Reddit search failed: %s", reason)
        return SourceResult(rendered_text=f"Reddit search error: {reason}", status=reason)

    return SourceResult(records=list(posts), rendered_text=format_posts(posts))


def forum_posts(records: Iterable[object]) -> List[ForumPost]:
    return [record for record in records if isinstance(record, ForumPost)]
