"""
Serper (Google search API) fetcher for web mentions, grouped by platform category.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List

import httpx

from listening.config import (
    PLATFORM_FILTER_KEYWORDS,
    SERPER_MAX_RESULTS,
    WEB_QUERY_TEMPLATES,
    WEB_RESULTS_PER_QUERY,
    settings,
)
from listening.models import WEB_PLATFORMS, Platform, SourceRecord, SourceResult
from listening.sources.common import (
    clean_text,
    deduplicate_by_url,
    describe_http_error,
    parse_utc_datetime,
    truncate_snippet,
)

logger = logging.getLogger(__name__)

SERPER_SEARCH_URL = "https://google.serper.dev/search"

CATEGORY_HEADINGS: Dict[Platform, str] = {
    Platform.LINKEDIN: "LINKEDIN DATA",
    Platform.TWITTER: "TWITTER/X DATA",
    Platform.REVIEWS: "REVIEW SITES DATA",
    Platform.BLOGS: "BLOGS & FORUMS DATA",
}


def select_platforms(platforms: str) -> List[Platform]:
    """
    Resolve the caller's platform filter to the web categories to search.

    "all" (or empty) selects every category; anything else is matched by
    keyword, e.g. "LinkedIn, G2" selects LinkedIn and review sites.
    """
    if not platforms or platforms.strip().lower() == "all":
        return list(WEB_PLATFORMS)

    wanted = platforms.lower()
    return [
        platform
        for platform in WEB_PLATFORMS
        if any(keyword in wanted for keyword in PLATFORM_FILTER_KEYWORDS[platform.value])
    ]


def format_category(platform: Platform, records: List[SourceRecord]) -> str:
    """Render one category as a numbered plain-text block."""
    lines = [f"{CATEGORY_HEADINGS[platform]} ({len(records)} results):", ""]
    for index, record in enumerate(records, start=1):
        lines.append(f"{index}. {record.title}")
        lines.append(f"   URL: {record.url}")
        lines.append(f'   Snippet: "{truncate_snippet(record.snippet)}"')
        lines.append("")
    return "\n".join(lines)


def format_results(by_platform: Dict[Platform, List[SourceRecord]]) -> str:
    blocks = [
        format_category(platform, records)
        for platform, records in by_platform.items()
        if records
    ]
    if not blocks:
        return "No web search results found."
    return "\n".join(blocks)


class SerperSearchFetcher:
    """Runs the templated site-restricted queries for each web category."""

    def __init__(self, api_key: str, timeout: float = 15.0):
        self.api_key = api_key
        self.timeout = timeout

    async def search(
        self,
        client: httpx.AsyncClient,
        query: str,
        platform: Platform,
        num: int = WEB_RESULTS_PER_QUERY,
    ) -> List[SourceRecord]:
        """Execute one search; provider errors are logged and yield no results."""
        try:
            response = await client.post(
                SERPER_SEARCH_URL,
                headers={"X-API-KEY": self.api_key, "Content-Type": "application/json"},
                json={"q": query, "num": min(num, SERPER_MAX_RESULTS)},
            )
            response.raise_for_status()
            payload = response.json()
        except Exception as e:
            logger.warning("Serper search failed for %r: %s", query, describe_http_error(e))
            return []

        records: List[SourceRecord] = []
        for item in payload.get("organic") or []:
            records.append(
                SourceRecord(
                    title=clean_text(item.get("title")),
                    url=clean_text(item.get("link")),
                    snippet=clean_text(item.get("snippet")),
                    platform=platform,
                    published_at=parse_utc_datetime(item.get("date")),
                )
            )
        return records

    async def search_category(
        self, client: httpx.AsyncClient, brand: str, platform: Platform
    ) -> List[SourceRecord]:
        queries = [template.format(brand=brand) for template in WEB_QUERY_TEMPLATES[platform.value]]
        batches = await asyncio.gather(*(self.search(client, query, platform) for query in queries))

        unique = deduplicate_by_url(record for batch in batches for record in batch)
        logger.info("Found %d %s results", len(unique), platform.display_name)
        return unique

    async def fetch(self, brand: str, platforms: str = "all") -> Dict[Platform, List[SourceRecord]]:
        """
        Search every selected web category concurrently.

        Returns:
            Mapping of each web category to its deduplicated records; categories
            excluded by the platform filter map to an empty list
        """
        selected = select_platforms(platforms)
        results: Dict[Platform, List[SourceRecord]] = {platform: [] for platform in WEB_PLATFORMS}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            batches = await asyncio.gather(
                *(self.search_category(client, brand, platform) for platform in selected)
            )

        for platform, records in zip(selected, batches):
            results[platform] = records
        return results


async def fetch_web_mentions(brand: str, platforms: str = "all") -> SourceResult:
    """Web-search adapter entry point. Never raises."""
    if not settings.SERPER_API_KEY:
        logger.warning("Serper API key not configured, skipping web search")
        return SourceResult(
            rendered_text="Web search data unavailable (Serper API key not configured)",
            status="credentials missing",
        )

    try:
        fetcher = SerperSearchFetcher(settings.SERPER_API_KEY, timeout=settings.HTTP_TIMEOUT_SECONDS)
        by_platform = await fetcher.fetch(brand, platforms)
    except Exception as e:
        reason = describe_http_error(e)
        logger.error("Web search failed: %s", reason)
        return SourceResult(rendered_text=f"Web search error: {reason}", status=reason)

    records = [record for platform in WEB_PLATFORMS for record in by_platform[platform]]
    logger.info("Total web search results: %d", len(records))
    return SourceResult(records=records, rendered_text=format_results(by_platform))
