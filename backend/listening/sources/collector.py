"""
Mention aggregation: merges forum and web adapter output into one corpus.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from listening.models import (
    BUCKET_ORDER,
    WEB_PLATFORMS,
    AggregatedCorpus,
    DataSourceStatus,
    Platform,
    PlatformBucket,
    SourceRecord,
    SourceResult,
)
from listening.sources import reddit, serper

logger = logging.getLogger(__name__)

SEPARATOR = "===================================="


def bucket_records(records: Iterable[SourceRecord]) -> Dict[Platform, PlatformBucket]:
    """Group records by platform. Every platform gets a bucket, possibly empty."""
    buckets = {platform: PlatformBucket(platform) for platform in BUCKET_ORDER}
    for record in records:
        buckets[record.platform].records.append(record)
    return buckets


def count_sources(buckets: Dict[Platform, PlatformBucket]) -> int:
    return sum(bucket.count for bucket in buckets.values())


def active_platforms(buckets: Dict[Platform, PlatformBucket]) -> List[Platform]:
    return [platform for platform in BUCKET_ORDER if buckets[platform].count > 0]


def determine_data_source(buckets: Dict[Platform, PlatformBucket]) -> DataSourceStatus:
    """
    Classify how much live data backs the corpus.

    The two signals are "forum has posts" and "any web category has results":
    both -> real-time, one -> partial, none -> fallback.
    """
    has_forum = buckets[Platform.REDDIT].count > 0
    has_web = any(buckets[platform].count > 0 for platform in WEB_PLATFORMS)

    if has_forum and has_web:
        return DataSourceStatus.REAL_TIME
    if has_forum or has_web:
        return DataSourceStatus.PARTIAL
    return DataSourceStatus.FALLBACK


def deduplicate_across_buckets(buckets: Dict[Platform, PlatformBucket]) -> Dict[Platform, PlatformBucket]:
    """
    Drop records whose url already appeared in an earlier bucket.

    Buckets are visited in BUCKET_ORDER, so a url found both on the forum and
    on a web category stays attributed to the forum.
    """
    seen_urls: set[str] = set()
    deduplicated: Dict[Platform, PlatformBucket] = {}

    for platform in BUCKET_ORDER:
        kept: List[SourceRecord] = []
        for record in buckets[platform].records:
            if record.url in seen_urls:
                continue
            seen_urls.add(record.url)
            kept.append(record)
        deduplicated[platform] = PlatformBucket(platform, kept)

    return deduplicated


def render_bucket(bucket: PlatformBucket) -> str:
    if bucket.platform is Platform.REDDIT:
        return reddit.format_posts(reddit.forum_posts(bucket.records))
    return serper.format_category(bucket.platform, bucket.records)


def render_prompt_body(
    brand: str,
    time_range: str,
    buckets: Dict[Platform, PlatformBucket],
) -> str:
    """Build the data section of the real-data prompt."""
    total = count_sources(buckets)
    platforms = [platform.display_name for platform in active_platforms(buckets)]
    forum_mood = reddit.summarize_sentiment(reddit.forum_posts(buckets[Platform.REDDIT].records))

    lines = [
        f"You are analyzing REAL social listening data collected from APIs for the brand: {brand}",
        "",
        f"TIME RANGE: Last {time_range}",
        f"TOTAL SOURCES: {total} mentions across {len(platforms)} platforms",
        f"PLATFORMS: {', '.join(platforms)}",
        "",
        SEPARATOR,
        "PLATFORM BREAKDOWN:",
        f"- Reddit: {buckets[Platform.REDDIT].count} posts (avg sentiment: {forum_mood.label})",
    ]
    for platform in WEB_PLATFORMS:
        lines.append(f"- {platform.display_name}: {buckets[platform].count} results")
    lines += [SEPARATOR, ""]

    for platform in BUCKET_ORDER:
        if buckets[platform].count > 0:
            lines += [render_bucket(buckets[platform]), ""]

    lines += [
        SEPARATOR,
        "",
        "ANALYSIS INSTRUCTIONS:",
        f"Based on the REAL data above ({total} total sources), provide a comprehensive "
        "social listening analysis.",
        "All source citations MUST reference the actual URLs provided above.",
        "Do NOT cite any URL that does not appear in the data above.",
        "Focus on actual sentiment, trends, and insights found in the real data.",
        "",
    ]
    return "\n".join(lines)


def aggregate_results(
    forum_result: SourceResult,
    web_result: SourceResult,
    brand: str,
    time_range: str,
) -> AggregatedCorpus:
    """
    Merge adapter results into a single deduplicated corpus.

    Args:
        forum_result: Output of the forum adapter
        web_result: Output of the web-search adapter
        brand: Brand being analyzed
        time_range: Human-readable time window

    Returns:
        AggregatedCorpus with counts, status and the rendered prompt body. An
        empty corpus is still fully rendered; deciding what to do with it is
        up to the caller.
    """
    buckets = bucket_records([*forum_result.records, *web_result.records])

    # status reflects what the adapters delivered, before cross-bucket dedup
    status = determine_data_source(buckets)

    buckets = deduplicate_across_buckets(buckets)
    total = count_sources(buckets)
    active = active_platforms(buckets)

    corpus = AggregatedCorpus(
        brand=brand,
        time_range=time_range,
        buckets=buckets,
        total_sources=total,
        active_platforms=active,
        data_source_status=status,
        rendered_prompt_body=render_prompt_body(brand, time_range, buckets),
    )

    logger.info("Aggregated %d total sources from %d platforms", total, len(active))
    logger.info("Data source status: %s", status.value)
    return corpus
