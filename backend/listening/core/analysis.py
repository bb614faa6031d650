"""
Analysis orchestration: collect mentions, pick a prompt, generate and parse the report.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from listening.config import DEFAULT_PLATFORMS, DEFAULT_TIME_RANGE
from listening.core.parser import parse_response
from listening.core.prompts import build_knowledge_prompt, build_real_data_prompt
from listening.models import AggregatedCorpus, AnalysisPath, AnalysisResult, DataSourceStatus
from listening.services.llm import generate_report
from listening.sources.collector import aggregate_results
from listening.sources.reddit import fetch_forum_mentions
from listening.sources.serper import fetch_web_mentions
from listening.utils import now_iso

logger = logging.getLogger(__name__)

ANALYSIS_ERROR_SUMMARY = (
    "Error: Unable to complete social listening analysis. "
    "Please check API credentials and try again."
)
ANALYSIS_ERROR_CONCERNS = "Analysis error occurred."


async def collect_corpus(brand: str, time_range: str, platforms: str) -> Optional[AggregatedCorpus]:
    """
    Fetch both sources concurrently and aggregate them.

    Returns:
        The corpus, or None if collection or aggregation failed unexpectedly
    """
    try:
        forum_result, web_result = await asyncio.gather(
            fetch_forum_mentions(brand, time_range),
            fetch_web_mentions(brand, platforms),
        )
        logger.info("Reddit: %d posts, web: %d results", len(forum_result.records), len(web_result.records))
        return aggregate_results(forum_result, web_result, brand, time_range)
    except Exception as e:
        logger.warning("Live data collection failed, falling back to model knowledge: %s", e)
        return None


def choose_path(corpus: Optional[AggregatedCorpus]) -> AnalysisPath:
    if corpus is None or corpus.total_sources == 0:
        return AnalysisPath.KNOWLEDGE_FALLBACK
    return AnalysisPath.REAL_DATA


def provenance_banner(
    path: AnalysisPath,
    brand: str,
    time_range: str,
    corpus: Optional[AggregatedCorpus],
) -> str:
    """Header block stating which data path produced the report."""
    if path is AnalysisPath.REAL_DATA and corpus is not None:
        if corpus.data_source_status is DataSourceStatus.REAL_TIME:
            source_note = "✅ Real-time API data"
        else:
            source_note = "⚠️ Partial API data"
        return (
            "# Social Listening Report (Real-Time Data)\n\n"
            f"**Data Source:** {source_note}\n"
            f"**Sources:** {corpus.total_sources} mentions across "
            f"{len(corpus.active_platforms)} platforms ({', '.join(corpus.active_platform_names)})\n"
            f"**Brand:** {brand}\n"
            f"**Time Range:** {time_range}\n"
            f"**Generated:** {now_iso()}\n\n"
            "---\n\n"
        )

    return (
        "# Social Listening Report (Training Data Fallback)\n\n"
        "**Data Source:** ⚠️ Using model training data (live API data unavailable)\n"
        f"**Brand:** {brand}\n"
        f"**Time Range:** {time_range}\n"
        f"**Generated:** {now_iso()}\n\n"
        "---\n\n"
    )


def error_result(error: Exception) -> AnalysisResult:
    timestamp = now_iso()
    return AnalysisResult(
        sentiment_summary=ANALYSIS_ERROR_SUMMARY,
        negative_concerns=ANALYSIS_ERROR_CONCERNS,
        has_critical_issues=True,
        full_report=(
            "# Social Listening Analysis Error\n\n"
            f"**Error:** {error}\n\n"
            f"**Time:** {timestamp}"
        ),
        data_source=DataSourceStatus.ERROR,
        timestamp=timestamp,
    )


async def analyze_brand_sentiment(
    brand: str,
    competitors: str = "",
    time_range: str = DEFAULT_TIME_RANGE,
    platforms: str = DEFAULT_PLATFORMS,
) -> AnalysisResult:
    """
    Produce the social listening report for a brand.

    Uses live mentions when at least one source returned data, otherwise asks
    the model to rely on its own knowledge. Never raises: any failure becomes
    an error result flagged as critical.

    Args:
        brand: Brand or product name
        competitors: Comma-separated competitor names, may be empty
        time_range: Free-form time window, e.g. "7 days"
        platforms: Platform filter or "all"

    Returns:
        AnalysisResult with provenance banner and data_source set
    """
    try:
        logger.info("Starting social listening analysis for %s (%s, platforms: %s)", brand, time_range, platforms)

        corpus = await collect_corpus(brand, time_range, platforms)
        path = choose_path(corpus)

        if path is AnalysisPath.REAL_DATA:
            logger.info("Using real-time API data for analysis")
            prompt = build_real_data_prompt(brand, competitors, time_range, corpus)
            data_source = corpus.data_source_status
        else:
            logger.info("No real-time data found, falling back to model knowledge")
            prompt = build_knowledge_prompt(brand, competitors, time_range, platforms)
            data_source = DataSourceStatus.FALLBACK

        reply = await generate_report(prompt)
        result = parse_response(reply)

        result.full_report = provenance_banner(path, brand, time_range, corpus) + result.full_report
        result.data_source = data_source
        return result

    except Exception as e:
        logger.exception("Error in social listening analysis for %s", brand)
        return error_result(e)
