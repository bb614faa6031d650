"""Tests for the analysis orchestrator."""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from conftest import make_post, make_result
from listening.core import analysis
from listening.models import AnalysisPath, DataSourceStatus, Platform, SourceResult


def empty_result(text: str = "unavailable") -> SourceResult:
    return SourceResult(rendered_text=text)


def run_with(forum_result, web_result, reply):
    """Patch both adapters and the generation call for one orchestrator run."""
    return (
        patch("listening.core.analysis.fetch_forum_mentions", new=AsyncMock(return_value=forum_result)),
        patch("listening.core.analysis.fetch_web_mentions", new=AsyncMock(return_value=web_result)),
        patch("listening.core.analysis.generate_report", new=AsyncMock(return_value=reply)),
    )


@pytest.mark.asyncio
async def test_forum_only_takes_real_data_path_with_partial_status(sample_reply):
    forum_result = SourceResult(
        records=[
            make_post("https://reddit.com/r/SaaS/comments/a1/", title="Acme rocks"),
            make_post("https://reddit.com/r/webdev/comments/b2/", title="Acme API"),
        ]
    )
    forum_patch, web_patch, llm_patch = run_with(forum_result, empty_result(), sample_reply)

    with forum_patch as forum_mock, web_patch as web_mock, llm_patch as llm_mock:
        result = await analysis.analyze_brand_sentiment("Acme", "Globex", "7 days", "all")

    forum_mock.assert_awaited_once_with("Acme", "7 days")
    web_mock.assert_awaited_once_with("Acme", "all")
    prompt = llm_mock.await_args.args[0]
    assert "REAL DATA COLLECTED FROM APIS" in prompt
    assert "https://reddit.com/r/webdev/comments/b2/" in prompt

    assert result.data_source is DataSourceStatus.PARTIAL
    assert result.full_report.startswith("# Social Listening Report (Real-Time Data)")
    assert "⚠️ Partial API data" in result.full_report
    assert "**Sources:** 2 mentions across 1 platforms (Reddit)" in result.full_report
    assert result.full_report.endswith(sample_reply)
    assert result.has_critical_issues is True
    assert result.positive_highlights


@pytest.mark.asyncio
async def test_both_sources_give_real_time_status(sample_reply):
    forum_patch, web_patch, llm_patch = run_with(
        SourceResult(records=[make_post("https://reddit.com/1")]),
        SourceResult(records=[make_result("https://g2.com/1", Platform.REVIEWS)]),
        sample_reply,
    )

    with forum_patch, web_patch, llm_patch:
        result = await analysis.analyze_brand_sentiment("Acme")

    assert result.data_source is DataSourceStatus.REAL_TIME
    assert "✅ Real-time API data" in result.full_report


@pytest.mark.asyncio
async def test_no_data_takes_knowledge_fallback_path(sample_reply):
    forum_patch, web_patch, llm_patch = run_with(empty_result(), empty_result(), sample_reply)

    with forum_patch, web_patch, llm_patch as llm_mock:
        result = await analysis.analyze_brand_sentiment("Acme", "", "30 days", "LinkedIn")

    prompt = llm_mock.await_args.args[0]
    assert "REAL DATA" not in prompt
    assert "**Platforms to Analyze:** LinkedIn" in prompt

    assert result.data_source is DataSourceStatus.FALLBACK
    assert result.full_report.startswith("# Social Listening Report (Training Data Fallback)")
    assert "training data" in result.full_report
    assert result.full_report.endswith(sample_reply)


@pytest.mark.asyncio
async def test_aggregation_failure_falls_back(sample_reply):
    forum_patch, web_patch, llm_patch = run_with(
        SourceResult(records=[make_post("https://reddit.com/1")]), empty_result(), sample_reply
    )

    with (
        forum_patch,
        web_patch,
        llm_patch as llm_mock,
        patch("listening.core.analysis.aggregate_results", side_effect=KeyError("bucket")),
    ):
        result = await analysis.analyze_brand_sentiment("Acme")

    assert result.data_source is DataSourceStatus.FALLBACK
    assert "REAL DATA" not in llm_mock.await_args.args[0]


@pytest.mark.asyncio
async def test_generation_failure_becomes_error_result():
    with (
        patch("listening.core.analysis.fetch_forum_mentions", new=AsyncMock(return_value=empty_result())),
        patch("listening.core.analysis.fetch_web_mentions", new=AsyncMock(return_value=empty_result())),
        patch("listening.core.analysis.generate_report", new=AsyncMock(side_effect=RuntimeError("quota exceeded"))),
    ):
        result = await analysis.analyze_brand_sentiment("Acme")

    assert result.has_critical_issues is True
    assert result.data_source is DataSourceStatus.ERROR
    assert result.positive_highlights == ""
    assert result.trending_topics == ""
    assert result.competitive_insights == ""
    assert "quota exceeded" in result.full_report
    assert result.full_report.startswith("# Social Listening Analysis Error")


@pytest.mark.asyncio
async def test_missing_generation_key_becomes_error_result():
    with (
        patch("listening.core.analysis.fetch_forum_mentions", new=AsyncMock(return_value=empty_result())),
        patch("listening.core.analysis.fetch_web_mentions", new=AsyncMock(return_value=empty_result())),
        patch("listening.services.llm.settings") as mock_settings,
    ):
        mock_settings.OPENAI_API_KEY = ""
        result = await analysis.analyze_brand_sentiment("Acme")

    assert result.data_source is DataSourceStatus.ERROR
    assert "OPENAI_API_KEY" in result.full_report


def test_choose_path():
    assert analysis.choose_path(None) is AnalysisPath.KNOWLEDGE_FALLBACK


@pytest.mark.asyncio
async def test_collect_corpus_returns_none_when_adapters_blow_up():
    with (
        patch("listening.core.analysis.fetch_forum_mentions", new=AsyncMock(side_effect=RuntimeError("bug"))),
        patch("listening.core.analysis.fetch_web_mentions", new=AsyncMock(return_value=empty_result())),
    ):
        corpus = await analysis.collect_corpus("Acme", "7 days", "all")

    assert corpus is None
