"""
Shared utility functions for the social listening service.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from listening.config import DEFAULT_PLATFORMS, DEFAULT_TIME_RANGE
from listening.models import AnalysisResult


class MissingBrandError(ValueError):
    """The workflow step was invoked without a brand/product name."""


MISSING_BRAND_MESSAGE = "Brand/Product Name parameter is required but was not provided"

# Prefix and placeholder for each section field of the workflow outputs
SECTION_OUTPUTS = (
    ("sentiment_summary", "📊", "Unable to determine sentiment distribution."),
    ("positive_highlights", "✅", "No significant positive highlights identified."),
    ("negative_concerns", "⚠️", "No critical concerns identified at this time."),
    ("trending_topics", "🔥", "No trending topics detected."),
    ("competitive_insights", "🎯", "No competitive insights available."),
)


def now_utc() -> datetime:
    """
    Get current UTC datetime with timezone information.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def now_iso() -> str:
    return now_utc().isoformat()


def read_inputs(inputs: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """
    Normalize the workflow step inputs.

    Args:
        inputs: Raw inputs (brand_or_product, competitors, time_range, platforms)

    Returns:
        Dict with brand, competitors, time_range and platforms filled in

    Raises:
        MissingBrandError: If brand_or_product is missing or blank
    """
    brand = (inputs.get("brand_or_product") or "").strip()
    if not brand:
        raise MissingBrandError(MISSING_BRAND_MESSAGE)

    return {
        "brand": brand,
        "competitors": (inputs.get("competitors") or "").strip(),
        "time_range": (inputs.get("time_range") or "").strip() or DEFAULT_TIME_RANGE,
        "platforms": (inputs.get("platforms") or "").strip() or DEFAULT_PLATFORMS,
    }


def _fallback_full_report(analysis: AnalysisResult, params: Mapping[str, str]) -> str:
    def status(present: str, label_on: str, label_off: str) -> str:
        return label_on if present else label_off

    return (
        "# Social Listening Report\n\n"
        f"**Brand/Product:** {params['brand']}\n"
        f"**Competitors Tracked:** {params.get('competitors') or 'None specified'}\n"
        f"**Time Range:** {params.get('time_range') or DEFAULT_TIME_RANGE}\n"
        f"**Platforms:** {params.get('platforms') or 'All platforms'}\n"
        f"**Generated:** {now_iso()}\n\n"
        "## Summary\n"
        f"{status(analysis.sentiment_summary, '📊 **SENTIMENT ANALYZED**', '📊 **SENTIMENT DATA UNAVAILABLE**')}\n"
        f"{status(analysis.positive_highlights, '✅ **POSITIVE FEEDBACK FOUND**', '✅ **NO POSITIVE HIGHLIGHTS**')}\n"
        f"{status(analysis.negative_concerns, '⚠️ **CONCERNS IDENTIFIED**', '⚠️ **NO CRITICAL CONCERNS**')}\n"
        f"{status(analysis.trending_topics, '🔥 **TRENDING TOPICS DETECTED**', '🔥 **NO TRENDING TOPICS**')}\n"
        f"{status(analysis.competitive_insights, '🎯 **COMPETITIVE INSIGHTS AVAILABLE**', '🎯 **NO COMPETITIVE DATA**')}\n"
    )


def build_report_outputs(analysis: AnalysisResult, params: Mapping[str, str]) -> Dict[str, str]:
    """
    Build the fixed-shape output record for the workflow step.

    Every value is a string; has_critical_issues is the literal "true"/"false".

    Args:
        analysis: Result of the analysis run
        params: Normalized inputs from read_inputs

    Returns:
        Dict with the eight output fields
    """
    outputs: Dict[str, str] = {}
    for name, emoji, placeholder in SECTION_OUTPUTS:
        value = getattr(analysis, name)
        outputs[name] = f"{emoji} {value}" if value else f"{emoji} {placeholder}"

    outputs["full_report"] = analysis.full_report or _fallback_full_report(analysis, params)
    outputs["has_critical_issues"] = "true" if analysis.has_critical_issues else "false"
    outputs["report_timestamp"] = analysis.timestamp or now_iso()
    return outputs


def build_error_outputs(brand: str, error: Exception) -> Dict[str, str]:
    """Outputs used when the workflow step itself fails."""
    timestamp = now_iso()
    return {
        "sentiment_summary": f"📊 Analysis Error: Unable to complete sentiment analysis. Error: {error}",
        "positive_highlights": "✅ Unable to retrieve positive feedback due to analysis error.",
        "negative_concerns": f"⚠️ Critical: Analysis error occurred - {error}",
        "trending_topics": "🔥 Unable to identify trending topics due to analysis error.",
        "competitive_insights": "🎯 Unable to retrieve competitive insights due to analysis error.",
        "full_report": (
            "# Social Listening Analysis Error\n\n"
            f"**Brand:** {brand}\n"
            f"**Error:** {error}\n"
            f"**Time:** {timestamp}\n\n"
            "Please check API credentials and try again."
        ),
        "has_critical_issues": "true",
        "report_timestamp": timestamp,
    }
