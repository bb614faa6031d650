"""
Recovers the five report sections from the model's free-text reply.

Each section starts at its emoji + bold header. All headers are located
first, then the text is sliced between consecutive header positions, so the
model may emit the sections in any order.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from listening.config import NO_CONCERN_PHRASES
from listening.models import AnalysisResult
from listening.utils import now_iso

logger = logging.getLogger(__name__)

# Field name -> header pattern. The warning sign may come with or without
# its emoji variation selector.
SECTION_MARKERS: Dict[str, re.Pattern] = {
    "sentiment_summary": re.compile(r"📊\s*\*\*SENTIMENT BREAKDOWN\*\*"),
    "positive_highlights": re.compile(r"✅\s*\*\*POSITIVE HIGHLIGHTS\*\*"),
    "negative_concerns": re.compile(r"\u26a0\ufe0f?\s*\*\*CRITICAL CONCERNS\*\*"),
    "trending_topics": re.compile(r"🔥\s*\*\*TRENDING TOPICS\*\*"),
    "competitive_insights": re.compile(r"🎯\s*\*\*COMPETITIVE INSIGHTS\*\*"),
}

UNPARSED_SENTIMENT = "Unable to extract sentiment data from response."
UNPARSED_CONCERNS = "Manual review of full report required."
PARSE_ERROR_SENTIMENT = "Error: Unable to parse sentiment analysis."
PARSE_ERROR_CONCERNS = "Error occurred during analysis parsing. Manual review required."
EMPTY_REPLY_REPORT = "No response received from the model."


def locate_sections(text: str) -> List[Tuple[int, int, str]]:
    """Return (header_start, content_start, field) for every header found, in text order."""
    found: List[Tuple[int, int, str]] = []
    for name, pattern in SECTION_MARKERS.items():
        match = pattern.search(text)
        if match:
            found.append((match.start(), match.end(), name))
    return sorted(found)


def extract_sections(text: str) -> Dict[str, str]:
    """Slice the reply into sections; headers that are missing map to ''."""
    sections = {name: "" for name in SECTION_MARKERS}
    located = locate_sections(text)

    for index, (_, content_start, name) in enumerate(located):
        content_end = located[index + 1][0] if index + 1 < len(located) else len(text)
        sections[name] = text[content_start:content_end].strip()

    return sections


def has_critical_issues(concerns: str) -> bool:
    """True when the concerns section has content that is not an explicit all-clear."""
    if not concerns:
        return False
    concerns_lower = concerns.lower()
    return not any(phrase in concerns_lower for phrase in NO_CONCERN_PHRASES)


def parse_response(response_text: Optional[str]) -> AnalysisResult:
    """
    Parse a generated report into an AnalysisResult.

    Never raises. When no header is recognized the result carries placeholder
    messages and the raw text, and is not flagged critical: nothing in the
    content itself pointed at a problem. An unexpected internal failure does
    flag the result critical.

    Args:
        response_text: Concatenated text of the model reply

    Returns:
        AnalysisResult without data_source (filled in by the orchestrator)
    """
    try:
        sections = extract_sections(response_text)

        result = AnalysisResult(
            full_report=response_text,
            timestamp=now_iso(),
            has_critical_issues=has_critical_issues(sections["negative_concerns"]),
            **sections,
        )

        if not any(sections.values()):
            logger.warning("Unable to parse structured sections from response")
            result.sentiment_summary = UNPARSED_SENTIMENT
            result.negative_concerns = UNPARSED_CONCERNS

        logger.info("Parsed social listening response (critical issues: %s)", result.has_critical_issues)
        return result

    except Exception:
        logger.exception("Error parsing social listening response")
        return AnalysisResult(
            sentiment_summary=PARSE_ERROR_SENTIMENT,
            negative_concerns=PARSE_ERROR_CONCERNS,
            has_critical_issues=True,
            full_report=response_text if isinstance(response_text, str) and response_text else EMPTY_REPLY_REPORT,
            timestamp=now_iso(),
        )
