"""
File: listening/models.py
Internal data structures passed between adapters, aggregator and parser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Platform(str, Enum):
    """Platform categories, in bucket (and dedup tie-break) order."""

    REDDIT = "reddit"
    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    REVIEWS = "reviews"
    BLOGS = "blogs"

    @property
    def display_name(self) -> str:
        return PLATFORM_DISPLAY_NAMES[self]


PLATFORM_DISPLAY_NAMES: Dict[Platform, str] = {
    Platform.REDDIT: "Reddit",
    Platform.LINKEDIN: "LinkedIn",
    Platform.TWITTER: "Twitter/X",
    Platform.REVIEWS: "Review Sites",
    Platform.BLOGS: "Blogs",
}

BUCKET_ORDER: Tuple[Platform, ...] = tuple(Platform)
WEB_PLATFORMS: Tuple[Platform, ...] = BUCKET_ORDER[1:]


class DataSourceStatus(str, Enum):
    REAL_TIME = "real-time"
    PARTIAL = "partial"
    FALLBACK = "fallback"
    ERROR = "error"


class AnalysisPath(str, Enum):
    """Which prompt the orchestrator used for a run."""

    REAL_DATA = "real-data"
    KNOWLEDGE_FALLBACK = "knowledge-fallback"


@dataclass(frozen=True)
class SourceRecord:
    """Normalized mention produced by an adapter. Identity is the exact url."""

    title: str
    url: str
    snippet: str
    platform: Platform
    published_at: Optional[datetime] = None


@dataclass(frozen=True)
class ForumPost(SourceRecord):
    score: int = 0
    num_comments: int = 0
    community: str = ""
    author: str = ""

    @property
    def engagement(self) -> int:
        # comments count double
        return self.score + 2 * self.num_comments


@dataclass
class SourceResult:
    """What an adapter hands back: records plus its plain-text rendering.

    `status` carries a human-readable note when the adapter degraded
    (missing credentials, transport failure); it is None on success.
    """

    records: List[SourceRecord] = field(default_factory=list)
    rendered_text: str = ""
    status: Optional[str] = None


@dataclass
class PlatformBucket:
    platform: Platform
    records: List[SourceRecord] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)


@dataclass
class AggregatedCorpus:
    brand: str
    time_range: str
    buckets: Dict[Platform, PlatformBucket]
    total_sources: int
    active_platforms: List[Platform]
    data_source_status: DataSourceStatus
    rendered_prompt_body: str = ""

    @property
    def active_platform_names(self) -> List[str]:
        return [p.display_name for p in self.active_platforms]


@dataclass
class AnalysisResult:
    sentiment_summary: str = ""
    positive_highlights: str = ""
    negative_concerns: str = ""
    trending_topics: str = ""
    competitive_insights: str = ""
    has_critical_issues: bool = False
    full_report: str = ""
    data_source: Optional[DataSourceStatus] = None
    timestamp: str = ""


__all__ = [
    "Platform",
    "BUCKET_ORDER",
    "WEB_PLATFORMS",
    "DataSourceStatus",
    "AnalysisPath",
    "SourceRecord",
    "ForumPost",
    "SourceResult",
    "PlatformBucket",
    "AggregatedCorpus",
    "AnalysisResult",
]
