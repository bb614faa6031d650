"""
Application configuration with environment variable support.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide settings, read once at startup."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Text generation
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    MAX_OUTPUT_TOKENS: int = 4000

    # Forum (Reddit app-only OAuth)
    REDDIT_CLIENT_ID: str = ""
    REDDIT_CLIENT_SECRET: str = ""
    REDDIT_USER_AGENT: str = "social-listening-bot/1.0"

    # Web search (Serper)
    SERPER_API_KEY: str = ""

    HTTP_TIMEOUT_SECONDS: float = 15.0

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # CORS Configuration
    CORS_ALLOW_ORIGINS: str = "*"
    PORT: int = 8000

    @property
    def cors_origin_list(self) -> List[str]:
        return [item.strip() for item in self.CORS_ALLOW_ORIGINS.split(",") if item.strip()]


settings = Settings()


# Forum search settings
TARGET_SUBREDDITS: Tuple[str, ...] = (
    "SaaS",
    "technology",
    "startups",
    "entrepreneur",
    "smallbusiness",
    "Entrepreneur",
    "webdev",
    "programming",
    "software",
    "business",
)
SUBREDDIT_SEARCH_LIMIT: int = 10
MAX_FORUM_POSTS: int = 20
SNIPPET_MAX_CHARS: int = 200

# Web search settings
WEB_RESULTS_PER_QUERY: int = 5
SERPER_MAX_RESULTS: int = 10  # provider-side cap per request

# "{brand}" is substituted per run. Keys are Platform values.
WEB_QUERY_TEMPLATES: Dict[str, Tuple[str, ...]] = {
    "linkedin": (
        '"{brand}" site:linkedin.com/posts',
        '"{brand} feedback" site:linkedin.com',
        '"{brand} review" site:linkedin.com',
    ),
    "twitter": (
        '"{brand}" (site:twitter.com OR site:x.com)',
        '"{brand} feedback" site:twitter.com',
        '"{brand} complaint" site:x.com',
    ),
    "reviews": (
        '"{brand}" site:g2.com',
        '"{brand}" site:capterra.com',
        '"{brand} review" site:trustradius.com',
    ),
    "blogs": (
        '"{brand}" site:medium.com',
        '"{brand}" site:dev.to',
        '"{brand}" site:news.ycombinator.com',
    ),
}

# Platform filter keywords; a category is searched when any keyword appears in the filter
PLATFORM_FILTER_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "linkedin": ("linkedin",),
    "twitter": ("twitter", "x"),
    "reviews": ("g2", "capterra"),
    "blogs": ("blog", "medium"),
}

# Concerns text containing any of these is not treated as critical
NO_CONCERN_PHRASES: Tuple[str, ...] = (
    "no critical concerns",
    "no significant concerns",
    "no critical issues",
)

DEFAULT_TIME_RANGE: str = "7 days"
DEFAULT_PLATFORMS: str = "all"
