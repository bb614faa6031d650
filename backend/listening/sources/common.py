"""
Common utilities for mention source fetchers.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import httpx
from dateutil import parser as dateparser

from listening.config import SNIPPET_MAX_CHARS
from listening.models import SourceRecord

logger = logging.getLogger(__name__)


def parse_utc_datetime(date_string: Optional[str]) -> Optional[datetime]:
    """
    Parse a date string and convert to UTC datetime.

    Args:
        date_string: Date string in various formats, or None

    Returns:
        UTC datetime object, or None if the input is empty or not a date
        (search providers sometimes report relative dates like "3 days ago")
    """
    if not date_string:
        return None

    try:
        parsed_date = dateparser.parse(date_string)
    except (ValueError, OverflowError):
        return None

    if parsed_date.tzinfo:
        return parsed_date.astimezone(timezone.utc)
    return parsed_date.replace(tzinfo=timezone.utc)


def from_unix_timestamp(value: Optional[float]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def clean_text(text: Optional[str]) -> str:
    """
    Clean and normalize text content.

    Args:
        text: Raw text string or None

    Returns:
        Cleaned text string, empty string if input is None
    """
    if not text:
        return ""
    return text.strip()


def truncate_snippet(text: str, limit: int = SNIPPET_MAX_CHARS) -> str:
    """Flatten newlines and cut to `limit` characters, marking the cut with '...'."""
    flat = text.replace("\n", " ")
    if len(text) > limit:
        return flat[:limit] + "..."
    return flat


def deduplicate_by_url(records: Iterable[SourceRecord]) -> List[SourceRecord]:
    """Keep the first record for each exact url, preserving order."""
    seen_urls: set[str] = set()
    unique: List[SourceRecord] = []

    for record in records:
        if record.url in seen_urls:
            continue
        seen_urls.add(record.url)
        unique.append(record)

    return unique


def describe_http_error(error: Exception) -> str:
    """Short, human-readable reason for a failed provider call."""
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 429:
            return "quota exceeded (HTTP 429)"
        if status in (401, 403):
            return f"access denied - check API credentials (HTTP {status})"
        return f"HTTP {status} {error.response.reason_phrase}"
    return f"{type(error).__name__}: {error}"
