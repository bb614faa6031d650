from __future__ import annotations

from unittest.mock import patch

import pytest

from conftest import FakeResponse, make_result
from listening.models import WEB_PLATFORMS, Platform, SourceRecord
from listening.sources import serper


class FakeSerperClient:
    """Answers each query with the organic results registered for its site."""

    def __init__(self, results_by_site=None, failing_sites=(), status_code: int = 429):
        self.results_by_site = results_by_site or {}
        self.failing_sites = tuple(failing_sites)
        self.status_code = status_code
        self.requests = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    async def post(self, url, headers=None, json=None):
        self.requests.append({"url": url, "headers": headers, "json": json})
        query = json["q"]
        if any(site in query for site in self.failing_sites):
            return FakeResponse(status_code=self.status_code, url=url)
        organic = []
        for site, items in self.results_by_site.items():
            if f"site:{site}" in query:
                organic.extend(items)
        return FakeResponse({"organic": organic}, url=url)


def organic(link: str, title: str = "Acme mention", date: str | None = None) -> dict:
    item = {"title": title, "link": link, "snippet": f"About {title}"}
    if date:
        item["date"] = date
    return item


@pytest.mark.parametrize(
    "platforms, expected",
    [
        ("all", list(WEB_PLATFORMS)),
        ("", list(WEB_PLATFORMS)),
        ("LinkedIn, G2", [Platform.LINKEDIN, Platform.REVIEWS]),
        ("twitter", [Platform.TWITTER]),
        ("Medium blogs", [Platform.BLOGS]),
        ("reddit", []),
    ],
)
def test_select_platforms(platforms, expected):
    assert serper.select_platforms(platforms) == expected


def test_deduplicate_by_url_keeps_first_occurrence():
    records = [
        make_result("https://g2.com/a", Platform.REVIEWS, title="first"),
        make_result("https://g2.com/b", Platform.REVIEWS),
        make_result("https://g2.com/a", Platform.REVIEWS, title="second"),
    ]

    unique = serper.deduplicate_by_url(records)

    assert [r.url for r in unique] == ["https://g2.com/a", "https://g2.com/b"]
    assert unique[0].title == "first"


def test_format_results_skips_empty_categories():
    text = serper.format_results(
        {
            Platform.LINKEDIN: [],
            Platform.REVIEWS: [make_result("https://g2.com/a", Platform.REVIEWS, title="G2 page")],
        }
    )

    assert "LINKEDIN DATA" not in text
    assert "REVIEW SITES DATA (1 results):" in text
    assert "1. G2 page" in text
    assert "   URL: https://g2.com/a" in text


def test_format_results_empty():
    assert serper.format_results({platform: [] for platform in WEB_PLATFORMS}) == "No web search results found."


def test_format_category_truncates_long_snippets():
    record = SourceRecord(
        title="Acme review",
        url="https://g2.com/acme",
        snippet="Acme is fast.\n" + "x" * 300,
        platform=Platform.REVIEWS,
    )

    text = serper.format_category(Platform.REVIEWS, [record])

    snippet_line = next(line for line in text.splitlines() if line.startswith("   Snippet:"))
    quoted = snippet_line[len('   Snippet: "') : -1]
    assert len(quoted) == 203
    assert quoted.startswith("Acme is fast. x")
    assert quoted.endswith("...")
    assert "x" * 300 not in text


@pytest.mark.asyncio
async def test_fetch_without_api_key_returns_status_text():
    with (
        patch("listening.sources.serper.settings") as mock_settings,
        patch("listening.sources.serper.httpx.AsyncClient") as client_cls,
    ):
        mock_settings.SERPER_API_KEY = ""
        result = await serper.fetch_web_mentions("Acme")

    assert result.records == []
    assert "unavailable" in result.rendered_text
    client_cls.assert_not_called()


@pytest.mark.asyncio
async def test_fetch_dedups_within_category_and_tags_platforms():
    fake = FakeSerperClient(
        results_by_site={
            # the same link comes back for all three G2/Capterra/TrustRadius queries
            "g2.com": [organic("https://www.g2.com/products/acme/reviews", date="Mar 3, 2025")],
            "capterra.com": [organic("https://www.g2.com/products/acme/reviews")],
            "trustradius.com": [organic("https://www.trustradius.com/acme")],
            "medium.com": [organic("https://medium.com/@dev/acme", date="3 days ago")],
        }
    )

    with (
        patch("listening.sources.serper.settings") as mock_settings,
        patch("listening.sources.serper.httpx.AsyncClient", return_value=fake),
    ):
        mock_settings.SERPER_API_KEY = "key"
        mock_settings.HTTP_TIMEOUT_SECONDS = 5.0
        result = await serper.fetch_web_mentions("Acme", "all")

    reviews = [r for r in result.records if r.platform is Platform.REVIEWS]
    blogs = [r for r in result.records if r.platform is Platform.BLOGS]

    assert [r.url for r in reviews] == [
        "https://www.g2.com/products/acme/reviews",
        "https://www.trustradius.com/acme",
    ]
    assert reviews[0].published_at is not None
    assert blogs[0].published_at is None
    assert len(fake.requests) == 12
    assert all(req["headers"]["X-API-KEY"] == "key" for req in fake.requests)
    assert all(req["json"]["num"] == serper.WEB_RESULTS_PER_QUERY for req in fake.requests)
    assert "REVIEW SITES DATA (2 results):" in result.rendered_text
    assert "BLOGS & FORUMS DATA (1 results):" in result.rendered_text


@pytest.mark.asyncio
async def test_fetch_respects_platform_filter():
    fake = FakeSerperClient(results_by_site={"linkedin.com": [organic("https://linkedin.com/posts/acme-1")]})

    with (
        patch("listening.sources.serper.settings") as mock_settings,
        patch("listening.sources.serper.httpx.AsyncClient", return_value=fake),
    ):
        mock_settings.SERPER_API_KEY = "key"
        mock_settings.HTTP_TIMEOUT_SECONDS = 5.0
        result = await serper.fetch_web_mentions("Acme", "LinkedIn")

    assert len(fake.requests) == 3
    assert all("linkedin.com" in req["json"]["q"] for req in fake.requests)
    assert [r.platform for r in result.records] == [Platform.LINKEDIN]


@pytest.mark.asyncio
async def test_quota_errors_only_drop_the_failing_queries():
    fake = FakeSerperClient(
        results_by_site={
            "dev.to": [organic("https://dev.to/acme")],
            "g2.com": [organic("https://g2.com/acme")],
        },
        failing_sites=("g2.com",),
        status_code=429,
    )

    with (
        patch("listening.sources.serper.settings") as mock_settings,
        patch("listening.sources.serper.httpx.AsyncClient", return_value=fake),
    ):
        mock_settings.SERPER_API_KEY = "key"
        mock_settings.HTTP_TIMEOUT_SECONDS = 5.0
        result = await serper.fetch_web_mentions("Acme")

    assert [r.url for r in result.records] == ["https://dev.to/acme"]
    assert result.status is None


@pytest.mark.asyncio
async def test_unexpected_failure_never_raises():
    with (
        patch("listening.sources.serper.settings") as mock_settings,
        patch("listening.sources.serper.httpx.AsyncClient", side_effect=RuntimeError("boom")),
    ):
        mock_settings.SERPER_API_KEY = "key"
        mock_settings.HTTP_TIMEOUT_SECONDS = 5.0
        result = await serper.fetch_web_mentions("Acme")

    assert result.records == []
    assert result.rendered_text.startswith("Web search error:")
    assert "boom" in result.rendered_text


@pytest.mark.asyncio
async def test_search_caps_result_count_at_provider_maximum():
    fake = FakeSerperClient()
    fetcher = serper.SerperSearchFetcher("key")

    await fetcher.search(fake, '"Acme" site:g2.com', Platform.REVIEWS, num=25)

    assert fake.requests[0]["json"] == {"q": '"Acme" site:g2.com', "num": serper.SERPER_MAX_RESULTS}
