"""Shared fixtures and fakes for the social listening tests."""
from __future__ import annotations

import httpx
import pytest

from listening.models import ForumPost, Platform, SourceRecord

SAMPLE_REPLY = """📊 **SENTIMENT BREAKDOWN**
• 60% positive, 25% neutral, 15% negative across 22 mentions (source: reddit.com/r/SaaS)
• Overall trend is improving week over week (source: g2.com)
• Onboarding speed drives most praise (source: linkedin.com)

✅ **POSITIVE HIGHLIGHTS**
• Users praise the new dashboard (source: https://reddit.com/r/SaaS/comments/a1)
• Strong support response times (source: https://www.g2.com/products/acme/reviews)
• Fast setup for small teams (source: https://medium.com/@dev/acme)

⚠️ **CRITICAL CONCERNS**
• CRITICAL: pricing backlash after tier change (source: g2.com)
• Moderate: API rate limits frustrate power users (source: reddit.com/r/webdev)
• Minor: mobile app lags behind web (source: x.com)

🔥 **TRENDING TOPICS**
• Pricing: tier change dominates discussion (12 mentions, source: reddit)
• AI features: beta feedback (5 mentions, source: linkedin)
• Integrations: Slack and Zapier requests (4 mentions, source: g2)

🎯 **COMPETITIVE INSIGHTS**
• Seen as cheaper than Globex for small teams (source: capterra.com)
• Initech wins on enterprise SSO (source: g2.com)
• Some migration from Globex reported (source: reddit.com/r/startups)
"""


def make_post(
    url: str,
    title: str = "Acme review",
    score: int = 5,
    num_comments: int = 1,
    community: str = "SaaS",
    snippet: str = "",
    author: str = "alice",
) -> ForumPost:
    return ForumPost(
        title=title,
        url=url,
        snippet=snippet,
        platform=Platform.REDDIT,
        score=score,
        num_comments=num_comments,
        community=community,
        author=author,
    )


def make_result(url: str, platform: Platform, title: str = "Acme on the web") -> SourceRecord:
    return SourceRecord(title=title, url=url, snippet="Acme snippet", platform=platform)


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, url: str = "https://example.com"):
        self.payload = payload if payload is not None else {}
        self.status_code = status_code
        self.url = url

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("GET", self.url)
            response = httpx.Response(self.status_code, request=request)
            raise httpx.HTTPStatusError(
                f"HTTP {self.status_code}", request=request, response=response
            )
        return None

    def json(self):
        return self.payload


@pytest.fixture
def sample_reply() -> str:
    return SAMPLE_REPLY
