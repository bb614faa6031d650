"""
Prompt templates for the social listening report.

Both prompts share the same five-section output contract; the response parser
relies on the exact emoji + bold headers below to split the reply.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from listening.models import AggregatedCorpus

SENTIMENT_HEADER = "📊 **SENTIMENT BREAKDOWN**"
POSITIVE_HEADER = "✅ **POSITIVE HIGHLIGHTS**"
CONCERNS_HEADER = "⚠️ **CRITICAL CONCERNS**"
TRENDING_HEADER = "🔥 **TRENDING TOPICS**"
COMPETITIVE_HEADER = "🎯 **COMPETITIVE INSIGHTS**"

ALL_PLATFORMS_DESCRIPTION = (
    "LinkedIn, X/Twitter, Reddit, review sites (G2, Capterra, TrustRadius), blogs, and forums"
)

FORMAT_REQUIREMENTS = """**CRITICAL OUTPUT FORMAT REQUIREMENTS:**

Your output MUST be concise and crisp for chat channel posting. Follow these rules EXACTLY:

1. **EXACTLY 3 bullet points per section** (no more, no less)
2. **Use bullet point symbol (•)** not numbers or dashes
3. **Each bullet: maximum 1-2 sentences**
4. **ALWAYS include source citation in parentheses** at the end of each bullet
   - {citation_rule}
5. **Total output must be under 250 words**
6. **Prioritize top 3 most impactful insights per section**"""

OUTPUT_STRUCTURE = """**Output Format - Structure your analysis EXACTLY as follows:**

{sentiment}
• [Percentage breakdown: X% positive, Y% neutral, Z% negative with total volume{data_qualifier}]
• [Overall trend: improving/stable/declining{trend_basis}]
• [Key sentiment drivers: what's driving the sentiment{driver_basis}]

{positive}
• [Concise positive highlight #1 with specific detail] (source: {source})
• [Concise positive highlight #2 with specific detail] (source: {source})
• [Concise positive highlight #3 with specific detail] (source: {source})

{concerns}
• [Severity level]: [Concise concern #1 with impact] (source: {source})
• [Severity level]: [Concise concern #2 with impact] (source: {source})
• [Severity level]: [Concise concern #3 with impact] (source: {source})
[Note: If no critical concerns exist, format as: • No critical issues identified in monitoring period (source: comprehensive review)]

{trending}
• [Topic #1]: [Brief context and why it matters] ([X mentions, source: platform])
• [Topic #2]: [Brief context and why it matters] ([X mentions, source: platform])
• [Topic #3]: [Brief context and why it matters] ([X mentions, source: platform])

{competitive}
• [Competitive insight #1 comparing to specific competitor] (source: {source})
• [Competitive insight #2 comparing to specific competitor] (source: {source})
• [Competitive insight #3 comparing to specific competitor] (source: {source})

**MANDATORY FORMAT RULES:**
- Do NOT add any sections beyond these 5
- Do NOT use numbered lists (1, 2, 3) - only bullet symbols (•)
- Do NOT exceed 3 bullets per section under any circumstances
- {source_rule}
- Do NOT write paragraphs - keep to 1-2 sentences maximum per bullet
- Target ~220 words total for ideal readability"""


def _output_contract(real_data: bool) -> str:
    if real_data:
        requirements = FORMAT_REQUIREMENTS.format(
            citation_rule="Use only the actual URLs provided in the data above",
        )
        structure = OUTPUT_STRUCTURE.format(
            data_qualifier=" from REAL data",
            trend_basis=" based on engagement and scores from REAL data",
            driver_basis=" with actual sources from data",
            source="[actual URL from data above]",
            source_rule="Do NOT fabricate sources - only use URLs from the REAL data provided above",
            **_headers(),
        )
    else:
        requirements = FORMAT_REQUIREMENTS.format(
            citation_rule="Format: (source: LinkedIn) or (source: reddit.com/r/SaaS) or (source: G2.com)",
        )
        structure = OUTPUT_STRUCTURE.format(
            data_qualifier="",
            trend_basis=" over time period with brief context",
            driver_basis=" with source if available",
            source="[platform or URL]",
            source_rule="Do NOT omit source citations - every bullet must have a source",
            **_headers(),
        )
    return f"{requirements}\n\n{structure}"


def _headers() -> dict:
    return {
        "sentiment": SENTIMENT_HEADER,
        "positive": POSITIVE_HEADER,
        "concerns": CONCERNS_HEADER,
        "trending": TRENDING_HEADER,
        "competitive": COMPETITIVE_HEADER,
    }


def _competitor_line(competitors: str) -> str:
    return f"**Competitors for Comparison:** {competitors}\n" if competitors else ""


def first_competitor(competitors: str) -> Optional[str]:
    names = [name.strip() for name in (competitors or "").split(",") if name.strip()]
    return names[0] if names else None


def build_real_data_prompt(
    brand: str,
    competitors: str,
    time_range: str,
    corpus: AggregatedCorpus,
    today: Optional[date] = None,
) -> str:
    """Prompt that embeds the aggregated corpus and restricts citations to its URLs."""
    today = today or date.today()
    platforms = ", ".join(corpus.active_platform_names)

    return f"""You are a social listening and brand monitoring specialist analyzing REAL data collected from APIs.

**Brand to Monitor:** {brand}
{_competitor_line(competitors)}**Time Range:** Last {time_range}
**Platforms Analyzed:** {platforms}

====================================
REAL DATA COLLECTED FROM APIS:
====================================

{corpus.rendered_prompt_body}

====================================

{_output_contract(real_data=True)}

**Current Date:** {today.isoformat()}
**Analysis Focus:** {corpus.total_sources} real sources from last {time_range}

Provide your analysis based ONLY on the real data above."""


def build_knowledge_prompt(
    brand: str,
    competitors: str,
    time_range: str,
    platforms: str,
    today: Optional[date] = None,
) -> str:
    """Prompt used when no live data is available; the model relies on its own knowledge."""
    today = today or date.today()
    platform_list = ALL_PLATFORMS_DESCRIPTION if not platforms or platforms == "all" else platforms
    brand_slug = brand.lower().replace(" ", "")

    rival = first_competitor(competitors)
    if rival:
        comparison_hints = (
            f'   - "{brand} vs {rival}"\n'
            f'   - "{rival} better than {brand}"\n'
            f'   - "switch from {brand} to"'
        )
    else:
        comparison_hints = "   - Search for general competitive mentions"
    specific_comparison = f"\n   - Specific comparisons with: {competitors}" if competitors else ""

    return f"""You are a social listening and brand monitoring specialist. Analyze recent online conversations, mentions, and feedback about the specified brand across multiple platforms.

No live data could be collected for this run. Base the report on your own training knowledge of the brand and its market.

**Brand to Monitor:** {brand}
{_competitor_line(competitors)}**Time Range:** Last {time_range}
**Platforms to Analyze:** {platform_list}

**Where the conversation usually happens:**

1. **LinkedIn Posts & Discussions:** "{brand} feedback", "{brand} review", "{brand} experience" (excluding linkedin.com/company/{brand_slug})
2. **Twitter/X Mentions:** "{brand} complaint", "{brand} problem", "{brand} love", "{brand} frustrated" (excluding @{brand_slug})
3. **Reddit Discussions:** "{brand} alternative", "{brand} vs" in r/SaaS, r/technology, r/entrepreneur, r/startups
4. **Review Sites:** G2, Capterra, TrustRadius, especially recent 1-3 star reviews
5. **Blogs & Forums:** Medium, dev.to, hashnode, Stack Overflow, Hacker News
6. **Competitive Comparisons:**
{comparison_hints}
7. **Exclude Official Sources:** {brand_slug}.com, help.{brand_slug}.com

**Analysis Requirements:**

1. **Sentiment Analysis** - positive/neutral/negative distribution, total volume, trend
2. **Positive Highlights** - praised features, success stories, advocates
3. **Critical Concerns** - recurring complaints, feature gaps, churn signals, support issues, urgency level (critical/moderate/minor)
4. **Trending Topics** - most discussed themes, emerging patterns, industry trends
5. **Competitive Insights** - positioning vs competitors, preferred alternative features, pricing, migration patterns{specific_comparison}

{_output_contract(real_data=False)}

**Current Date:** {today.isoformat()}
**Analysis Focus:** Recent {time_range} across {platform_list}

Provide a comprehensive social listening report based on your knowledge and analysis of brand sentiment, customer feedback, and market conversations."""
