"""
Text generation for the social listening report.
"""
from __future__ import annotations

import logging
from typing import Optional

from openai import AsyncOpenAI

from listening.config import settings

logger = logging.getLogger(__name__)


class LLMConfigurationError(RuntimeError):
    """No API key is configured for the text-generation provider."""


def _get_openai_client() -> AsyncOpenAI:
    """Create the OpenAI client; fails fast when the key is missing."""
    if not settings.OPENAI_API_KEY:
        raise LLMConfigurationError("OPENAI_API_KEY environment variable is not set")
    return AsyncOpenAI(api_key=settings.OPENAI_API_KEY)


def collect_text(response) -> str:
    """Concatenate every text segment of a chat completion."""
    parts = []
    for choice in response.choices or []:
        content: Optional[str] = choice.message.content
        if content:
            parts.append(content)
    return "".join(parts)


async def generate_report(prompt: str) -> str:
    """
    Run one generation call with the full prompt as a single user message.

    Args:
        prompt: Complete prompt text

    Returns:
        The reply text, all segments concatenated

    Raises:
        LLMConfigurationError: If no API key is configured
        openai.OpenAIError: On quota, authentication or network failures
    """
    client = _get_openai_client()

    response = await client.chat.completions.create(
        model=settings.OPENAI_MODEL,
        max_tokens=settings.MAX_OUTPUT_TOKENS,
        messages=[{"role": "user", "content": prompt}],
    )
    logger.info("Model response received from %s, processing...", settings.OPENAI_MODEL)

    return collect_text(response)
