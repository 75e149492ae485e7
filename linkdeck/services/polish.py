"""
Card text polishing through Claude.

Sends a card's title, description, URL, category and tags to the model
and returns rewritten text plus an optional suggested price. This is a
user-initiated action: every failure is raised as PolishError. No retries.
"""

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any

import anthropic
from anthropic.types import TextBlock

from linkdeck.config import settings
from linkdeck.models.card import normalize_tags
from linkdeck.models.failure import PolishError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You polish entries in a personal collection of saved links.

Given a card's current title, description, link, category and tags:
1. Make the title concise and accurate (at most 50 characters)
2. Expand the description to 100-200 characters, highlighting what the
   resource does and why it is useful
3. Return 3 to 6 tags that describe the resource
4. Suggest a price in USD if the resource is paid, or 0 if it is free

Reply with a single JSON object and nothing else:
{"title": "...", "description": "...", "tags": ["..."], "suggestedPrice": 0}
"""

# Strips a surrounding ```json ... ``` fence if the model adds one
_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@dataclass
class PolishRequest:
    """Card fields sent to the rewrite service."""

    title: str
    description: str
    url: str | None = None
    card_type: str | None = None
    tags: list[str] = field(default_factory=list)


@dataclass
class PolishResponse:
    """Rewritten card fields."""

    title: str
    description: str
    tags: list[str]
    suggested_price: float | None = None


def build_prompt(request: PolishRequest) -> str:
    """Render the user message for a polish request."""
    return (
        "Current card:\n"
        f"- Title: {request.title}\n"
        f"- Description: {request.description}\n"
        f"- Link: {request.url or 'none'}\n"
        f"- Category: {request.card_type or 'unknown'}\n"
        f"- Tags: {', '.join(request.tags) or 'none'}"
    )


def parse_polish_output(text: str) -> PolishResponse:
    """
    Parse the model's reply.

    Raises:
        PolishError: If the reply is not a JSON object with a title,
            description and tag list
    """
    cleaned = _FENCE_PATTERN.sub("", text.strip())
    try:
        data: Any = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("Unparseable polish reply: %s", text[:200])
        raise PolishError("Failed to parse AI response", detail=str(e)) from e

    if not isinstance(data, dict):
        raise PolishError("Failed to parse AI response", detail="Reply is not a JSON object")

    title = data.get("title")
    description = data.get("description")
    tags = data.get("tags")
    if (
        not isinstance(title, str)
        or not title.strip()
        or not isinstance(description, str)
        or not description.strip()
        or not isinstance(tags, list)
    ):
        raise PolishError("Invalid response format from AI", detail=cleaned[:200])

    price = data.get("suggestedPrice")
    suggested_price = None
    if isinstance(price, int | float) and not isinstance(price, bool):
        if math.isfinite(price) and price >= 0:
            suggested_price = float(price)

    return PolishResponse(
        title=title.strip(),
        description=description.strip(),
        tags=normalize_tags(tag for tag in tags if isinstance(tag, str)),
        suggested_price=suggested_price,
    )


def _get_client() -> anthropic.AsyncAnthropic:
    if not settings.anthropic_api_key:
        raise PolishError("Text rewrite service is not configured", status_code=503)
    return anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)


async def polish_card(
    request: PolishRequest,
    client: anthropic.AsyncAnthropic | None = None,
) -> PolishResponse:
    """
    Rewrite a card's title, description and tags.

    Args:
        request: Current card fields
        client: Optional Anthropic client (a new one is built from settings
            when omitted)

    Raises:
        PolishError: If the service is unconfigured, the call fails, or the
            reply cannot be parsed
    """
    client = client or _get_client()

    try:
        response = await client.messages.create(
            model=settings.polish_model,
            max_tokens=settings.polish_max_tokens,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": build_prompt(request)}],
        )
    except anthropic.APIError as e:
        logger.error("Polish request failed: %s", e)
        raise PolishError("Text rewrite request failed", detail=str(e)) from e

    text = "".join(block.text for block in response.content if isinstance(block, TextBlock))
    if not text.strip():
        raise PolishError("No response from text rewrite service")

    return parse_polish_output(text)
