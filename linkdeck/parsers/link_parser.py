"""
Link classification and parsing.

Turns a URL into a CardDraft. Exactly one strategy handles each URL,
chosen first-match-wins from an ordered list:

1. repository: a GitHub repository page (not an issue or pull request)
2. prompt_share: the URL mentions an AI chat/prompt platform
3. generic: any other http(s) URL

Only the repository strategy performs network I/O, and it never fails the
parse: when the metadata lookup fails it falls back to a draft built from
the URL path alone.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from urllib.parse import SplitResult, urlsplit

import httpx

from linkdeck.config import settings
from linkdeck.models.card import CardDraft, CardType, normalize_tags
from linkdeck.models.failure import InvalidUrlError
from linkdeck.services.github import RepoMetadata, fetch_repo_metadata

logger = logging.getLogger(__name__)

REPOSITORY_HOST = "github.com"
REPOSITORY_EXCLUDED_SECTIONS = frozenset({"issues", "pull", "pulls"})
PROMPT_KEYWORDS = ("prompt", "chatgpt", "claude", "openai", "anthropic")
TOOL_HOST_KEYWORDS = ("tool", "app")
ALLOWED_SCHEMES = ("http", "https")

OPEN_SOURCE_TAG = "open-source"


class LinkStrategy(str, Enum):
    """Parsing strategies, in the order they are tried."""

    REPOSITORY = "repository"
    PROMPT_SHARE = "prompt_share"
    GENERIC = "generic"


def validate_url(url: str) -> SplitResult:
    """
    Parse an absolute http(s) URL.

    Raises:
        InvalidUrlError: If the URL has no scheme or host, uses a scheme
            other than http/https, or is otherwise unparseable.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrlError(str(url))

    candidate = url.strip()
    try:
        parts = urlsplit(candidate)
        # Accessing .port validates the netloc (raises on bad ports)
        _ = parts.port
    except ValueError as e:
        raise InvalidUrlError(candidate) from e

    if parts.scheme.lower() not in ALLOWED_SCHEMES or not parts.hostname:
        raise InvalidUrlError(candidate)
    if any(ch.isspace() for ch in candidate):
        raise InvalidUrlError(candidate)

    return parts


def repository_path(parts: SplitResult) -> tuple[str, str] | None:
    """Return (owner, repo) from a repository URL path, or None."""
    segments = [s for s in parts.path.split("/") if s]
    if len(segments) < 2:
        return None
    owner, repo = segments[0], segments[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        return None
    return owner, repo


def is_repository_url(parts: SplitResult) -> bool:
    host = (parts.hostname or "").lower()
    if REPOSITORY_HOST not in host:
        return False
    segments = [s.lower() for s in parts.path.split("/") if s]
    if len(segments) > 2 and segments[2] in REPOSITORY_EXCLUDED_SECTIONS:
        return False
    return repository_path(parts) is not None


def is_prompt_url(parts: SplitResult) -> bool:
    lowered = parts.geturl().lower()
    return any(keyword in lowered for keyword in PROMPT_KEYWORDS)


def is_generic_url(parts: SplitResult) -> bool:
    return parts.scheme.lower() in ALLOWED_SCHEMES


@dataclass(frozen=True)
class StrategyRule:
    """A strategy and the predicate that selects it."""

    strategy: LinkStrategy
    matches: Callable[[SplitResult], bool]


STRATEGY_RULES: tuple[StrategyRule, ...] = (
    StrategyRule(LinkStrategy.REPOSITORY, is_repository_url),
    StrategyRule(LinkStrategy.PROMPT_SHARE, is_prompt_url),
    StrategyRule(LinkStrategy.GENERIC, is_generic_url),
)


def match_strategy(parts: SplitResult) -> LinkStrategy:
    """First rule whose predicate accepts an already-validated URL."""
    for rule in STRATEGY_RULES:
        if rule.matches(parts):
            return rule.strategy
    # validate_url only admits URLs the generic rule accepts
    return LinkStrategy.GENERIC


def select_strategy(url: str) -> LinkStrategy:
    """
    Choose the strategy for a URL (first match wins).

    Raises:
        InvalidUrlError: If the URL is not a valid http(s) URL
    """
    return match_strategy(validate_url(url))


def detect_link_type(url: str) -> CardType:
    """
    Guess a card category from a URL without any I/O or validation.

    Used by manual entry forms to preselect a category.
    """
    lowered = url.lower()
    if REPOSITORY_HOST in lowered:
        return CardType.GITHUB_REPO
    if any(keyword in lowered for keyword in PROMPT_KEYWORDS):
        return CardType.PROMPT_SHARE
    return CardType.TOOL_WEBSITE


# --- Draft builders ---


def build_repository_draft(url: str, repo: RepoMetadata) -> CardDraft:
    """Draft for a repository whose metadata lookup succeeded."""
    updated = repo.updated_at or datetime.now(UTC)
    tags = [repo.language, "GitHub", OPEN_SOURCE_TAG, *repo.topics]
    return CardDraft(
        title=repo.name,
        description=repo.description or "A GitHub repository",
        card_type=CardType.GITHUB_REPO,
        url=url,
        image_url=repo.avatar_url,
        tags=normalize_tags(t for t in tags if t),
        metadata={
            "owner": repo.owner,
            "repo": repo.name,
            "stars": repo.stars,
            "language": repo.language or "Unknown",
            "last_updated": updated.isoformat(),
        },
    )


def build_repository_fallback(url: str, owner: str, repo: str) -> CardDraft:
    """Draft for a repository URL when the metadata lookup failed."""
    return CardDraft(
        title=repo,
        description=f"GitHub repository: {owner}/{repo}",
        card_type=CardType.GITHUB_REPO,
        url=url,
        tags=["GitHub", OPEN_SOURCE_TAG],
        metadata={
            "owner": owner,
            "repo": repo,
            "stars": 0,
            "language": "Unknown",
            "last_updated": datetime.now(UTC).isoformat(),
        },
    )


def build_prompt_draft(url: str, parts: SplitResult) -> CardDraft:
    domain = parts.hostname or ""
    return CardDraft(
        title=f"Prompt share - {domain}",
        description="An AI prompt sharing link",
        card_type=CardType.PROMPT_SHARE,
        url=url,
        tags=normalize_tags(["Prompt", "AI", "share", domain]),
        metadata={
            "domain": domain,
            "url": url,
            "prompt_text": "",
            "use_case": "general",
            "model": "unknown",
            "author": "unknown",
        },
    )


def build_generic_draft(url: str, parts: SplitResult) -> CardDraft:
    domain = parts.hostname or ""
    tags = ["website"]
    if any(keyword in domain for keyword in TOOL_HOST_KEYWORDS):
        tags.append("tool")
    tags.append(domain)

    return CardDraft(
        title=f"{domain} - website",
        description=f"Resource from {domain}",
        card_type=CardType.TOOL_WEBSITE,
        url=url,
        tags=normalize_tags(tags),
        metadata={"domain": domain, "url": url},
    )


def build_placeholder_draft(url: str, index: int, error: BaseException) -> CardDraft:
    """Stand-in draft for a URL that failed inside a batch."""
    return CardDraft(
        title=f"Link {index + 1}",
        description="This link could not be parsed",
        card_type=CardType.CUSTOM,
        tags=["link"],
        metadata={"url": url, "error": str(error) or type(error).__name__},
    )


# --- Parsing ---


async def parse_repository(
    url: str,
    parts: SplitResult,
    client: httpx.AsyncClient | None = None,
) -> CardDraft:
    """Repository strategy: enrich from the GitHub API, or fall back."""
    path = repository_path(parts)
    if path is None:
        msg = f"Not a repository URL: {url}"
        raise RuntimeError(msg)

    owner, repo = path
    metadata = await fetch_repo_metadata(owner, repo, client)
    if metadata is None:
        logger.info("Using URL-only draft for %s/%s", owner, repo)
        return build_repository_fallback(url, owner, repo)
    return build_repository_draft(url, metadata)


async def parse_link(url: str, client: httpx.AsyncClient | None = None) -> CardDraft:
    """
    Parse a single URL into a CardDraft.

    Args:
        url: Absolute http(s) URL
        client: Optional httpx client for connection reuse

    Raises:
        InvalidUrlError: If the URL is malformed
    """
    parts = validate_url(url)
    clean_url = parts.geturl()

    match match_strategy(parts):
        case LinkStrategy.REPOSITORY:
            return await parse_repository(clean_url, parts, client)
        case LinkStrategy.PROMPT_SHARE:
            return build_prompt_draft(clean_url, parts)
        case _:
            return build_generic_draft(clean_url, parts)


async def parse_links(
    urls: Sequence[str],
    client: httpx.AsyncClient | None = None,
) -> list[CardDraft]:
    """
    Parse many URLs concurrently.

    Never raises for a bad URL: each failure becomes a placeholder draft
    carrying the reason in its metadata. The result has one draft per
    input, in input order.
    """
    if not urls:
        return []

    async def _gather(http: httpx.AsyncClient) -> list[CardDraft | BaseException]:
        return await asyncio.gather(
            *(parse_link(url, http) for url in urls),
            return_exceptions=True,
        )

    if client:
        outcomes = await _gather(client)
    else:
        async with httpx.AsyncClient(timeout=settings.metadata_timeout) as own_client:
            outcomes = await _gather(own_client)

    drafts: list[CardDraft] = []
    for index, (url, outcome) in enumerate(zip(urls, outcomes, strict=True)):
        if isinstance(outcome, BaseException):
            logger.warning("Failed to parse link %d (%s): %s", index + 1, url, outcome)
            drafts.append(build_placeholder_draft(url, index, outcome))
        else:
            drafts.append(outcome)
    return drafts
