"""
GitHub repository metadata lookup.

Best-effort: any failure (network error, non-success status, malformed
response) is reported as "no data" by returning None. Callers fall back to
whatever they can derive from the URL alone. No retries.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from linkdeck.config import settings

logger = logging.getLogger(__name__)

USER_AGENT = "LinkDeck/1.0"


@dataclass
class RepoMetadata:
    """The subset of the GitHub repository payload we keep."""

    owner: str
    name: str
    description: str | None
    avatar_url: str | None
    stars: int
    language: str | None
    topics: list[str] = field(default_factory=list)
    updated_at: datetime | None = None


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_repo_payload(data: Any) -> RepoMetadata | None:
    """
    Extract RepoMetadata from a GitHub ``/repos/{owner}/{repo}`` payload.

    Returns None if required fields are missing or have the wrong type.
    """
    if not isinstance(data, dict):
        return None

    owner = data.get("owner")
    name = data.get("name")
    if not isinstance(owner, dict) or not isinstance(name, str) or not name:
        return None

    login = owner.get("login")
    if not isinstance(login, str):
        return None

    stars = data.get("stargazers_count", 0)
    if not isinstance(stars, int) or isinstance(stars, bool):
        stars = 0

    topics = data.get("topics") or []
    if not isinstance(topics, list):
        topics = []

    description = data.get("description")
    language = data.get("language")
    avatar_url = owner.get("avatar_url")

    return RepoMetadata(
        owner=login,
        name=name,
        description=description if isinstance(description, str) else None,
        avatar_url=avatar_url if isinstance(avatar_url, str) else None,
        stars=stars,
        language=language if isinstance(language, str) else None,
        topics=[t for t in topics if isinstance(t, str)],
        updated_at=_parse_timestamp(data.get("updated_at")),
    )


def _headers() -> dict[str, str]:
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/vnd.github+json",
    }
    if settings.github_token:
        headers["Authorization"] = f"Bearer {settings.github_token}"
    return headers


async def fetch_repo_metadata(
    owner: str,
    repo: str,
    client: httpx.AsyncClient | None = None,
) -> RepoMetadata | None:
    """
    Look up a repository on the GitHub API.

    Args:
        owner: Repository owner (user or organization)
        repo: Repository name
        client: Optional httpx client for connection reuse

    Returns:
        RepoMetadata, or None if the lookup failed for any reason.
    """
    url = f"{settings.github_api_url}/repos/{owner}/{repo}"

    try:
        if client:
            response = await client.get(url, headers=_headers())
        else:
            async with httpx.AsyncClient(timeout=settings.metadata_timeout) as own_client:
                response = await own_client.get(url, headers=_headers())
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as e:
        logger.warning("Repository lookup failed for %s/%s: %s", owner, repo, e)
        return None
    except ValueError as e:
        logger.warning("Repository lookup returned invalid JSON for %s/%s: %s", owner, repo, e)
        return None

    metadata = parse_repo_payload(data)
    if metadata is None:
        logger.warning("Repository lookup returned an unexpected payload for %s/%s", owner, repo)
    return metadata
