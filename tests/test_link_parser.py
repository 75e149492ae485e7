"""Tests for link classification and parsing."""

from urllib.parse import urlsplit

import httpx
import pytest
import respx

from linkdeck.config import settings
from linkdeck.models.card import CardType
from linkdeck.models.failure import FailureKind, InvalidUrlError
from linkdeck.parsers.link_parser import (
    LinkStrategy,
    detect_link_type,
    is_repository_url,
    parse_link,
    parse_links,
    select_strategy,
    validate_url,
)


def repo_api(owner: str, repo: str) -> str:
    return f"{settings.github_api_url}/repos/{owner}/{repo}"


class TestValidateUrl:
    @pytest.mark.parametrize(
        "url",
        ["", "   ", "not a url", "github.com/foo/bar", "ftp://example.com/file", "http://"],
    )
    def test_rejects_malformed(self, url: str) -> None:
        with pytest.raises(InvalidUrlError) as exc_info:
            validate_url(url)
        assert exc_info.value.kind == FailureKind.MALFORMED_INPUT

    def test_accepts_http_and_https(self) -> None:
        assert validate_url("http://example.com").hostname == "example.com"
        assert validate_url("https://example.com/a?b=c").path == "/a"


class TestStrategySelection:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://github.com/foo/bar", LinkStrategy.REPOSITORY),
            ("https://github.com/foo/bar.git", LinkStrategy.REPOSITORY),
            ("https://github.com/foo/bar/issues/12", LinkStrategy.GENERIC),
            ("https://github.com/foo/bar/pull/3", LinkStrategy.GENERIC),
            ("https://github.com/foo/bar/pulls", LinkStrategy.GENERIC),
            ("https://github.com/pullreminders/backlog", LinkStrategy.REPOSITORY),
            ("https://github.com/foo/issues-tracker", LinkStrategy.REPOSITORY),
            ("https://github.com/foo/pull-request-bot", LinkStrategy.REPOSITORY),
            ("https://github.com/foo/bar/tree/main/issues", LinkStrategy.REPOSITORY),
            ("https://chatgpt.com/share/abc", LinkStrategy.PROMPT_SHARE),
            ("https://example.com/prompts/42", LinkStrategy.PROMPT_SHARE),
            ("https://claude.ai/share/xyz", LinkStrategy.PROMPT_SHARE),
            ("https://example.com", LinkStrategy.GENERIC),
        ],
    )
    def test_first_match_wins(self, url: str, expected: LinkStrategy) -> None:
        assert select_strategy(url) == expected

    def test_github_without_repo_path_is_not_repository(self) -> None:
        """An owner page has no repository segment."""
        assert not is_repository_url(urlsplit("https://github.com/foo"))
        assert select_strategy("https://github.com/foo") == LinkStrategy.GENERIC

    def test_repository_beats_prompt_keyword(self) -> None:
        """A repository named after a prompt keyword is still a repository."""
        assert select_strategy("https://github.com/openai/openai-python") == LinkStrategy.REPOSITORY


class TestDetectLinkType:
    def test_categories(self) -> None:
        assert detect_link_type("https://github.com/foo/bar") == CardType.GITHUB_REPO
        assert detect_link_type("https://chatgpt.com/share/1") == CardType.PROMPT_SHARE
        assert detect_link_type("https://example.com") == CardType.TOOL_WEBSITE

    def test_never_raises(self) -> None:
        assert detect_link_type("not a url") == CardType.TOOL_WEBSITE


class TestParseRepository:
    @respx.mock
    async def test_enriched_draft(self, sample_repo_payload: dict) -> None:
        respx.get(repo_api("vinta", "awesome-python")).mock(
            return_value=httpx.Response(200, json=sample_repo_payload)
        )

        draft = await parse_link("https://github.com/vinta/awesome-python")

        assert draft.card_type == CardType.GITHUB_REPO
        assert draft.title == "awesome-python"
        assert draft.description == sample_repo_payload["description"]
        assert draft.image_url == sample_repo_payload["owner"]["avatar_url"]
        assert draft.tags[:3] == ["Python", "GitHub", "open-source"]
        assert "awesome" in draft.tags
        assert draft.metadata["stars"] == 200000
        assert draft.metadata["owner"] == "vinta"

    @respx.mock
    async def test_missing_description_gets_default(self, sample_repo_payload: dict) -> None:
        sample_repo_payload["description"] = None
        sample_repo_payload["language"] = None
        respx.get(repo_api("vinta", "awesome-python")).mock(
            return_value=httpx.Response(200, json=sample_repo_payload)
        )

        draft = await parse_link("https://github.com/vinta/awesome-python")

        assert draft.description == "A GitHub repository"
        assert draft.tags[0] == "GitHub"
        assert draft.metadata["language"] == "Unknown"

    @respx.mock
    async def test_lookup_failure_falls_back(self) -> None:
        """A failed lookup still yields a usable draft built from the URL."""
        respx.get(repo_api("foo", "bar")).mock(return_value=httpx.Response(500))

        draft = await parse_link("https://github.com/foo/bar")

        assert draft.title == "bar"
        assert draft.description == "GitHub repository: foo/bar"
        assert "open-source" in draft.tags
        assert draft.metadata["stars"] == 0
        assert draft.metadata["language"] == "Unknown"

    @respx.mock
    async def test_git_suffix_is_stripped(self) -> None:
        route = respx.get(repo_api("foo", "bar")).mock(return_value=httpx.Response(404))

        draft = await parse_link("https://github.com/foo/bar.git")

        assert route.called
        assert draft.title == "bar"


class TestParseOtherStrategies:
    async def test_prompt_share(self) -> None:
        draft = await parse_link("https://chatgpt.com/share/abc")

        assert draft.card_type == CardType.PROMPT_SHARE
        assert draft.title == "Prompt share - chatgpt.com"
        assert draft.tags == ["Prompt", "AI", "share", "chatgpt.com"]
        assert draft.metadata["use_case"] == "general"
        assert draft.metadata["prompt_text"] == ""

    async def test_generic_website(self) -> None:
        draft = await parse_link("https://example.com/docs")

        assert draft.card_type == CardType.TOOL_WEBSITE
        assert draft.title == "example.com - website"
        assert draft.description == "Resource from example.com"
        assert draft.tags == ["website", "example.com"]

    async def test_tool_host_gets_tool_tag(self) -> None:
        draft = await parse_link("https://mytool.dev")

        assert draft.tags == ["website", "tool", "mytool.dev"]

    async def test_invalid_url_raises(self) -> None:
        with pytest.raises(InvalidUrlError):
            await parse_link("not a url")


class TestParseLinks:
    async def test_empty_input(self) -> None:
        assert await parse_links([]) == []

    @respx.mock
    async def test_preserves_length_and_order(self) -> None:
        """A bad URL becomes a placeholder instead of failing the batch."""
        respx.get(repo_api("foo", "bar")).mock(return_value=httpx.Response(404))
        urls = ["https://example.com", "not a url", "https://github.com/foo/bar"]

        drafts = await parse_links(urls)

        assert len(drafts) == 3
        assert drafts[0].title == "example.com - website"
        assert drafts[1].title == "Link 2"
        assert drafts[1].card_type == CardType.CUSTOM
        assert drafts[1].tags == ["link"]
        assert drafts[1].metadata["url"] == "not a url"
        assert drafts[1].metadata["error"] == "Invalid URL format"
        assert drafts[2].title == "bar"

    @respx.mock
    async def test_one_request_per_repository(self, sample_repo_payload: dict) -> None:
        route = respx.get(repo_api("vinta", "awesome-python")).mock(
            return_value=httpx.Response(200, json=sample_repo_payload)
        )

        await parse_links(
            ["https://github.com/vinta/awesome-python", "https://github.com/vinta/awesome-python"]
        )

        assert route.call_count == 2
