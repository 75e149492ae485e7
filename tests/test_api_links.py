"""Tests for link parsing and polish endpoints."""

from unittest.mock import AsyncMock, patch

import httpx
import respx
from httpx import AsyncClient

from linkdeck.config import settings
from linkdeck.models.failure import PolishError
from linkdeck.services.polish import PolishResponse


class TestParseLink:
    @respx.mock
    async def test_repository(self, client: AsyncClient, sample_repo_payload: dict) -> None:
        respx.get(f"{settings.github_api_url}/repos/vinta/awesome-python").mock(
            return_value=httpx.Response(200, json=sample_repo_payload)
        )

        response = await client.post(
            "/links/parse", json={"url": "https://github.com/vinta/awesome-python"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["strategy"] == "repository"
        assert data["draft"]["title"] == "awesome-python"
        assert data["suggested_rarity"] == "legendary"

    async def test_prompt(self, client: AsyncClient) -> None:
        response = await client.post("/links/parse", json={"url": "https://claude.ai/share/abc"})

        data = response.json()
        assert data["strategy"] == "prompt_share"
        assert data["draft"]["type"] == "prompt_share"

    async def test_invalid(self, client: AsyncClient) -> None:
        response = await client.post("/links/parse", json={"url": "mailto:someone@example.com"})

        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Invalid URL format"

    async def test_parse_saves_nothing(self, client: AsyncClient) -> None:
        await client.post("/links/parse", json={"url": "https://example.com"})

        assert (await client.get("/cards")).json()["count"] == 0


class TestParseBatch:
    async def test_bad_links_become_placeholders(self, client: AsyncClient) -> None:
        response = await client.post(
            "/links/parse-batch",
            json={"urls": ["https://example.com", "garbage", "https://chatgpt.com/share/1"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert [d["title"] for d in data["drafts"]] == [
            "example.com - website",
            "Link 2",
            "Prompt share - chatgpt.com",
        ]

    async def test_too_many(self, client: AsyncClient) -> None:
        response = await client.post(
            "/links/parse-batch", json={"urls": ["https://example.com"] * 51}
        )
        assert response.status_code == 400


class TestDetectType:
    async def test_detect(self, client: AsyncClient) -> None:
        response = await client.post("/links/detect-type", json={"url": "https://github.com/a/b"})

        assert response.json() == {"type": "github_repo"}


class TestPolishEndpoint:
    async def test_returns_suggestion(self, client: AsyncClient) -> None:
        suggestion = PolishResponse(
            title="HTTPX",
            description="A fully featured HTTP client",
            tags=["python", "http"],
            suggested_price=0.0,
        )
        with patch(
            "linkdeck.api.polish.polish_card", new=AsyncMock(return_value=suggestion)
        ) as mock_polish:
            response = await client.post(
                "/polish",
                json={"title": "httpx", "description": "client", "type": "github_repo"},
            )

        assert response.status_code == 200
        assert response.json()["title"] == "HTTPX"
        assert mock_polish.call_args.args[0].card_type == "github_repo"

    async def test_unconfigured_returns_503(self, client: AsyncClient) -> None:
        with patch("linkdeck.services.polish.settings") as mock_settings:
            mock_settings.anthropic_api_key = ""

            response = await client.post("/polish", json={"title": "a", "description": "b"})

        assert response.status_code == 503
        assert response.json()["detail"]["kind"] == "external_lookup_failure"

    async def test_failure_returns_502(self, client: AsyncClient) -> None:
        with patch(
            "linkdeck.api.polish.polish_card",
            new=AsyncMock(side_effect=PolishError("Failed to parse AI response")),
        ):
            response = await client.post("/polish", json={"title": "a", "description": "b"})

        assert response.status_code == 502
