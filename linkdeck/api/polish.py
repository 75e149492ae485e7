"""
Polish endpoint.

Asks Claude to rewrite a card's title, description and tags. The result is
a suggestion; nothing is saved.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from linkdeck.api.dependencies import to_http_error
from linkdeck.models.card import CardType
from linkdeck.models.failure import KnownError
from linkdeck.services.polish import PolishRequest, polish_card

router = APIRouter(prefix="/polish", tags=["polish"])


class PolishCardRequest(BaseModel):
    """Current card fields to rewrite."""

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    url: str | None = None
    type: CardType | None = None
    tags: list[str] = Field(default_factory=list)


class PolishCardResponse(BaseModel):
    """Suggested card fields."""

    title: str
    description: str
    tags: list[str]
    suggested_price: float | None = None


@router.post("", response_model=PolishCardResponse)
async def polish(request: PolishCardRequest) -> PolishCardResponse:
    """
    Rewrite card text.

    Returns 503 if the service is not configured and 502 if the call fails
    or the reply cannot be parsed.
    """
    try:
        result = await polish_card(
            PolishRequest(
                title=request.title,
                description=request.description,
                url=request.url,
                card_type=request.type.value if request.type else None,
                tags=request.tags,
            )
        )
    except KnownError as e:
        raise to_http_error(e) from e

    return PolishCardResponse(
        title=result.title,
        description=result.description,
        tags=result.tags,
        suggested_price=result.suggested_price,
    )
