"""
Link parsing endpoints.

Preview what a URL would turn into without saving anything.
"""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from linkdeck.api.dependencies import to_http_error
from linkdeck.api.schemas import DraftResponse
from linkdeck.models.card import CardRarity, CardType
from linkdeck.models.failure import KnownError
from linkdeck.parsers.link_parser import (
    LinkStrategy,
    detect_link_type,
    parse_link,
    parse_links,
    select_strategy,
)
from linkdeck.services.scoring import content_rarity

router = APIRouter(prefix="/links", tags=["links"])

MAX_BATCH_SIZE = 50


class LinkParseRequest(BaseModel):
    """Request model for parsing one link."""

    url: str = Field(..., examples=["https://github.com/vinta/awesome-python"])


class LinkBatchRequest(BaseModel):
    """Request model for parsing several links at once."""

    urls: list[str] = Field(..., min_length=1)


class LinkParseResponse(BaseModel):
    """A parsed link and the card it would become."""

    strategy: LinkStrategy
    draft: DraftResponse
    suggested_rarity: CardRarity


class LinkBatchResponse(BaseModel):
    """One draft per input URL, in input order."""

    drafts: list[DraftResponse]
    count: int


class LinkTypeResponse(BaseModel):
    type: CardType


@router.post("/parse", response_model=LinkParseResponse)
async def parse(request: LinkParseRequest) -> LinkParseResponse:
    """
    Parse a single link.

    Returns 400 if the URL is malformed. A GitHub lookup failure is not an
    error: the draft is built from the URL alone.
    """
    try:
        strategy = select_strategy(request.url)
        draft = await parse_link(request.url)
    except KnownError as e:
        raise to_http_error(e) from e

    return LinkParseResponse(
        strategy=strategy,
        draft=DraftResponse.from_draft(draft),
        suggested_rarity=content_rarity(draft),
    )


@router.post("/parse-batch", response_model=LinkBatchResponse)
async def parse_batch(request: LinkBatchRequest) -> LinkBatchResponse:
    """
    Parse many links concurrently.

    Never fails for a bad link: it becomes a placeholder draft whose
    metadata explains the error.
    """
    if len(request.urls) > MAX_BATCH_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {MAX_BATCH_SIZE} links per batch",
        )

    drafts = await parse_links(request.urls)
    return LinkBatchResponse(
        drafts=[DraftResponse.from_draft(d) for d in drafts],
        count=len(drafts),
    )


@router.post("/detect-type", response_model=LinkTypeResponse)
async def detect_type(request: LinkParseRequest) -> LinkTypeResponse:
    """Guess the card category for a link without fetching anything."""
    return LinkTypeResponse(type=detect_link_type(request.url))
