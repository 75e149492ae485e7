"""
Card API endpoints.

CRUD for cards, search with filters and sorting, collection statistics,
and quick add from a URL.
"""

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from linkdeck.api.dependencies import get_store, to_http_error
from linkdeck.api.schemas import CardResponse, ExportResponse, NonEmptyText
from linkdeck.models.card import CardDraft, CardRarity, CardType, PriceTier
from linkdeck.models.failure import KnownError
from linkdeck.services import collection
from linkdeck.services.card_search import (
    SearchFilters,
    SortKey,
    SortOrder,
    card_stats,
    filter_cards,
    popular_tags,
    sort_cards,
)
from linkdeck.storage.base import CollectionStore

router = APIRouter(prefix="/cards", tags=["cards"])


class CardListResponse(BaseModel):
    """Response model for a list of cards."""

    cards: list[CardResponse]
    count: int


class TagCount(BaseModel):
    tag: str
    count: int


class CardStatsResponse(BaseModel):
    """Summary counts over the whole collection."""

    total: int
    by_type: dict[str, int]
    by_rarity: dict[str, int]
    by_price_tier: dict[str, int]
    recent_count: int = Field(..., description="Cards created in the last 7 days")
    popular_tags: list[TagCount] = Field(default_factory=list)


class CardCreateRequest(BaseModel):
    """Request model for creating a card by hand."""

    title: NonEmptyText = Field(..., examples=["awesome-python"])
    description: NonEmptyText
    type: CardType = CardType.CUSTOM
    rarity: CardRarity | None = Field(
        default=None,
        description="Explicit rarity; derived from price when omitted",
    )
    price: float | None = Field(default=None, ge=0)
    url: str | None = None
    image_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class CardUpdateRequest(BaseModel):
    """Request model for updating a card. Omitted fields are left alone."""

    title: NonEmptyText | None = None
    description: NonEmptyText | None = None
    type: CardType | None = None
    rarity: CardRarity | None = None
    price: float | None = Field(default=None, ge=0)
    url: str | None = None
    image_url: str | None = None
    tags: list[str] | None = None
    metadata: dict[str, Any] | None = None


class QuickAddRequest(BaseModel):
    """Request model for adding a card straight from a link."""

    url: str = Field(..., examples=["https://github.com/vinta/awesome-python"])


# Request field name -> Card attribute name, where they differ
UPDATE_FIELD_NAMES = {"type": "card_type"}

# Fields that may be cleared by sending null
CLEARABLE_FIELDS = frozenset({"price", "url", "image_url"})


@router.get("", response_model=CardListResponse)
async def list_cards(
    store: Annotated[CollectionStore, Depends(get_store)],
    q: str | None = None,
    card_type: Annotated[list[CardType] | None, Query(alias="type")] = None,
    rarity: Annotated[list[CardRarity] | None, Query()] = None,
    price_tier: Annotated[list[PriceTier] | None, Query()] = None,
    tag: Annotated[list[str] | None, Query()] = None,
    created_after: datetime | None = None,
    created_before: datetime | None = None,
    sort: SortKey = "date",
    order: SortOrder = "desc",
) -> CardListResponse:
    """
    List cards matching every given filter.

    Repeat a filter parameter to match any of several values.
    """
    filters = SearchFilters(
        types=card_type or [],
        rarities=rarity or [],
        price_tiers=price_tier or [],
        tags=tag or [],
        query=q,
        created_after=created_after,
        created_before=created_before,
    )
    cards = sort_cards(filter_cards(await store.list_cards(), filters), sort, order)
    return CardListResponse(cards=[CardResponse.from_card(c) for c in cards], count=len(cards))


@router.get("/stats", response_model=CardStatsResponse)
async def get_card_stats(
    store: Annotated[CollectionStore, Depends(get_store)],
    tag_limit: Annotated[int, Query(ge=1, le=50)] = 10,
) -> CardStatsResponse:
    """Counts by type, rarity and price tier, plus the most used tags."""
    cards = await store.list_cards()
    stats = card_stats(cards)
    return CardStatsResponse(
        total=stats.total,
        by_type=stats.by_type,
        by_rarity=stats.by_rarity,
        by_price_tier=stats.by_price_tier,
        recent_count=stats.recent_count,
        popular_tags=[TagCount(tag=t, count=n) for t, n in popular_tags(cards, tag_limit)],
    )


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    request: CardCreateRequest,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> CardResponse:
    """Create a card from explicit fields."""
    draft = CardDraft(
        title=request.title,
        description=request.description,
        card_type=request.type,
        rarity=request.rarity,
        price=request.price,
        url=request.url,
        image_url=request.image_url,
        tags=request.tags,
        metadata=request.metadata,
    )
    try:
        card = await collection.create_card(store, draft)
    except KnownError as e:
        raise to_http_error(e) from e
    return CardResponse.from_card(card)


@router.post("/quick-add", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def quick_add(
    request: QuickAddRequest,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> CardResponse:
    """
    Parse a link and save it as a card.

    GitHub repositories are enriched from the GitHub API when reachable.
    Returns 400 if the URL is malformed.
    """
    try:
        card = await collection.quick_add(store, request.url)
    except KnownError as e:
        raise to_http_error(e) from e
    return CardResponse.from_card(card)


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(
    card_id: str,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> CardResponse:
    """Get a card by id. Returns 404 if not found."""
    try:
        card = await collection.require_card(store, card_id)
    except KnownError as e:
        raise to_http_error(e) from e
    return CardResponse.from_card(card)


@router.put("/{card_id}", response_model=CardResponse)
async def update_card(
    card_id: str,
    request: CardUpdateRequest,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> CardResponse:
    """Update the given fields of a card and refresh its timestamp."""
    changes = {
        UPDATE_FIELD_NAMES.get(name, name): value
        for name, value in request.model_dump(exclude_unset=True).items()
        if value is not None or name in CLEARABLE_FIELDS
    }
    try:
        card = await collection.update_card(store, card_id, **changes)
    except KnownError as e:
        raise to_http_error(e) from e
    return CardResponse.from_card(card)


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: str,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> Response:
    """
    Delete a card.

    Decks that contain it are not modified; the id is skipped when they
    are read.
    """
    try:
        await collection.delete_card(store, card_id)
    except KnownError as e:
        raise to_http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{card_id}/export", response_model=ExportResponse)
async def export_card(
    card_id: str,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> ExportResponse:
    """Export a single card as importable JSON."""
    try:
        data = await collection.export_card_json(store, card_id)
    except KnownError as e:
        raise to_http_error(e) from e
    return ExportResponse(data=data)
