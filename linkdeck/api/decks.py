"""
Deck API endpoints.

Decks are ordered lists of card ids. Reading a deck resolves its ids
against the collection and skips any that no longer exist.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from linkdeck.api.dependencies import get_store, to_http_error
from linkdeck.api.schemas import CardResponse, ExportResponse, NonEmptyText
from linkdeck.models.card import Card, PriceTier
from linkdeck.models.deck import Deck, DeckDraft
from linkdeck.models.failure import KnownError
from linkdeck.services import collection
from linkdeck.services.scoring import deck_price_tier, deck_value
from linkdeck.storage.base import CollectionStore

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckResponse(BaseModel):
    """Response model for a single deck."""

    id: str
    name: str
    description: str
    card_ids: list[str] = Field(default_factory=list)
    is_public: bool = False
    tags: list[str] = Field(default_factory=list)
    card_count: int = Field(..., description="Cards that still exist in the collection")
    total_value: float
    price_tier: PriceTier
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_deck(cls, deck: Deck, cards: list[Card]) -> "DeckResponse":
        resolved = deck.resolve_cards(cards)
        return cls(
            id=deck.id,
            name=deck.name,
            description=deck.description,
            card_ids=deck.card_ids,
            is_public=deck.is_public,
            tags=deck.tags,
            card_count=len(resolved),
            total_value=deck_value(resolved),
            price_tier=deck_price_tier(resolved),
            created_at=deck.created_at,
            updated_at=deck.updated_at,
        )


class DeckDetailResponse(DeckResponse):
    """A deck with its cards resolved, in deck order."""

    cards: list[CardResponse] = Field(default_factory=list)
    type_distribution: dict[str, int] = Field(default_factory=dict)
    rarity_distribution: dict[str, int] = Field(default_factory=dict)
    missing_card_ids: list[str] = Field(default_factory=list)


class DeckListResponse(BaseModel):
    """Response model for a list of decks."""

    decks: list[DeckResponse]
    count: int


class DeckCreateRequest(BaseModel):
    """Request model for creating a deck."""

    name: NonEmptyText
    description: NonEmptyText
    is_public: bool = False
    tags: list[str] = Field(default_factory=list)
    card_ids: list[str] = Field(default_factory=list)


class DeckCardsRequest(BaseModel):
    """Request model for adding cards to a deck."""

    card_ids: list[str] = Field(..., min_length=1)


class DeckMoveRequest(BaseModel):
    """Request model for moving one card to a new position."""

    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class DeckDuplicateRequest(BaseModel):
    """Request model for copying a deck."""

    name: NonEmptyText | None = Field(
        default=None,
        description='Name of the copy; defaults to "<name> (copy)"',
    )


async def _deck_response(store: CollectionStore, deck: Deck) -> DeckResponse:
    return DeckResponse.from_deck(deck, await store.list_cards())


@router.get("", response_model=DeckListResponse)
async def list_decks(store: Annotated[CollectionStore, Depends(get_store)]) -> DeckListResponse:
    """List all decks."""
    cards = await store.list_cards()
    decks = [DeckResponse.from_deck(deck, cards) for deck in await store.list_decks()]
    return DeckListResponse(decks=decks, count=len(decks))


@router.post("", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_deck(
    request: DeckCreateRequest,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> DeckResponse:
    """Create a deck. Returns 404 if any listed card does not exist."""
    draft = DeckDraft(
        name=request.name,
        description=request.description,
        is_public=request.is_public,
        tags=request.tags,
    )
    try:
        deck = await collection.create_deck(store, draft, request.card_ids)
    except KnownError as e:
        raise to_http_error(e) from e
    return await _deck_response(store, deck)


@router.get("/{deck_id}", response_model=DeckDetailResponse)
async def get_deck(
    deck_id: str,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> DeckDetailResponse:
    """Get a deck with its cards resolved. Returns 404 if not found."""
    try:
        deck = await collection.require_deck(store, deck_id)
    except KnownError as e:
        raise to_http_error(e) from e

    cards = await store.list_cards()
    summary = DeckResponse.from_deck(deck, cards)
    stats = deck.stats(cards)
    return DeckDetailResponse(
        **summary.model_dump(),
        cards=[CardResponse.from_card(card) for card in deck.resolve_cards(cards)],
        type_distribution=stats.type_distribution,
        rarity_distribution=stats.rarity_distribution,
        missing_card_ids=deck.dangling_ids(cards),
    )


@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(
    deck_id: str,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> Response:
    """Delete a deck. Its cards stay in the collection."""
    try:
        await collection.delete_deck(store, deck_id)
    except KnownError as e:
        raise to_http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{deck_id}/cards", response_model=DeckResponse)
async def add_cards(
    deck_id: str,
    request: DeckCardsRequest,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> DeckResponse:
    """Append cards to a deck. Cards already in the deck are ignored."""
    try:
        deck = await collection.add_cards_to_deck(store, deck_id, request.card_ids)
    except KnownError as e:
        raise to_http_error(e) from e
    return await _deck_response(store, deck)


@router.delete("/{deck_id}/cards/{card_id}", response_model=DeckResponse)
async def remove_card(
    deck_id: str,
    card_id: str,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> DeckResponse:
    """Remove a card from a deck without deleting the card."""
    try:
        deck = await collection.remove_card_from_deck(store, deck_id, card_id)
    except KnownError as e:
        raise to_http_error(e) from e
    return await _deck_response(store, deck)


@router.post("/{deck_id}/move", response_model=DeckResponse)
async def move_card(
    deck_id: str,
    request: DeckMoveRequest,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> DeckResponse:
    """Move the card at from_index to to_index. Returns 400 if out of range."""
    try:
        deck = await collection.move_card_in_deck(
            store, deck_id, request.from_index, request.to_index
        )
    except KnownError as e:
        raise to_http_error(e) from e
    return await _deck_response(store, deck)


@router.post(
    "/{deck_id}/duplicate",
    response_model=DeckResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_deck(
    deck_id: str,
    store: Annotated[CollectionStore, Depends(get_store)],
    request: DeckDuplicateRequest | None = None,
) -> DeckResponse:
    """Copy a deck under a new id. The copy is always private."""
    new_name = request.name if request else None
    try:
        deck = await collection.duplicate_deck(store, deck_id, new_name)
    except KnownError as e:
        raise to_http_error(e) from e
    return await _deck_response(store, deck)


@router.get("/{deck_id}/export", response_model=ExportResponse)
async def export_deck(
    deck_id: str,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> ExportResponse:
    """Export a deck with its cards inline as importable JSON."""
    try:
        data = await collection.export_deck_json(store, deck_id)
    except KnownError as e:
        raise to_http_error(e) from e
    return ExportResponse(data=data)
