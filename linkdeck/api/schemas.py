"""Request and response types shared by several routers."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, Field, StringConstraints

from linkdeck.models.card import Card, CardDraft, CardRarity, CardType, PriceTier
from linkdeck.services.scoring import format_price_tier, price_tier

# Request text that must not be blank once surrounding whitespace is removed
NonEmptyText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CardResponse(BaseModel):
    """A stored card."""

    id: str
    title: str
    description: str
    type: CardType
    rarity: CardRarity
    price: float | None = None
    price_tier: PriceTier
    price_label: str = Field(..., description='"free" or "$" through "$$$$"')
    url: str | None = None
    image_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            title=card.title,
            description=card.description,
            type=card.card_type,
            rarity=card.rarity,
            price=card.price,
            price_tier=price_tier(card.price),
            price_label=format_price_tier(card.price),
            url=card.url,
            image_url=card.image_url,
            tags=card.tags,
            metadata=card.metadata,
            created_at=card.created_at,
            updated_at=card.updated_at,
        )


class DraftResponse(BaseModel):
    """A card that has been parsed or validated but not saved."""

    title: str
    description: str
    type: CardType
    rarity: CardRarity | None = None
    price: float | None = None
    url: str | None = None
    image_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_draft(cls, draft: CardDraft) -> "DraftResponse":
        return cls(
            title=draft.title,
            description=draft.description,
            type=draft.card_type,
            rarity=draft.rarity,
            price=draft.price,
            url=draft.url,
            image_url=draft.image_url,
            tags=draft.tags,
            metadata=draft.metadata,
        )


class ExportResponse(BaseModel):
    """Exported JSON text, in the shape the import endpoint accepts."""

    data: str
