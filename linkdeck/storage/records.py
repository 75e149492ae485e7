"""
Plain-dict records for cards and decks.

This is the persisted ("full") shape: camelCase keys, ISO timestamps. A
raw dump of these records is itself importable (see card_import).
"""

from datetime import UTC, datetime
from typing import Any

from linkdeck.models.card import Card, CardRarity, CardType
from linkdeck.models.deck import Deck


def _timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def card_to_record(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "title": card.title,
        "description": card.description,
        "type": card.card_type.value,
        "rarity": card.rarity.value,
        "price": card.price,
        "url": card.url,
        "imageUrl": card.image_url,
        "tags": list(card.tags),
        "createdAt": card.created_at.isoformat(),
        "updatedAt": card.updated_at.isoformat(),
        "metadata": dict(card.metadata),
    }


def card_from_record(record: dict[str, Any]) -> Card:
    """
    Rebuild a Card from a stored record.

    Raises:
        KeyError, ValueError: If the record is missing fields or has
            values outside the enums
    """
    return Card(
        id=record["id"],
        title=record["title"],
        description=record["description"],
        card_type=CardType(record["type"]),
        rarity=CardRarity(record["rarity"]),
        price=record.get("price"),
        url=record.get("url"),
        image_url=record.get("imageUrl"),
        tags=list(record.get("tags") or []),
        created_at=_timestamp(record["createdAt"]),
        updated_at=_timestamp(record["updatedAt"]),
        metadata=dict(record.get("metadata") or {}),
    )


def deck_to_record(deck: Deck) -> dict[str, Any]:
    return {
        "id": deck.id,
        "name": deck.name,
        "description": deck.description,
        "cardIds": list(deck.card_ids),
        "isPublic": deck.is_public,
        "tags": list(deck.tags),
        "createdAt": deck.created_at.isoformat(),
        "updatedAt": deck.updated_at.isoformat(),
    }


def deck_from_record(record: dict[str, Any]) -> Deck:
    return Deck(
        id=record["id"],
        name=record["name"],
        description=record.get("description", ""),
        card_ids=list(record.get("cardIds") or []),
        is_public=bool(record.get("isPublic", False)),
        tags=list(record.get("tags") or []),
        created_at=_timestamp(record["createdAt"]),
        updated_at=_timestamp(record["updatedAt"]),
    )
