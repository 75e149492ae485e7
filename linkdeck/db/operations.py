"""
Database CRUD operations.

Async functions for reading and writing cards and decks, plus the
conversions between ORM rows and domain dataclasses.
"""

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from linkdeck.models.card import Card, CardRarity, CardType
from linkdeck.models.db import CardDB, DeckDB
from linkdeck.models.deck import Deck


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out
    return value if value.tzinfo else value.replace(tzinfo=UTC)


# --- Card Operations ---


async def get_card(session: AsyncSession, card_id: str) -> CardDB | None:
    """Get a card by id. Returns None if it does not exist."""
    return await session.get(CardDB, card_id)


async def list_cards(session: AsyncSession) -> list[CardDB]:
    """All cards, oldest first."""
    result = await session.execute(select(CardDB).order_by(CardDB.created_at, CardDB.id))
    return list(result.scalars().all())


async def upsert_card(session: AsyncSession, card: Card) -> CardDB:
    """
    Insert or update a card.

    If a row with the same id exists every field is overwritten,
    including timestamps, which the domain model owns.
    """
    existing = await get_card(session, card.id)

    if existing:
        existing.title = card.title
        existing.description = card.description
        existing.card_type = card.card_type.value
        existing.rarity = card.rarity.value
        existing.price = card.price
        existing.url = card.url
        existing.image_url = card.image_url
        existing.tags = list(card.tags)
        existing.extra = dict(card.metadata)
        existing.created_at = card.created_at
        existing.updated_at = card.updated_at
        await session.flush()
        return existing

    db_card = card_to_db(card)
    session.add(db_card)
    await session.flush()
    return db_card


async def delete_card(session: AsyncSession, card_id: str) -> bool:
    """
    Delete a card.

    Returns True if deleted, False if not found. Decks that reference the
    card are left alone.
    """
    db_card = await get_card(session, card_id)
    if not db_card:
        return False

    await session.delete(db_card)
    await session.flush()
    return True


def card_to_db(card: Card) -> CardDB:
    """Convert a domain card to a new ORM row."""
    return CardDB(
        id=card.id,
        title=card.title,
        description=card.description,
        card_type=card.card_type.value,
        rarity=card.rarity.value,
        price=card.price,
        url=card.url,
        image_url=card.image_url,
        tags=list(card.tags),
        extra=dict(card.metadata),
        created_at=card.created_at,
        updated_at=card.updated_at,
    )


def card_to_model(db_card: CardDB) -> Card:
    """Convert a database card to a domain model."""
    return Card(
        id=db_card.id,
        title=db_card.title,
        description=db_card.description,
        card_type=CardType(db_card.card_type),
        rarity=CardRarity(db_card.rarity),
        price=db_card.price,
        url=db_card.url,
        image_url=db_card.image_url,
        tags=list(db_card.tags or []),
        created_at=_aware(db_card.created_at),
        updated_at=_aware(db_card.updated_at),
        metadata=dict(db_card.extra or {}),
    )


# --- Deck Operations ---


async def get_deck(session: AsyncSession, deck_id: str) -> DeckDB | None:
    """Get a deck by id. Returns None if it does not exist."""
    return await session.get(DeckDB, deck_id)


async def list_decks(session: AsyncSession) -> list[DeckDB]:
    """All decks, oldest first."""
    result = await session.execute(select(DeckDB).order_by(DeckDB.created_at, DeckDB.id))
    return list(result.scalars().all())


async def upsert_deck(session: AsyncSession, deck: Deck) -> DeckDB:
    """Insert or update a deck, overwriting every field."""
    existing = await get_deck(session, deck.id)

    if existing:
        existing.name = deck.name
        existing.description = deck.description
        existing.card_ids = list(deck.card_ids)
        existing.is_public = deck.is_public
        existing.tags = list(deck.tags)
        existing.created_at = deck.created_at
        existing.updated_at = deck.updated_at
        await session.flush()
        return existing

    db_deck = DeckDB(
        id=deck.id,
        name=deck.name,
        description=deck.description,
        card_ids=list(deck.card_ids),
        is_public=deck.is_public,
        tags=list(deck.tags),
        created_at=deck.created_at,
        updated_at=deck.updated_at,
    )
    session.add(db_deck)
    await session.flush()
    return db_deck


async def delete_deck(session: AsyncSession, deck_id: str) -> bool:
    """
    Delete a deck. Its cards are not touched.

    Returns True if deleted, False if not found.
    """
    db_deck = await get_deck(session, deck_id)
    if not db_deck:
        return False

    await session.delete(db_deck)
    await session.flush()
    return True


def deck_to_model(db_deck: DeckDB) -> Deck:
    """Convert a database deck to a domain model."""
    return Deck(
        id=db_deck.id,
        name=db_deck.name,
        description=db_deck.description or "",
        card_ids=list(db_deck.card_ids or []),
        is_public=bool(db_deck.is_public),
        tags=list(db_deck.tags or []),
        created_at=_aware(db_deck.created_at),
        updated_at=_aware(db_deck.updated_at),
    )
