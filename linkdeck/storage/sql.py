"""Relational store backed by an AsyncSession."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from linkdeck.db import operations
from linkdeck.models.card import Card
from linkdeck.models.deck import Deck

logger = logging.getLogger(__name__)


class SqlStore:
    """
    A CollectionStore over the cards and decks tables.

    The session's lifetime (and its final commit) belongs to the caller;
    writes are flushed immediately. A failed write rolls the session back
    and reports False.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_cards(self) -> list[Card]:
        return [operations.card_to_model(row) for row in await operations.list_cards(self.session)]

    async def get_card(self, card_id: str) -> Card | None:
        row = await operations.get_card(self.session, card_id)
        return operations.card_to_model(row) if row else None

    async def upsert_card(self, card: Card) -> bool:
        try:
            await operations.upsert_card(self.session, card)
        except SQLAlchemyError as e:
            logger.error("Failed to save card %s: %s", card.id, e)
            await self.session.rollback()
            return False
        return True

    async def delete_card(self, card_id: str) -> bool:
        try:
            return await operations.delete_card(self.session, card_id)
        except SQLAlchemyError as e:
            logger.error("Failed to delete card %s: %s", card_id, e)
            await self.session.rollback()
            return False

    async def list_decks(self) -> list[Deck]:
        return [operations.deck_to_model(row) for row in await operations.list_decks(self.session)]

    async def get_deck(self, deck_id: str) -> Deck | None:
        row = await operations.get_deck(self.session, deck_id)
        return operations.deck_to_model(row) if row else None

    async def upsert_deck(self, deck: Deck) -> bool:
        try:
            await operations.upsert_deck(self.session, deck)
        except SQLAlchemyError as e:
            logger.error("Failed to save deck %s: %s", deck.id, e)
            await self.session.rollback()
            return False
        return True

    async def delete_deck(self, deck_id: str) -> bool:
        try:
            return await operations.delete_deck(self.session, deck_id)
        except SQLAlchemyError as e:
            logger.error("Failed to delete deck %s: %s", deck_id, e)
            await self.session.rollback()
            return False
