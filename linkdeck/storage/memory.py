"""In-memory store, used by tests and as a scratch collection."""

import copy

from linkdeck.models.card import Card
from linkdeck.models.deck import Deck


class MemoryStore:
    """
    A CollectionStore backed by dicts.

    Records are copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self, cards: list[Card] | None = None, decks: list[Deck] | None = None):
        self._cards: dict[str, Card] = {card.id: copy.deepcopy(card) for card in cards or []}
        self._decks: dict[str, Deck] = {deck.id: copy.deepcopy(deck) for deck in decks or []}

    async def list_cards(self) -> list[Card]:
        return [copy.deepcopy(card) for card in self._cards.values()]

    async def get_card(self, card_id: str) -> Card | None:
        card = self._cards.get(card_id)
        return copy.deepcopy(card) if card else None

    async def upsert_card(self, card: Card) -> bool:
        self._cards[card.id] = copy.deepcopy(card)
        return True

    async def delete_card(self, card_id: str) -> bool:
        return self._cards.pop(card_id, None) is not None

    async def list_decks(self) -> list[Deck]:
        return [copy.deepcopy(deck) for deck in self._decks.values()]

    async def get_deck(self, deck_id: str) -> Deck | None:
        deck = self._decks.get(deck_id)
        return copy.deepcopy(deck) if deck else None

    async def upsert_deck(self, deck: Deck) -> bool:
        self._decks[deck.id] = copy.deepcopy(deck)
        return True

    async def delete_deck(self, deck_id: str) -> bool:
        return self._decks.pop(deck_id, None) is not None
