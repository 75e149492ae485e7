"""
Persistence contract for cards and decks.

Every store (in-memory, local JSON file, relational) implements the same
async interface, so core operations take a store handle as an argument
rather than reaching for a global. Writes report success as a bool; no
store is assumed to be transactional across calls, and concurrent writers
to the same id are last-write-wins.
"""

from typing import Protocol, runtime_checkable

from linkdeck.models.card import Card
from linkdeck.models.deck import Deck


@runtime_checkable
class CollectionStore(Protocol):
    """Read/write access to a user's cards and decks."""

    async def list_cards(self) -> list[Card]: ...

    async def get_card(self, card_id: str) -> Card | None: ...

    async def upsert_card(self, card: Card) -> bool: ...

    async def delete_card(self, card_id: str) -> bool: ...

    async def list_decks(self) -> list[Deck]: ...

    async def get_deck(self, deck_id: str) -> Deck | None: ...

    async def upsert_deck(self, deck: Deck) -> bool: ...

    async def delete_deck(self, deck_id: str) -> bool: ...
