from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime

from linkdeck.models.card import Card, CardDraft, normalize_tags, utcnow


@dataclass
class DeckDraft:
    """A validated deck record awaiting merge, with its nested card drafts."""

    name: str
    description: str
    is_public: bool = False
    tags: list[str] = field(default_factory=list)
    cards: list[CardDraft] = field(default_factory=list)


@dataclass
class DeckStats:
    """Distribution of resolvable cards in a deck."""

    card_count: int
    type_distribution: dict[str, int]
    rarity_distribution: dict[str, int]


@dataclass
class Deck:
    """
    A named, ordered collection of card ids.

    ``card_ids`` is display order, not a set. Each id appears at most once.
    Ids may reference cards that no longer exist; those resolve to nothing
    when the deck is read (deleting a card does not touch its decks).
    """

    id: str
    name: str
    description: str = ""
    card_ids: list[str] = field(default_factory=list)
    is_public: bool = False
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.card_ids = list(dict.fromkeys(self.card_ids))
        self.tags = normalize_tags(self.tags)

    def touch(self) -> None:
        """Refresh the last-modified timestamp."""
        self.updated_at = utcnow()

    def __contains__(self, card_id: str) -> bool:
        return card_id in self.card_ids

    def __len__(self) -> int:
        return len(self.card_ids)

    def add_card(self, card_id: str) -> bool:
        """
        Append a card id.

        Returns False (and leaves the deck untouched) if already present.
        """
        if card_id in self.card_ids:
            return False
        self.card_ids.append(card_id)
        self.touch()
        return True

    def add_cards(self, card_ids: Iterable[str]) -> int:
        """Append every id not already present. Returns how many were added."""
        new_ids = [cid for cid in dict.fromkeys(card_ids) if cid not in self.card_ids]
        if new_ids:
            self.card_ids.extend(new_ids)
            self.touch()
        return len(new_ids)

    def remove_card(self, card_id: str) -> bool:
        """Remove a card id. Returns False if it was not in the deck."""
        if card_id not in self.card_ids:
            return False
        self.card_ids.remove(card_id)
        self.touch()
        return True

    def remove_cards(self, card_ids: Iterable[str]) -> int:
        """Remove every listed id. Returns how many were removed."""
        doomed = set(card_ids)
        before = len(self.card_ids)
        self.card_ids = [cid for cid in self.card_ids if cid not in doomed]
        removed = before - len(self.card_ids)
        if removed:
            self.touch()
        return removed

    def move_card(self, from_index: int, to_index: int) -> None:
        """
        Move the id at ``from_index`` so it ends up at ``to_index``.

        A move is a removal followed by a reinsertion: membership and
        length never change.

        Raises:
            IndexError: If either index is outside the deck
        """
        size = len(self.card_ids)
        if not 0 <= from_index < size or not 0 <= to_index < size:
            raise IndexError(f"Move {from_index} -> {to_index} out of range for {size} cards")
        card_id = self.card_ids.pop(from_index)
        self.card_ids.insert(to_index, card_id)
        self.touch()

    def resolve_cards(self, cards: Mapping[str, Card] | Iterable[Card]) -> list[Card]:
        """
        Return the deck's cards in deck order.

        Dangling ids are skipped rather than raising.
        """
        by_id = cards if isinstance(cards, Mapping) else {card.id: card for card in cards}
        return [by_id[cid] for cid in self.card_ids if cid in by_id]

    def dangling_ids(self, cards: Mapping[str, Card] | Iterable[Card]) -> list[str]:
        """Ids in this deck that resolve to no card."""
        known = set(cards.keys()) if isinstance(cards, Mapping) else {card.id for card in cards}
        return [cid for cid in self.card_ids if cid not in known]

    def stats(self, cards: Mapping[str, Card] | Iterable[Card]) -> DeckStats:
        """Count resolvable cards by type and rarity."""
        resolved = self.resolve_cards(cards)
        type_distribution: dict[str, int] = {}
        rarity_distribution: dict[str, int] = {}
        for card in resolved:
            type_distribution[card.card_type.value] = (
                type_distribution.get(card.card_type.value, 0) + 1
            )
            rarity_distribution[card.rarity.value] = (
                rarity_distribution.get(card.rarity.value, 0) + 1
            )
        return DeckStats(
            card_count=len(resolved),
            type_distribution=type_distribution,
            rarity_distribution=rarity_distribution,
        )

    def duplicate(self, new_id: str, new_name: str | None = None) -> "Deck":
        """
        Copy this deck under a new id.

        The copy is always private and gets fresh timestamps.
        """
        return Deck(
            id=new_id,
            name=new_name or f"{self.name} (copy)",
            description=self.description,
            card_ids=list(self.card_ids),
            is_public=False,
            tags=list(self.tags),
        )
