"""
Merge imported drafts into an existing collection.

Identity for merge purposes is the case-insensitive title (cards) or name
(decks), never the opaque id: imported records carry no meaningful id.
A collision means "skip": imports only ever add, never overwrite.

Processing order is fixed: all top-level cards in input order, then each
deck in input order, with a deck's own cards merged before the deck.

INVARIANT: merge_import never mutates its inputs. Callers persist the
returned collections.
"""

import logging
from dataclasses import dataclass

from linkdeck.models.card import Card, CardDraft
from linkdeck.models.deck import Deck
from linkdeck.parsers.card_import import ImportPayload, card_from_draft, deck_from_draft

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportSummary:
    """Counts of records actually appended (after dedup)."""

    cards_added: int = 0
    decks_added: int = 0

    @property
    def changed(self) -> bool:
        return self.cards_added > 0 or self.decks_added > 0


@dataclass
class MergeResult:
    """The merged collections plus the records that were new."""

    cards: list[Card]
    decks: list[Deck]
    added_cards: list[Card]
    added_decks: list[Deck]

    @property
    def summary(self) -> ImportSummary:
        return ImportSummary(cards_added=len(self.added_cards), decks_added=len(self.added_decks))


def _key(text: str) -> str:
    return text.lower()


class _MergeState:
    """Working copy of the collection, indexed by merge identity."""

    def __init__(self, cards: list[Card], decks: list[Deck]):
        self.cards = list(cards)
        self.decks = list(decks)
        self.added_cards: list[Card] = []
        self.added_decks: list[Deck] = []
        # First card with a given title wins, matching a linear scan
        self.cards_by_title: dict[str, Card] = {}
        for card in self.cards:
            self.cards_by_title.setdefault(_key(card.title), card)
        self.deck_names = {_key(deck.name) for deck in self.decks}

    def resolve_card(self, draft: CardDraft) -> Card:
        """Return the existing card with this title, or add a new one."""
        existing = self.cards_by_title.get(_key(draft.title))
        if existing is not None:
            return existing

        card = card_from_draft(draft)
        self.cards.append(card)
        self.added_cards.append(card)
        self.cards_by_title[_key(card.title)] = card
        return card


def merge_import(
    payload: ImportPayload,
    existing_cards: list[Card],
    existing_decks: list[Deck],
) -> MergeResult:
    """
    Combine an import payload with an existing collection.

    Args:
        payload: Validated drafts from parse_import_data
        existing_cards: Current cards (not modified)
        existing_decks: Current decks (not modified)

    Returns:
        MergeResult with the union and the records that were added.
    """
    state = _MergeState(existing_cards, existing_decks)

    for draft in payload.cards:
        state.resolve_card(draft)

    for deck_draft in payload.decks:
        # Nested cards are merged even if the deck itself turns out to be
        # a duplicate; its card list may reference pre-existing cards.
        card_ids = [state.resolve_card(card_draft).id for card_draft in deck_draft.cards]

        if _key(deck_draft.name) in state.deck_names:
            logger.debug("Skipping duplicate deck %r", deck_draft.name)
            continue

        deck = deck_from_draft(deck_draft, card_ids)
        state.decks.append(deck)
        state.added_decks.append(deck)
        state.deck_names.add(_key(deck.name))

    result = MergeResult(
        cards=state.cards,
        decks=state.decks,
        added_cards=state.added_cards,
        added_decks=state.added_decks,
    )
    logger.info(
        "Merged import: %d cards added, %d decks added",
        result.summary.cards_added,
        result.summary.decks_added,
    )
    return result
