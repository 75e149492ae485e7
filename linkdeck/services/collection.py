"""
Collection service.

Runs the pure core (link parsing, import, merge, deck edits) against a
store handle passed in by the caller. Nothing here holds global state.

Failures raise KnownError subclasses: NotFoundError for unknown ids,
MalformedInputError for bad input, StoreWriteError when a store refuses
a write.
"""

import logging
from dataclasses import replace
from typing import Any

import httpx

from linkdeck.models.card import Card, CardDraft
from linkdeck.models.deck import Deck, DeckDraft
from linkdeck.models.failure import MalformedInputError, NotFoundError, StoreWriteError
from linkdeck.parsers.card_import import (
    card_from_draft,
    deck_from_draft,
    export_card,
    export_collection,
    export_deck,
    new_id,
    parse_import_data,
)
from linkdeck.parsers.link_parser import parse_link, validate_url
from linkdeck.services.merge import MergeResult, merge_import
from linkdeck.services.scoring import content_rarity
from linkdeck.storage.base import CollectionStore
from linkdeck.storage.local import LAST_SYNC_KEY, JsonFileStore

logger = logging.getLogger(__name__)


# --- Store helpers ---


async def _save_card(store: CollectionStore, card: Card) -> Card:
    if not await store.upsert_card(card):
        raise StoreWriteError("card", card.id)
    return card


async def _save_deck(store: CollectionStore, deck: Deck) -> Deck:
    if not await store.upsert_deck(deck):
        raise StoreWriteError("deck", deck.id)
    return deck


def _checked_url(url: str | None) -> str | None:
    """Validate an optional card URL and return it without surrounding whitespace."""
    if url is None:
        return None
    validate_url(url)
    return url.strip()


def _required_text(value: str, message: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise MalformedInputError(message)
    return cleaned


async def require_card(store: CollectionStore, card_id: str) -> Card:
    card = await store.get_card(card_id)
    if card is None:
        raise NotFoundError("card", card_id)
    return card


async def require_deck(store: CollectionStore, deck_id: str) -> Deck:
    deck = await store.get_deck(deck_id)
    if deck is None:
        raise NotFoundError("deck", deck_id)
    return deck


# --- Cards ---


async def create_card(store: CollectionStore, draft: CardDraft) -> Card:
    """
    Persist a new card built from a draft.

    Raises:
        MalformedInputError: If the title or description is blank
        InvalidUrlError: If the draft carries a malformed URL
    """
    draft = replace(
        draft,
        title=_required_text(draft.title, "Card title cannot be empty"),
        description=_required_text(draft.description, "Card description cannot be empty"),
        url=_checked_url(draft.url),
    )
    return await _save_card(store, card_from_draft(draft))


async def quick_add(
    store: CollectionStore,
    url: str,
    client: httpx.AsyncClient | None = None,
) -> Card:
    """
    Parse a URL and save the resulting card.

    Rarity comes from the content heuristic (stars, tags, description,
    image) rather than price, since parsed links carry no price.

    Raises:
        InvalidUrlError: If the URL is malformed
    """
    draft = await parse_link(url, client)
    draft = replace(draft, rarity=content_rarity(draft))
    card = await create_card(store, draft)
    logger.info("Quick-added %s card %r", card.card_type.value, card.title)
    return card


async def update_card(store: CollectionStore, card_id: str, **changes: Any) -> Card:
    """
    Apply field changes to a stored card.

    Raises:
        NotFoundError: If the card does not exist
        MalformedInputError: If a change is not allowed (identity,
            timestamps, unknown field, empty title or description)
        InvalidUrlError: If a new URL is malformed
    """
    card = await require_card(store, card_id)
    if changes.get("url") is not None:
        changes["url"] = _checked_url(changes["url"])
    try:
        card.apply_changes(**changes)
    except ValueError as e:
        raise MalformedInputError("Invalid card update", detail=str(e)) from e
    return await _save_card(store, card)


async def delete_card(store: CollectionStore, card_id: str) -> None:
    """
    Delete a card.

    Decks referencing it keep the id; it resolves to nothing on read.
    """
    if not await store.delete_card(card_id):
        raise NotFoundError("card", card_id)


async def export_card_json(store: CollectionStore, card_id: str) -> str:
    return export_card(await require_card(store, card_id))


# --- Decks ---


async def create_deck(store: CollectionStore, draft: DeckDraft, card_ids: list[str]) -> Deck:
    """
    Persist a new deck over existing cards.

    Raises:
        MalformedInputError: If the name or description is blank
        NotFoundError: If any card id is unknown
    """
    draft = replace(
        draft,
        name=_required_text(draft.name, "Deck name cannot be empty"),
        description=_required_text(draft.description, "Deck description cannot be empty"),
    )
    for card_id in card_ids:
        await require_card(store, card_id)
    return await _save_deck(store, deck_from_draft(draft, card_ids))


async def deck_cards(store: CollectionStore, deck: Deck) -> list[Card]:
    """The deck's cards in deck order, skipping dangling ids."""
    return deck.resolve_cards(await store.list_cards())


async def add_cards_to_deck(store: CollectionStore, deck_id: str, card_ids: list[str]) -> Deck:
    """
    Append cards to a deck. Ids already in the deck are ignored.

    Raises:
        NotFoundError: If the deck or any card does not exist
    """
    deck = await require_deck(store, deck_id)
    for card_id in card_ids:
        await require_card(store, card_id)
    if deck.add_cards(card_ids):
        await _save_deck(store, deck)
    return deck


async def remove_card_from_deck(store: CollectionStore, deck_id: str, card_id: str) -> Deck:
    """
    Remove a card id from a deck.

    Raises:
        NotFoundError: If the deck does not exist or does not hold the card
    """
    deck = await require_deck(store, deck_id)
    if not deck.remove_card(card_id):
        raise NotFoundError("card", card_id)
    return await _save_deck(store, deck)


async def move_card_in_deck(
    store: CollectionStore, deck_id: str, from_index: int, to_index: int
) -> Deck:
    """
    Reorder a deck.

    Raises:
        NotFoundError: If the deck does not exist
        MalformedInputError: If either index is out of range
    """
    deck = await require_deck(store, deck_id)
    try:
        deck.move_card(from_index, to_index)
    except IndexError as e:
        raise MalformedInputError("Invalid card position", detail=str(e)) from e
    return await _save_deck(store, deck)


async def duplicate_deck(store: CollectionStore, deck_id: str, new_name: str | None = None) -> Deck:
    deck = await require_deck(store, deck_id)
    return await _save_deck(store, deck.duplicate(new_id(), new_name))


async def delete_deck(store: CollectionStore, deck_id: str) -> None:
    """Delete a deck. Its cards stay in the collection."""
    if not await store.delete_deck(deck_id):
        raise NotFoundError("deck", deck_id)


async def export_deck_json(store: CollectionStore, deck_id: str) -> str:
    deck = await require_deck(store, deck_id)
    return export_deck(deck, await store.list_cards())


# --- Import / export ---


async def import_into_store(store: CollectionStore, text: str) -> MergeResult:
    """
    Parse import text, merge it with the stored collection and persist
    the records that were added.

    An input with nothing importable yields a result whose summary has
    no changes; nothing is written. Otherwise a local JSON store also
    records the time of the import.

    Raises:
        ImportParseError: If the text is not valid JSON
        StoreWriteError: If the store refuses a write
    """
    payload = parse_import_data(text)
    cards = await store.list_cards()
    decks = await store.list_decks()

    if payload.is_empty:
        logger.info("Import contained nothing to import (%s)", payload.format.value)
        return MergeResult(cards=cards, decks=decks, added_cards=[], added_decks=[])

    result = merge_import(payload, cards, decks)
    # Cards first, so a deck is never stored before its members
    for card in result.added_cards:
        await _save_card(store, card)
    for deck in result.added_decks:
        await _save_deck(store, deck)
    if isinstance(store, JsonFileStore) and not store.mark_synced():
        raise StoreWriteError("sync time", LAST_SYNC_KEY)
    return result


async def export_store(store: CollectionStore) -> str:
    """Export the whole collection as an importable batch payload."""
    return export_collection(await store.list_cards(), await store.list_decks())
