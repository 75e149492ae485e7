"""
Parser for JSON card/deck imports.

Accepted shapes (sniffed in this order, first match wins):
- Single card: {"title": ..., "description": ..., ...}
- Single deck: {"name": ..., "description": ..., "cards": [...]}
- Batch: {"cards": [...], "decks": [...]} where each record is either a
  draft (import shape) or a full persisted record (has "id" and timestamps
  or "cardIds"), as produced by a raw store dump.

Malformed JSON is a hard error. Everything else degrades gracefully: bad
entries are dropped, and an unrecognized object yields an empty payload.
"""

import json
import logging
import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from linkdeck.models.card import Card, CardDraft, CardRarity, CardType, normalize_tags, utcnow
from linkdeck.models.deck import Deck, DeckDraft
from linkdeck.models.failure import ImportParseError
from linkdeck.services.scoring import rarity_from_price

logger = logging.getLogger(__name__)

CARD_TYPES = frozenset(t.value for t in CardType)
CARD_RARITIES = frozenset(r.value for r in CardRarity)

# Keys a persisted record carries but a draft never does
ID_KEY = "id"
CREATED_KEYS = ("createdAt", "created_at")
CARD_IDS_KEYS = ("cardIds", "card_ids")


class ImportFormat(str, Enum):
    """Top-level shape of an import payload."""

    SINGLE_CARD = "single_card"
    SINGLE_DECK = "single_deck"
    BATCH = "batch"
    UNRECOGNIZED = "unrecognized"


class RecordShape(str, Enum):
    """Whether a record is in import (draft) shape or persisted (full) shape."""

    DRAFT = "draft"
    FULL = "full"


@dataclass
class ImportPayload:
    """Validated drafts extracted from import text."""

    format: ImportFormat
    cards: list[CardDraft] = field(default_factory=list)
    decks: list[DeckDraft] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to import."""
        return not self.cards and not self.decks

    @property
    def card_count(self) -> int:
        """Cards presented for import, including those nested in decks."""
        return len(self.cards) + sum(len(deck.cards) for deck in self.decks)


# --- Field validation ---


def _clean_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _clean_tags(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return normalize_tags(tag for tag in value if isinstance(tag, str))


def _clean_price(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def _first_key(data: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        if key in data:
            return key
    return None


def card_record_shape(record: dict[str, Any]) -> RecordShape:
    """A card is FULL when it carries an id and a creation timestamp."""
    if ID_KEY in record and _first_key(record, CREATED_KEYS):
        return RecordShape.FULL
    return RecordShape.DRAFT


def deck_record_shape(record: dict[str, Any]) -> RecordShape:
    """A deck is FULL when it carries an id and a list of card ids."""
    ids_key = _first_key(record, CARD_IDS_KEYS)
    if ID_KEY in record and ids_key and isinstance(record[ids_key], list):
        return RecordShape.FULL
    return RecordShape.DRAFT


def validate_card_data(data: Any) -> CardDraft | None:
    """
    Validate one card record in import shape.

    Returns None (entry dropped) if title or description is missing.
    Invalid optional fields are defaulted or dropped individually.
    """
    if not isinstance(data, dict):
        return None

    title = _clean_text(data.get("title"))
    description = _clean_text(data.get("description"))
    if title is None or description is None:
        logger.debug("Dropping card without title/description: %r", data.get("title"))
        return None

    raw_type = data.get("type")
    raw_rarity = data.get("rarity")

    return CardDraft(
        title=title,
        description=description,
        card_type=CardType(raw_type) if raw_type in CARD_TYPES else CardType.CUSTOM,
        rarity=CardRarity(raw_rarity) if raw_rarity in CARD_RARITIES else None,
        price=_clean_price(data.get("price")),
        url=_clean_text(data.get("url")),
        image_url=_clean_text(data.get("imageUrl")),
        tags=_clean_tags(data.get("tags")),
    )


def project_full_card(record: dict[str, Any]) -> CardDraft | None:
    """Project a persisted card record back onto the import shape."""
    projected = {
        "title": record.get("title"),
        "description": record.get("description"),
        "type": record.get("type", record.get("card_type")),
        "rarity": record.get("rarity"),
        "price": record.get("price"),
        "url": record.get("url"),
        "imageUrl": record.get("imageUrl", record.get("image_url")),
        "tags": record.get("tags"),
    }
    return validate_card_data(projected)


def card_draft_from_record(record: Any) -> CardDraft | None:
    """Validate a card record of either shape."""
    if not isinstance(record, dict):
        return None
    if card_record_shape(record) is RecordShape.FULL:
        return project_full_card(record)
    return validate_card_data(record)


def _validate_deck_fields(data: dict[str, Any]) -> DeckDraft | None:
    name = _clean_text(data.get("name"))
    description = _clean_text(data.get("description"))
    if name is None or description is None:
        logger.debug("Dropping deck without name/description: %r", data.get("name"))
        return None

    is_public = data.get("isPublic", data.get("is_public"))
    return DeckDraft(
        name=name,
        description=description,
        is_public=is_public if isinstance(is_public, bool) else False,
        tags=_clean_tags(data.get("tags")),
    )


def validate_deck_data(data: Any) -> DeckDraft | None:
    """
    Validate one deck record in import shape, including nested cards.

    Nested cards that fail validation are dropped; the deck survives.
    """
    if not isinstance(data, dict):
        return None

    deck = _validate_deck_fields(data)
    if deck is None:
        return None

    nested = data.get("cards")
    if isinstance(nested, list):
        drafts = (card_draft_from_record(card) for card in nested)
        deck.cards = [draft for draft in drafts if draft is not None]
    return deck


def project_full_deck(
    record: dict[str, Any],
    cards_by_id: dict[str, dict[str, Any]],
) -> DeckDraft | None:
    """
    Project a persisted deck record back onto the import shape.

    Member cards are looked up by id in the payload's top-level cards;
    ids with no matching card are skipped.
    """
    deck = _validate_deck_fields(record)
    if deck is None:
        return None

    ids_key = _first_key(record, CARD_IDS_KEYS)
    card_ids = record.get(ids_key, []) if ids_key else []
    for card_id in card_ids:
        if not isinstance(card_id, str) or card_id not in cards_by_id:
            continue
        draft = card_draft_from_record(cards_by_id[card_id])
        if draft is not None:
            deck.cards.append(draft)
    return deck


# --- Format sniffing ---


def load_import_json(text: str) -> Any:
    """
    Decode import text.

    Raises:
        ImportParseError: If the text is not valid JSON
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ImportParseError(str(e)) from e


def detect_import_format(data: Any) -> ImportFormat:
    """Classify decoded JSON into one of the accepted top-level shapes."""
    if not isinstance(data, dict):
        return ImportFormat.UNRECOGNIZED

    has_cards = "cards" in data
    has_decks = "decks" in data

    has_title = _clean_text(data.get("title")) is not None
    has_description = _clean_text(data.get("description")) is not None

    if has_title and has_description and not has_cards and not has_decks:
        return ImportFormat.SINGLE_CARD

    has_name = _clean_text(data.get("name")) is not None
    if has_name and has_description and "title" not in data and not has_decks:
        if not has_cards:
            return ImportFormat.SINGLE_DECK
        # A single deck exported with its cards inline
        if isinstance(data["cards"], list):
            return ImportFormat.SINGLE_DECK

    if isinstance(data.get("cards"), list) or isinstance(data.get("decks"), list):
        return ImportFormat.BATCH

    return ImportFormat.UNRECOGNIZED


def _parse_batch(data: dict[str, Any]) -> ImportPayload:
    raw_cards = data.get("cards") if isinstance(data.get("cards"), list) else []
    raw_decks = data.get("decks") if isinstance(data.get("decks"), list) else []

    cards = [draft for draft in map(card_draft_from_record, raw_cards) if draft is not None]

    cards_by_id = {
        record[ID_KEY]: record
        for record in raw_cards
        if isinstance(record, dict) and isinstance(record.get(ID_KEY), str)
    }

    decks: list[DeckDraft] = []
    for record in raw_decks:
        if not isinstance(record, dict):
            continue
        if deck_record_shape(record) is RecordShape.FULL:
            deck = project_full_deck(record, cards_by_id)
        else:
            deck = validate_deck_data(record)
        if deck is not None:
            decks.append(deck)

    dropped = (len(raw_cards) - len(cards)) + (len(raw_decks) - len(decks))
    if dropped:
        logger.debug("Dropped %d invalid entries from import batch", dropped)

    return ImportPayload(format=ImportFormat.BATCH, cards=cards, decks=decks)


def parse_import_data(text: str) -> ImportPayload:
    """
    Parse import text into validated drafts.

    Returns:
        ImportPayload; ``is_empty`` is True when nothing importable was
        found (unrecognized shape, or every entry failed validation).

    Raises:
        ImportParseError: If the text is not valid JSON
    """
    data = load_import_json(text)
    import_format = detect_import_format(data)

    match import_format:
        case ImportFormat.SINGLE_CARD:
            card = card_draft_from_record(data)
            return ImportPayload(format=import_format, cards=[card] if card else [])
        case ImportFormat.SINGLE_DECK:
            deck = validate_deck_data(data)
            return ImportPayload(format=import_format, decks=[deck] if deck else [])
        case ImportFormat.BATCH:
            return _parse_batch(data)
        case _:
            return ImportPayload(format=ImportFormat.UNRECOGNIZED)


# --- Draft -> entity ---


def new_id() -> str:
    return uuid.uuid4().hex


def card_from_draft(draft: CardDraft) -> Card:
    """
    Create a new Card from a draft.

    Assigns a fresh id and timestamps; derives rarity from price when the
    draft has no explicit rarity.
    """
    now = utcnow()
    return Card(
        id=new_id(),
        title=draft.title,
        description=draft.description,
        card_type=draft.card_type,
        rarity=draft.rarity or rarity_from_price(draft.price),
        price=draft.price,
        url=draft.url,
        image_url=draft.image_url,
        tags=list(draft.tags),
        created_at=now,
        updated_at=now,
        metadata=dict(draft.metadata),
    )


def deck_from_draft(draft: DeckDraft, card_ids: list[str] | None = None) -> Deck:
    """Create a new Deck from a draft with the given member ids."""
    now = utcnow()
    return Deck(
        id=new_id(),
        name=draft.name,
        description=draft.description,
        card_ids=list(card_ids or []),
        is_public=draft.is_public,
        tags=list(draft.tags),
        created_at=now,
        updated_at=now,
    )


# --- Export ---


def card_to_import_dict(card: Card) -> dict[str, Any]:
    """Render a card in import shape. Absent optional fields are omitted."""
    data: dict[str, Any] = {
        "title": card.title,
        "description": card.description,
        "type": card.card_type.value,
        "rarity": card.rarity.value,
        "price": card.price,
        "url": card.url,
        "imageUrl": card.image_url,
        "tags": list(card.tags),
    }
    return {key: value for key, value in data.items() if value is not None}


def deck_to_import_dict(deck: Deck, cards: list[Card]) -> dict[str, Any]:
    """Render a deck in import shape with its resolvable cards inline."""
    return {
        "name": deck.name,
        "description": deck.description,
        "isPublic": deck.is_public,
        "tags": list(deck.tags),
        "cards": [card_to_import_dict(card) for card in deck.resolve_cards(cards)],
    }


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def export_card(card: Card) -> str:
    return _dump(card_to_import_dict(card))


def export_deck(deck: Deck, cards: list[Card]) -> str:
    return _dump(deck_to_import_dict(deck, cards))


def export_collection(cards: list[Card], decks: list[Deck]) -> str:
    """Export everything as a batch payload that parse_import_data accepts."""
    return _dump(
        {
            "cards": [card_to_import_dict(card) for card in cards],
            "decks": [deck_to_import_dict(deck, cards) for deck in decks],
        }
    )
