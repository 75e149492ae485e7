"""
Local key-value store backed by a single JSON file.

Layout mirrors a browser localStorage namespace: one key per collection
("cards", "decks", "settings") plus the time of the last bulk import.
Unreadable or corrupt files read as empty rather than failing.
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from linkdeck.config import settings
from linkdeck.models.card import Card
from linkdeck.models.deck import Deck
from linkdeck.models.settings import UserSettings
from linkdeck.storage.records import (
    card_from_record,
    card_to_record,
    deck_from_record,
    deck_to_record,
)

logger = logging.getLogger(__name__)

CARDS_KEY = "cards"
DECKS_KEY = "decks"
SETTINGS_KEY = "settings"
LAST_SYNC_KEY = "last_sync"

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class JsonFileStore:
    """A CollectionStore that keeps everything in one JSON document."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path or settings.local_store_path)

    # --- raw document access ---

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read local store %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error("Could not write local store %s: %s", self.path, e)
            return False
        return True

    def _records(self, key: str) -> list[dict[str, Any]]:
        records = self._read().get(key, [])
        return [r for r in records if isinstance(r, dict)] if isinstance(records, list) else []

    def _save_records(self, key: str, records: list[dict[str, Any]]) -> bool:
        data = self._read()
        data[key] = records
        return self._write(data)

    def _upsert_record(self, key: str, record: dict[str, Any]) -> bool:
        records = self._records(key)
        for index, existing in enumerate(records):
            if existing.get("id") == record["id"]:
                records[index] = record
                break
        else:
            records.append(record)
        return self._save_records(key, records)

    def _delete_record(self, key: str, record_id: str) -> bool:
        records = self._records(key)
        remaining = [r for r in records if r.get("id") != record_id]
        if len(remaining) == len(records):
            return False
        return self._save_records(key, remaining)

    # --- cards ---

    async def list_cards(self) -> list[Card]:
        cards: list[Card] = []
        for record in self._records(CARDS_KEY):
            try:
                cards.append(card_from_record(record))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Skipping unreadable card record %r: %s", record.get("id"), e)
        return cards

    async def get_card(self, card_id: str) -> Card | None:
        for card in await self.list_cards():
            if card.id == card_id:
                return card
        return None

    async def upsert_card(self, card: Card) -> bool:
        return self._upsert_record(CARDS_KEY, card_to_record(card))

    async def delete_card(self, card_id: str) -> bool:
        return self._delete_record(CARDS_KEY, card_id)

    # --- decks ---

    async def list_decks(self) -> list[Deck]:
        decks: list[Deck] = []
        for record in self._records(DECKS_KEY):
            try:
                decks.append(deck_from_record(record))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Skipping unreadable deck record %r: %s", record.get("id"), e)
        return decks

    async def get_deck(self, deck_id: str) -> Deck | None:
        for deck in await self.list_decks():
            if deck.id == deck_id:
                return deck
        return None

    async def upsert_deck(self, deck: Deck) -> bool:
        return self._upsert_record(DECKS_KEY, deck_to_record(deck))

    async def delete_deck(self, deck_id: str) -> bool:
        return self._delete_record(DECKS_KEY, deck_id)

    # --- settings and bookkeeping ---

    def get_settings(self) -> UserSettings:
        """Saved settings merged over the defaults."""
        saved = self._read().get(SETTINGS_KEY)
        return UserSettings.from_dict(saved) if isinstance(saved, dict) else UserSettings()

    def save_settings(self, **changes: Any) -> bool:
        merged = {**self.get_settings().to_dict(), **changes}
        data = self._read()
        data[SETTINGS_KEY] = UserSettings.from_dict(merged).to_dict()
        return self._write(data)

    def last_sync(self) -> datetime:
        """Time of the last bulk import, or the epoch if there was none."""
        value = self._read().get(LAST_SYNC_KEY)
        if not isinstance(value, str):
            return EPOCH
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return EPOCH

    def mark_synced(self) -> bool:
        data = self._read()
        data[LAST_SYNC_KEY] = datetime.now(UTC).isoformat()
        return self._write(data)

    def clear(self) -> bool:
        """Remove every key this store owns."""
        return self._write({})
