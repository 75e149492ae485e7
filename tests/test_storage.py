"""Tests for the store implementations."""

import json
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from linkdeck.config import settings
from linkdeck.models.card import CardRarity
from linkdeck.models.deck import Deck
from linkdeck.storage import CollectionStore, JsonFileStore, MemoryStore, SqlStore
from linkdeck.storage.local import EPOCH
from linkdeck.storage.records import card_from_record, card_to_record


@pytest.fixture(params=["memory", "json", "sql"])
async def store(request, tmp_path: Path, session: AsyncSession) -> CollectionStore:
    """Each store implementation, behind the same interface."""
    if request.param == "memory":
        return MemoryStore()
    if request.param == "json":
        return JsonFileStore(tmp_path / "store.json")
    return SqlStore(session)


class TestCollectionStoreContract:
    async def test_satisfies_protocol(self, store: CollectionStore) -> None:
        assert isinstance(store, CollectionStore)

    async def test_card_round_trip(self, store: CollectionStore, make_card) -> None:
        card = make_card(tags=["Python"], price=12.5, metadata={"stars": 3})

        assert await store.upsert_card(card) is True
        loaded = await store.get_card(card.id)

        assert loaded == card

    async def test_upsert_overwrites(self, store: CollectionStore, make_card) -> None:
        card = make_card()
        await store.upsert_card(card)
        card.apply_changes(rarity=CardRarity.EPIC)

        await store.upsert_card(card)

        cards = await store.list_cards()
        assert len(cards) == 1
        assert cards[0].rarity == CardRarity.EPIC

    async def test_list_keeps_insertion_order(self, store: CollectionStore, make_card) -> None:
        await store.upsert_card(make_card("a", title="A"))
        await store.upsert_card(make_card("b", title="B"))

        assert [c.id for c in await store.list_cards()] == ["a", "b"]

    async def test_missing_card(self, store: CollectionStore) -> None:
        assert await store.get_card("nope") is None
        assert await store.delete_card("nope") is False

    async def test_delete_card_leaves_decks_alone(self, store: CollectionStore, make_card) -> None:
        """Deleting a card does not cascade: the deck keeps a dangling id."""
        await store.upsert_card(make_card("a"))
        await store.upsert_deck(Deck(id="d", name="D", card_ids=["a"]))

        assert await store.delete_card("a") is True

        deck = await store.get_deck("d")
        assert deck is not None
        assert deck.card_ids == ["a"]
        assert deck.resolve_cards(await store.list_cards()) == []

    async def test_deck_round_trip(self, store: CollectionStore) -> None:
        deck = Deck(id="d", name="Tools", description="desc", card_ids=["b", "a"], tags=["x"])

        await store.upsert_deck(deck)

        assert await store.get_deck("d") == deck
        assert [d.id for d in await store.list_decks()] == ["d"]
        assert await store.delete_deck("d") is True
        assert await store.get_deck("d") is None


class TestMemoryStore:
    async def test_returns_copies(self, make_card) -> None:
        store = MemoryStore([make_card(tags=["a"])])

        card = await store.get_card("card-1")
        assert card is not None
        card.tags.append("mutated")

        stored = await store.get_card("card-1")
        assert stored is not None
        assert stored.tags == ["a"]


class TestJsonFileStore:
    async def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path / "absent.json")

        assert await store.list_cards() == []
        assert store.last_sync() == EPOCH

    async def test_corrupt_file_reads_as_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        path.write_text("{broken", encoding="utf-8")

        store = JsonFileStore(path)

        assert await store.list_cards() == []
        assert store.get_settings().theme == "auto"

    async def test_unreadable_records_are_skipped(self, tmp_path: Path, make_card) -> None:
        path = tmp_path / "store.json"
        good = card_to_record(make_card())
        path.write_text(
            json.dumps({"cards": [good, {"id": "bad"}, "junk"]}),
            encoding="utf-8",
        )

        cards = await JsonFileStore(path).list_cards()

        assert [c.id for c in cards] == ["card-1"]

    async def test_settings_merge_over_defaults(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path / "store.json")

        assert store.save_settings(theme="dark") is True
        assert store.save_settings(language="en") is True

        settings = store.get_settings()
        assert settings.theme == "dark"
        assert settings.language == "en"
        assert settings.notifications is True

    async def test_mark_synced_and_clear(self, tmp_path: Path, make_card) -> None:
        store = JsonFileStore(tmp_path / "store.json")
        await store.upsert_card(make_card())

        assert store.mark_synced() is True
        assert store.last_sync() > EPOCH

        assert store.clear() is True
        assert await store.list_cards() == []
        assert store.last_sync() == EPOCH

    async def test_write_failure_reports_false(self, tmp_path: Path, make_card) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = JsonFileStore(blocker / "store.json")

        assert await store.upsert_card(make_card()) is False


class TestRecords:
    def test_naive_timestamps_become_utc(self, make_card) -> None:
        record = card_to_record(make_card())
        record["createdAt"] = "2024-01-01T00:00:00"

        card = card_from_record(record)

        assert card.created_at.tzinfo is not None

    def test_zulu_suffix(self, make_card) -> None:
        record = card_to_record(make_card())
        record["updatedAt"] = "2024-01-01T00:00:00Z"

        assert card_from_record(record).updated_at.year == 2024


class TestJsonFileStoreLocation:
    def test_defaults_to_configured_path(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setattr(settings, "local_store_path", str(tmp_path / "configured.json"))

        assert JsonFileStore().path == tmp_path / "configured.json"
