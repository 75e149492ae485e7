"""Tests for JSON import parsing and export."""

import json

import pytest

from linkdeck.models.card import CardRarity, CardType
from linkdeck.models.deck import Deck
from linkdeck.models.failure import FailureKind, ImportParseError
from linkdeck.parsers.card_import import (
    ImportFormat,
    RecordShape,
    card_from_draft,
    card_record_shape,
    deck_record_shape,
    detect_import_format,
    export_card,
    export_collection,
    export_deck,
    parse_import_data,
    validate_card_data,
)
from linkdeck.storage.records import card_to_record, deck_to_record


class TestDetectImportFormat:
    def test_single_card(self) -> None:
        assert detect_import_format({"title": "X", "description": "Y"}) == ImportFormat.SINGLE_CARD

    def test_single_deck(self) -> None:
        data = {"name": "Tools", "description": "Useful tools"}
        assert detect_import_format(data) == ImportFormat.SINGLE_DECK

    def test_single_deck_with_inline_cards(self) -> None:
        data = {"name": "Tools", "description": "Useful", "cards": [{"title": "a"}]}
        assert detect_import_format(data) == ImportFormat.SINGLE_DECK

    def test_batch(self) -> None:
        assert detect_import_format({"cards": []}) == ImportFormat.BATCH
        assert detect_import_format({"decks": []}) == ImportFormat.BATCH

    def test_unrecognized(self) -> None:
        assert detect_import_format({"foo": "bar"}) == ImportFormat.UNRECOGNIZED
        assert detect_import_format([1, 2, 3]) == ImportFormat.UNRECOGNIZED
        assert detect_import_format(42) == ImportFormat.UNRECOGNIZED

    def test_empty_title_is_not_a_card(self) -> None:
        assert detect_import_format({"title": "", "description": "Y"}) == ImportFormat.UNRECOGNIZED

    def test_blank_text_is_not_a_record(self) -> None:
        """Whitespace-only fields count as missing, as in validation."""
        blank_title = {"title": "  ", "description": "Y"}
        blank_name = {"name": " \t", "description": "Y"}
        blank_description = {"title": "X", "description": "   "}

        assert detect_import_format(blank_title) == ImportFormat.UNRECOGNIZED
        assert detect_import_format(blank_name) == ImportFormat.UNRECOGNIZED
        assert detect_import_format(blank_description) == ImportFormat.UNRECOGNIZED


class TestValidateCardData:
    def test_minimal_card(self) -> None:
        draft = validate_card_data({"title": "  X ", "description": "Y"})

        assert draft is not None
        assert draft.title == "X"
        assert draft.card_type == CardType.CUSTOM
        assert draft.rarity is None
        assert draft.price is None

    def test_missing_description_is_dropped(self) -> None:
        assert validate_card_data({"title": "X"}) is None
        assert validate_card_data({"title": "X", "description": "   "}) is None

    def test_invalid_enums_default(self) -> None:
        draft = validate_card_data(
            {"title": "X", "description": "Y", "type": "weapon", "rarity": "mythic"}
        )

        assert draft is not None
        assert draft.card_type == CardType.CUSTOM
        assert draft.rarity is None

    @pytest.mark.parametrize("price", [-1, True, "12", float("inf")])
    def test_invalid_price_is_dropped(self, price) -> None:
        draft = validate_card_data({"title": "X", "description": "Y", "price": price})

        assert draft is not None
        assert draft.price is None

    def test_tags_are_cleaned(self) -> None:
        draft = validate_card_data(
            {"title": "X", "description": "Y", "tags": [" AI ", "ai", "", 3, "Tools"]}
        )

        assert draft is not None
        assert draft.tags == ["AI", "Tools"]


class TestRecordShape:
    def test_full_card(self, make_card) -> None:
        assert card_record_shape(card_to_record(make_card())) == RecordShape.FULL

    def test_draft_card(self) -> None:
        assert card_record_shape({"title": "X", "description": "Y"}) == RecordShape.DRAFT
        assert card_record_shape({"id": "1", "title": "X"}) == RecordShape.DRAFT

    def test_full_deck(self) -> None:
        deck = Deck(id="d1", name="Tools", description="Useful", card_ids=["a"])
        assert deck_record_shape(deck_to_record(deck)) == RecordShape.FULL

    def test_snake_case_keys(self) -> None:
        assert card_record_shape({"id": "1", "created_at": "2024-01-01"}) == RecordShape.FULL
        assert deck_record_shape({"id": "1", "card_ids": []}) == RecordShape.FULL


class TestParseImportData:
    def test_single_card_scenario(self) -> None:
        payload = parse_import_data('{"title":"X","description":"Y"}')

        assert payload.format == ImportFormat.SINGLE_CARD
        assert len(payload.cards) == 1
        card = card_from_draft(payload.cards[0])
        assert card.card_type == CardType.CUSTOM
        assert card.rarity == CardRarity.COMMON
        assert card.price is None

    def test_malformed_json_raises(self) -> None:
        with pytest.raises(ImportParseError) as exc_info:
            parse_import_data("{not json")

        assert exc_info.value.kind == FailureKind.MALFORMED_INPUT
        assert exc_info.value.detail

    def test_non_object_is_empty(self) -> None:
        assert parse_import_data("[1, 2, 3]").is_empty
        assert parse_import_data("42").is_empty

    def test_all_invalid_entries_is_empty(self) -> None:
        payload = parse_import_data('{"cards": [{"title": "no description"}, 5]}')

        assert payload.format == ImportFormat.BATCH
        assert payload.is_empty

    def test_batch_drops_bad_entries(self) -> None:
        text = json.dumps(
            {
                "cards": [
                    {"title": "A", "description": "first"},
                    {"title": "", "description": "bad"},
                    {"title": "B", "description": "second", "price": 120},
                ],
                "decks": [{"name": "D", "description": "deck", "cards": [{"title": "C"}]}],
            }
        )

        payload = parse_import_data(text)

        assert [c.title for c in payload.cards] == ["A", "B"]
        assert len(payload.decks) == 1
        assert payload.decks[0].cards == []

    def test_single_deck_with_nested_cards(self) -> None:
        text = json.dumps(
            {
                "name": "Tools",
                "description": "Useful tools",
                "isPublic": True,
                "cards": [{"title": "A", "description": "a"}],
            }
        )

        payload = parse_import_data(text)

        assert payload.format == ImportFormat.SINGLE_DECK
        assert payload.decks[0].is_public is True
        assert [c.title for c in payload.decks[0].cards] == ["A"]
        assert payload.card_count == 1

    def test_full_records_are_projected(self, make_card) -> None:
        """A raw store dump imports, with deck members resolved by id."""
        first = make_card("c1", title="First")
        second = make_card("c2", title="Second", price=300.0)
        deck = Deck(id="d1", name="Deck", description="desc", card_ids=["c2", "gone", "c1"])
        text = json.dumps(
            {
                "cards": [card_to_record(first), card_to_record(second)],
                "decks": [deck_to_record(deck)],
            }
        )

        payload = parse_import_data(text)

        assert [c.title for c in payload.cards] == ["First", "Second"]
        assert payload.cards[1].price == 300.0
        assert [c.title for c in payload.decks[0].cards] == ["Second", "First"]


class TestCardFromDraft:
    def test_rarity_from_price_when_absent(self) -> None:
        payload = parse_import_data('{"title":"X","description":"Y","price":600}')
        assert card_from_draft(payload.cards[0]).rarity == CardRarity.LEGENDARY

    def test_explicit_rarity_kept(self) -> None:
        payload = parse_import_data('{"title":"X","description":"Y","price":600,"rarity":"rare"}')
        assert card_from_draft(payload.cards[0]).rarity == CardRarity.RARE

    def test_fresh_identity(self) -> None:
        payload = parse_import_data('{"title":"X","description":"Y"}')
        first = card_from_draft(payload.cards[0])
        second = card_from_draft(payload.cards[0])

        assert first.id != second.id
        assert first.created_at == first.updated_at


class TestExport:
    def test_card_omits_absent_fields(self, make_card) -> None:
        data = json.loads(export_card(make_card(url="https://github.com/encode/httpx")))

        assert data["title"] == "httpx"
        assert data["type"] == "github_repo"
        assert "price" not in data
        assert "imageUrl" not in data
        assert "id" not in data

    def test_deck_skips_dangling_ids(self, make_card) -> None:
        card = make_card("c1")
        deck = Deck(id="d1", name="Deck", description="desc", card_ids=["c1", "gone"])

        data = json.loads(export_deck(deck, [card]))

        assert [c["title"] for c in data["cards"]] == ["httpx"]

    def test_non_ascii_is_kept(self, make_card) -> None:
        text = export_card(make_card(title="工具"))
        assert "工具" in text

    def test_collection_round_trip(self, make_card) -> None:
        """Exported text parses back to the same titles and deck names."""
        cards = [make_card("c1", title="A", price=20.0), make_card("c2", title="B")]
        decks = [Deck(id="d1", name="Deck", description="desc", card_ids=["c2", "c1"])]

        payload = parse_import_data(export_collection(cards, decks))

        assert [c.title for c in payload.cards] == ["A", "B"]
        assert payload.cards[0].price == 20.0
        assert payload.decks[0].name == "Deck"
        assert [c.title for c in payload.decks[0].cards] == ["B", "A"]
