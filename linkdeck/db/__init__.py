from linkdeck.db.database import get_session, init_db
from linkdeck.db.operations import (
    card_to_db,
    card_to_model,
    deck_to_model,
    delete_card,
    delete_deck,
    get_card,
    get_deck,
    list_cards,
    list_decks,
    upsert_card,
    upsert_deck,
)

__all__ = [
    "card_to_db",
    "card_to_model",
    "deck_to_model",
    "delete_card",
    "delete_deck",
    "get_card",
    "get_deck",
    "get_session",
    "init_db",
    "list_cards",
    "list_decks",
    "upsert_card",
    "upsert_deck",
]
