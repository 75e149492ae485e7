from linkdeck.models.card import (
    RARITY_ORDER,
    Card,
    CardDraft,
    CardRarity,
    CardType,
    PriceTier,
    normalize_tags,
)
from linkdeck.models.deck import Deck, DeckDraft, DeckStats
from linkdeck.models.failure import (
    FailureDetail,
    FailureKind,
    ImportParseError,
    InvalidUrlError,
    KnownError,
    MalformedInputError,
    NotFoundError,
    PolishError,
    StoreWriteError,
)
from linkdeck.models.settings import UserSettings

__all__ = [
    "Card",
    "CardDraft",
    "CardRarity",
    "CardType",
    "Deck",
    "DeckDraft",
    "DeckStats",
    "FailureDetail",
    "FailureKind",
    "ImportParseError",
    "InvalidUrlError",
    "KnownError",
    "MalformedInputError",
    "NotFoundError",
    "PolishError",
    "PriceTier",
    "RARITY_ORDER",
    "StoreWriteError",
    "UserSettings",
    "normalize_tags",
]
