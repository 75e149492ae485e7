"""
LinkDeck services.

Scoring, search, and the external lookups. The orchestration modules
(merge, collection) depend on the parsers and are imported directly.
"""

from linkdeck.services.card_search import (
    CardStats,
    SearchFilters,
    card_stats,
    filter_cards,
    popular_tags,
    sort_cards,
)
from linkdeck.services.github import RepoMetadata, fetch_repo_metadata
from linkdeck.services.polish import PolishRequest, PolishResponse, polish_card
from linkdeck.services.scoring import (
    content_rarity,
    deck_price_tier,
    deck_value,
    format_price_tier,
    price_tier,
    rarity_from_price,
    tier_to_rarity,
)

__all__ = [
    "CardStats",
    "PolishRequest",
    "PolishResponse",
    "RepoMetadata",
    "SearchFilters",
    "card_stats",
    "content_rarity",
    "deck_price_tier",
    "deck_value",
    "fetch_repo_metadata",
    "filter_cards",
    "format_price_tier",
    "polish_card",
    "popular_tags",
    "price_tier",
    "rarity_from_price",
    "sort_cards",
    "tier_to_rarity",
]
