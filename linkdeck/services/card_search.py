"""
Card search service.

Filtering, sorting and summary statistics over a list of cards.

Supports queries like:
- "my legendary repos" -> types=[github_repo], rarities=[legendary]
- "anything tagged python" -> tags=["python"]
- "free tools added this week" -> price_tiers=[free], created_after=...
- "what mentions agents?" -> query="agents"
"""

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

from linkdeck.models.card import RARITY_ORDER, Card, CardRarity, CardType, PriceTier, utcnow
from linkdeck.services.scoring import price_tier

SortKey = Literal["date", "title", "rarity", "type", "price"]
SortOrder = Literal["asc", "desc"]

RECENT_WINDOW = timedelta(days=7)

SORT_KEYS: dict[str, Callable[[Card], Any]] = {
    "date": lambda card: card.created_at,
    "title": lambda card: card.title.lower(),
    "rarity": lambda card: RARITY_ORDER.index(card.rarity),
    "type": lambda card: card.card_type.value,
    "price": lambda card: card.price or 0.0,
}


@dataclass
class SearchFilters:
    """
    Criteria for filter_cards. Empty criteria match everything.

    Tags match if any requested tag is a case-insensitive substring of
    any card tag. The query matches title, description and tags.
    """

    types: list[CardType] = field(default_factory=list)
    rarities: list[CardRarity] = field(default_factory=list)
    price_tiers: list[PriceTier] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    query: str | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None


@dataclass
class CardStats:
    """Summary counts for a collection."""

    total: int
    by_type: dict[str, int]
    by_rarity: dict[str, int]
    by_price_tier: dict[str, int]
    recent_count: int


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _matches(card: Card, filters: SearchFilters) -> bool:
    if filters.types and card.card_type not in filters.types:
        return False

    if filters.rarities and card.rarity not in filters.rarities:
        return False

    if filters.price_tiers and price_tier(card.price) not in filters.price_tiers:
        return False

    if filters.tags:
        wanted = [tag.lower() for tag in filters.tags]
        card_tags = [tag.lower() for tag in card.tags]
        if not any(w in tag for w in wanted for tag in card_tags):
            return False

    if filters.query and filters.query.strip():
        query = filters.query.strip().lower()
        searchable = " ".join([card.title, card.description, *card.tags]).lower()
        if query not in searchable:
            return False

    if filters.created_after and card.created_at < _aware(filters.created_after):
        return False

    if filters.created_before and card.created_at > _aware(filters.created_before):
        return False

    return True


def filter_cards(cards: list[Card], filters: SearchFilters) -> list[Card]:
    """Return cards matching every criterion, preserving input order."""
    return [card for card in cards if _matches(card, filters)]


def sort_cards(
    cards: list[Card], sort_by: SortKey = "date", order: SortOrder = "desc"
) -> list[Card]:
    """
    Return a sorted copy.

    Rarity sorts by tier (common < rare < epic < legendary), not by name.
    Unpriced cards sort as price 0.
    """
    key = SORT_KEYS.get(sort_by, SORT_KEYS["date"])
    return sorted(cards, key=key, reverse=(order == "desc"))


def card_stats(cards: list[Card], now: datetime | None = None) -> CardStats:
    """Count cards by type, rarity and price tier; count recent additions."""
    cutoff = (now or utcnow()) - RECENT_WINDOW

    by_type = {card_type.value: 0 for card_type in CardType}
    by_rarity = {rarity.value: 0 for rarity in CardRarity}
    by_price_tier = {tier.value: 0 for tier in PriceTier}
    recent = 0

    for card in cards:
        by_type[card.card_type.value] += 1
        by_rarity[card.rarity.value] += 1
        by_price_tier[price_tier(card.price).value] += 1
        if card.created_at > cutoff:
            recent += 1

    return CardStats(
        total=len(cards),
        by_type=by_type,
        by_rarity=by_rarity,
        by_price_tier=by_price_tier,
        recent_count=recent,
    )


def popular_tags(cards: list[Card], limit: int = 10) -> list[tuple[str, int]]:
    """
    Most used tags, normalized to lower case.

    Returns (tag, count) pairs, most frequent first.
    """
    counts: Counter[str] = Counter()
    for card in cards:
        for tag in card.tags:
            counts[tag.strip().lower()] += 1
    return counts.most_common(limit)
