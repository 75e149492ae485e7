"""
Price tier and rarity scoring.

Two independent ways to assign a rarity:

- From price: price -> PriceTier -> CardRarity. This is the canonical
  mapping whenever an explicit rarity is not supplied.
- From content: an additive point score rewarding richer entries. Used only
  by the quick-add flow, purely cosmetic.

All functions are pure and never raise.
"""

import math
from collections.abc import Iterable
from typing import Any

from linkdeck.models.card import Card, CardDraft, CardRarity, CardType, PriceTier

# Upper bound (inclusive) of each paid tier
BUDGET_MAX = 50
STANDARD_MAX = 200
PREMIUM_MAX = 500

TIER_RARITY: dict[PriceTier, CardRarity] = {
    PriceTier.FREE: CardRarity.COMMON,
    PriceTier.BUDGET: CardRarity.COMMON,
    PriceTier.STANDARD: CardRarity.RARE,
    PriceTier.PREMIUM: CardRarity.EPIC,
    PriceTier.ENTERPRISE: CardRarity.LEGENDARY,
}

TIER_SYMBOLS: dict[PriceTier, str] = {
    PriceTier.FREE: "free",
    PriceTier.BUDGET: "$",
    PriceTier.STANDARD: "$$",
    PriceTier.PREMIUM: "$$$",
    PriceTier.ENTERPRISE: "$$$$",
}

# Content score: (exclusive lower bound, points), checked in order
STAR_POINTS = ((10_000, 30), (1_000, 20), (100, 10))
DESCRIPTION_POINTS = ((200, 10), (100, 5))
POINTS_PER_TAG = 2
MAX_TAG_POINTS = 10
IMAGE_POINTS = 5

# Minimum score for each rarity, highest first
RARITY_THRESHOLDS = (
    (40, CardRarity.LEGENDARY),
    (25, CardRarity.EPIC),
    (15, CardRarity.RARE),
)


def _valid_price(price: Any) -> float | None:
    """Return price as a positive float, or None if it counts as free."""
    if isinstance(price, bool) or not isinstance(price, int | float):
        return None
    if math.isnan(price) or price <= 0:
        return None
    return float(price)


def price_tier(price: float | None = None) -> PriceTier:
    """
    Map a price to its tier.

    Absent, zero, negative or non-numeric prices are free. Each band is
    inclusive on its upper end: 50 is budget, 50.01 is standard.
    """
    value = _valid_price(price)
    if value is None:
        return PriceTier.FREE
    if value <= BUDGET_MAX:
        return PriceTier.BUDGET
    if value <= STANDARD_MAX:
        return PriceTier.STANDARD
    if value <= PREMIUM_MAX:
        return PriceTier.PREMIUM
    return PriceTier.ENTERPRISE


def tier_to_rarity(tier: PriceTier) -> CardRarity:
    """Canonical price tier -> rarity mapping."""
    return TIER_RARITY[tier]


def rarity_from_price(price: float | None = None) -> CardRarity:
    """Rarity for a card with no explicit rarity."""
    return tier_to_rarity(price_tier(price))


def format_price_tier(price: float | None = None) -> str:
    """Short display form of a price tier: "free" or "$" through "$$$$"."""
    return TIER_SYMBOLS[price_tier(price)]


def _points_for(value: int, table: tuple[tuple[int, int], ...]) -> int:
    for lower_bound, points in table:
        if value > lower_bound:
            return points
    return 0


def content_score(card: CardDraft | Card) -> int:
    """
    Additive richness score behind content_rarity.

    Stars only count for repository cards.
    """
    score = 0

    if card.card_type == CardType.GITHUB_REPO:
        stars = card.metadata.get("stars") or 0
        if isinstance(stars, int | float) and not isinstance(stars, bool):
            score += _points_for(int(stars), STAR_POINTS)

    score += min(len(card.tags) * POINTS_PER_TAG, MAX_TAG_POINTS)
    score += _points_for(len(card.description or ""), DESCRIPTION_POINTS)

    if card.image_url:
        score += IMAGE_POINTS

    return score


def content_rarity(card: CardDraft | Card) -> CardRarity:
    """Estimate a rarity from how substantial the entry is."""
    score = content_score(card)
    for minimum, rarity in RARITY_THRESHOLDS:
        if score >= minimum:
            return rarity
    return CardRarity.COMMON


def deck_value(cards: Iterable[Card | CardDraft]) -> float:
    """Total price of a set of cards; unpriced cards count as zero."""
    return sum(_valid_price(card.price) or 0.0 for card in cards)


def deck_price_tier(cards: Iterable[Card | CardDraft]) -> PriceTier:
    """Tier of a deck based on its total value."""
    return price_tier(deck_value(cards))
