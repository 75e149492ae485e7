from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class CardType(str, Enum):
    """Category of the external resource a card points at."""

    GITHUB_REPO = "github_repo"
    TOOL_WEBSITE = "tool_website"
    PROMPT_SHARE = "prompt_share"
    CUSTOM = "custom"


class CardRarity(str, Enum):
    """Collectible tier, lowest to highest."""

    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class PriceTier(str, Enum):
    """Monetary band a card's price falls into."""

    FREE = "free"
    BUDGET = "budget"
    STANDARD = "standard"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


RARITY_ORDER: tuple[CardRarity, ...] = tuple(CardRarity)


def utcnow() -> datetime:
    return datetime.now(UTC)


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """
    Trim tags and drop empty and duplicate entries.

    Duplicates are detected case-insensitively; the first spelling wins.
    """
    seen: set[str] = set()
    result: list[str] = []
    for tag in tags:
        cleaned = tag.strip()
        key = cleaned.lower()
        if not cleaned or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


@dataclass
class CardDraft:
    """
    A normalized card record that has not been persisted yet.

    Produced by link parsing and import validation. Has no identity and
    no timestamps. ``rarity`` is None when it should be derived later.
    """

    title: str
    description: str
    card_type: CardType = CardType.CUSTOM
    rarity: CardRarity | None = None
    price: float | None = None
    url: str | None = None
    image_url: str | None = None
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Card:
    """
    A collectible card referencing an external resource.

    Attributes:
        id: Opaque identity, unique within a collection
        title: Display title (never empty)
        description: Display description (never empty)
        card_type: Resource category
        rarity: Collectible tier
        price: Optional non-negative price; None means unpriced/free
        url: Source URL
        image_url: Preview image URL
        tags: Set-like tag list, deduplicated case-insensitively
        created_at: Creation timestamp
        updated_at: Last modification timestamp
        metadata: Category-dependent extras (stars, language, domain, ...)
    """

    id: str
    title: str
    description: str
    card_type: CardType
    rarity: CardRarity
    price: float | None = None
    url: str | None = None
    image_url: str | None = None
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.tags = normalize_tags(self.tags)

    def touch(self) -> None:
        """Refresh the last-modified timestamp."""
        self.updated_at = utcnow()

    def apply_changes(self, **changes: Any) -> None:
        """
        Update fields in place and refresh ``updated_at``.

        Identity and creation time cannot be changed.
        """
        for name, value in changes.items():
            if name in ("id", "created_at", "updated_at"):
                raise ValueError(f"Field '{name}' cannot be changed")
            if not hasattr(self, name):
                raise ValueError(f"Unknown card field '{name}'")
            if name in ("title", "description"):
                if not isinstance(value, str) or not value.strip():
                    raise ValueError(f"Card {name} cannot be empty")
                value = value.strip()
            if name == "tags":
                value = normalize_tags(value)
            setattr(self, name, value)
        self.touch()

    def has_tag(self, tag: str) -> bool:
        """Case-insensitive exact tag match."""
        wanted = tag.strip().lower()
        return any(t.lower() == wanted for t in self.tags)
