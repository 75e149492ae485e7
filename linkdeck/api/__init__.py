from linkdeck.api.cards import router as cards_router
from linkdeck.api.decks import router as decks_router
from linkdeck.api.health import router as health_router
from linkdeck.api.imports import router as imports_router
from linkdeck.api.links import router as links_router
from linkdeck.api.polish import router as polish_router

__all__ = [
    "cards_router",
    "decks_router",
    "health_router",
    "imports_router",
    "links_router",
    "polish_router",
]
