from deckbuilder.api.cards import router as cards_router
from deckbuilder.api.decks import router as decks_router
from deckbuilder.api.health import router as health_router
from deckbuilder.api.inventory import router as inventory_router

__all__ = [
    "cards_router",
    "decks_router",
    "health_router",
    "inventory_router",
]
