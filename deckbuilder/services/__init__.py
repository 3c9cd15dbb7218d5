"""
DeckBuilder services.

Business logic for the card catalog, deck lines and inventories.
"""

from deckbuilder.services.card_catalog import CardCatalog
from deckbuilder.services.card_search import CardSearch, ScryfallCardSearch, parse_card
from deckbuilder.services.deck_reconciler import DeckLineReconciler
from deckbuilder.services.inventory import InventoryService, resolve_deck, resolve_inventory

__all__ = [
    "CardCatalog",
    "CardSearch",
    "DeckLineReconciler",
    "InventoryService",
    "ScryfallCardSearch",
    "parse_card",
    "resolve_deck",
    "resolve_inventory",
]
