from deckbuilder.db.database import atomic, get_session, init_db
from deckbuilder.db.operations import (
    card_to_model,
    count_cards,
    create_card,
    create_deck,
    create_deck_line,
    create_inventory,
    deck_to_model,
    delete_deck,
    get_card,
    get_deck,
    get_deck_line,
    get_decks_by_inventory,
    get_inventory,
    get_or_create_inventory,
)

__all__ = [
    "atomic",
    "card_to_model",
    "count_cards",
    "create_card",
    "create_deck",
    "create_deck_line",
    "create_inventory",
    "deck_to_model",
    "delete_deck",
    "get_card",
    "get_deck",
    "get_deck_line",
    "get_decks_by_inventory",
    "get_inventory",
    "get_or_create_inventory",
]
