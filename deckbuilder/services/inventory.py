"""
Inventory service.

Mediates deck creation, listing and deletion for a user's inventory.
The acting user's id is always passed in explicitly. Every operation
resolves that user's inventory first and only ever touches decks it owns;
inventories are never created implicitly by deck operations.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from deckbuilder.db.database import atomic
from deckbuilder.db.operations import (
    create_deck,
    deck_to_model,
    delete_deck,
    get_deck,
    get_decks_by_inventory,
    get_inventory,
    get_or_create_inventory,
)
from deckbuilder.models.db import DeckDB, InventoryDB
from deckbuilder.models.deck import Deck, DeckDraft
from deckbuilder.models.failure import DeckNotFoundError, InventoryNotFoundError

logger = logging.getLogger(__name__)


async def resolve_inventory(session: AsyncSession, user_id: str) -> InventoryDB:
    """
    Get the acting user's inventory.

    Raises:
        InventoryNotFoundError: If the user has no inventory
    """
    inventory = await get_inventory(session, user_id)
    if inventory is None:
        logger.warning("No inventory provisioned for user %s", user_id)
        raise InventoryNotFoundError(user_id)
    return inventory


async def resolve_deck(session: AsyncSession, user_id: str, deck_id: int) -> DeckDB:
    """
    Get a deck owned by the acting user, with its lines loaded.

    Raises:
        InventoryNotFoundError: If the user has no inventory
        DeckNotFoundError: If the deck does not exist or belongs to someone else
    """
    inventory = await resolve_inventory(session, user_id)
    deck = await get_deck(session, inventory.id, deck_id)
    if deck is None:
        raise DeckNotFoundError(deck_id)
    return deck


class InventoryService:
    """Deck management for one user's inventory."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def provision_inventory(self, user_id: str) -> tuple[InventoryDB, bool]:
        """
        Create the user's inventory if it does not exist yet.

        Called by account provisioning, never by deck operations.

        Returns:
            Tuple of (inventory, created) where created is True if new.
        """
        async with atomic(self._session):
            inventory, created = await get_or_create_inventory(self._session, user_id)
        if created:
            logger.info("Provisioned inventory %d for user %s", inventory.id, user_id)
        return inventory, created

    async def create_deck(self, owner_id: str, draft: DeckDraft) -> Deck:
        """
        Create an empty deck in the owner's inventory.

        Raises:
            ValidationError: If name or format is empty (nothing is written)
            InventoryNotFoundError: If the owner has no inventory
        """
        draft.validate()
        inventory = await resolve_inventory(self._session, owner_id)

        async with atomic(self._session):
            deck = await create_deck(
                self._session, inventory.id, draft.name.strip(), draft.format.strip()
            )

        logger.info(
            "Created deck %d (%s, %s) for user %s", deck.id, deck.name, deck.format, owner_id
        )
        return deck_to_model(deck)

    async def get_deck(self, owner_id: str, deck_id: int) -> Deck:
        """Get one of the owner's decks with its lines."""
        deck = await resolve_deck(self._session, owner_id, deck_id)
        return deck_to_model(deck)

    async def list_decks(self, owner_id: str) -> list[Deck]:
        """All decks in the owner's inventory."""
        inventory = await resolve_inventory(self._session, owner_id)
        decks = await get_decks_by_inventory(self._session, inventory.id)
        return [deck_to_model(deck) for deck in decks]

    async def delete_deck(self, owner_id: str, deck_id: int) -> None:
        """
        Delete one of the owner's decks and all of its lines.

        Catalog cards referenced by the deck are left in place.

        Raises:
            InventoryNotFoundError: If the owner has no inventory
            DeckNotFoundError: If the deck is not in the owner's inventory
        """
        deck = await resolve_deck(self._session, owner_id, deck_id)

        async with atomic(self._session):
            removed = await delete_deck(self._session, deck)

        logger.info("Deleted deck %d (%d lines) for user %s", deck_id, removed, owner_id)
