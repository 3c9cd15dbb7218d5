"""
Deck line reconciliation.

Maps an incoming card onto the catalog and onto a deck's lines:

1. If the deck already has a line for the card's MID, increment it.
2. Otherwise find-or-create the catalog entry and add a line of quantity 1.

Each add or remove runs in one savepoint, so a failure leaves neither a
catalog entry nor a line behind. A line insert that loses a race on the
(deck, card) uniqueness constraint is retried as an increment.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from deckbuilder.config import settings
from deckbuilder.db.database import atomic
from deckbuilder.db.operations import (
    create_deck_line,
    deck_to_model,
    get_deck,
    get_deck_line,
)
from deckbuilder.models.card import CardDefinitionData
from deckbuilder.models.deck import Deck
from deckbuilder.models.failure import (
    ConflictError,
    DeckNotFoundError,
    FailureKind,
    NotFoundError,
)
from deckbuilder.services.card_catalog import CardCatalog
from deckbuilder.services.card_search import CardSearch, ScryfallCardSearch
from deckbuilder.services.inventory import resolve_deck

logger = logging.getLogger(__name__)


class DeckLineReconciler:
    """
    Adds and removes cards on a user's decks.

    Args:
        session: Request-scoped database session
        search: Remote card search used by add_card, defaults to Scryfall
        catalog: Card catalog, defaults to one on the same session
        conflict_retries: Increment retries after a lost insert race
    """

    def __init__(
        self,
        session: AsyncSession,
        search: CardSearch | None = None,
        catalog: CardCatalog | None = None,
        conflict_retries: int | None = None,
    ) -> None:
        self._session = session
        self._search = search or ScryfallCardSearch()
        self._catalog = catalog or CardCatalog(session)
        self._conflict_retries = (
            settings.conflict_retries if conflict_retries is None else conflict_retries
        )

    async def add_card(self, owner_id: str, deck_id: int, query: str) -> Deck:
        """
        Search for a card and add the first result to a deck.

        Raises:
            InventoryNotFoundError: If the owner has no inventory
            DeckNotFoundError: If the deck is not in the owner's inventory
            NotFoundError: If the search returned no cards (deck unchanged)
            ConflictError: If the line kept conflicting after retrying
        """
        deck = await resolve_deck(self._session, owner_id, deck_id)

        candidates = await self._search.search(query)
        if not candidates:
            logger.warning("No cards found for %r, deck %d unchanged", query, deck_id)
            raise NotFoundError(
                message="No cards found.",
                detail=f"Search for {query!r} returned no results",
                kind=FailureKind.EMPTY_RESULT,
                suggestion="Check the spelling of the card name.",
            )

        # TODO: let the user pick among multiple matches instead of taking the first
        return await self._add_to_deck(deck.inventory_id, deck.id, candidates[0])

    async def add_card_data(
        self, owner_id: str, deck_id: int, candidate: CardDefinitionData
    ) -> Deck:
        """Add an already-resolved card to a deck."""
        deck = await resolve_deck(self._session, owner_id, deck_id)
        return await self._add_to_deck(deck.inventory_id, deck.id, candidate)

    async def remove_card(self, owner_id: str, deck_id: int, mid: str) -> Deck:
        """
        Remove one copy of a card from a deck.

        The line is deleted when its last copy is removed.

        Raises:
            NotFoundError: If the deck has no line for this card
        """
        deck = await resolve_deck(self._session, owner_id, deck_id)
        inventory_id = deck.inventory_id

        async with atomic(self._session):
            line = await get_deck_line(self._session, deck_id, mid)
            if line is None:
                raise NotFoundError(
                    message="Card not in deck.",
                    detail=f"Deck {deck_id} has no card {mid}",
                )
            if line.quantity <= 1:
                await self._session.delete(line)
                logger.info("Removed last copy of %s from deck %d", mid, deck_id)
            else:
                line.quantity -= 1
                logger.debug("Deck %d now has %d of %s", deck_id, line.quantity, mid)
            await self._session.flush()

        return await self._reload(inventory_id, deck_id)

    async def _add_to_deck(
        self, inventory_id: int, deck_id: int, candidate: CardDefinitionData
    ) -> Deck:
        attempts = self._conflict_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                async with atomic(self._session):
                    await self._upsert_line(deck_id, candidate)
                break
            except IntegrityError:
                logger.warning(
                    "Line for %s in deck %d conflicted (attempt %d of %d)",
                    candidate.mid,
                    deck_id,
                    attempt,
                    attempts,
                )
        else:
            raise ConflictError(deck_id, candidate.mid)

        return await self._reload(inventory_id, deck_id)

    async def _upsert_line(self, deck_id: int, candidate: CardDefinitionData) -> None:
        line = await get_deck_line(self._session, deck_id, candidate.mid)
        if line is not None:
            line.quantity += 1
            await self._session.flush()
            logger.debug("Deck %d now has %d of %s", deck_id, line.quantity, candidate.mid)
            return

        card = await self._catalog.find_or_create(candidate)
        await create_deck_line(self._session, deck_id, card.mid)
        logger.info("Added %s (%s) to deck %d", card.name, card.mid, deck_id)

    async def _reload(self, inventory_id: int, deck_id: int) -> Deck:
        refreshed = await get_deck(self._session, inventory_id, deck_id)
        if refreshed is None:
            raise DeckNotFoundError(deck_id)
        return deck_to_model(refreshed)
