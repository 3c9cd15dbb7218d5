"""
Card catalog.

The deduplicated registry of every card printing seen by any deck,
keyed by MID. Entries are created on first encounter and never changed
or deleted afterwards.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from deckbuilder.db.database import atomic
from deckbuilder.db.operations import card_to_model, create_card, get_card
from deckbuilder.models.card import CardDefinitionData

logger = logging.getLogger(__name__)


class CardCatalog:
    """Find-or-create access to catalog cards."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find(self, mid: str) -> CardDefinitionData | None:
        """Look up a catalog card by MID."""
        card = await get_card(self._session, mid)
        return card_to_model(card) if card else None

    async def find_or_create(self, candidate: CardDefinitionData) -> CardDefinitionData:
        """
        Return the catalog entry for the candidate's MID, creating it if needed.

        Idempotent. When the MID is already stored, the stored record is
        returned and the candidate's other fields are ignored. A concurrent
        insert of the same MID resolves to the row that won.
        """
        existing = await get_card(self._session, candidate.mid)
        if existing:
            return card_to_model(existing)

        try:
            async with atomic(self._session):
                created = await create_card(self._session, candidate)
        except IntegrityError:
            logger.warning("Catalog insert for %s lost a race, using stored card", candidate.mid)
            stored = await get_card(self._session, candidate.mid)
            if stored is None:
                raise
            return card_to_model(stored)

        logger.info("Added %s (%s) to catalog", candidate.name, candidate.mid)
        return card_to_model(created)
