"""
Card API endpoints.

Browse the remote card search and look up cards already in the catalog.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from deckbuilder.api.dependencies import get_card_search, require_user_id
from deckbuilder.api.schemas import CardResponse
from deckbuilder.db.database import get_session
from deckbuilder.models.failure import NotFoundError
from deckbuilder.services.card_catalog import CardCatalog
from deckbuilder.services.card_search import CardSearch

router = APIRouter(prefix="/cards", tags=["cards"], dependencies=[Depends(require_user_id)])


class CardSearchResponse(BaseModel):
    """Response model for a card search."""

    query: str
    cards: list[CardResponse]
    count: int


@router.get("/search", response_model=CardSearchResponse)
async def search_cards(
    search: Annotated[CardSearch, Depends(get_card_search)],
    q: Annotated[str, Query(min_length=1, max_length=200)],
) -> CardSearchResponse:
    """
    Search for cards by name or query.

    An empty result is not an error here; nothing is written to the catalog.
    """
    cards = await search.search(q)
    return CardSearchResponse(
        query=q,
        cards=[CardResponse.from_model(card) for card in cards],
        count=len(cards),
    )


@router.get("/{mid}", response_model=CardResponse)
async def get_catalog_card(
    mid: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Get a card from the catalog by MID."""
    card = await CardCatalog(session).find(mid)
    if card is None:
        raise NotFoundError(message="Card not found.", detail=f"No catalog card {mid}")
    return CardResponse.from_model(card)
