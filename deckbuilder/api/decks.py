"""
Deck API endpoints.

Create, view, list and delete the current user's decks, and add or remove
cards on them. Domain errors are rendered by the KnownError handler in
deckbuilder.main.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from deckbuilder.api.dependencies import get_card_search, require_user_id
from deckbuilder.api.schemas import DeckResponse
from deckbuilder.db.database import get_session
from deckbuilder.models.deck import DeckDraft
from deckbuilder.services.card_search import CardSearch
from deckbuilder.services.deck_reconciler import DeckLineReconciler
from deckbuilder.services.inventory import InventoryService

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckCreateRequest(BaseModel):
    """Request model for creating a deck."""

    # Empty values are accepted here and rejected by DeckDraft.validate
    # so the submitted input can be echoed back.
    name: str = Field(default="", examples=["Burn"])
    format: str = Field(default="", examples=["Standard"])


class AddCardRequest(BaseModel):
    """Request model for adding a card by search query."""

    query: str = Field(
        ...,
        description="Free-text card search; the first result is added",
        examples=["Lightning Bolt"],
    )


class DeckListResponse(BaseModel):
    """Response model for a list of decks."""

    decks: list[DeckResponse]
    count: int


@router.get("", response_model=DeckListResponse)
async def list_decks(
    user_id: Annotated[str, Depends(require_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckListResponse:
    """Get all decks made by the current user."""
    decks = await InventoryService(session).list_decks(user_id)
    return DeckListResponse(decks=[DeckResponse.from_model(d) for d in decks], count=len(decks))


@router.post("", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_deck(
    request: DeckCreateRequest,
    user_id: Annotated[str, Depends(require_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """
    Create an empty deck.

    Returns 422 with the submitted values if name or format is empty.
    """
    draft = DeckDraft(name=request.name, format=request.format)
    deck = await InventoryService(session).create_deck(user_id, draft)
    return DeckResponse.from_model(deck)


@router.get("/{deck_id}", response_model=DeckResponse)
async def get_deck(
    deck_id: int,
    user_id: Annotated[str, Depends(require_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Get a deck with every card in it."""
    deck = await InventoryService(session).get_deck(user_id, deck_id)
    return DeckResponse.from_model(deck)


@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(
    deck_id: int,
    user_id: Annotated[str, Depends(require_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> None:
    """Delete a deck and all of its cards."""
    await InventoryService(session).delete_deck(user_id, deck_id)


@router.post("/{deck_id}/cards", response_model=DeckResponse)
async def add_card_to_deck(
    deck_id: int,
    request: AddCardRequest,
    user_id: Annotated[str, Depends(require_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
    search: Annotated[CardSearch, Depends(get_card_search)],
) -> DeckResponse:
    """
    Add a card to a deck.

    Searches for the query and adds one copy of the first result.
    Returns 404 if the search finds nothing.
    """
    deck = await DeckLineReconciler(session, search).add_card(user_id, deck_id, request.query)
    return DeckResponse.from_model(deck)


@router.delete("/{deck_id}/cards/{mid}", response_model=DeckResponse)
async def remove_card_from_deck(
    deck_id: int,
    mid: str,
    user_id: Annotated[str, Depends(require_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Remove one copy of a card from a deck."""
    deck = await DeckLineReconciler(session).remove_card(user_id, deck_id, mid)
    return DeckResponse.from_model(deck)
