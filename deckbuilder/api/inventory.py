"""
Inventory API endpoints.

Lets the identity subsystem provision a user's inventory.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from deckbuilder.api.dependencies import require_user_id
from deckbuilder.db.database import get_session
from deckbuilder.services.inventory import InventoryService

router = APIRouter(prefix="/inventory", tags=["inventory"])


class InventoryResponse(BaseModel):
    """Response model for inventory provisioning."""

    user_id: str
    inventory_id: int
    created: bool


@router.post("", response_model=InventoryResponse)
async def provision_inventory(
    user_id: Annotated[str, Depends(require_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> InventoryResponse:
    """
    Create the current user's inventory.

    Idempotent: returns the existing inventory if there is one.
    """
    inventory, created = await InventoryService(session).provision_inventory(user_id)
    return InventoryResponse(user_id=user_id, inventory_id=inventory.id, created=created)
