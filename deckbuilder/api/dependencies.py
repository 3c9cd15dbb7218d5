"""
Shared FastAPI dependencies.

The identity provider sits in front of this service and forwards the
authenticated user's id in the X-User-Id header. The card search is a
dependency so tests can swap in a fake.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from deckbuilder.services.card_search import CardSearch, ScryfallCardSearch


async def current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str | None:
    """The authenticated user's id, or None if the request is anonymous."""
    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()


async def require_user_id(
    user_id: Annotated[str | None, Depends(current_user_id)],
) -> str:
    """Dependency for routes that need a signed-in user."""
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user_id


def get_card_search() -> CardSearch:
    """Dependency that provides the remote card search."""
    return ScryfallCardSearch()
