"""
Remote card search.

Looks up candidate card printings for a free-text query using the
Scryfall search API. Only the first page of results is fetched; callers
that add a card to a deck use the first candidate.

Search API: https://scryfall.com/docs/api/cards/search
"""

import logging
from typing import Any, Protocol

import httpx

from deckbuilder.config import settings
from deckbuilder.models.card import CardDefinitionData
from deckbuilder.models.failure import SearchUnavailableError

logger = logging.getLogger(__name__)


class CardSearch(Protocol):
    """Anything that can turn a query into candidate cards."""

    async def search(self, query: str) -> list[CardDefinitionData]: ...


def _image_url(card: dict[str, Any]) -> str | None:
    """Normal-size image, falling back to the front face for double-faced cards."""
    image_uris = card.get("image_uris")
    if not image_uris:
        faces = card.get("card_faces") or []
        image_uris = faces[0].get("image_uris") if faces else None
    if not image_uris:
        return None
    return image_uris.get("normal")


def parse_card(card: dict[str, Any]) -> CardDefinitionData:
    """
    Convert a Scryfall card object into catalog data.

    The MID is the first multiverse id when Gatherer knows the printing,
    otherwise the Scryfall id.
    """
    multiverse_ids = card.get("multiverse_ids") or []
    mid = str(multiverse_ids[0]) if multiverse_ids else str(card["id"])

    return CardDefinitionData(
        mid=mid,
        name=card["name"],
        image_url=_image_url(card),
        type_line=card.get("type_line", ""),
        set_code=card.get("set", "").upper(),
    )


class ScryfallCardSearch:
    """
    Card search backed by Scryfall.

    Args:
        client: Optional httpx client for connection reuse
        base_url: API root, defaults to settings.scryfall_api_url
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.card_search_timeout

    async def _get(self, url: str, params: dict[str, str]) -> httpx.Response:
        if self._client:
            return await self._client.get(url, params=params)

        async with httpx.AsyncClient(
            timeout=self._timeout,
            headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        ) as client:
            return await client.get(url, params=params)

    async def search(self, query: str) -> list[CardDefinitionData]:
        """
        Search for cards matching a query.

        Returns:
            Candidate cards in Scryfall's order, empty if nothing matched

        Raises:
            SearchUnavailableError: If the API cannot be reached or errors
        """
        if not query or not query.strip():
            return []

        url = f"{self._base_url}/cards/search"
        try:
            response = await self._get(url, {"q": query.strip()})
            # Scryfall answers 404 when no cards match and 400 when the query cannot be parsed
            if response.status_code in (400, 404):
                logger.info("Card search for %r matched nothing", query)
                return []
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Card search for %r failed: HTTP %d", query, e.response.status_code)
            raise SearchUnavailableError(f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error("Card search for %r failed: %s", query, e)
            raise SearchUnavailableError(str(e)) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Card search for %r returned a non-JSON body", query)
            raise SearchUnavailableError("Malformed search response") from e

        cards = [parse_card(card) for card in data.get("data", [])]
        logger.debug("Card search for %r returned %d cards", query, len(cards))
        return cards
