"""Tests for the card catalog."""

from dataclasses import replace

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from deckbuilder.db.operations import count_cards, create_card
from deckbuilder.models.card import CardDefinitionData
from deckbuilder.services import card_catalog as card_catalog_module
from deckbuilder.services.card_catalog import CardCatalog


class TestFind:
    async def test_find_missing(self, session: AsyncSession) -> None:
        assert await CardCatalog(session).find("LB1") is None

    async def test_find_existing(
        self, session: AsyncSession, lightning_bolt: CardDefinitionData
    ) -> None:
        await create_card(session, lightning_bolt)

        assert await CardCatalog(session).find("LB1") == lightning_bolt


class TestFindOrCreate:
    async def test_creates_on_first_encounter(
        self, session: AsyncSession, lightning_bolt: CardDefinitionData
    ) -> None:
        card = await CardCatalog(session).find_or_create(lightning_bolt)

        assert card == lightning_bolt
        assert await count_cards(session, "LB1") == 1

    async def test_idempotent(
        self, session: AsyncSession, lightning_bolt: CardDefinitionData
    ) -> None:
        """Repeated calls return equal entries and store one row."""
        catalog = CardCatalog(session)

        first = await catalog.find_or_create(lightning_bolt)
        second = await catalog.find_or_create(lightning_bolt)

        assert first == second
        assert await count_cards(session, "LB1") == 1

    async def test_stored_record_wins(
        self, session: AsyncSession, lightning_bolt: CardDefinitionData
    ) -> None:
        """Differing non-key fields do not overwrite the stored entry."""
        catalog = CardCatalog(session)
        await catalog.find_or_create(lightning_bolt)

        variant = replace(lightning_bolt, name="Lightning Bolt (Alt)", set_code="LEB")
        card = await catalog.find_or_create(variant)

        assert card == lightning_bolt
        assert (await catalog.find("LB1")).set_code == "M10"
        assert await count_cards(session, "LB1") == 1

    async def test_concurrent_insert_resolves_to_stored_row(
        self,
        session: AsyncSession,
        lightning_bolt: CardDefinitionData,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Losing an insert race returns the row that won."""
        await create_card(session, lightning_bolt)
        real_get_card = card_catalog_module.get_card
        calls = 0

        async def stale_get_card(session_: AsyncSession, mid: str):
            nonlocal calls
            calls += 1
            # First lookup misses, as if the other writer had not committed yet
            if calls == 1:
                return None
            return await real_get_card(session_, mid)

        monkeypatch.setattr(card_catalog_module, "get_card", stale_get_card)

        card = await CardCatalog(session).find_or_create(replace(lightning_bolt, name="Other"))

        assert card == lightning_bolt
        assert calls == 2
        assert await count_cards(session, "LB1") == 1
