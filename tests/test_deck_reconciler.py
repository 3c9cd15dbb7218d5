"""Tests for adding and removing cards on decks."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from deckbuilder.db.operations import count_cards, create_inventory
from deckbuilder.models.card import CardDefinitionData
from deckbuilder.models.deck import Deck, DeckDraft
from deckbuilder.models.failure import (
    ConflictError,
    DeckNotFoundError,
    FailureKind,
    InventoryNotFoundError,
    NotFoundError,
    StoreError,
)
from deckbuilder.services import deck_reconciler as reconciler_module
from deckbuilder.services.card_catalog import CardCatalog
from deckbuilder.services.deck_reconciler import DeckLineReconciler
from deckbuilder.services.inventory import InventoryService


@pytest.fixture
async def burn_deck(session: AsyncSession) -> Deck:
    await create_inventory(session, "user-u")
    return await InventoryService(session).create_deck("user-u", DeckDraft("Burn", "Standard"))


@pytest.fixture
def reconciler(session: AsyncSession, card_search) -> DeckLineReconciler:
    return DeckLineReconciler(session, card_search)


class TestAddCard:
    async def test_first_add_creates_line_and_catalog_entry(
        self, session: AsyncSession, reconciler: DeckLineReconciler, burn_deck: Deck
    ) -> None:
        """Adding a new card creates one line of quantity 1."""
        deck = await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")

        assert deck.unique_cards() == 1
        assert deck.lines[0].card.mid == "LB1"
        assert deck.lines[0].quantity == 1
        assert await count_cards(session, "LB1") == 1

    async def test_repeat_add_increments(
        self, session: AsyncSession, reconciler: DeckLineReconciler, burn_deck: Deck
    ) -> None:
        """Adding the same card again increments the existing line."""
        await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")
        deck = await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")

        assert deck.unique_cards() == 1
        assert deck.get_quantity("LB1") == 2
        assert await count_cards(session, "LB1") == 1

    async def test_add_n_times_yields_one_line(
        self,
        session: AsyncSession,
        reconciler: DeckLineReconciler,
        burn_deck: Deck,
        stored_lines,
    ) -> None:
        for _ in range(5):
            deck = await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")

        assert deck.unique_cards() == 1
        assert deck.get_quantity("LB1") == 5
        assert len(await stored_lines(burn_deck.id)) == 1

    async def test_first_result_wins(
        self, reconciler: DeckLineReconciler, burn_deck: Deck
    ) -> None:
        """Only the first search candidate is added."""
        deck = await reconciler.add_card("user-u", burn_deck.id, "red")

        assert deck.unique_cards() == 1
        assert deck.lines[0].card.name == "Goblin Guide"

    async def test_different_cards_get_separate_lines(
        self, reconciler: DeckLineReconciler, burn_deck: Deck
    ) -> None:
        await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")
        deck = await reconciler.add_card("user-u", burn_deck.id, "Goblin Guide")

        assert deck.unique_cards() == 2
        assert deck.total_cards() == 2

    async def test_cross_deck_sharing(
        self, session: AsyncSession, reconciler: DeckLineReconciler, burn_deck: Deck
    ) -> None:
        """Two decks holding the same card share one catalog entry."""
        other = await InventoryService(session).create_deck(
            "user-u", DeckDraft("Prowess", "Modern")
        )

        deck_a = await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")
        deck_b = await reconciler.add_card("user-u", other.id, "Lightning Bolt")

        assert deck_a.lines[0].card == deck_b.lines[0].card
        assert deck_b.get_quantity("LB1") == 1
        assert await count_cards(session, "LB1") == 1

    async def test_existing_catalog_card_reused(
        self,
        session: AsyncSession,
        reconciler: DeckLineReconciler,
        burn_deck: Deck,
        lightning_bolt: CardDefinitionData,
    ) -> None:
        """A card already in the catalog is linked, not re-inserted."""
        await CardCatalog(session).find_or_create(lightning_bolt)

        deck = await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")

        assert deck.get_quantity("LB1") == 1
        assert await count_cards(session, "LB1") == 1

    async def test_no_results_leaves_deck_unchanged(
        self,
        session: AsyncSession,
        reconciler: DeckLineReconciler,
        burn_deck: Deck,
        stored_lines,
    ) -> None:
        """An empty search fails and writes nothing."""
        with pytest.raises(NotFoundError) as exc_info:
            await reconciler.add_card("user-u", burn_deck.id, "Nonexistent Card")

        assert exc_info.value.kind == FailureKind.EMPTY_RESULT
        assert await stored_lines(burn_deck.id) == []
        deck = await InventoryService(session).get_deck("user-u", burn_deck.id)
        assert deck.unique_cards() == 0

    async def test_add_card_data(
        self,
        reconciler: DeckLineReconciler,
        burn_deck: Deck,
        goblin_guide: CardDefinitionData,
        card_search,
    ) -> None:
        """An already-resolved card skips the search."""
        deck = await reconciler.add_card_data("user-u", burn_deck.id, goblin_guide)

        assert deck.get_quantity("GG1") == 1
        assert card_search.queries == []


class TestAddCardOwnership:
    async def test_missing_inventory(
        self, session: AsyncSession, reconciler: DeckLineReconciler, burn_deck: Deck, card_search
    ) -> None:
        with pytest.raises(InventoryNotFoundError):
            await reconciler.add_card("nobody", burn_deck.id, "Lightning Bolt")

        assert card_search.queries == []

    async def test_other_users_deck(
        self,
        session: AsyncSession,
        reconciler: DeckLineReconciler,
        burn_deck: Deck,
        stored_lines,
    ) -> None:
        """A user cannot add to someone else's deck."""
        await create_inventory(session, "user-b")

        with pytest.raises(DeckNotFoundError):
            await reconciler.add_card("user-b", burn_deck.id, "Lightning Bolt")

        assert await stored_lines(burn_deck.id) == []

    async def test_unknown_deck(self, reconciler: DeckLineReconciler, burn_deck: Deck) -> None:
        with pytest.raises(DeckNotFoundError):
            await reconciler.add_card("user-u", burn_deck.id + 100, "Lightning Bolt")


class TestConflictRetry:
    async def test_lost_insert_race_becomes_increment(
        self,
        session: AsyncSession,
        reconciler: DeckLineReconciler,
        burn_deck: Deck,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A line inserted concurrently is incremented on retry."""
        await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")
        real_get_deck_line = reconciler_module.get_deck_line
        calls = 0

        async def stale_get_deck_line(session_: AsyncSession, deck_id: int, mid: str):
            nonlocal calls
            calls += 1
            # First lookup misses the line the other request just wrote
            if calls == 1:
                return None
            return await real_get_deck_line(session_, deck_id, mid)

        monkeypatch.setattr(reconciler_module, "get_deck_line", stale_get_deck_line)

        deck = await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")

        assert calls == 2
        assert deck.unique_cards() == 1
        assert deck.get_quantity("LB1") == 2

    async def test_conflict_surfaces_after_retry(
        self,
        session: AsyncSession,
        reconciler: DeckLineReconciler,
        burn_deck: Deck,
        stored_lines,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """If the retry conflicts too, ConflictError is raised and nothing changes."""
        await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")

        async def always_missing(session_: AsyncSession, deck_id: int, mid: str):
            return None

        monkeypatch.setattr(reconciler_module, "get_deck_line", always_missing)

        with pytest.raises(ConflictError) as exc_info:
            await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")

        assert exc_info.value.status_code == 409
        lines = await stored_lines(burn_deck.id)
        assert [(line.card_mid, line.quantity) for line in lines] == [("LB1", 1)]

    async def test_retries_configurable(
        self,
        session: AsyncSession,
        card_search,
        burn_deck: Deck,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """With zero retries the first conflict is surfaced."""
        reconciler = DeckLineReconciler(session, card_search, conflict_retries=0)
        await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")
        real_get_deck_line = reconciler_module.get_deck_line
        calls = 0

        async def stale_once(session_: AsyncSession, deck_id: int, mid: str):
            nonlocal calls
            calls += 1
            if calls == 1:
                return None
            return await real_get_deck_line(session_, deck_id, mid)

        monkeypatch.setattr(reconciler_module, "get_deck_line", stale_once)

        with pytest.raises(ConflictError):
            await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")


class TestAddCardAtomicity:
    async def test_failed_line_insert_leaves_no_catalog_entry(
        self,
        session: AsyncSession,
        reconciler: DeckLineReconciler,
        burn_deck: Deck,
        stored_lines,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A store failure after the catalog insert rolls the whole add back."""

        async def broken_create_deck_line(session_: AsyncSession, deck_id: int, mid: str):
            raise OperationalError("INSERT INTO deck_lines", {}, Exception("disk I/O error"))

        monkeypatch.setattr(reconciler_module, "create_deck_line", broken_create_deck_line)

        with pytest.raises(StoreError) as exc_info:
            await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")

        assert exc_info.value.status_code == 503
        assert await count_cards(session, "LB1") == 0
        assert await stored_lines(burn_deck.id) == []
        deck = await InventoryService(session).get_deck("user-u", burn_deck.id)
        assert deck.unique_cards() == 0


class TestRemoveCard:
    async def test_decrements_quantity(
        self, reconciler: DeckLineReconciler, burn_deck: Deck
    ) -> None:
        await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")
        await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")

        deck = await reconciler.remove_card("user-u", burn_deck.id, "LB1")

        assert deck.get_quantity("LB1") == 1

    async def test_remove_to_zero_deletes_line(
        self,
        session: AsyncSession,
        reconciler: DeckLineReconciler,
        burn_deck: Deck,
        stored_lines,
    ) -> None:
        """Removing the last copy removes the line but keeps the catalog entry."""
        await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")

        deck = await reconciler.remove_card("user-u", burn_deck.id, "LB1")

        assert deck.unique_cards() == 0
        assert await stored_lines(burn_deck.id) == []
        assert await count_cards(session, "LB1") == 1

    async def test_remove_absent_card(
        self, reconciler: DeckLineReconciler, burn_deck: Deck
    ) -> None:
        """Removing a card the deck does not hold is NotFoundError."""
        await reconciler.add_card("user-u", burn_deck.id, "Goblin Guide")

        with pytest.raises(NotFoundError):
            await reconciler.remove_card("user-u", burn_deck.id, "LB1")

    async def test_other_user_cannot_remove(
        self, session: AsyncSession, reconciler: DeckLineReconciler, burn_deck: Deck
    ) -> None:
        await reconciler.add_card("user-u", burn_deck.id, "Lightning Bolt")
        await create_inventory(session, "user-b")

        with pytest.raises(DeckNotFoundError):
            await reconciler.remove_card("user-b", burn_deck.id, "LB1")

        deck = await InventoryService(session).get_deck("user-u", burn_deck.id)
        assert deck.get_quantity("LB1") == 1


class TestBurnScenario:
    async def test_create_add_repeat(self, session: AsyncSession, card_search) -> None:
        """Create "Burn", add Lightning Bolt twice, catalog holds one LB1."""
        await create_inventory(session, "U")
        inventory = InventoryService(session)
        reconciler = DeckLineReconciler(session, card_search)

        deck = await inventory.create_deck("U", DeckDraft(name="Burn", format="Standard"))

        deck = await reconciler.add_card("U", deck.id, "Lightning Bolt")
        assert deck.unique_cards() == 1
        assert deck.lines[0].card.mid == "LB1"
        assert deck.lines[0].quantity == 1

        deck = await reconciler.add_card("U", deck.id, "Lightning Bolt")
        assert deck.lines[0].quantity == 2
        assert await count_cards(session, "LB1") == 1
