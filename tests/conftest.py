import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from deckbuilder.db.database import enable_sqlite_savepoints
from deckbuilder.models.card import CardDefinitionData
from deckbuilder.models.db import Base, DeckLineDB


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def stored_lines(session: AsyncSession):
    """Fetch the deck-line rows stored for a deck id, bypassing the ORM relationship."""

    async def fetch(deck_id: int) -> list[DeckLineDB]:
        result = await session.execute(select(DeckLineDB).where(DeckLineDB.deck_id == deck_id))
        return list(result.scalars().all())

    return fetch


class FakeCardSearch:
    """In-memory card search keyed by query."""

    def __init__(self, results: dict[str, list[CardDefinitionData]] | None = None) -> None:
        self.results = results or {}
        self.queries: list[str] = []

    async def search(self, query: str) -> list[CardDefinitionData]:
        self.queries.append(query)
        return list(self.results.get(query, []))


@pytest.fixture
def lightning_bolt() -> CardDefinitionData:
    return CardDefinitionData(
        mid="LB1",
        name="Lightning Bolt",
        image_url="https://cards.scryfall.io/normal/front/lb1.jpg",
        type_line="Instant",
        set_code="M10",
    )


@pytest.fixture
def goblin_guide() -> CardDefinitionData:
    return CardDefinitionData(
        mid="GG1",
        name="Goblin Guide",
        image_url=None,
        type_line="Creature — Goblin Scout",
        set_code="ZEN",
    )


@pytest.fixture
def card_search(lightning_bolt, goblin_guide) -> FakeCardSearch:
    """Search that knows two cards, plus a query matching both."""
    return FakeCardSearch(
        {
            "Lightning Bolt": [lightning_bolt],
            "Goblin Guide": [goblin_guide],
            "red": [goblin_guide, lightning_bolt],
        }
    )
