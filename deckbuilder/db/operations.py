"""
Database CRUD operations.

Provides async functions for creating, reading, updating, and deleting
inventories, decks, catalog cards and deck lines. Functions flush but never
commit; the caller owns the transaction.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from deckbuilder.models.card import CardDefinitionData
from deckbuilder.models.db import CardDefinitionDB, DeckDB, DeckLineDB, InventoryDB
from deckbuilder.models.deck import Deck, DeckLine

# --- Inventory Operations ---


async def get_inventory(session: AsyncSession, user_id: str) -> InventoryDB | None:
    """
    Get a user's inventory by user_id.

    Returns None if no inventory exists for this user.
    """
    result = await session.execute(select(InventoryDB).where(InventoryDB.user_id == user_id))
    return result.scalar_one_or_none()


async def create_inventory(session: AsyncSession, user_id: str) -> InventoryDB:
    """
    Create a new inventory for a user.

    Raises IntegrityError if inventory already exists.
    """
    inventory = InventoryDB(user_id=user_id)
    session.add(inventory)
    await session.flush()
    return inventory


async def get_or_create_inventory(
    session: AsyncSession, user_id: str
) -> tuple[InventoryDB, bool]:
    """
    Get existing inventory or create new one.

    Returns:
        Tuple of (inventory, created) where created is True if new.
    """
    inventory = await get_inventory(session, user_id)
    if inventory:
        return inventory, False

    inventory = await create_inventory(session, user_id)
    return inventory, True


# --- Deck Operations ---


async def get_deck(session: AsyncSession, inventory_id: int, deck_id: int) -> DeckDB | None:
    """
    Get a deck by id, only if it belongs to the given inventory.

    Lines are eagerly loaded and refreshed from the database.
    """
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.id == deck_id, DeckDB.inventory_id == inventory_id)
        .options(selectinload(DeckDB.lines))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_decks_by_inventory(session: AsyncSession, inventory_id: int) -> list[DeckDB]:
    """Get all decks in an inventory, oldest first."""
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.inventory_id == inventory_id)
        .options(selectinload(DeckDB.lines))
        .order_by(DeckDB.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def create_deck(
    session: AsyncSession, inventory_id: int, name: str, format_name: str
) -> DeckDB:
    """Create an empty deck in an inventory."""
    deck = DeckDB(inventory_id=inventory_id, name=name, format=format_name, lines=[])
    session.add(deck)
    await session.flush()
    return deck


async def delete_deck(session: AsyncSession, deck: DeckDB) -> int:
    """
    Delete a deck together with all of its lines.

    The deck must have been loaded with its lines (see get_deck).
    Returns the number of lines removed.
    """
    line_count = len(deck.lines)
    await session.delete(deck)
    await session.flush()
    return line_count


def deck_to_model(deck: DeckDB) -> Deck:
    """Convert a database deck to a domain model."""
    lines = [
        DeckLine(card=card_to_model(line.card), quantity=line.quantity)
        for line in sorted(deck.lines, key=lambda line: line.id)
    ]
    return Deck(
        id=deck.id,
        inventory_id=deck.inventory_id,
        name=deck.name,
        format=deck.format,
        lines=lines,
    )


# --- Catalog Operations ---


async def get_card(session: AsyncSession, mid: str) -> CardDefinitionDB | None:
    """Get a catalog card by MID."""
    result = await session.execute(select(CardDefinitionDB).where(CardDefinitionDB.mid == mid))
    return result.scalar_one_or_none()


async def create_card(session: AsyncSession, card: CardDefinitionData) -> CardDefinitionDB:
    """
    Insert a catalog card.

    Raises IntegrityError if the MID is already present.
    """
    db_card = CardDefinitionDB(
        mid=card.mid,
        name=card.name,
        image_url=card.image_url,
        type_line=card.type_line,
        set_code=card.set_code,
    )
    session.add(db_card)
    await session.flush()
    return db_card


async def count_cards(session: AsyncSession, mid: str | None = None) -> int:
    """Number of catalog rows, or of rows stored for one MID (0 or 1)."""
    query = select(func.count()).select_from(CardDefinitionDB)
    if mid is not None:
        query = query.where(CardDefinitionDB.mid == mid)
    result = await session.execute(query)
    return result.scalar_one()


def card_to_model(card: CardDefinitionDB) -> CardDefinitionData:
    """Convert a database card to a domain model."""
    return CardDefinitionData(
        mid=card.mid,
        name=card.name,
        image_url=card.image_url,
        type_line=card.type_line,
        set_code=card.set_code,
    )


# --- Deck Line Operations ---


async def get_deck_line(session: AsyncSession, deck_id: int, mid: str) -> DeckLineDB | None:
    """Get the line for a card in a deck, if any."""
    result = await session.execute(
        select(DeckLineDB)
        .where(DeckLineDB.deck_id == deck_id, DeckLineDB.card_mid == mid)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_deck_line(session: AsyncSession, deck_id: int, mid: str) -> DeckLineDB:
    """
    Insert a line with quantity 1.

    Raises IntegrityError if the deck already has a line for this card.
    """
    line = DeckLineDB(deck_id=deck_id, card_mid=mid, quantity=1)
    session.add(line)
    await session.flush()
    return line

