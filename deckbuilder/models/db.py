"""
SQLAlchemy ORM models for persistent storage.

Ownership is a tree: an inventory owns its decks, a deck owns its lines.
Deck lines point at shared catalog cards without owning them.
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class InventoryDB(Base):
    """
    A user's inventory of decks.

    Exactly one per user. Provisioned outside of deck operations.
    """

    __tablename__ = "inventories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    decks: Mapped[list["DeckDB"]] = relationship(
        back_populates="inventory", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<InventoryDB(id={self.id}, user_id={self.user_id})>"


class DeckDB(Base):
    """A user-built deck belonging to one inventory."""

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    inventory_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("inventories.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(Text)
    format: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    inventory: Mapped["InventoryDB"] = relationship(back_populates="decks")
    lines: Mapped[list["DeckLineDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name}, format={self.format})>"


class CardDefinitionDB(Base):
    """
    A catalog card, keyed by its external MID.

    Append-only: rows are created on first encounter and never updated.
    """

    __tablename__ = "card_definitions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mid: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    type_line: Mapped[str] = mapped_column(String(255), default="")
    set_code: Mapped[str] = mapped_column(String(16), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<CardDefinitionDB(mid={self.mid}, name={self.name})>"


class DeckLineDB(Base):
    """
    N copies of one catalog card in one deck.

    At most one line per (deck, card).
    """

    __tablename__ = "deck_lines"
    __table_args__ = (UniqueConstraint("deck_id", "card_mid", name="uq_deck_card"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_mid: Mapped[str] = mapped_column(
        String(64), ForeignKey("card_definitions.mid"), index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    deck: Mapped["DeckDB"] = relationship(back_populates="lines")
    card: Mapped["CardDefinitionDB"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<DeckLineDB(deck={self.deck_id}, card={self.card_mid}, qty={self.quantity})>"
