"""Request and response models shared by the deck and card endpoints."""

from pydantic import BaseModel, Field

from deckbuilder.models.card import CardDefinitionData
from deckbuilder.models.deck import Deck


class CardResponse(BaseModel):
    """A catalog card."""

    mid: str
    name: str
    image_url: str | None = None
    type_line: str = ""
    set_code: str = ""

    @classmethod
    def from_model(cls, card: CardDefinitionData) -> "CardResponse":
        return cls(
            mid=card.mid,
            name=card.name,
            image_url=card.image_url,
            type_line=card.type_line,
            set_code=card.set_code,
        )


class DeckLineResponse(BaseModel):
    """A card and how many copies the deck holds."""

    card: CardResponse
    quantity: int


class DeckResponse(BaseModel):
    """Response model for a single deck."""

    id: int
    name: str
    format: str
    lines: list[DeckLineResponse] = Field(default_factory=list)
    total_cards: int = 0
    unique_cards: int = 0

    @classmethod
    def from_model(cls, deck: Deck) -> "DeckResponse":
        return cls(
            id=deck.id,
            name=deck.name,
            format=deck.format,
            lines=[
                DeckLineResponse(card=CardResponse.from_model(line.card), quantity=line.quantity)
                for line in deck.lines
            ],
            total_cards=deck.total_cards(),
            unique_cards=deck.unique_cards(),
        )
