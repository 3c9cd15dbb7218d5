from dataclasses import dataclass, field
from typing import Any

from deckbuilder.models.card import CardDefinitionData
from deckbuilder.models.failure import ValidationError


@dataclass
class DeckDraft:
    """
    User-submitted data for a new deck.

    Format tags are opaque strings; their rules are not enforced here.
    """

    name: str
    format: str

    def validate(self) -> None:
        """
        Check that name and format are non-empty.

        Raises:
            ValidationError: Carrying the submitted values for redisplay
        """
        missing = [
            field_name
            for field_name, value in (("name", self.name), ("format", self.format))
            if not value or not value.strip()
        ]
        if missing:
            raise ValidationError(missing, self.as_dict())

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "format": self.format}


@dataclass(frozen=True, slots=True)
class DeckLine:
    """N copies of one catalog card within a deck."""

    card: CardDefinitionData
    quantity: int


@dataclass
class Deck:
    """
    A user's deck.

    Attributes:
        id: Store-assigned deck id
        inventory_id: Owning inventory, fixed for the deck's lifetime
        name: User-chosen deck name
        format: Format tag (e.g., "Standard", "Commander")
        lines: One line per distinct card
    """

    id: int
    inventory_id: int
    name: str
    format: str
    lines: list[DeckLine] = field(default_factory=list)

    def total_cards(self) -> int:
        """Total number of cards in the deck."""
        return sum(line.quantity for line in self.lines)

    def unique_cards(self) -> int:
        """Number of distinct cards in the deck."""
        return len(self.lines)

    def get_quantity(self, mid: str) -> int:
        """Copies of a card in the deck, 0 if absent."""
        for line in self.lines:
            if line.card.mid == mid:
                return line.quantity
        return 0
