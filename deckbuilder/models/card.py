from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CardDefinitionData:
    """
    A single card printing as known to the catalog.

    Attributes:
        mid: External card identifier, unique per printing
        name: Card name (e.g., "Lightning Bolt")
        image_url: Link to the card image, if the source provides one
        type_line: Full type line (e.g., "Creature — Goblin")
        set_code: Upper-case set code (e.g., "M10")
    """

    mid: str
    name: str
    image_url: str | None = None
    type_line: str = ""
    set_code: str = ""
