from deckbuilder.models.card import CardDefinitionData
from deckbuilder.models.deck import Deck, DeckDraft, DeckLine
from deckbuilder.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    ConflictError,
    DeckNotFoundError,
    FailureDetail,
    FailureKind,
    InventoryNotFoundError,
    KnownError,
    NotFoundError,
    OutcomeType,
    SearchUnavailableError,
    StoreError,
    ValidationError,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)

__all__ = [
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "ApiResponse",
    "CardDefinitionData",
    "ConflictError",
    "Deck",
    "DeckDraft",
    "DeckLine",
    "DeckNotFoundError",
    "FailureDetail",
    "FailureKind",
    "InventoryNotFoundError",
    "KnownError",
    "NotFoundError",
    "OutcomeType",
    "SearchUnavailableError",
    "StoreError",
    "ValidationError",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]
