"""
Failure Explanation Envelope and deck-building error taxonomy.

Every failure that reaches an HTTP caller is classified and explained
through a single response envelope.

Response types:
- Success: Operation completed successfully
- KnownFailure: System knows why it failed
- UnknownFailure: System does not know why it failed

AUTHORITY BOUNDARY:
All user-visible failures pass through `finalize_response()`.

Every error raised by the deck core subclasses `KnownError` and leaves
stored data in its pre-operation state.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    MISSING_REQUIRED = "missing_required"

    # Resource failures
    NOT_FOUND = "not_found"
    EMPTY_RESULT = "empty_result"

    # Constraint violations
    CONFLICT = "conflict"

    # Service failures
    STORE_ERROR = "store_error"
    EXTERNAL_API_ERROR = "external_api_error"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Response envelope for failures and successes.

    `data` is normally present only on success. Validation failures also
    carry the submitted input in `data` so the caller can redisplay it.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success, echoed input on validation failure)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )
    _finalized: bool = PrivateAttr(default=False)

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        data: Any = None,
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        Example: Deck not found, empty search result.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            data=data,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


# =============================================================================
# KNOWN ERRORS
# =============================================================================


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class ValidationError(KnownError):
    """
    Raised when a deck draft is missing a required field.

    The submitted input is preserved so it can be echoed back.
    """

    def __init__(self, fields: list[str], submitted: dict[str, Any]):
        self.fields = fields
        self.submitted = submitted
        super().__init__(
            kind=FailureKind.MISSING_REQUIRED,
            message="Deck is invalid.",
            detail=f"Required fields missing or empty: {', '.join(fields)}",
            suggestion="Provide both a deck name and a format.",
            status_code=422,
        )

    def to_response(self) -> ApiResponse[Any]:
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
            data=self.submitted,
        )


class NotFoundError(KnownError):
    """Raised when a search yields nothing or a removal target is absent."""

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        kind: FailureKind = FailureKind.NOT_FOUND,
        suggestion: str | None = None,
    ):
        super().__init__(
            kind=kind,
            message=message,
            detail=detail,
            suggestion=suggestion,
            status_code=404,
        )


class InventoryNotFoundError(NotFoundError):
    """Raised when an authenticated user has no inventory provisioned."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(
            message="User inventory not found.",
            detail=f"No inventory for user {user_id}",
        )


class DeckNotFoundError(NotFoundError):
    """
    Raised when a deck id does not resolve to a deck in the acting
    user's inventory. Decks owned by other users are reported the same way.
    """

    def __init__(self, deck_id: int):
        self.deck_id = deck_id
        super().__init__(
            message="Deck not found.",
            detail=f"Deck {deck_id} not found",
        )


class ConflictError(KnownError):
    """Raised when a deck-line insert keeps losing a uniqueness race."""

    def __init__(self, deck_id: int, mid: str):
        self.deck_id = deck_id
        self.mid = mid
        super().__init__(
            kind=FailureKind.CONFLICT,
            message="The deck was modified concurrently.",
            detail=f"Deck {deck_id} line for card {mid} conflicted after retry",
            suggestion="Retry the request.",
            status_code=409,
        )


class StoreError(KnownError):
    """Raised when the persistent store fails for a non-constraint reason."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.STORE_ERROR,
            message="An error occurred while saving.",
            detail=detail,
            suggestion="No changes were saved. Try again later.",
            status_code=503,
        )


class SearchUnavailableError(KnownError):
    """Raised when the remote card search cannot be reached."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message="Card search is currently unavailable.",
            detail=detail,
            suggestion="Try the search again in a moment.",
            status_code=502,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================

# Standard messages — fixed, boring, predictable

STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.UNKNOWN_FAILURE: (
        "I failed and I don't know why. Try simplifying the request or retrying."
    ),
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Args:
        response: The ApiResponse to finalize

    Returns:
        The same response, marked as having passed through the boundary

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    response._finalized = True

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through the authority boundary."""
    return response._finalized


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Create a finalized unknown failure response from an exception.

    The message is fixed; only the exception type name is exposed.
    """
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
            detail=type(exception).__name__,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
        ),
    )

    return finalize_response(response)
