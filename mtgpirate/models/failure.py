"""
Response envelope for the HTTP API.

Every API endpoint answers with an ApiResponse classified as one of:
- Success: the operation completed
- KnownFailure: the system knows why it failed (no catalog, bad input)
- UnknownFailure: an unexpected exception

The parsing and matching core never raises for bad data; these types
exist only at the API boundary. All user-visible responses pass through
`finalize_response()`.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    INVALID_INPUT = "invalid_input"
    EMPTY_RESULT = "empty_result"
    CATALOG_UNAVAILABLE = "catalog_unavailable"
    EXTERNAL_API_ERROR = "external_api_error"
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
    """Universal response envelope for all API endpoints."""

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Raised by API handlers; the app's exception handler turns it into
    a finalized known-failure envelope with `status_code`.
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
        """Convert to a finalized ApiResponse."""
        return finalize_response(
            ApiResponse.known_failure(
                kind=self.kind,
                message=self.message,
                detail=self.detail,
                suggestion=self.suggestion,
            )
        )


class CatalogUnavailableError(KnownError):
    """No catalog is loaded, or loading one failed."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.CATALOG_UNAVAILABLE,
            message="No catalog is available to match against.",
            detail=detail,
            suggestion="Refresh the catalog or import a catalog CSV first.",
            status_code=503,
        )


# =============================================================================
# RESPONSE BOUNDARY
# =============================================================================

STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "The operation failed due to a known issue.",
    OutcomeType.UNKNOWN_FAILURE: "Something went wrong and the cause is unknown. Try again.",
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "Check the error details and adjust your request.",
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}

# Ids of responses that went through finalize_response()
_finalized_responses: set[int] = set()


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the response boundary.

    Raises:
        ValueError: If the outcome and failure fields disagree
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    _finalized_responses.add(id(response))
    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """True if the response passed through finalize_response()."""
    return id(response) in _finalized_responses


def create_known_failure(kind: FailureKind, reason: str) -> ApiResponse[Any]:
    """Finalized known failure with the standard message and `reason` as detail."""
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.KNOWN_FAILURE,
        failure=FailureDetail(
            kind=kind,
            message=STANDARD_MESSAGES[OutcomeType.KNOWN_FAILURE],
            detail=reason,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.KNOWN_FAILURE],
        ),
    )
    return finalize_response(response)


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Finalized unknown failure for an unexpected exception.

    Only the exception type is exposed, never its message.
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


def create_success(data: T) -> ApiResponse[T]:
    """Finalized success response."""
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    finalize_response(response)
    return response
