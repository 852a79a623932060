"""
Domain-specific exceptions for the Settlement Review service.

Client-side precondition failures never reach the payments backend and never
mutate state. Backend failures leave prior state untouched and are surfaced
to the caller as-is. The API layer maps each class to an HTTP status code.
"""

from typing import Any


class SettlementReviewError(Exception):
    """Base exception for all settlement review domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(SettlementReviewError):
    """
    Raised when a client-side precondition fails.

    Examples:
    - Blank rejection reason
    - Empty batch selection
    - Selection containing non-verified transactions

    HTTP Status: 400 Bad Request
    """

    pass


class EmptySelectionError(ValidationError):
    """Raised when a batch submission is attempted with nothing selected."""

    def __init__(self, message: str = "Please select at least one transaction to submit."):
        super().__init__(message)


class MixedStatusError(ValidationError):
    """Raised when a batch selection contains transactions that are not verified."""

    def __init__(self, ineligible_count: int):
        self.ineligible_count = ineligible_count
        super().__init__(
            "Only verified transactions can be submitted for settlement. "
            f"{ineligible_count} selected transaction(s) are pending or rejected.",
            details={"ineligible_count": ineligible_count},
        )


class IllegalTransitionError(ValidationError):
    """Raised when a status change is not allowed by the transaction state machine."""

    def __init__(self, transaction_id: str, current_status: str, requested_status: str):
        self.transaction_id = transaction_id
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            f"Invalid status transition from {current_status} to {requested_status}",
            details={
                "transaction_id": transaction_id,
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )


class RequestFailedError(SettlementReviewError):
    """
    Raised when the payments backend rejects a call or cannot be reached.

    Carries the server-supplied message when one was returned.

    HTTP Status: 502 Bad Gateway
    """

    def __init__(
        self,
        message: str,
        server_message: str | None = None,
        status_code: int | None = None,
    ):
        self.server_message = server_message
        self.status_code = status_code
        details: dict[str, Any] = {}
        if server_message:
            details["server_message"] = server_message
        if status_code is not None:
            details["upstream_status"] = status_code
        super().__init__(server_message or message, details=details)


class NotFoundError(SettlementReviewError):
    """
    Raised when a requested transaction does not exist (stale or removed id).

    HTTP Status: 404 Not Found
    """

    pass


class UnauthorizedError(SettlementReviewError):
    """
    Raised when the caller has no valid session token.

    HTTP Status: 401 Unauthorized
    """

    pass


class ForbiddenError(SettlementReviewError):
    """
    Raised when the caller is authenticated but lacks the required role.

    HTTP Status: 403 Forbidden
    """

    pass


class ConflictError(SettlementReviewError):
    """
    Raised when an operation conflicts with work already in progress.

    HTTP Status: 409 Conflict
    """

    pass


class ActionInFlightError(ConflictError):
    """Raised when a batch would include a transaction with an outstanding action."""

    def __init__(self, transaction_ids: list[str]):
        self.transaction_ids = transaction_ids
        super().__init__(
            "Some selected transactions still have an approve/reject action in progress",
            details={"transaction_ids": transaction_ids},
        )


ERROR_STATUS_MAP = {
    ValidationError: 400,
    NotFoundError: 404,
    UnauthorizedError: 401,
    ForbiddenError: 403,
    ConflictError: 409,
    RequestFailedError: 502,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Subclasses resolve to their nearest mapped ancestor.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    for error_type in type(error).__mro__:
        if error_type in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[error_type]
    return 500
