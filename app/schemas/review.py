"""Request and response schemas for the employee review API."""

import datetime as dt

from pydantic import BaseModel, Field

from app.domain.models.transaction import StatusFilter, Transaction


class FilterRequest(BaseModel):
    """Schema for replacing the active filter of the review list."""

    status: StatusFilter = Field(default=StatusFilter.ALL, description="Status to show")
    date: dt.date | None = Field(None, description="Calendar day the transaction was created")
    beneficiary_text: str | None = Field(
        None, max_length=256, description="Case-insensitive beneficiary name fragment"
    )


class ApproveRequest(BaseModel):
    note: str = Field(default="", max_length=2000, description="Optional approval note")


class RejectRequest(BaseModel):
    reason: str = Field(..., max_length=2000, description="Reason for rejection (required)")


class ReviewStateResponse(BaseModel):
    """Everything the transactions view needs to render."""

    loaded: bool
    filter: FilterRequest
    visible: list[Transaction]
    visible_count: int
    total_count: int
    selected_ids: list[str]
    all_selected: bool
    can_submit: bool
    submitting: bool
    in_flight_ids: list[str]


class SelectionResponse(BaseModel):
    selected_ids: list[str]
    all_selected: bool
    can_submit: bool


class TransactionActionResponse(BaseModel):
    """Result of an approve/reject intent.

    ``applied`` is false when the intent was ignored because an action for
    the same transaction was still outstanding.
    """

    transaction_id: str
    applied: bool
    transaction: Transaction | None = None


class TransactionDetailResponse(BaseModel):
    transaction: Transaction
    can_act: bool = Field(..., description="Approve/reject is currently allowed")


class BatchSubmitResponse(BaseModel):
    submitted_count: int
    message: str
