"""Schemas package for request/response models."""

from app.schemas.review import (
    ApproveRequest,
    BatchSubmitResponse,
    FilterRequest,
    RejectRequest,
    ReviewStateResponse,
    SelectionResponse,
    TransactionActionResponse,
    TransactionDetailResponse,
)

__all__ = [
    "ApproveRequest",
    "BatchSubmitResponse",
    "FilterRequest",
    "RejectRequest",
    "ReviewStateResponse",
    "SelectionResponse",
    "TransactionActionResponse",
    "TransactionDetailResponse",
]
