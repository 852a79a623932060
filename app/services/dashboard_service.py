"""Employee dashboard summary."""

from collections.abc import Iterable

from pydantic import BaseModel, Field

from app.domain.models.transaction import Transaction, TransactionStatus


class DashboardSummary(BaseModel):
    total_transactions: int = 0
    pending_transactions: int = 0
    verified_transactions: int = 0
    rejected_transactions: int = 0
    submitted_transactions: int = 0
    to_be_reviewed: list[Transaction] = Field(default_factory=list)


def summarize(transactions: Iterable[Transaction], preview_size: int = 5) -> DashboardSummary:
    """Count transactions per status and list the first pending ones for review."""
    transactions = list(transactions)
    counts = {status: 0 for status in TransactionStatus}
    for transaction in transactions:
        counts[transaction.status] += 1

    pending = [t for t in transactions if t.status == TransactionStatus.PENDING]
    return DashboardSummary(
        total_transactions=len(transactions),
        pending_transactions=counts[TransactionStatus.PENDING],
        verified_transactions=counts[TransactionStatus.VERIFIED],
        rejected_transactions=counts[TransactionStatus.REJECTED],
        submitted_transactions=counts[TransactionStatus.SUBMITTED],
        to_be_reviewed=pending[:preview_size],
    )
