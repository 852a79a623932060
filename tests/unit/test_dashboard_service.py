"""Unit tests for the dashboard summary."""

from app.domain.models.transaction import TransactionStatus
from app.services.dashboard_service import DashboardSummary, summarize
from tests.conftest import make_transaction


class TestSummarize:
    """Test summarize."""

    def test_empty(self):
        summary = summarize([])
        assert summary == DashboardSummary()

    def test_counts_per_status(self, mixed_transactions):
        transactions = [*mixed_transactions, make_transaction("4", TransactionStatus.SUBMITTED)]
        summary = summarize(transactions)
        assert summary.total_transactions == 4
        assert summary.pending_transactions == 1
        assert summary.verified_transactions == 1
        assert summary.rejected_transactions == 1
        assert summary.submitted_transactions == 1

    def test_preview_lists_first_pending_in_order(self):
        transactions = [make_transaction(str(i)) for i in range(8)]
        transactions.insert(2, make_transaction("v", TransactionStatus.VERIFIED))
        summary = summarize(transactions)
        assert [t.id for t in summary.to_be_reviewed] == ["0", "1", "2", "3", "4"]

    def test_preview_size(self):
        transactions = [make_transaction(str(i)) for i in range(3)]
        assert len(summarize(transactions, preview_size=2).to_be_reviewed) == 2
        assert summarize(transactions, preview_size=0).to_be_reviewed == []
