"""In-memory store holding the authoritative transaction list for a review view."""

import logging
from collections.abc import Iterable

from app.core.errors import NotFoundError
from app.domain.models.transaction import Transaction, TransactionStatus

logger = logging.getLogger(__name__)


class TransactionStore:
    """Ordered list of transactions as last fetched from the payments backend.

    A full refetch replaces the contents wholesale; individual records only
    change through ``apply_status``.
    """

    def __init__(self) -> None:
        self._transactions: list[Transaction] = []
        self._loaded = False
        self.revision = 0

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self):
        return iter(list(self._transactions))

    def replace_all(self, transactions: Iterable[Transaction]) -> None:
        """Replace the contents after a full fetch."""
        self._transactions = list(transactions)
        self._loaded = True
        self.revision += 1
        logger.debug(
            "Transaction store replaced",
            extra={"count": len(self._transactions), "revision": self.revision},
        )

    def get(self, transaction_id: str) -> Transaction | None:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def require(self, transaction_id: str) -> Transaction:
        transaction = self.get(transaction_id)
        if transaction is None:
            raise NotFoundError(
                "Transaction not found", details={"transaction_id": transaction_id}
            )
        return transaction

    def apply_status(self, transaction_id: str, status: TransactionStatus) -> Transaction:
        """Set the status of a single record, keeping its position in the list."""
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                updated = transaction.with_status(status)
                self._transactions[index] = updated
                self.revision += 1
                return updated
        raise NotFoundError("Transaction not found", details={"transaction_id": transaction_id})
