"""Approve/reject workflow for individual transactions."""

import logging
from collections.abc import Awaitable, Callable, Iterable

from app.clients.payments_gateway import PaymentsGateway
from app.core.errors import IllegalTransitionError, NotFoundError, ValidationError
from app.domain.models.transaction import Transaction, TransactionStatus
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)

# Valid status transitions for a transaction under review
VALID_STATUS_TRANSITIONS = {
    TransactionStatus.PENDING: [TransactionStatus.VERIFIED, TransactionStatus.REJECTED],
    TransactionStatus.VERIFIED: [TransactionStatus.SUBMITTED],
    TransactionStatus.REJECTED: [],
    TransactionStatus.SUBMITTED: [],
}


def validate_status_transition(
    current_status: TransactionStatus, new_status: TransactionStatus
) -> bool:
    """Validate if a status transition is allowed."""
    return new_status in VALID_STATUS_TRANSITIONS.get(current_status, [])


def ensure_transition(transaction: Transaction, new_status: TransactionStatus) -> None:
    if not validate_status_transition(transaction.status, new_status):
        raise IllegalTransitionError(
            transaction_id=transaction.id,
            current_status=transaction.status.value,
            requested_status=new_status.value,
        )


class StatusTransitionController:
    """Applies approve/reject decisions to the transaction store.

    One action may be outstanding per transaction id. A second intent for a
    locked id is ignored and returns ``None`` without calling the backend.
    Status changes are applied optimistically once the backend acknowledges.
    """

    def __init__(
        self,
        store: TransactionStore,
        gateway: PaymentsGateway,
        on_updated: Callable[[Transaction], None] | None = None,
        is_active: Callable[[], bool] | None = None,
    ):
        self.store = store
        self.gateway = gateway
        self._on_updated = on_updated
        self._is_active = is_active or (lambda: True)
        self._locked: set[str] = set()

    @property
    def locked_ids(self) -> frozenset[str]:
        return frozenset(self._locked)

    def is_locked(self, transaction_id: str) -> bool:
        return transaction_id in self._locked

    def lock(self, transaction_ids: Iterable[str]) -> None:
        self._locked.update(transaction_ids)

    def unlock(self, transaction_ids: Iterable[str]) -> None:
        self._locked.difference_update(transaction_ids)

    async def approve(self, transaction_id: str, note: str = "") -> Transaction | None:
        """Move a pending transaction to verified."""
        return await self._transition(
            transaction_id,
            TransactionStatus.VERIFIED,
            lambda: self.gateway.approve_transaction(transaction_id, note),
        )

    async def reject(self, transaction_id: str, reason: str | None) -> Transaction | None:
        """Move a pending transaction to rejected. A non-blank reason is required."""
        if not reason or not reason.strip():
            logger.info(
                "Rejection refused without reason", extra={"transaction_id": transaction_id}
            )
            raise ValidationError(
                "Rejection reason is required.", details={"transaction_id": transaction_id}
            )
        return await self._transition(
            transaction_id,
            TransactionStatus.REJECTED,
            lambda: self.gateway.reject_transaction(transaction_id, reason.strip()),
        )

    def mark_submitted(self, transaction_ids: Iterable[str]) -> list[Transaction]:
        """Apply the batch-only ``verified -> submitted`` transition locally.

        Records a concurrent refetch removed or already moved on are skipped.
        """
        updated = []
        for txn_id in transaction_ids:
            transaction = self.store.get(txn_id)
            if transaction is None or not validate_status_transition(
                transaction.status, TransactionStatus.SUBMITTED
            ):
                logger.info("Skipping submitted status", extra={"transaction_id": txn_id})
                continue
            updated.append(self.store.apply_status(txn_id, TransactionStatus.SUBMITTED))
        if self._on_updated is not None:
            for transaction in updated:
                self._on_updated(transaction)
        return updated

    async def _transition(
        self,
        transaction_id: str,
        new_status: TransactionStatus,
        call: Callable[[], Awaitable[None]],
    ) -> Transaction | None:
        if transaction_id in self._locked:
            logger.info(
                "Ignoring duplicate action while request is outstanding",
                extra={"transaction_id": transaction_id, "requested_status": new_status.value},
            )
            return None

        transaction = self.store.require(transaction_id)
        ensure_transition(transaction, new_status)

        self._locked.add(transaction_id)
        try:
            await call()
        finally:
            self._locked.discard(transaction_id)

        if not self._is_active():
            logger.info(
                "Discarding status change for closed view",
                extra={"transaction_id": transaction_id, "new_status": new_status.value},
            )
            return None

        try:
            updated = self.store.apply_status(transaction_id, new_status)
        except NotFoundError:
            # A refetch during the request dropped the record; the refetch wins.
            logger.info(
                "Transaction vanished before status could be applied",
                extra={"transaction_id": transaction_id},
            )
            return None

        logger.info(
            "Transaction status updated",
            extra={
                "transaction_id": transaction_id,
                "old_status": transaction.status.value,
                "new_status": new_status.value,
            },
        )
        if self._on_updated is not None:
            self._on_updated(updated)
        return updated
