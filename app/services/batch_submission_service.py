"""Batch settlement submission of verified transactions."""

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence

from app.clients.payments_gateway import PaymentsGateway
from app.core.errors import (
    ActionInFlightError,
    ConflictError,
    EmptySelectionError,
    MixedStatusError,
    RequestFailedError,
    ValidationError,
)
from app.domain.models.transaction import (
    BatchSubmissionResult,
    Transaction,
    TransactionStatus,
)
from app.services.selection_tracker import SelectionTracker
from app.services.status_transition_service import StatusTransitionController

logger = logging.getLogger(__name__)


def eligible_batch(selection: Iterable[str], transactions: Sequence[Transaction]) -> list[str]:
    """Validate a selection and return the ids to submit, in list order.

    Raises:
        EmptySelectionError: nothing is selected
        MixedStatusError: a selected transaction is not verified (unknown ids count too)
    """
    selected = set(selection)
    if not selected:
        raise EmptySelectionError()

    chosen = [t for t in transactions if t.id in selected]
    ineligible = len(selected) - len(chosen)
    ineligible += sum(1 for t in chosen if t.status != TransactionStatus.VERIFIED)
    if ineligible:
        raise MixedStatusError(ineligible_count=ineligible)

    return [t.id for t in chosen]


class BatchSubmissionGate:
    """Validates the selection and dispatches one settlement batch.

    All-or-nothing from the client's point of view: on failure nothing local
    changes; on success the batch is marked submitted, the selection is
    cleared and the store is refreshed from the backend.
    """

    def __init__(
        self,
        gateway: PaymentsGateway,
        selection: SelectionTracker,
        transitions: StatusTransitionController,
        refresh: Callable[[], Awaitable[object]],
        max_batch_size: int | None = None,
        is_active: Callable[[], bool] | None = None,
    ):
        self.gateway = gateway
        self.selection = selection
        self.transitions = transitions
        self._refresh = refresh
        self.max_batch_size = max_batch_size
        self._is_active = is_active or (lambda: True)
        self.submitting = False

    async def submit(
        self,
        selection: Iterable[str],
        transactions: Sequence[Transaction],
    ) -> BatchSubmissionResult:
        transaction_ids = eligible_batch(selection, transactions)

        if self.max_batch_size is not None and len(transaction_ids) > self.max_batch_size:
            raise ValidationError(
                f"At most {self.max_batch_size} transactions can be submitted at once.",
                details={"selected": len(transaction_ids), "max_batch_size": self.max_batch_size},
            )
        if self.submitting:
            raise ConflictError("A batch submission is already in progress")
        busy = [txn_id for txn_id in transaction_ids if self.transitions.is_locked(txn_id)]
        if busy:
            raise ActionInFlightError(busy)

        logger.info("Submitting settlement batch", extra={"count": len(transaction_ids)})
        self.submitting = True
        self.transitions.lock(transaction_ids)
        try:
            result = await self.gateway.submit_batch(transaction_ids)
        except RequestFailedError:
            logger.warning(
                "Settlement batch failed", extra={"transaction_ids": transaction_ids}
            )
            raise
        finally:
            self.transitions.unlock(transaction_ids)
            self.submitting = False

        if not self._is_active():
            logger.info("Discarding batch result for closed view")
            return result

        self.transitions.mark_submitted(transaction_ids)
        self.selection.clear_all()
        logger.info(
            "Settlement batch submitted",
            extra={"submitted_count": result.submitted_count, "transaction_ids": transaction_ids},
        )

        try:
            await self._refresh()
        except RequestFailedError:
            logger.warning("Refresh after settlement batch failed; keeping local statuses")

        return result
