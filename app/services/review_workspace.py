"""Employee transaction review workspace.

Wires the transaction store, filter, selection, status transitions and batch
settlement together for one open review view. After every change to the store
or the filter the visible list is recomputed and the selection reconciled
against it, so the selection is always a subset of what the employee sees.
"""

import datetime as dt
import logging

from app.clients.payments_gateway import PaymentsGateway
from app.core.auth import require_role
from app.core.errors import ConflictError, NotFoundError
from app.domain.models.transaction import (
    BatchSubmissionResult,
    CurrentUser,
    FilterPredicate,
    Transaction,
    TransactionStatus,
    UserRole,
)
from app.services.batch_submission_service import BatchSubmissionGate
from app.services.dashboard_service import DashboardSummary, summarize
from app.services.filter_engine import compute_visible
from app.services.review_session import ReviewSession
from app.services.selection_tracker import SelectionTracker
from app.services.status_transition_service import StatusTransitionController
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class ReviewWorkspace:
    """State and entry points behind the employee transactions view."""

    def __init__(
        self,
        gateway: PaymentsGateway,
        user: CurrentUser,
        *,
        required_role: str = UserRole.EMPLOYEE.value,
        tz: dt.tzinfo | None = None,
        max_batch_size: int | None = None,
        dashboard_preview_size: int = 5,
    ):
        self.user = require_role(required_role)(user)
        self.gateway = gateway
        self.tz = tz
        self.dashboard_preview_size = dashboard_preview_size
        self.closed = False

        self.store = TransactionStore()
        self.selection = SelectionTracker()
        self.predicate = FilterPredicate()
        self._visible: list[Transaction] = []
        self._sessions: dict[str, ReviewSession] = {}

        self.transitions = StatusTransitionController(
            self.store,
            gateway,
            on_updated=self._on_transaction_updated,
            is_active=self._is_active,
        )
        self.batch_gate = BatchSubmissionGate(
            gateway,
            self.selection,
            self.transitions,
            refresh=self.load,
            max_batch_size=max_batch_size,
            is_active=self._is_active,
        )

    def _is_active(self) -> bool:
        return not self.closed

    # ------------------------------------------------------------------
    # Derived view state
    # ------------------------------------------------------------------

    @property
    def visible(self) -> list[Transaction]:
        return list(self._visible)

    @property
    def visible_ids(self) -> list[str]:
        return [t.id for t in self._visible]

    @property
    def selected_ids(self) -> frozenset[str]:
        return self.selection.selected

    @property
    def in_flight_ids(self) -> frozenset[str]:
        return self.transitions.locked_ids

    @property
    def submitting(self) -> bool:
        return self.batch_gate.submitting

    @property
    def all_selected(self) -> bool:
        return self.selection.all_selected(self.visible_ids)

    @property
    def can_submit(self) -> bool:
        """A selected, visible transaction is verified and no batch is running."""
        return not self.submitting and any(
            t.id in self.selection and t.status == TransactionStatus.VERIFIED
            for t in self._visible
        )

    def is_in_flight(self, transaction_id: str) -> bool:
        return self.transitions.is_locked(transaction_id)

    def _recompute(self) -> None:
        self._visible = compute_visible(self.store.transactions, self.predicate, self.tz)
        self.selection.reconcile(self.visible_ids)

    def _on_transaction_updated(self, transaction: Transaction) -> None:
        self._recompute()
        session = self._sessions.pop(transaction.id, None)
        if session is not None:
            session.close()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def load(self) -> list[Transaction]:
        """Fetch every transaction and replace the store."""
        transactions = await self.gateway.fetch_all_transactions()
        if self.closed:
            logger.debug("Discarding transaction fetch for closed workspace")
            return transactions
        self.store.replace_all(transactions)
        self._recompute()
        logger.info(
            "Transactions loaded",
            extra={
                "user_id": self.user.user_id,
                "count": len(transactions),
                "visible": len(self._visible),
            },
        )
        return self.visible

    def set_filter(self, predicate: FilterPredicate) -> list[Transaction]:
        self.predicate = predicate
        self._recompute()
        return self.visible

    def update_filter(self, **changes: object) -> list[Transaction]:
        """Change individual clauses of the current filter."""
        predicate = FilterPredicate.model_validate({**self.predicate.model_dump(), **changes})
        return self.set_filter(predicate)

    def toggle(self, transaction_id: str) -> bool:
        if transaction_id not in self.visible_ids:
            raise NotFoundError(
                "Transaction is not in the current view",
                details={"transaction_id": transaction_id},
            )
        return self.selection.toggle(transaction_id)

    def select_all(self) -> frozenset[str]:
        return self.selection.select_all(self.visible_ids)

    def clear_selection(self) -> None:
        self.selection.clear_all()

    async def approve(self, transaction_id: str, note: str = "") -> Transaction | None:
        return await self.transitions.approve(transaction_id, note)

    async def reject(self, transaction_id: str, reason: str | None) -> Transaction | None:
        return await self.transitions.reject(transaction_id, reason)

    async def submit_batch(self) -> BatchSubmissionResult:
        return await self.batch_gate.submit(self.selection.selected, self.store.transactions)

    async def open_detail(self, transaction_id: str) -> ReviewSession:
        """Open a detail view, replacing any earlier one for the same id."""
        previous = self._sessions.pop(transaction_id, None)
        if previous is not None:
            previous.close()
        session = ReviewSession(self.gateway, transaction_id)
        self._sessions[transaction_id] = session
        try:
            await session.load()
        except NotFoundError:
            if self._sessions.get(transaction_id) is session:
                del self._sessions[transaction_id]
            raise
        if session.closed:
            raise ConflictError(
                "Detail view was closed before the transaction loaded",
                details={"transaction_id": transaction_id},
            )
        return session

    def close_detail(self, transaction_id: str) -> None:
        session = self._sessions.pop(transaction_id, None)
        if session is not None:
            session.close()

    def dashboard(self) -> DashboardSummary:
        return summarize(self.store.transactions, self.dashboard_preview_size)

    def close(self) -> None:
        """Tear down the view. Requests still outstanding will not mutate state."""
        self.closed = True
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
        logger.info("Review workspace closed", extra={"user_id": self.user.user_id})
