"""Detail view state for a single transaction."""

import logging

from app.clients.payments_gateway import PaymentsGateway
from app.core.errors import NotFoundError, RequestFailedError
from app.domain.models.transaction import Transaction

logger = logging.getLogger(__name__)


class ReviewSession:
    """Snapshot of one transaction, fetched by id when the detail view opens.

    Discarded on close; a fetch that completes after close leaves it untouched.
    """

    def __init__(self, gateway: PaymentsGateway, transaction_id: str):
        self.gateway = gateway
        self.transaction_id = transaction_id
        self.transaction: Transaction | None = None
        self.loading = False
        self.error: str | None = None
        self.closed = False

    async def load(self) -> Transaction:
        self.error = None
        self.loading = True
        try:
            transaction = await self.gateway.fetch_transaction_by_id(self.transaction_id)
        except (NotFoundError, RequestFailedError) as e:
            if not self.closed:
                self.error = "Failed to load transaction details."
                logger.warning(
                    "Transaction detail fetch failed",
                    extra={"transaction_id": self.transaction_id, "error": e.message},
                )
            raise
        finally:
            self.loading = False

        if self.closed:
            logger.debug(
                "Discarding detail fetch for closed session",
                extra={"transaction_id": self.transaction_id},
            )
        else:
            self.transaction = transaction
        return transaction

    def close(self) -> None:
        self.closed = True
        self.transaction = None
        self.error = None
