"""Tracks which visible transactions are selected for batch action."""

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class SelectionTracker:
    """Set of chosen transaction ids.

    Callers must ``reconcile`` against every newly computed visible set so
    that the selection never holds an id the user can no longer see.
    """

    def __init__(self) -> None:
        self._selected: set[str] = set()

    @property
    def selected(self) -> frozenset[str]:
        return frozenset(self._selected)

    def __contains__(self, transaction_id: str) -> bool:
        return transaction_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def is_empty(self) -> bool:
        return not self._selected

    def toggle(self, transaction_id: str) -> bool:
        """Flip membership of ``transaction_id``. Returns the new membership."""
        if transaction_id in self._selected:
            self._selected.discard(transaction_id)
            return False
        self._selected.add(transaction_id)
        return True

    def all_selected(self, visible_ids: Iterable[str]) -> bool:
        visible = set(visible_ids)
        return bool(visible) and self._selected == visible

    def select_all(self, visible_ids: Iterable[str]) -> frozenset[str]:
        """Select exactly ``visible_ids``, or clear if they are already all selected."""
        visible = set(visible_ids)
        if self._selected == visible:
            self._selected = set()
        else:
            self._selected = visible
        return self.selected

    def clear_all(self) -> None:
        self._selected = set()

    def reconcile(self, visible_ids: Iterable[str]) -> frozenset[str]:
        """Drop selected ids that are not visible. Never adds. Returns the pruned ids."""
        visible = set(visible_ids)
        pruned = self._selected - visible
        if pruned:
            self._selected &= visible
            logger.debug("Pruned selection", extra={"pruned": sorted(pruned)})
        return frozenset(pruned)
