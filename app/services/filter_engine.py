"""Derives the visible subset of the transaction list from the active filter."""

import datetime as dt
from collections.abc import Iterable

from app.domain.models.transaction import FilterPredicate, StatusFilter, Transaction


def local_day(timestamp: dt.datetime, tz: dt.tzinfo | None = None) -> dt.date:
    """Calendar day of ``timestamp`` in the review timezone.

    Naive timestamps are taken to already be in that timezone.
    """
    if tz is not None and timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(tz)
    return timestamp.date()


def matches_status(transaction: Transaction, status: StatusFilter) -> bool:
    if status == StatusFilter.ALL:
        return True
    return transaction.status.value.lower() == status.value.lower()


def matches_date(
    transaction: Transaction, day: dt.date | None, tz: dt.tzinfo | None = None
) -> bool:
    if day is None:
        return True
    return local_day(transaction.created_at, tz) == day


def matches_beneficiary(transaction: Transaction, text: str | None) -> bool:
    needle = (text or "").strip().lower()
    if not needle:
        return True
    return needle in (transaction.beneficiary_name or "").lower()


def matches(
    transaction: Transaction, predicate: FilterPredicate, tz: dt.tzinfo | None = None
) -> bool:
    """True when the transaction satisfies every clause of the predicate."""
    return (
        matches_status(transaction, predicate.status)
        and matches_date(transaction, predicate.date, tz)
        and matches_beneficiary(transaction, predicate.beneficiary_text)
    )


def compute_visible(
    transactions: Iterable[Transaction],
    predicate: FilterPredicate,
    tz: dt.tzinfo | None = None,
) -> list[Transaction]:
    """Return the transactions passing ``predicate``, in their original order."""
    return [t for t in transactions if matches(t, predicate, tz)]
