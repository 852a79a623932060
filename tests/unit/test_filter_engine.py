"""Unit tests for the filter engine."""

from datetime import UTC, date, datetime, timedelta, timezone
from itertools import product

from app.domain.models.transaction import FilterPredicate, StatusFilter
from app.services.filter_engine import compute_visible, local_day, matches
from tests.conftest import make_transaction


def _catalogue():
    return [
        make_transaction("1", "pending", "Alice Martin", datetime(2025, 10, 3, 8, tzinfo=UTC)),
        make_transaction("2", "verified", "Bob Okafor", datetime(2025, 10, 3, 23, tzinfo=UTC)),
        make_transaction("3", "rejected", "alice cooper", datetime(2025, 10, 4, 1, tzinfo=UTC)),
        make_transaction("4", "submitted", "Dmitri Ivan", datetime(2025, 10, 4, 12, tzinfo=UTC)),
        make_transaction("5", "PENDING", "", datetime(2025, 10, 5, 12, tzinfo=UTC)),
    ]


class TestComputeVisible:
    """Test compute_visible."""

    def test_default_predicate_shows_everything_in_order(self):
        """An empty predicate excludes nothing and keeps store order."""
        transactions = _catalogue()
        visible = compute_visible(transactions, FilterPredicate())
        assert [t.id for t in visible] == ["1", "2", "3", "4", "5"]

    def test_status_filter_is_exact(self):
        """Status clause matches only that status."""
        visible = compute_visible(_catalogue(), FilterPredicate(status=StatusFilter.PENDING))
        assert [t.id for t in visible] == ["1", "5"]

    def test_status_filter_accepts_any_case(self):
        """Status filter values are case-insensitive."""
        predicate = FilterPredicate(status="Verified")
        assert predicate.status == StatusFilter.VERIFIED
        assert [t.id for t in compute_visible(_catalogue(), predicate)] == ["2"]

    def test_all_status_shows_submitted(self):
        """The 'all' filter includes submitted transactions."""
        visible = compute_visible(_catalogue(), FilterPredicate(status="all"))
        assert "4" in [t.id for t in visible]

    def test_date_filter_compares_calendar_day(self):
        """Date clause ignores the time of day."""
        visible = compute_visible(_catalogue(), FilterPredicate(date=date(2025, 10, 3)))
        assert [t.id for t in visible] == ["1", "2"]

    def test_date_filter_uses_review_timezone(self):
        """Calendar day is taken in the configured timezone."""
        plus_two = timezone(timedelta(hours=2))
        visible = compute_visible(
            _catalogue(), FilterPredicate(date=date(2025, 10, 4)), tz=plus_two
        )
        # 2025-10-03 23:00 UTC is already the 4th at UTC+2
        assert [t.id for t in visible] == ["2", "3", "4"]

    def test_beneficiary_filter_is_case_insensitive_substring(self):
        """Beneficiary clause is a case-insensitive substring match."""
        visible = compute_visible(_catalogue(), FilterPredicate(beneficiary_text="ALICE"))
        assert [t.id for t in visible] == ["1", "3"]

    def test_blank_beneficiary_text_matches_everything(self):
        """Whitespace-only beneficiary text is ignored."""
        visible = compute_visible(_catalogue(), FilterPredicate(beneficiary_text="   "))
        assert len(visible) == 5

    def test_beneficiary_text_is_trimmed(self):
        """Surrounding whitespace does not prevent a match."""
        visible = compute_visible(_catalogue(), FilterPredicate(beneficiary_text="  okafor "))
        assert [t.id for t in visible] == ["2"]

    def test_clauses_are_combined(self):
        """All clauses must hold at once."""
        predicate = FilterPredicate(
            status=StatusFilter.REJECTED, date=date(2025, 10, 4), beneficiary_text="alice"
        )
        assert [t.id for t in compute_visible(_catalogue(), predicate)] == ["3"]

    def test_empty_store(self):
        """No transactions, nothing visible."""
        assert compute_visible([], FilterPredicate(status="pending")) == []

    def test_does_not_mutate_input(self):
        """compute_visible returns a new list."""
        transactions = _catalogue()
        visible = compute_visible(transactions, FilterPredicate())
        visible.pop()
        assert len(transactions) == 5


class TestFilterSoundness:
    """Every visible transaction satisfies the predicate; no excluded one does."""

    def test_visible_and_excluded_partition_the_store(self):
        transactions = _catalogue()
        statuses = list(StatusFilter)
        days = [None, date(2025, 10, 3), date(2025, 10, 4), date(2025, 10, 9)]
        texts = [None, "", "ali", "BOB", "zzz"]

        for status, day, text in product(statuses, days, texts):
            predicate = FilterPredicate(status=status, date=day, beneficiary_text=text)
            visible = compute_visible(transactions, predicate)
            visible_ids = {t.id for t in visible}

            for transaction in transactions:
                if transaction.id in visible_ids:
                    assert matches(transaction, predicate)
                    if status != StatusFilter.ALL:
                        assert transaction.status.value == status.value
                    if day is not None:
                        assert local_day(transaction.created_at) == day
                    if text and text.strip():
                        assert text.strip().lower() in transaction.beneficiary_name.lower()
                else:
                    assert not matches(transaction, predicate)


class TestLocalDay:
    """Test local_day helper."""

    def test_naive_timestamp_is_left_alone(self):
        assert local_day(datetime(2025, 1, 1, 23, 59)) == date(2025, 1, 1)

    def test_aware_timestamp_is_converted(self):
        minus_five = timezone(timedelta(hours=-5))
        assert local_day(datetime(2025, 1, 2, 3, tzinfo=UTC), minus_five) == date(2025, 1, 1)

