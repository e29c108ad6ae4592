"""Tests for the ledger: mutations, balance and filtered views."""

import datetime as dt
from decimal import Decimal

import pytest

from taka_tracker.ledger import (
    ClockIdGenerator,
    Ledger,
    SequentialIdGenerator,
    TransactionValidationError,
    in_period,
)
from taka_tracker.models import Period, Transaction


@pytest.fixture
def ledger():
    return Ledger(id_generator=SequentialIdGenerator())


class TestLedgerMutations:
    """Tests for add, update and remove."""

    def test_add_inserts_at_head(self, ledger, make_draft):
        """Test new transactions go to the front of storage order."""
        first = ledger.add(make_draft(amount="10"))
        second = ledger.add(make_draft(amount="20"))
        assert [t.id for t in ledger.transactions] == [second.id, first.id]
        assert len(ledger) == 2
        assert list(ledger) == list(ledger.transactions)

    def test_add_assigns_unique_ids(self, ledger, make_draft):
        """Test ids come from the injected generator."""
        ids = {ledger.add(make_draft()).id for _ in range(5)}
        assert ids == {"tx-1", "tx-2", "tx-3", "tx-4", "tx-5"}

    def test_add_accepts_mapping(self, ledger):
        """Test a plain mapping is validated into a draft."""
        transaction = ledger.add({
            "amount": "99.50",
            "type": "income",
            "category": "gift",
            "paymentMethod": "cash",
            "date": "2024-06-01",
        })
        assert transaction.amount == Decimal("99.50")

    @pytest.mark.parametrize("amount", ["0", "-5", "abc"])
    def test_add_rejects_bad_amount(self, ledger, amount):
        """Test invalid amounts raise and leave the ledger unchanged."""
        with pytest.raises(TransactionValidationError) as exc_info:
            ledger.add({
                "amount": amount,
                "type": "expense",
                "category": "food",
                "paymentMethod": "cash",
                "date": "2024-06-01",
            })
        assert exc_info.value.issues
        assert len(ledger) == 0

    def test_update_keeps_id_and_position(self, ledger, make_draft):
        """Test edits replace in place."""
        older = ledger.add(make_draft(amount="10"))
        ledger.add(make_draft(amount="20"))

        updated = ledger.update(older.id, make_draft(amount="15", category="rent"))

        assert updated.id == older.id
        assert ledger.transactions[1].id == older.id
        assert ledger.transactions[1].amount == Decimal("15")
        assert ledger.transactions[1].category == "rent"

    def test_update_unknown_id_is_noop(self, ledger, make_draft):
        """Test editing a missing id changes nothing."""
        ledger.add(make_draft())
        before = ledger.transactions
        assert ledger.update("nope", make_draft(amount="999")) is None
        assert ledger.transactions == before

    def test_remove_is_idempotent(self, ledger, make_draft):
        """Test removing twice is harmless."""
        transaction = ledger.add(make_draft())
        assert ledger.remove(transaction.id) is True
        assert ledger.remove(transaction.id) is False
        assert ledger.get(transaction.id) is None

    def test_get(self, ledger, make_draft):
        transaction = ledger.add(make_draft())
        assert ledger.get(transaction.id) == transaction
        assert ledger.get("missing") is None


class TestLedgerBalance:
    """Tests for the balance computation."""

    def test_empty_balance_is_zero(self, ledger):
        assert ledger.balance() == Decimal("0")

    def test_balance_is_income_minus_expense(self, ledger, make_draft):
        """Test balance after a mix of mutations."""
        salary = ledger.add(make_draft(amount="50000", type="income", category="salary"))
        ledger.add(make_draft(amount="1200.50", category="food"))
        rent = ledger.add(make_draft(amount="15000", category="rent"))
        assert ledger.balance() == Decimal("33799.50")

        ledger.update(rent.id, make_draft(amount="14000", category="rent"))
        ledger.remove(salary.id)
        assert ledger.balance() == Decimal("-15200.50")

    def test_balance_is_exact_for_decimal_amounts(self, ledger, make_draft):
        """Test there is no float drift in sums."""
        for _ in range(10):
            ledger.add(make_draft(amount="0.10", type="income", category="gift"))
        assert ledger.balance() == Decimal("1.00")


class TestPeriodFilter:
    """Tests for period statistics."""

    def test_monthly_income_and_expense(self, ledger, make_draft, today):
        """Test a 500 expense and 2000 income this month."""
        ledger.add(make_draft(amount="500", type="expense", date=today))
        ledger.add(make_draft(amount="2000", type="income", category="salary", date=today))

        stats = ledger.filter_by_period(Period.MONTHLY, today)

        assert stats.income == Decimal("2000")
        assert stats.expense == Decimal("500")
        assert stats.net == Decimal("1500")
        assert stats.count == 2
        assert ledger.balance() == Decimal("1500")

    def test_period_windows(self, ledger, make_draft, today):
        """Test daily, monthly and yearly windows."""
        ledger.add(make_draft(amount="1", date=today))
        ledger.add(make_draft(amount="10", date=today.replace(day=1)))
        ledger.add(make_draft(amount="100", date=today.replace(month=1)))
        ledger.add(make_draft(amount="1000", date=today.replace(year=today.year - 1)))

        assert ledger.filter_by_period(Period.DAILY, today).expense == Decimal("1")
        assert ledger.filter_by_period(Period.MONTHLY, today).expense == Decimal("11")
        assert ledger.filter_by_period(Period.YEARLY, today).expense == Decimal("111")

    def test_same_month_previous_year_is_excluded(self, today):
        """Test monthly means same year and month."""
        assert not in_period(today.replace(year=today.year - 1), Period.MONTHLY, today)

    def test_period_keeps_storage_order(self, ledger, make_draft, today):
        """Test matching transactions come back most recently added first."""
        first = ledger.add(make_draft(amount="1", date=today))
        second = ledger.add(make_draft(amount="2", date=today))
        stats = ledger.filter_by_period(Period.DAILY, today)
        assert [t.id for t in stats.transactions] == [second.id, first.id]

    def test_empty_period(self, ledger, today):
        stats = ledger.filter_by_period(Period.YEARLY, today)
        assert stats.count == 0
        assert stats.income == Decimal("0")
        assert stats.expense == Decimal("0")


class TestCriteriaFilter:
    """Tests for the history view filter."""

    def test_sorted_newest_first(self, ledger, make_draft):
        """Test results are sorted by date descending."""
        ledger.add(make_draft(date=dt.date(2024, 6, 10)))
        ledger.add(make_draft(date=dt.date(2024, 6, 12)))
        ledger.add(make_draft(date=dt.date(2024, 6, 1)))

        dates = [t.date for t in ledger.filter_by_criteria()]
        assert dates == [dt.date(2024, 6, 12), dt.date(2024, 6, 10), dt.date(2024, 6, 1)]

    def test_same_date_most_recently_added_first(self, ledger, make_draft):
        """Test ties on date keep storage order."""
        first = ledger.add(make_draft(date=dt.date(2024, 6, 10)))
        second = ledger.add(make_draft(date=dt.date(2024, 6, 10)))
        assert [t.id for t in ledger.filter_by_criteria()] == [second.id, first.id]

    def test_category_filter(self, ledger, make_draft):
        ledger.add(make_draft(category="food"))
        ledger.add(make_draft(category="rent"))
        assert [t.category for t in ledger.filter_by_criteria(category="rent")] == ["rent"]
        assert len(ledger.filter_by_criteria(category="all")) == 2

    def test_date_bounds_are_inclusive(self, ledger, make_draft):
        """Test start and end dates are both included."""
        for day in (1, 5, 10, 15):
            ledger.add(make_draft(date=dt.date(2024, 6, day)))

        result = ledger.filter_by_criteria(start=dt.date(2024, 6, 5), end=dt.date(2024, 6, 10))
        assert sorted(t.date.day for t in result) == [5, 10]

    def test_open_bounds(self, ledger, make_draft):
        ledger.add(make_draft(date=dt.date(2024, 6, 1)))
        ledger.add(make_draft(date=dt.date(2024, 6, 20)))
        assert len(ledger.filter_by_criteria(start=dt.date(2024, 6, 2))) == 1
        assert len(ledger.filter_by_criteria(end=dt.date(2024, 6, 2))) == 1


class TestIdGenerators:
    """Tests for id generation."""

    def test_clock_ids_strictly_increase(self):
        """Test ids requested in the same millisecond stay unique."""
        generator = ClockIdGenerator(clock=lambda: 1000)
        assert [generator.next_id() for _ in range(3)] == ["1000", "1001", "1002"]

    def test_clock_ids_survive_clock_going_back(self):
        """Test an earlier clock reading never reuses an id."""
        readings = iter([2000, 1500])
        generator = ClockIdGenerator(clock=lambda: next(readings))
        assert generator.next_id() == "2000"
        assert generator.next_id() == "2001"

    def test_observed_ids_are_not_reissued(self, make_draft):
        """Test loading a ledger moves the generator past existing ids."""
        existing = Transaction.from_draft("5000", make_draft())
        ledger = Ledger([existing], id_generator=ClockIdGenerator(clock=lambda: 4000))
        assert ledger.add(make_draft()).id == "5001"

    def test_sequential_observe(self):
        generator = SequentialIdGenerator()
        generator.observe(["tx-4", "other"])
        assert generator.next_id() == "tx-5"
