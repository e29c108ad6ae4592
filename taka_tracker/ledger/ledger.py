"""
Ledger

The authoritative in-memory collection of transactions for the session.

Storage order is most-recent-first: new transactions go to the head, edits
keep their slot. Display order is computed separately by each view.

DESIGN DECISION: balance and period totals are recomputed from a full scan
on every call. There is no running total that could drift from the list.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from pydantic import ValidationError

from taka_tracker.ledger.ids import ClockIdGenerator, IdGenerator
from taka_tracker.ledger.periods import in_period
from taka_tracker.models.reports import PeriodStats
from taka_tracker.models.results import ValidationIssue
from taka_tracker.models.transaction import (
    Period,
    Transaction,
    TransactionDraft,
    TransactionType,
)


ALL_CATEGORIES = "all"


class TransactionValidationError(Exception):
    """A transaction was rejected; the ledger is unchanged."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        messages = "; ".join(issue.message for issue in issues) or "Invalid transaction"
        super().__init__(messages)


def _coerce_draft(draft: Union[TransactionDraft, Mapping[str, Any]]) -> TransactionDraft:
    if isinstance(draft, TransactionDraft):
        return draft
    try:
        return TransactionDraft.model_validate(draft)
    except ValidationError as e:
        raise TransactionValidationError([
            ValidationIssue(
                field=".".join(str(p) for p in err.get("loc", ())) or "input",
                issue_type="invalid_value",
                message=err.get("msg", "Invalid value"),
                severity="error",
            )
            for err in e.errors()
        ])


class Ledger:
    """
    Owns the transactions and answers every question about them.

    Not thread-safe; the tracker has a single local user.
    """

    def __init__(
        self,
        transactions: Optional[Iterable[Transaction]] = None,
        id_generator: Optional[IdGenerator] = None,
    ):
        self._items: list[Transaction] = list(transactions or [])
        self._ids = id_generator or ClockIdGenerator()
        self._ids.observe(t.id for t in self._items)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add(self, draft: Union[TransactionDraft, Mapping[str, Any]]) -> Transaction:
        """
        Record a new transaction at the head of the ledger.

        Raises:
            TransactionValidationError: amount missing, non-numeric or not
                positive (or any other field invalid). Nothing is added.
        """
        draft = _coerce_draft(draft)
        transaction = Transaction.from_draft(self._ids.next_id(), draft)
        self._items.insert(0, transaction)
        return transaction

    def update(
        self,
        transaction_id: str,
        draft: Union[TransactionDraft, Mapping[str, Any]],
    ) -> Optional[Transaction]:
        """
        Replace a transaction in place, keeping its id and position.

        Returns:
            The updated transaction, or None if the id is unknown (no-op).

        Raises:
            TransactionValidationError: the new values are invalid.
        """
        draft = _coerce_draft(draft)
        for index, existing in enumerate(self._items):
            if existing.id == transaction_id:
                updated = Transaction.from_draft(transaction_id, draft)
                self._items[index] = updated
                return updated
        return None

    def remove(self, transaction_id: str) -> bool:
        """Delete a transaction. Unknown ids are ignored."""
        for index, existing in enumerate(self._items):
            if existing.id == transaction_id:
                del self._items[index]
                return True
        return False

    # =========================================================================
    # READS
    # =========================================================================

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self._items:
            if transaction.id == transaction_id:
                return transaction
        return None

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Snapshot in storage order (most recently added first)."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(tuple(self._items))

    def balance(self) -> Decimal:
        """Income minus expenses over every transaction."""
        return sum((t.signed_amount for t in self._items), Decimal("0"))

    def filter_by_period(self, period: Period, reference: dt.date) -> PeriodStats:
        """
        Transactions in the period window around a reference day.

        The matching transactions keep storage order. Income and expense
        totals are summed over the matches only.
        """
        period = Period(period)
        matching = tuple(t for t in self._items if in_period(t.date, period, reference))
        return PeriodStats(
            period=period,
            reference=reference,
            transactions=matching,
            income=_total(matching, TransactionType.INCOME),
            expense=_total(matching, TransactionType.EXPENSE),
        )

    def filter_by_criteria(
        self,
        category: Optional[str] = None,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
    ) -> list[Transaction]:
        """
        History view: optional category and inclusive date bounds.

        Args:
            category: Exact category key; None or "all" disables the filter
            start: Earliest date to include; None for no lower bound
            end: Latest date to include; None for no upper bound

        Returns:
            Matches sorted by date, newest first. Transactions on the same
            date keep storage order, so the most recently added comes first.
        """
        def matches(t: Transaction) -> bool:
            if category not in (None, ALL_CATEGORIES) and t.category != category:
                return False
            if start is not None and t.date < start:
                return False
            if end is not None and t.date > end:
                return False
            return True

        # sorted() is stable, and reverse=True keeps equal keys in input order
        return sorted(
            (t for t in self._items if matches(t)),
            key=lambda t: t.date,
            reverse=True,
        )

    def expenses_for(self, category: str, period: Period, reference: dt.date) -> Decimal:
        """Total expenses of one category inside a period window."""
        return sum(
            (
                t.amount
                for t in self._items
                if t.is_expense and t.category == category and in_period(t.date, period, reference)
            ),
            Decimal("0"),
        )


def _total(transactions: Iterable[Transaction], transaction_type: TransactionType) -> Decimal:
    return sum(
        (t.amount for t in transactions if t.type == transaction_type),
        Decimal("0"),
    )
