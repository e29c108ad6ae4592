"""
Main Orchestrator for Taka Tracker

This module ties together all the components and exposes the command
surface the presentation layer calls:

1. Access: unlock with PIN, lock
2. Ledger: add / edit / delete transactions
3. Budgets: add or replace / delete
4. Views: balance, period statistics, filtered history, expense
   distribution, budget progress, export
5. Preferences: language, theme, currency, notifications

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is reachable while the access gate is locked
- Input is validated before any component sees it
- Every mutation writes a full snapshot of the affected collection
- Errors come back as CommandResult values; commands never raise

If a write fails, the in-memory state stays authoritative for the session
and the key is queued; flush() and close() retry queued writes.
"""

import datetime as dt
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict

from taka_tracker.access import AccessGate, GateOutcome, GateState, Scheduler, asyncio_scheduler
from taka_tracker.analytics import expense_distribution
from taka_tracker.budgets import BudgetTracker
from taka_tracker.config import TrackerSettings, get_settings
from taka_tracker.export import export_filename, export_rows, render_csv
from taka_tracker.ledger import ALL_CATEGORIES, IdGenerator, Ledger, in_period
from taka_tracker.models.budget import BudgetProgress
from taka_tracker.models.preferences import Language, Preferences, Theme
from taka_tracker.models.reports import ExpenseDistribution, ExportRow, PeriodStats
from taka_tracker.models.results import CommandResult, ErrorKind, ValidationIssue
from taka_tracker.models.transaction import Period, Transaction
from taka_tracker.services.storage import (
    JsonFileStore,
    PersistentStore,
    StorageError,
    StoreKey,
)
from taka_tracker.services.storage.codec import (
    decode_budgets,
    decode_preferences,
    decode_transactions,
    encode_budgets,
    encode_notifications,
    encode_transactions,
)
from taka_tracker.telemetry import configure_logging, get_logger
from taka_tracker.validation import TransactionValidator, validate_budget_fields


class AppLockedError(Exception):
    """A view was requested while the access gate is locked."""
    pass


class HistoryFilter(BaseModel):
    """Current criteria of the history view."""
    model_config = ConfigDict(frozen=True)

    category: str = ALL_CATEGORIES
    start: Optional[dt.date] = None
    end: Optional[dt.date] = None


def _parse_filter_date(field: str, value: Union[None, str, dt.date]) -> Optional[dt.date]:
    """Empty values clear a bound; anything else must be an ISO date."""
    if value is None or value == "":
        return None
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValueError(f"{field} ({value!r}) is not in YYYY-MM-DD format")


class TrackerApp:
    """
    Command facade over the ledger, budgets, preferences and access gate.

    Lifecycle:
        app = TrackerApp(store)
        await app.start()          # load snapshots; the gate is locked
        await app.unlock_with_pin("1234")
        ...
        await app.close()          # cancel timers, flush queued writes
    """

    def __init__(
        self,
        store: PersistentStore,
        settings: Optional[TrackerSettings] = None,
        id_generator: Optional[IdGenerator] = None,
        today: Callable[[], dt.date] = dt.date.today,
        scheduler: Scheduler = asyncio_scheduler,
        pin_error_delay: Optional[float] = None,
    ):
        self._settings = settings or get_settings()
        self._store = store
        self._id_generator = id_generator
        self._today = today
        self._scheduler = scheduler
        self._pin_error_delay = pin_error_delay
        self._validator = TransactionValidator(today=today)
        self._logger = get_logger("orchestrator")

        self.preferences = Preferences.defaults(self._settings)
        self.ledger = Ledger(id_generator=id_generator)
        self.budgets = BudgetTracker()
        self.gate = self._build_gate()

        self._period = Period.MONTHLY
        self._filter = HistoryFilter()
        self._pending: set[StoreKey] = set()

    def _build_gate(self) -> AccessGate:
        return AccessGate(
            self.preferences,
            error_delay=self._pin_error_delay,
            scheduler=self._scheduler,
            pin_length=self._settings.pin_length,
        )

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> None:
        """
        Load everything from the store.

        Missing keys fall back to defaults. The gate always starts locked.

        Raises:
            StorageError: a snapshot could not be read or decoded.
                          Nothing is overwritten in that case.
        """
        raw = {key: await self._store.load(key) for key in StoreKey}

        transactions = decode_transactions(raw[StoreKey.TRANSACTIONS])
        budgets = decode_budgets(raw[StoreKey.BUDGETS])
        preferences = decode_preferences(raw, Preferences.defaults(self._settings))

        self.gate.close()
        self.preferences = preferences
        self.ledger = Ledger(transactions, id_generator=self._id_generator)
        self.budgets = BudgetTracker(budgets)
        self.gate = self._build_gate()
        self._pending.clear()

        self._logger.info(
            "tracker_started",
            transactions=len(self.ledger),
            budgets=len(self.budgets),
            has_pin=self.preferences.has_pin,
        )

    async def flush(self) -> bool:
        """
        Retry every queued write.

        Returns:
            True if nothing is left in the queue.
        """
        for key in sorted(self._pending, key=lambda k: k.value):
            await self._persist(key)
        return not self._pending

    async def close(self) -> bool:
        """Tear down: cancel gate timers and flush queued writes."""
        self.gate.close()
        flushed = await self.flush()
        if not flushed:
            self._logger.error(
                "unsaved_changes_on_close",
                keys=sorted(k.value for k in self._pending),
            )
        return flushed

    @property
    def pending_writes(self) -> frozenset[StoreKey]:
        """Keys whose latest state has not reached the store."""
        return frozenset(self._pending)

    # =========================================================================
    # ACCESS
    # =========================================================================

    @property
    def is_locked(self) -> bool:
        return self.gate.is_locked

    @property
    def gate_state(self) -> GateState:
        return self.gate.state

    async def unlock_with_pin(self, digits: str) -> CommandResult:
        """
        Feed PIN input to the gate.

        On first run the entered PIN becomes the stored PIN and is persisted.
        """
        outcome = self.gate.enter(digits)
        result = CommandResult(
            command="unlock_with_pin",
            applied=outcome in (GateOutcome.PIN_CREATED, GateOutcome.UNLOCKED),
            outcome=outcome.value,
        )
        if outcome == GateOutcome.PIN_CREATED:
            return await self._finish(result, StoreKey.PIN)
        return result

    def lock_now(self) -> None:
        """Lock immediately (explicit log out)."""
        self.gate.lock()

    def _require_unlocked(self) -> None:
        if self.gate.is_locked:
            raise AppLockedError("Unlock the app first")

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    async def add_transaction(self, fields: Mapping[str, Any]) -> CommandResult:
        """Validate form fields and record a new transaction."""
        command = "add_transaction"
        if self.gate.is_locked:
            return CommandResult.locked(command)

        draft, validation = self._validator.validate(fields)
        if draft is None:
            self._logger.info("transaction_rejected", issues=[i.issue_type for i in validation.errors])
            return CommandResult.rejected(command, validation.issues)

        transaction = self.ledger.add(draft)
        self._logger.info(
            "transaction_added",
            transaction_id=transaction.id,
            type=transaction.type.value,
            category=transaction.category,
        )
        result = CommandResult(
            command=command,
            applied=True,
            issues=validation.issues,
            entity_id=transaction.id,
            budget_alert=self._budget_alert_for(transaction),
        )
        return await self._finish(result, StoreKey.TRANSACTIONS)

    async def edit_transaction(self, transaction_id: str, fields: Mapping[str, Any]) -> CommandResult:
        """Replace an existing transaction. Unknown ids are a no-op."""
        command = "edit_transaction"
        if self.gate.is_locked:
            return CommandResult.locked(command)

        draft, validation = self._validator.validate(fields)
        if draft is None:
            return CommandResult.rejected(command, validation.issues)

        updated = self.ledger.update(transaction_id, draft)
        if updated is None:
            self._logger.debug("transaction_edit_ignored", transaction_id=transaction_id)
            return CommandResult(command=command, entity_id=transaction_id)

        self._logger.info("transaction_updated", transaction_id=transaction_id)
        result = CommandResult(
            command=command,
            applied=True,
            issues=validation.issues,
            entity_id=transaction_id,
            budget_alert=self._budget_alert_for(updated),
        )
        return await self._finish(result, StoreKey.TRANSACTIONS)

    async def delete_transaction(self, transaction_id: str) -> CommandResult:
        command = "delete_transaction"
        if self.gate.is_locked:
            return CommandResult.locked(command)

        if not self.ledger.remove(transaction_id):
            return CommandResult(command=command, entity_id=transaction_id)

        self._logger.info("transaction_deleted", transaction_id=transaction_id)
        result = CommandResult(command=command, applied=True, entity_id=transaction_id)
        return await self._finish(result, StoreKey.TRANSACTIONS)

    def _budget_alert_for(self, transaction: Transaction) -> bool:
        """An expense in the current month took its category to or past the limit."""
        if not self.preferences.notifications.budget_alert or not transaction.is_expense:
            return False
        today = self._today()
        if not in_period(transaction.date, Period.MONTHLY, today):
            return False
        progress = self.budgets.progress(transaction.category, self.ledger, today)
        return progress is not None and progress.over_budget

    # =========================================================================
    # BUDGETS
    # =========================================================================

    async def add_or_replace_budget(self, category: Any, limit: Any) -> CommandResult:
        command = "add_or_replace_budget"
        if self.gate.is_locked:
            return CommandResult.locked(command)

        budget, validation = validate_budget_fields(category, limit)
        if budget is None:
            return CommandResult.rejected(command, validation.issues)

        self.budgets.upsert(budget.category, budget.limit)
        self._logger.info("budget_saved", category=budget.category, limit=str(budget.limit))
        result = CommandResult(
            command=command,
            applied=True,
            issues=validation.issues,
            entity_id=budget.category,
        )
        return await self._finish(result, StoreKey.BUDGETS)

    async def delete_budget(self, category: str) -> CommandResult:
        command = "delete_budget"
        if self.gate.is_locked:
            return CommandResult.locked(command)

        if not self.budgets.remove(category):
            return CommandResult(command=command, entity_id=category)

        self._logger.info("budget_deleted", category=category)
        result = CommandResult(command=command, applied=True, entity_id=category)
        return await self._finish(result, StoreKey.BUDGETS)

    # =========================================================================
    # VIEW STATE
    # =========================================================================

    @property
    def period_tab(self) -> Period:
        return self._period

    @property
    def history_filter(self) -> HistoryFilter:
        return self._filter

    def set_filter(
        self,
        category: Optional[str] = None,
        start: Union[None, str, dt.date] = None,
        end: Union[None, str, dt.date] = None,
    ) -> CommandResult:
        """
        Set the history criteria.

        category None or "all" means every category; empty bounds are open.
        """
        command = "set_filter"
        if self.gate.is_locked:
            return CommandResult.locked(command)
        try:
            start_date = _parse_filter_date("start", start)
            end_date = _parse_filter_date("end", end)
        except ValueError as e:
            return CommandResult.rejected(command, [ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=str(e),
                severity="error",
            )])

        self._filter = HistoryFilter(
            category=category or ALL_CATEGORIES,
            start=start_date,
            end=end_date,
        )
        return CommandResult(command=command, applied=True)

    def reset_filter(self) -> CommandResult:
        command = "reset_filter"
        if self.gate.is_locked:
            return CommandResult.locked(command)
        self._filter = HistoryFilter()
        return CommandResult(command=command, applied=True)

    def set_period_tab(self, period: Union[str, Period]) -> CommandResult:
        command = "set_period_tab"
        if self.gate.is_locked:
            return CommandResult.locked(command)
        try:
            self._period = Period(period)
        except ValueError:
            return CommandResult.rejected(command, [ValidationIssue(
                field="period",
                issue_type="invalid_value",
                message=f"Period must be daily, monthly or yearly, not {period!r}",
                severity="error",
            )])
        return CommandResult(command=command, applied=True, entity_id=self._period.value)

    # =========================================================================
    # VIEWS
    # =========================================================================

    def get_balance(self) -> Decimal:
        self._require_unlocked()
        return self.ledger.balance()

    def get_period_stats(self, period: Optional[Period] = None) -> PeriodStats:
        """Statistics for a period (the active tab by default) around today."""
        self._require_unlocked()
        return self.ledger.filter_by_period(period or self._period, self._today())

    def get_filtered_history(self) -> list[Transaction]:
        self._require_unlocked()
        return self.ledger.filter_by_criteria(
            category=self._filter.category,
            start=self._filter.start,
            end=self._filter.end,
        )

    def get_expense_distribution(self, period: Optional[Period] = None) -> ExpenseDistribution:
        """Expense breakdown of the period's transactions, labels localized."""
        stats = self.get_period_stats(period)
        return expense_distribution(stats.transactions, language=self.preferences.language)

    def get_budget_progress(self, category: str) -> Optional[BudgetProgress]:
        self._require_unlocked()
        return self.budgets.progress(category, self.ledger, self._today())

    def get_all_budget_progress(self) -> list[BudgetProgress]:
        self._require_unlocked()
        return self.budgets.progress_all(self.ledger, self._today())

    def export_rows(self) -> list[ExportRow]:
        """Every transaction as an export row, in storage order."""
        self._require_unlocked()
        return export_rows(self.ledger.transactions, self.preferences.language)

    def export_csv(self) -> Optional[tuple[str, str]]:
        """
        CSV export of the whole ledger.

        Returns:
            (file_name, csv_text), or None when there is nothing to export.
        """
        rows = self.export_rows()
        if not rows:
            return None
        return export_filename(self._settings.app_name, self._today()), render_csv(rows)

    # =========================================================================
    # PREFERENCES
    # =========================================================================

    async def set_language(self, language: Union[str, Language]) -> CommandResult:
        command = "set_language"
        if self.gate.is_locked:
            return CommandResult.locked(command)
        try:
            self.preferences.language = Language(language)
        except ValueError:
            return CommandResult.rejected(command, [ValidationIssue(
                field="language",
                issue_type="invalid_value",
                message=f"Unsupported language: {language!r}",
                severity="error",
            )])
        result = CommandResult(command=command, applied=True, entity_id=self.preferences.language.value)
        return await self._finish(result, StoreKey.LANGUAGE)

    async def toggle_theme(self) -> CommandResult:
        command = "toggle_theme"
        if self.gate.is_locked:
            return CommandResult.locked(command)
        self.preferences.theme = self.preferences.theme.toggled()
        result = CommandResult(command=command, applied=True, entity_id=self.preferences.theme.value)
        return await self._finish(result, StoreKey.THEME)

    async def set_theme(self, theme: Union[str, Theme]) -> CommandResult:
        command = "set_theme"
        if self.gate.is_locked:
            return CommandResult.locked(command)
        try:
            self.preferences.theme = Theme(theme)
        except ValueError:
            return CommandResult.rejected(command, [ValidationIssue(
                field="theme",
                issue_type="invalid_value",
                message=f"Theme must be light or dark, not {theme!r}",
                severity="error",
            )])
        result = CommandResult(command=command, applied=True, entity_id=self.preferences.theme.value)
        return await self._finish(result, StoreKey.THEME)

    async def set_currency(self, symbol: str) -> CommandResult:
        command = "set_currency"
        if self.gate.is_locked:
            return CommandResult.locked(command)
        candidate = (symbol or "").strip()
        if not candidate or len(candidate) > 5:
            return CommandResult.rejected(command, [ValidationIssue(
                field="currency",
                issue_type="invalid_value",
                message="Currency symbol must be 1 to 5 characters",
                severity="error",
            )])
        self.preferences.currency = candidate
        result = CommandResult(command=command, applied=True, entity_id=candidate)
        return await self._finish(result, StoreKey.CURRENCY)

    async def set_notifications(
        self,
        budget_alert: Optional[bool] = None,
        daily_reminder: Optional[bool] = None,
    ) -> CommandResult:
        """Turn notification flags on or off; None leaves a flag unchanged."""
        command = "set_notifications"
        if self.gate.is_locked:
            return CommandResult.locked(command)
        current = self.preferences.notifications
        self.preferences.notifications = current.model_copy(update={
            key: value
            for key, value in (("budget_alert", budget_alert), ("daily_reminder", daily_reminder))
            if value is not None
        })
        result = CommandResult(command=command, applied=True)
        return await self._finish(result, StoreKey.NOTIFICATIONS)

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _encode(self, key: StoreKey) -> str:
        if key == StoreKey.TRANSACTIONS:
            return encode_transactions(self.ledger.transactions)
        if key == StoreKey.BUDGETS:
            return encode_budgets(self.budgets.budgets)
        if key == StoreKey.LANGUAGE:
            return self.preferences.language.value
        if key == StoreKey.THEME:
            return self.preferences.theme.value
        if key == StoreKey.CURRENCY:
            return self.preferences.currency
        if key == StoreKey.PIN:
            return self.preferences.pin or ""
        if key == StoreKey.NOTIFICATIONS:
            return encode_notifications(self.preferences.notifications)
        raise ValueError(f"Unknown store key: {key!r}")

    async def _persist(self, key: StoreKey) -> Optional[str]:
        """
        Write the current snapshot for a key.

        Returns:
            None on success, otherwise the error message. Failed keys are
            queued for flush().
        """
        try:
            await self._store.save(key, self._encode(key))
        except StorageError as e:
            self._pending.add(key)
            self._logger.error("storage_save_failed", key=key.value, error=str(e))
            return str(e)
        self._pending.discard(key)
        return None

    async def _finish(self, result: CommandResult, key: StoreKey) -> CommandResult:
        """Persist after an applied mutation and record the outcome on the result."""
        error = await self._persist(key)
        if error is None:
            return result.model_copy(update={"persisted": True})
        return result.model_copy(update={
            "persisted": False,
            "error_kind": ErrorKind.STORAGE,
            "message": f"Saved for this session only: {error}",
        })


def create_tracker_app(
    data_dir: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
) -> TrackerApp:
    """
    Factory function to create the application with local file storage.

    Args:
        data_dir: Where snapshots live; defaults to the configured data_dir.
        settings: Settings override, mainly for tests.

    Returns:
        A TrackerApp that still needs `await app.start()`.
    """
    settings = settings or get_settings()
    configure_logging(debug=settings.debug_mode)
    store = JsonFileStore(
        data_dir or settings.data_dir,
        retry_attempts=settings.storage_retry_attempts,
    )
    return TrackerApp(store, settings=settings)
