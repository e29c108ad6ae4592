"""
Snapshot Codec

Converts between models and the raw text kept in the store.

Collections are pretty-printed JSON arrays so the files stay readable
by hand. Amounts are written as decimal strings ("1500.50") which
round-trip exactly; plain JSON numbers written by older versions are
accepted on load.
"""

import json
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from taka_tracker.models.budget import CategoryBudget
from taka_tracker.models.preferences import (
    Language,
    NotificationPreferences,
    Preferences,
    Theme,
)
from taka_tracker.models.transaction import Transaction
from taka_tracker.services.storage.interface import CorruptDataError, StoreKey


_transactions_adapter = TypeAdapter(list[Transaction])
_budgets_adapter = TypeAdapter(list[CategoryBudget])


def _dump(payload) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def encode_transactions(transactions) -> str:
    return _dump([t.model_dump(mode="json", by_alias=True) for t in transactions])


def decode_transactions(raw: Optional[str]) -> list[Transaction]:
    """Decode the ledger snapshot; None (never saved) means an empty ledger."""
    if raw is None or not raw.strip():
        return []
    try:
        return _transactions_adapter.validate_json(raw)
    except ValidationError as e:
        raise CorruptDataError(StoreKey.TRANSACTIONS, str(e))


def encode_budgets(budgets) -> str:
    return _dump([b.model_dump(mode="json") for b in budgets])


def decode_budgets(raw: Optional[str]) -> list[CategoryBudget]:
    if raw is None or not raw.strip():
        return []
    try:
        budgets = _budgets_adapter.validate_json(raw)
    except ValidationError as e:
        raise CorruptDataError(StoreKey.BUDGETS, str(e))

    # Keep the one-budget-per-category rule even for hand-edited files:
    # a later entry replaces an earlier one in place.
    by_category: dict[str, CategoryBudget] = {}
    for budget in budgets:
        by_category[budget.category] = budget
    return list(by_category.values())


def encode_notifications(notifications: NotificationPreferences) -> str:
    return json.dumps(notifications.model_dump(by_alias=True))


def decode_notifications(raw: Optional[str]) -> NotificationPreferences:
    if raw is None or not raw.strip():
        return NotificationPreferences()
    try:
        return NotificationPreferences.model_validate_json(raw)
    except ValidationError as e:
        raise CorruptDataError(StoreKey.NOTIFICATIONS, str(e))


def decode_preferences(raw_values: dict[StoreKey, Optional[str]], defaults: Preferences) -> Preferences:
    """
    Build Preferences from the scalar keys.

    Missing or unrecognized scalar values fall back to the defaults;
    a bad theme string is not worth refusing to start over.
    """
    language = defaults.language
    raw_language = raw_values.get(StoreKey.LANGUAGE)
    if raw_language in {lang.value for lang in Language}:
        language = Language(raw_language)

    theme = defaults.theme
    raw_theme = raw_values.get(StoreKey.THEME)
    if raw_theme in {t.value for t in Theme}:
        theme = Theme(raw_theme)

    currency = (raw_values.get(StoreKey.CURRENCY) or "").strip()
    if not currency or len(currency) > 5:
        currency = defaults.currency

    pin = raw_values.get(StoreKey.PIN)
    if pin is not None:
        pin = pin.strip() or None
    if pin is not None:
        if len(pin) != 4 or not (pin.isascii() and pin.isdigit()):
            raise CorruptDataError(StoreKey.PIN, "PIN must be exactly 4 digits")

    return Preferences(
        language=language,
        theme=theme,
        currency=currency,
        pin=pin,
        notifications=decode_notifications(raw_values.get(StoreKey.NOTIFICATIONS)),
    )
