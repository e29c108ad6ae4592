"""
Category and Payment Method Vocabularies

Income and expense categories are disjoint fixed sets. Stored records may
still carry keys from neither set (older data, imports); those keys are
kept as-is and displayed verbatim.

Labels exist in Bengali (default) and English.
"""

from typing import Optional

from taka_tracker.models.preferences import Language
from taka_tracker.models.transaction import TransactionType


INCOME_CATEGORIES: tuple[str, ...] = (
    "salary",
    "business",
    "freelance",
    "gift",
    "investment",
    "other_income",
)

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "food",
    "transport",
    "rent",
    "utilities",
    "shopping",
    "health",
    "education",
    "entertainment",
    "bills",
    "others",
)

PAYMENT_METHODS: tuple[str, ...] = (
    "cash",
    "bkash",
    "nagad",
    "card",
    "bank",
)


CATEGORY_LABELS: dict[Language, dict[str, str]] = {
    Language.BN: {
        "salary": "বেতন",
        "business": "ব্যবসা",
        "freelance": "ফ্রিল্যান্সিং",
        "gift": "উপহার",
        "investment": "বিনিয়োগ",
        "other_income": "অন্যান্য আয়",
        "food": "খাবার",
        "transport": "যাতায়াত",
        "rent": "বাসা ভাড়া",
        "utilities": "ইউটিলিটি",
        "shopping": "কেনাকাটা",
        "health": "স্বাস্থ্য",
        "education": "শিক্ষা",
        "entertainment": "বিনোদন",
        "bills": "বিল",
        "others": "অন্যান্য",
    },
    Language.EN: {
        "salary": "Salary",
        "business": "Business",
        "freelance": "Freelance",
        "gift": "Gift",
        "investment": "Investment",
        "other_income": "Other Income",
        "food": "Food",
        "transport": "Transport",
        "rent": "Rent",
        "utilities": "Utilities",
        "shopping": "Shopping",
        "health": "Health",
        "education": "Education",
        "entertainment": "Entertainment",
        "bills": "Bills",
        "others": "Others",
    },
}

PAYMENT_LABELS: dict[Language, dict[str, str]] = {
    Language.BN: {
        "cash": "নগদ",
        "bkash": "বিকাশ",
        "nagad": "নগদ (মোবাইল)",
        "card": "কার্ড",
        "bank": "ব্যাংক",
    },
    Language.EN: {
        "cash": "Cash",
        "bkash": "bKash",
        "nagad": "Nagad",
        "card": "Card",
        "bank": "Bank",
    },
}

# Export keeps the type column in English regardless of language
TYPE_LABELS: dict[TransactionType, str] = {
    TransactionType.INCOME: "Income",
    TransactionType.EXPENSE: "Expense",
}


def categories_for(transaction_type: TransactionType) -> tuple[str, ...]:
    """Get the category vocabulary for a transaction type."""
    if transaction_type == TransactionType.INCOME:
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES


def is_known_category(category: str, transaction_type: Optional[TransactionType] = None) -> bool:
    """Check a category key against one vocabulary, or both when no type is given."""
    if transaction_type is None:
        return category in INCOME_CATEGORIES or category in EXPENSE_CATEGORIES
    return category in categories_for(transaction_type)


def category_label(category: str, language: Language = Language.BN) -> str:
    """Localized label for a category; unknown keys come back verbatim."""
    return CATEGORY_LABELS[language].get(category, category)


def payment_label(method: str, language: Language = Language.BN) -> str:
    """Localized label for a payment method; unknown keys come back verbatim."""
    return PAYMENT_LABELS[language].get(method, method)


def type_label(transaction_type: TransactionType) -> str:
    return TYPE_LABELS[transaction_type]
