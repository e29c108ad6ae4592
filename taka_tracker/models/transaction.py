"""
Transaction Models

A transaction is one income or expense entry. The ledger owns them; every
other component reads them.

DESIGN DECISION: amounts are always positive. The sign lives in `type`,
so a transaction can move between income and expense on edit without
touching its amount.

Field names follow Python conventions; stored snapshots use the
`paymentMethod` alias so the JSON matches the existing data layout.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


class TransactionType(str, Enum):
    """Which side of the ledger an entry is on."""
    INCOME = "income"
    EXPENSE = "expense"


class Period(str, Enum):
    """Statistics window, always relative to a reference day."""
    DAILY = "daily"      # same calendar day
    MONTHLY = "monthly"  # same year and month
    YEARLY = "yearly"    # same year


class TransactionDraft(BaseModel):
    """
    Everything needed to create or edit a transaction, minus the id.

    The ledger assigns ids; callers only ever hand over drafts.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        frozen=True,
    )

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in the app currency (always positive, any precision)"
    )
    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category key, free-form keys shown verbatim"
    )
    payment_method: str = Field(
        ...,
        min_length=1,
        alias="paymentMethod",
        description="Payment method key"
    )
    date: dt.date = Field(
        ...,
        description="Day of the transaction"
    )
    note: str = Field(
        default="",
        description="Free text note"
    )

    @field_validator("amount")
    @classmethod
    def amount_must_be_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("Amount must be a finite number")
        return v

    @property
    def signed_amount(self) -> Decimal:
        """Amount with its ledger sign: income positive, expense negative."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME


class Transaction(TransactionDraft):
    """A transaction owned by the ledger."""

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique id, never reused"
    )

    @classmethod
    def from_draft(cls, transaction_id: str, draft: TransactionDraft) -> "Transaction":
        """Attach an id to a draft."""
        return cls(id=transaction_id, **draft.model_dump(exclude={"id"}))

    def to_draft(self) -> TransactionDraft:
        return TransactionDraft(**self.model_dump(exclude={"id"}))
