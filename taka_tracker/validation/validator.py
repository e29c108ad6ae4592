"""
Two-Stage Validation Pipeline

Transaction and budget input arrives from the presentation layer as loose
form fields (strings, numbers, missing keys). It goes through two stages
before anything touches the ledger:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Amount is a finite, positive number
- Type is income or expense
- Date is an ISO calendar date
Any failure here is an error and blocks the mutation.

STAGE 2 - SEMANTIC VALIDATION:
- Category belongs to the vocabulary of the transaction type
- Payment method is known
- Date is not in the future
- Amount has at most two decimal places, note is not overly long
These are warnings only. Unknown keys are kept and shown verbatim.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the form.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from taka_tracker.models.budget import CategoryBudget
from taka_tracker.models.results import ValidationIssue, ValidationResult
from taka_tracker.models.transaction import TransactionDraft, TransactionType
from taka_tracker.models.vocabulary import (
    EXPENSE_CATEGORIES,
    PAYMENT_METHODS,
    categories_for,
)


# Form input beyond these is accepted with a warning; stored records are never capped
AMOUNT_DISPLAY_PLACES = 2
NOTE_SOFT_LIMIT = 500


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse a form amount into a Decimal.

    Returns None for anything that is not a finite number. Floats go through
    str() so 0.1 becomes Decimal("0.1") rather than its binary expansion.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite():
        return None
    return amount


def _parse_date(value: Any) -> Optional[dt.date]:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            return dt.date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _issues_from_pydantic(error: ValidationError) -> list[ValidationIssue]:
    """Translate pydantic errors into validation issues."""
    issues = []
    for err in error.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "input"
        issues.append(ValidationIssue(
            field=field,
            issue_type="invalid_value",
            message=err.get("msg", "Invalid value"),
            severity="error",
        ))
    return issues


class TransactionValidator:
    """
    Validates transaction form fields through a two-stage pipeline.

    Stage 1: Schema validation (blocks on error)
    Stage 2: Semantic validation (warnings only)
    """

    def __init__(self, today: Callable[[], dt.date] = dt.date.today):
        """
        Initialize validator.

        Args:
            today: Clock used for the future-date check.
        """
        self._today = today

    def _validate_schema(
        self,
        fields: Mapping[str, Any],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        raw_amount = fields.get("amount")
        amount = parse_amount(raw_amount)
        if raw_amount is None or (isinstance(raw_amount, str) and not raw_amount.strip()):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter how much was spent or received",
            ))
        elif amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount ({raw_amount!r}) is not a number",
                severity="error",
                suggested_fix="Use digits only, e.g. 1500 or 1500.50",
            ))
        elif amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Choose income or expense instead of entering a negative amount",
            ))

        raw_type = fields.get("type")
        if not isinstance(raw_type, str) or raw_type not in {t.value for t in TransactionType}:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message="Type must be 'income' or 'expense'",
                severity="error",
            ))

        category = fields.get("category")
        if not isinstance(category, str) or not category.strip():
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
                severity="error",
            ))

        method = fields.get("payment_method", fields.get("paymentMethod"))
        if not isinstance(method, str) or not method.strip():
            issues.append(ValidationIssue(
                field="payment_method",
                issue_type="missing",
                message="Payment method is required",
                severity="error",
            ))

        raw_date = fields.get("date")
        if raw_date is None or raw_date == "":
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
                severity="error",
            ))
        elif _parse_date(raw_date) is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Date ({raw_date!r}) is not in YYYY-MM-DD format",
                severity="error",
            ))

        note = fields.get("note")
        if note is not None and not isinstance(note, str):
            issues.append(ValidationIssue(
                field="note",
                issue_type="invalid_format",
                message="Note must be text",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        draft: TransactionDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Only produces warnings; a transaction with an unusual category
        is still recorded.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if draft.category not in categories_for(draft.type):
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=(
                    f"Category '{draft.category}' is not a standard "
                    f"{draft.type.value} category"
                ),
                severity="warning",
                suggested_fix="It will be shown exactly as entered",
            ))

        if draft.payment_method not in PAYMENT_METHODS:
            issues.append(ValidationIssue(
                field="payment_method",
                issue_type="unknown_payment_method",
                message=f"Payment method '{draft.payment_method}' is not a standard method",
                severity="warning",
            ))

        if draft.amount.as_tuple().exponent < -AMOUNT_DISPLAY_PLACES:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="extra_precision",
                message=f"Amount ({draft.amount}) has more than {AMOUNT_DISPLAY_PLACES} decimal places",
                severity="warning",
                suggested_fix="It is stored exactly as entered",
            ))

        if len(draft.note) > NOTE_SOFT_LIMIT:
            issues.append(ValidationIssue(
                field="note",
                issue_type="long_text",
                message=f"Note is longer than {NOTE_SOFT_LIMIT} characters",
                severity="warning",
            ))

        if draft.date > self._today():
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({draft.date.isoformat()}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        fields: Mapping[str, Any],
    ) -> tuple[Optional[TransactionDraft], ValidationResult]:
        """
        Run full two-stage validation pipeline.

        Args:
            fields: Raw form fields (amount, type, category, payment_method
                    or paymentMethod, date, note)

        Returns:
            (draft, result). draft is None unless schema validation passed.
        """
        all_issues = []
        draft = None

        schema_valid, schema_issues = self._validate_schema(fields)
        all_issues.extend(schema_issues)

        if schema_valid:
            try:
                draft = TransactionDraft(
                    amount=parse_amount(fields["amount"]),
                    type=TransactionType(fields["type"]),
                    category=fields["category"],
                    payment_method=fields.get("payment_method", fields.get("paymentMethod")),
                    date=_parse_date(fields["date"]),
                    note=fields.get("note") or "",
                )
            except ValidationError as e:
                schema_valid = False
                all_issues.extend(_issues_from_pydantic(e))

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if draft is not None:
            semantic_valid, semantic_issues = self._validate_semantic(draft)
            all_issues.extend(semantic_issues)

        return draft, ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=[i.message for i in all_issues if i.severity == "warning"],
        )


def validate_budget_fields(
    category: Any,
    limit: Any,
) -> tuple[Optional[CategoryBudget], ValidationResult]:
    """
    Validate a budget form.

    A category outside the expense vocabulary is accepted with a warning.
    """
    issues = []

    if not isinstance(category, str) or not category.strip():
        issues.append(ValidationIssue(
            field="category",
            issue_type="missing",
            message="Category is required",
            severity="error",
        ))

    parsed_limit = parse_amount(limit)
    if limit is None or (isinstance(limit, str) and not limit.strip()):
        issues.append(ValidationIssue(
            field="limit",
            issue_type="missing",
            message="Budget limit is required",
            severity="error",
        ))
    elif parsed_limit is None:
        issues.append(ValidationIssue(
            field="limit",
            issue_type="invalid_format",
            message=f"Budget limit ({limit!r}) is not a number",
            severity="error",
        ))
    elif parsed_limit <= 0:
        issues.append(ValidationIssue(
            field="limit",
            issue_type="invalid_value",
            message="Budget limit must be greater than zero",
            severity="error",
        ))

    budget = None
    schema_valid = not issues
    if schema_valid:
        try:
            budget = CategoryBudget(category=category, limit=parsed_limit)
        except ValidationError as e:
            schema_valid = False
            issues.extend(_issues_from_pydantic(e))

    if budget is not None and budget.category not in EXPENSE_CATEGORIES:
        issues.append(ValidationIssue(
            field="category",
            issue_type="unknown_category",
            message=f"Category '{budget.category}' is not a standard expense category",
            severity="warning",
        ))

    return budget, ValidationResult(
        schema_valid=schema_valid,
        semantic_valid=budget is not None,
        is_valid=budget is not None,
        issues=issues,
        warnings=[i.message for i in issues if i.severity == "warning"],
    )
