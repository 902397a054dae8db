"""
Add-Transaction Form Validation

Validation happens in two stages:

STAGE 1 - SCHEMA VALIDATION:
- Amount present, numeric and positive
- Category and account exist in the catalogue
- Note length

STAGE 2 - SEMANTIC VALIDATION:
- Suspiciously large amounts
- Dates in the future
- Category that does not match the transaction type

Stage 1 issues are errors and block submission. Stage 2 issues are
warnings: the user sees them, but the transaction is still sent.

Validation NEVER silently fixes input. It only reports.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from mengmeng_budget.config import get_settings
from mengmeng_budget.models import catalog
from mengmeng_budget.models.transaction import (
    NewTransaction,
    TransactionType,
    to_money,
)
from mengmeng_budget.models.validation import ValidationIssue, ValidationResult


MAX_NOTE_LENGTH = 200


class TransactionFormValidator:
    """Validates the raw add-transaction form and builds the payload."""

    def __init__(self, max_amount: Optional[float] = None):
        if max_amount is None:
            max_amount = get_settings().app.max_transaction_amount
        self._max_amount = Decimal(str(max_amount))

    def _parse_amount(self, amount_text: str) -> tuple[Optional[Decimal], Optional[ValidationIssue]]:
        text = (amount_text or "").strip().replace(",", "").lstrip("¥")
        if not text:
            return None, ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Please enter an amount",
                severity="error",
            )
        try:
            amount = to_money(text)
        except ValueError:
            return None, ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"'{amount_text}' is not a valid amount",
                severity="error",
                suggested_fix="Enter a number such as 35.50",
            )
        if amount <= 0:
            return None, ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            )
        return amount, None

    def _validate_schema(
        self,
        amount_text: str,
        category_id: str,
        account_id: str,
        note: str,
    ) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (parsed_amount, list_of_issues)
        """
        issues = []

        amount, amount_issue = self._parse_amount(amount_text)
        if amount_issue:
            issues.append(amount_issue)

        if not category_id:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="missing",
                message="Please choose a category",
                severity="error",
            ))
        elif not catalog.has_category(category_id):
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="unknown",
                message=f"Unknown category: {category_id}",
                severity="error",
            ))

        if not account_id:
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="missing",
                message="Please choose an account",
                severity="error",
            ))
        elif not catalog.has_account(account_id):
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="unknown",
                message=f"Unknown account: {account_id}",
                severity="error",
            ))

        if len(note or "") > MAX_NOTE_LENGTH:
            issues.append(ValidationIssue(
                field="note",
                issue_type="too_long",
                message=f"Note is longer than {MAX_NOTE_LENGTH} characters",
                severity="error",
                suggested_fix="Shorten the note",
            ))

        return amount, issues

    def _validate_semantic(
        self,
        amount: Decimal,
        type_: TransactionType,
        category_id: str,
        when: datetime,
    ) -> list[ValidationIssue]:
        """Stage 2: Semantic validation. Warnings only."""
        issues = []

        if amount > self._max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount (¥{amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if when > datetime.now(when.tzinfo):
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({when:%Y-%m-%d %H:%M}) is in the future",
                severity="warning",
            ))

        if type_ == TransactionType.EXPENSE and category_id in catalog.INCOME_CATEGORY_IDS:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="inconsistent",
                message="An income category is used on an expense",
                severity="warning",
            ))
        elif (
            type_ == TransactionType.INCOME
            and category_id not in catalog.INCOME_CATEGORY_IDS
            and category_id != "other"
        ):
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="inconsistent",
                message="An expense category is used on income",
                severity="warning",
            ))

        return issues

    def validate(
        self,
        amount_text: str,
        type_: TransactionType,
        category_id: str,
        account_id: str,
        note: str = "",
        when: Optional[datetime] = None,
    ) -> tuple[ValidationResult, Optional[NewTransaction]]:
        """
        Validate the form.

        Returns:
            (result, payload). The payload is None whenever there are errors.
        """
        when = when or datetime.now()
        amount, issues = self._validate_schema(amount_text, category_id, account_id, note)

        is_valid = not any(issue.severity == "error" for issue in issues)
        if not is_valid:
            return ValidationResult(is_valid=False, issues=issues), None

        issues.extend(self._validate_semantic(amount, type_, category_id, when))

        payload = NewTransaction(
            amount=amount,
            type=type_,
            category_id=category_id,
            account_id=account_id,
            date=when,
            note=note or "",
        )
        return ValidationResult(is_valid=True, issues=issues), payload

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Short message for the form's alert."""
        if not result.is_valid:
            errors = [i.message for i in result.issues if i.severity == "error"]
            return "❌ " + "; ".join(errors)
        if result.warnings:
            return "⚠️ " + "; ".join(result.warnings)
        return "✅ Looks good"
