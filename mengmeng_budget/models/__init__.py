"""
Data Models Package

This package contains all Pydantic models used by the MengMeng Budget client.
All data crossing the network boundary must conform to these schemas.
"""

from mengmeng_budget.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from mengmeng_budget.models.envelope import SUCCESS_CODE, ApiEnvelope
from mengmeng_budget.models.transaction import (
    MONTHLY_QUERY,
    Account,
    Category,
    HomeSummary,
    NewTransaction,
    SummaryQuery,
    Transaction,
    TransactionFilter,
    TransactionQuery,
    TransactionType,
    format_money,
    parse_datetime,
    to_money,
)
from mengmeng_budget.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Transaction models
    "MONTHLY_QUERY",
    "Account",
    "Category",
    "HomeSummary",
    "NewTransaction",
    "SummaryQuery",
    "Transaction",
    "TransactionFilter",
    "TransactionQuery",
    "TransactionType",
    "format_money",
    "parse_datetime",
    "to_money",
    # Envelope
    "SUCCESS_CODE",
    "ApiEnvelope",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
