"""
Audit Models for MengMeng Budget

Every user action and every backend failure is recorded as an event.
This gives:
1. Traceability of what the user did in a session
2. Debugging information when the backend misbehaves

Events never carry passwords or auth tokens.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Authentication
    USER_REGISTERED = "user_registered"
    REGISTRATION_FAILED = "registration_failed"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGGED_OUT = "logged_out"

    # Reads
    SUMMARY_LOADED = "summary_loaded"
    RECENT_TRANSACTIONS_LOADED = "recent_transactions_loaded"
    TRANSACTION_PAGE_LOADED = "transaction_page_loaded"
    TRANSACTIONS_EXHAUSTED = "transactions_exhausted"

    # Writes
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_REJECTED = "transaction_rejected"

    # Family sharing
    FAMILY_CODE_GENERATED = "family_code_generated"

    # Failures
    API_ERROR = "api_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'transaction', 'page')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Groups the events of one user action
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


def _clip(value: str, limit: int = 64) -> str:
    """Shorten user input quoted in a description."""
    return value if len(value) <= limit else f"{value[:limit]}..."


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login_succeeded(user_id, correlation_id)
        event = AuditEventBuilder.api_error("home-all", 500, "boom", correlation_id)
    """

    @staticmethod
    def user_registered(user_id: str, correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"User registered: {_clip(user_id)}",
            is_user_action=True,
        )

    @staticmethod
    def registration_failed(
        user_id: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Registration failed for {_clip(user_id)}",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(user_id: str, correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"User logged in: {_clip(user_id)}",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(
        user_id: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Login failed for {_clip(user_id)}",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def logged_out(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGGED_OUT,
            entity_type="user",
            correlation_id=correlation_id,
            description="User logged out",
            is_user_action=True,
        )

    @staticmethod
    def summary_loaded(
        income: str,
        balance: str,
        expense: str,
        query_month: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        scope = f" for {query_month}" if query_month else ""
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_LOADED,
            entity_type="summary",
            entity_id=query_month,
            correlation_id=correlation_id,
            description=f"Summary loaded{scope}",
            details={
                "income": income,
                "balance": balance,
                "expense": expense,
            },
        )

    @staticmethod
    def recent_transactions_loaded(
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECENT_TRANSACTIONS_LOADED,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"Loaded {count} recent transactions",
            details={"count": count},
        )

    @staticmethod
    def transaction_page_loaded(
        page_num: int,
        count: int,
        query_month: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_PAGE_LOADED,
            entity_type="page",
            entity_id=str(page_num),
            correlation_id=correlation_id,
            description=f"Loaded page {page_num} of {query_month}: {count} transactions",
            details={
                "page_num": page_num,
                "count": count,
                "query_month": query_month,
            },
        )

    @staticmethod
    def transactions_exhausted(
        total: int,
        query_month: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_EXHAUSTED,
            entity_type="page",
            correlation_id=correlation_id,
            description=f"All {total} transactions of {query_month} loaded",
            details={"total": total, "query_month": query_month},
        )

    @staticmethod
    def transaction_added(
        transaction_id: Optional[str],
        type_: str,
        category_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction added: {type_} {category_id} ¥{amount}",
            details={
                "type": type_,
                "category_id": category_id,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"Transaction form rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def family_code_generated(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FAMILY_CODE_GENERATED,
            entity_type="family",
            correlation_id=correlation_id,
            description="Family share code generated",
            is_user_action=True,
        )

    @staticmethod
    def api_error(
        operation: str,
        error_code: Optional[int],
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.API_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="api",
            entity_id=operation,
            correlation_id=correlation_id,
            description=f"Backend call failed: {operation}",
            error_code=str(error_code) if error_code is not None else None,
            error_message=error_message,
            details={"operation": operation},
        )
