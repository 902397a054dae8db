"""
Audit Logger

Every user action and every backend failure goes through here.

The audit logger:
- Writes structured events through structlog
- Never raises: a broken log sink must not break a user action
- Supports correlation IDs to tie the events of one action together
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from mengmeng_budget.config import get_settings
from mengmeng_budget.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """
    Configure structlog on top of the standard library logger.

    Defaults come from AppSettings (LOG_LEVEL, LOG_JSON).
    """
    app_settings = get_settings().app
    level = level or app_settings.log_level
    if json_logs is None:
        json_logs = app_settings.log_json

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """Central audit logging service for client-side actions."""

    def __init__(self, logger_name: str = "mengmeng_budget.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> AuditEvent:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Last resort; the user action already happened
            sys.stderr.write(f"audit logging failed: {e}\n")

        return event

    def log_registered(self, user_id: str, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.user_registered(user_id, correlation_id))

    def log_registration_failed(
        self,
        user_id: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.registration_failed(user_id, reason, correlation_id))

    def log_login(self, user_id: str, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.login_succeeded(user_id, correlation_id))

    def log_login_failed(
        self,
        user_id: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.login_failed(user_id, reason, correlation_id))

    def log_logout(self, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.logged_out(correlation_id))

    def log_summary_loaded(
        self,
        income: str,
        balance: str,
        expense: str,
        query_month: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.summary_loaded(
            income=income,
            balance=balance,
            expense=expense,
            query_month=query_month,
            correlation_id=correlation_id,
        ))

    def log_recent_loaded(self, count: int, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.recent_transactions_loaded(count, correlation_id))

    def log_page_loaded(
        self,
        page_num: int,
        count: int,
        query_month: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_page_loaded(
            page_num=page_num,
            count=count,
            query_month=query_month,
            correlation_id=correlation_id,
        ))

    def log_exhausted(
        self,
        total: int,
        query_month: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transactions_exhausted(total, query_month, correlation_id))

    def log_transaction_added(
        self,
        transaction_id: Optional[str],
        type_: str,
        category_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            type_=type_,
            category_id=category_id,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_transaction_rejected(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_rejected(issues, correlation_id))

    def log_family_code(self, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.family_code_generated(correlation_id))

    def log_api_error(
        self,
        operation: str,
        error_code: Optional[int],
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.api_error(
            operation=operation,
            error_code=error_code,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., pull-to-refresh).
    """
    return uuid4()
