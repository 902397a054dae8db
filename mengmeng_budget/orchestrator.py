"""
Screen Flows for MengMeng Budget

Ties the API client, the pager, the form validator and the audit log
together into one flow per app screen:
1. Auth (login / register / logout)
2. Home (summary + recent transactions)
3. Transaction list (monthly summary + paged, day-grouped list)
4. Add transaction (validate → submit)
5. Profile (family code, logout)

Flows turn expected backend failures into (ok, message) results for the
presentation layer. Every user action is audited. Anything that is not
an ApiError is a bug and propagates.
"""

from datetime import date, datetime
from typing import NamedTuple, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from mengmeng_budget.audit import AuditLogger, configure_logging, create_correlation_id
from mengmeng_budget.ledger import DailyGroup, TransactionPager
from mengmeng_budget.models import catalog
from mengmeng_budget.models.transaction import (
    HomeSummary,
    SummaryQuery,
    Transaction,
    TransactionFilter,
    TransactionType,
)
from mengmeng_budget.models.validation import ValidationResult
from mengmeng_budget.services.api import (
    ApiError,
    ApiResponseError,
    BudgetApiClient,
    NotAuthenticatedError,
    get_client,
)
from mengmeng_budget.validation import TransactionFormValidator


def _error_code(error: ApiError) -> Optional[int]:
    return error.code if isinstance(error, ApiResponseError) else None


class AuthFlow:
    """Login, registration and logout."""

    def __init__(self, client: BudgetApiClient, audit_logger: AuditLogger):
        self._client = client
        self._audit_logger = audit_logger

    def login(
        self,
        user_id: str,
        password: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[bool, str]:
        correlation_id = correlation_id or create_correlation_id()
        user_id = (user_id or "").strip()

        if not user_id or not password:
            return False, "Please enter your ID and password"

        try:
            self._client.login(user_id, password)
        except ApiError as e:
            self._audit_logger.log_login_failed(user_id, str(e), correlation_id)
            return False, str(e)

        self._audit_logger.log_login(user_id, correlation_id)
        return True, "Logged in"

    def register(
        self,
        user_id: str,
        username: str,
        password: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[bool, str]:
        """
        Create an account. The user still has to log in afterwards.
        """
        correlation_id = correlation_id or create_correlation_id()
        user_id = (user_id or "").strip()
        username = (username or "").strip()

        if not user_id or not username or not password:
            return False, "Please fill in ID, username and password"

        try:
            self._client.register(user_id, username, password)
        except ApiError as e:
            self._audit_logger.log_registration_failed(user_id, str(e), correlation_id)
            return False, str(e)

        self._audit_logger.log_registered(user_id, correlation_id)
        return True, "Registered, please log in"

    def logout(self, correlation_id: Optional[UUID] = None) -> None:
        self._client.logout()
        self._audit_logger.log_logout(correlation_id)

    @property
    def is_logged_in(self) -> bool:
        return self._client.is_logged_in


class HomeSnapshot(BaseModel):
    """Everything the home screen shows."""

    summary: HomeSummary = Field(default_factory=HomeSummary)
    recent: list[Transaction] = Field(default_factory=list)
    is_sample: bool = False


class HomeFlow:
    """Home screen: overall summary plus the latest transactions."""

    def __init__(self, client: BudgetApiClient, audit_logger: AuditLogger):
        self._client = client
        self._audit_logger = audit_logger

    def load(self, correlation_id: Optional[UUID] = None) -> tuple[bool, str, HomeSnapshot]:
        """
        Load the home screen.

        Before login the screen shows demo transactions and a zero summary.
        """
        correlation_id = correlation_id or create_correlation_id()

        if not self._client.is_logged_in:
            snapshot = HomeSnapshot(recent=catalog.sample_transactions(), is_sample=True)
            return False, str(NotAuthenticatedError()), snapshot

        try:
            summary = self._client.get_home_summary()
            recent = self._client.get_recent_transactions()
        except ApiError as e:
            self._audit_logger.log_api_error("home", _error_code(e), str(e), correlation_id)
            return False, str(e), HomeSnapshot()

        self._audit_logger.log_summary_loaded(
            income=str(summary.income),
            balance=str(summary.balance),
            expense=str(summary.expense),
            correlation_id=correlation_id,
        )
        self._audit_logger.log_recent_loaded(len(recent), correlation_id)
        return True, "Loaded", HomeSnapshot(summary=summary, recent=recent)


class TransactionListFlow:
    """
    Transaction list screen.

    Holds the selected filter and month, the monthly summary for that
    selection, and the accumulated pages.
    """

    def __init__(
        self,
        client: BudgetApiClient,
        audit_logger: AuditLogger,
        pager: Optional[TransactionPager] = None,
    ):
        self._client = client
        self._audit_logger = audit_logger
        self._pager = pager or TransactionPager(client)
        self.summary = HomeSummary()

    @property
    def pager(self) -> TransactionPager:
        return self._pager

    @property
    def groups(self) -> list[DailyGroup]:
        return self._pager.groups

    @property
    def month_label(self) -> str:
        return self._pager.month_label

    @property
    def has_more(self) -> bool:
        return self._pager.has_more

    @property
    def error_message(self) -> Optional[str]:
        return self._pager.error_message

    def _load_page(self, correlation_id: UUID) -> tuple[bool, str]:
        page_num = self._pager.current_page
        try:
            page = self._pager.load_next()
        except ApiError as e:
            self._audit_logger.log_api_error("home-all", _error_code(e), str(e), correlation_id)
            return False, str(e)

        self._audit_logger.log_page_loaded(
            page_num=page_num,
            count=len(page),
            query_month=self._pager.query_month,
            correlation_id=correlation_id,
        )
        if not self._pager.has_more:
            self._audit_logger.log_exhausted(
                total=len(self._pager.transactions),
                query_month=self._pager.query_month,
                correlation_id=correlation_id,
            )
        return True, f"Loaded {len(page)} transactions"

    def _load_summary(self, correlation_id: UUID) -> None:
        """Monthly summary; a failure keeps the previous figures."""
        query = SummaryQuery.for_filter(self._pager.transaction_filter, self._pager.month)
        try:
            self.summary = self._client.get_home_summary(query)
        except ApiError as e:
            self._audit_logger.log_api_error("home-summary", _error_code(e), str(e), correlation_id)
            return

        self._audit_logger.log_summary_loaded(
            income=str(self.summary.income),
            balance=str(self.summary.balance),
            expense=str(self.summary.expense),
            query_month=query.query_month,
            correlation_id=correlation_id,
        )

    def refresh(self, correlation_id: Optional[UUID] = None) -> tuple[bool, str]:
        """Reload page 1 and the monthly summary for the current selection."""
        correlation_id = correlation_id or create_correlation_id()
        self._pager.reset()
        result = self._load_page(correlation_id)
        self._load_summary(correlation_id)
        return result

    def load_more(self, correlation_id: Optional[UUID] = None) -> tuple[bool, str]:
        correlation_id = correlation_id or create_correlation_id()
        if not self._pager.has_more:
            return True, "No more transactions"
        return self._load_page(correlation_id)

    def select_filter(self, transaction_filter: TransactionFilter) -> tuple[bool, str]:
        self._pager.select_filter(transaction_filter)
        return self.refresh()

    def select_month(self, month: date) -> tuple[bool, str]:
        self._pager.select_month(month)
        return self.refresh()

    def next_month(self) -> tuple[bool, str]:
        if not self._pager.can_go_next:
            return False, "Already at the current month"
        self._pager.next_month()
        return self.refresh()

    def previous_month(self) -> tuple[bool, str]:
        self._pager.previous_month()
        return self.refresh()


class AddTransactionFlow:
    """Add-transaction form: validate, then submit."""

    def __init__(
        self,
        client: BudgetApiClient,
        audit_logger: AuditLogger,
        validator: Optional[TransactionFormValidator] = None,
    ):
        self._client = client
        self._audit_logger = audit_logger
        self._validator = validator or TransactionFormValidator()

    def validate(
        self,
        amount_text: str,
        type_: TransactionType,
        category_id: str,
        account_id: str,
        note: str = "",
        when: Optional[datetime] = None,
    ) -> tuple[ValidationResult, str]:
        """Validate without submitting, for live form feedback."""
        result, _ = self._validator.validate(
            amount_text, type_, category_id, account_id, note, when
        )
        return result, self._validator.get_user_friendly_summary(result)

    def submit(
        self,
        amount_text: str,
        type_: TransactionType,
        category_id: str,
        account_id: str,
        note: str = "",
        when: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[bool, str, Optional[Transaction]]:
        """
        Validate the form and send it.

        Returns:
            (ok, message, created_transaction)
        """
        correlation_id = correlation_id or create_correlation_id()

        result, payload = self._validator.validate(
            amount_text, type_, category_id, account_id, note, when
        )
        message = self._validator.get_user_friendly_summary(result)

        if payload is None:
            issues = [
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in result.issues
            ]
            self._audit_logger.log_transaction_rejected(issues, correlation_id)
            return False, message, None

        try:
            created = self._client.add_transaction(payload)
        except ApiError as e:
            self._audit_logger.log_api_error("add", _error_code(e), str(e), correlation_id)
            return False, str(e), None

        self._audit_logger.log_transaction_added(
            transaction_id=created.id,
            type_=created.type.value,
            category_id=created.category_id,
            amount=str(created.amount),
            correlation_id=correlation_id,
        )
        return True, message, created


class ProfileFlow:
    """Profile screen: family share code and logout."""

    def __init__(self, client: BudgetApiClient, audit_logger: AuditLogger):
        self._client = client
        self._audit_logger = audit_logger

    def generate_family_code(self, correlation_id: Optional[UUID] = None) -> tuple[bool, str]:
        """
        Returns:
            (True, code) on success, (False, error_message) otherwise
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            code = self._client.generate_family_code()
        except ApiError as e:
            self._audit_logger.log_api_error(
                "generate-family", _error_code(e), str(e), correlation_id
            )
            return False, str(e)

        self._audit_logger.log_family_code(correlation_id)
        return True, code

    def logout(self, correlation_id: Optional[UUID] = None) -> None:
        self._client.logout()
        self._audit_logger.log_logout(correlation_id)


class AppComponents(NamedTuple):
    client: BudgetApiClient
    auth: AuthFlow
    home: HomeFlow
    transactions: TransactionListFlow
    add_transaction: AddTransactionFlow
    profile: ProfileFlow


def create_app_components(
    client: Optional[BudgetApiClient] = None,
    audit_logger: Optional[AuditLogger] = None,
    setup_logging: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    All flows share one client, so logging in through `auth` is seen by
    every other screen.

    Args:
        client: Client to use; defaults to the process-wide shared client
        audit_logger: Audit sink; defaults to a new AuditLogger
        setup_logging: Configure structlog from settings first
    """
    if setup_logging:
        configure_logging()

    client = client or get_client()
    audit_logger = audit_logger or AuditLogger()

    return AppComponents(
        client=client,
        auth=AuthFlow(client, audit_logger),
        home=HomeFlow(client, audit_logger),
        transactions=TransactionListFlow(client, audit_logger),
        add_transaction=AddTransactionFlow(client, audit_logger),
        profile=ProfileFlow(client, audit_logger),
    )
