"""
Tests for MengMeng Budget models

Test strategy:
1. Unit tests for individual components (models, validators, pager)
2. Flow tests with a mocked API client
3. No real backend calls in tests (use mocks)
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from mengmeng_budget.models import catalog
from mengmeng_budget.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from mengmeng_budget.models.envelope import ApiEnvelope
from mengmeng_budget.models.transaction import (
    HomeSummary,
    NewTransaction,
    SummaryQuery,
    Transaction,
    TransactionFilter,
    TransactionQuery,
    TransactionType,
    parse_datetime,
    to_money,
)
from mengmeng_budget.models.validation import ValidationIssue, ValidationResult


class TestMoney:
    """Tests for amount parsing."""

    def test_float_keeps_short_repr(self):
        assert to_money(35.1) == Decimal("35.10")

    def test_string_is_rounded_to_cents(self):
        assert to_money(" 12.346 ") == Decimal("12.35")
        assert to_money("8") == Decimal("8.00")

    @pytest.mark.parametrize("value", ["abc", "", None, True, float("nan"), "Infinity"])
    def test_rejects_non_amounts(self, value):
        with pytest.raises(ValueError):
            to_money(value)


class TestParseDatetime:
    """Tests for the backend date formats."""

    def test_space_separated(self):
        assert parse_datetime("2025-03-06 12:30:00") == datetime(2025, 3, 6, 12, 30)

    def test_iso_with_t(self):
        assert parse_datetime("2025-03-06T12:30:00") == datetime(2025, 3, 6, 12, 30)

    def test_slash_date(self):
        assert parse_datetime("2025/03/06") == datetime(2025, 3, 6)

    def test_date_object(self):
        assert parse_datetime(date(2025, 3, 6)) == datetime(2025, 3, 6)

    def test_epoch_milliseconds_match_seconds(self):
        assert parse_datetime(1741234567000) == parse_datetime(1741234567)

    def test_utc_suffix_becomes_local_naive(self):
        parsed = parse_datetime("2025-03-06T10:00:00Z")
        expected = datetime(2025, 3, 6, 10, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert parsed.tzinfo is None
        assert parsed == expected

    def test_offset_and_aware_objects_become_naive(self):
        aware = datetime(2025, 3, 6, 18, 0, tzinfo=timezone(timedelta(hours=8)))
        assert parse_datetime("2025-03-06T18:00:00+08:00").tzinfo is None
        assert parse_datetime(aware) == aware.astimezone().replace(tzinfo=None)

    def test_mixed_forms_are_comparable(self):
        values = [parse_datetime("2025-03-06T10:00:00Z"), parse_datetime("2025-03-06 11:00:00")]
        assert len(sorted(values)) == 2

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_datetime("yesterday-ish")


class TestTransaction:
    """Tests for the Transaction model."""

    def test_parses_backend_json(self):
        tx = Transaction.model_validate({
            "id": 42,
            "amount": 35.5,
            "type": "EXPENSE",
            "categoryId": "food",
            "accountId": "alipay",
            "date": "2025-03-06 12:30:00",
            "note": None,
        })
        assert tx.id == "42"
        assert tx.amount == Decimal("35.50")
        assert tx.type == TransactionType.EXPENSE
        assert tx.category_id == "food"
        assert tx.account_id == "alipay"
        assert tx.note == ""
        assert tx.day == date(2025, 3, 6)

    def test_accepts_bare_category_and_remark(self):
        tx = Transaction.model_validate({
            "amount": "10",
            "type": "income",
            "category": "salary",
            "date": "2025-03-01",
            "remark": "三月工资",
        })
        assert tx.category_id == "salary"
        assert tx.note == "三月工资"
        assert tx.account_id == ""
        assert tx.id  # generated

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValueError):
            Transaction(amount="1", type="refund", category_id="food", date=datetime(2025, 3, 1))

    @pytest.mark.parametrize("type_,expected", [
        (TransactionType.EXPENSE, "-¥35.00"),
        (TransactionType.INCOME, "+¥35.00"),
        (TransactionType.TRANSFER, "¥35.00"),
    ])
    def test_formatted_amount(self, type_, expected):
        tx = Transaction(amount="35", type=type_, category_id="food", date=datetime(2025, 3, 1))
        assert tx.formatted_amount == expected

    def test_type_titles(self):
        assert TransactionType.EXPENSE.title == "支出"
        assert TransactionType.INCOME.title == "收入"
        assert TransactionType.TRANSFER.title == "转账"


class TestTransactionFilter:
    """Filter chips map to the backend's (type, category) pair."""

    @pytest.mark.parametrize("chip,expected", [
        (TransactionFilter.ALL, ("", "")),
        (TransactionFilter.EXPENSE, ("expense", "")),
        (TransactionFilter.INCOME, ("income", "")),
        (TransactionFilter.SALARY, ("income", "salary")),
        (TransactionFilter.FOOD, ("expense", "food")),
        (TransactionFilter.ENTERTAINMENT, ("expense", "entertainment")),
        (TransactionFilter.OTHER, ("expense", "other")),
    ])
    def test_to_params(self, chip, expected):
        assert chip.to_params() == expected

    def test_category_chips_name_catalogue_entries(self):
        for chip in TransactionFilter:
            _, category = chip.to_params()
            if category:
                assert catalog.has_category(category)
                assert catalog.get_category(category).name == chip.value


class TestHomeSummary:

    def test_missing_and_invalid_fields_default_to_zero(self):
        summary = HomeSummary.model_validate({"income": "12.5", "expense": None, "balance": "n/a"})
        assert summary.income == Decimal("12.50")
        assert summary.expense == Decimal("0.00")
        assert summary.balance == Decimal("0.00")


class TestQueries:
    """Tests for request bodies."""

    def test_summary_query_for_filter(self):
        query = SummaryQuery.for_filter(TransactionFilter.SALARY, date(2025, 3, 15))
        assert query.to_body() == {
            "type": "income",
            "category": "salary",
            "queryType": 2,
            "queryMonth": "2025-03",
        }

    def test_query_month_format_enforced(self):
        with pytest.raises(ValueError):
            SummaryQuery(query_month="2025-3")
        with pytest.raises(ValueError):
            SummaryQuery(query_month="2025-13")

    def test_transaction_query_page_bounds(self):
        with pytest.raises(ValueError):
            TransactionQuery(query_month="2025-03", page_num=0)
        with pytest.raises(ValueError):
            TransactionQuery(query_month="2025-03", page_size=101)

    def test_transaction_query_defaults(self):
        body = TransactionQuery(query_month="2025-03").to_body()
        assert body["pageNum"] == 1
        assert body["pageSize"] == 10
        assert body["type"] == ""

    def test_new_transaction_body(self):
        new = NewTransaction(
            amount="128.5",
            type=TransactionType.EXPENSE,
            category_id="shopping",
            account_id="wechat",
            date=datetime(2025, 3, 6, 9, 5, 0),
            note="超市购物",
        )
        assert new.to_body() == {
            "amount": 128.5,
            "type": "expense",
            "categoryId": "shopping",
            "accountId": "wechat",
            "date": "2025-03-06 09:05:00",
            "note": "超市购物",
        }

    def test_new_transaction_rejects_zero_amount(self):
        with pytest.raises(ValueError):
            NewTransaction(amount="0", type=TransactionType.EXPENSE, category_id="food", account_id="cash")


class TestEnvelope:

    def test_ok_only_for_200(self):
        assert ApiEnvelope(code=200).ok is True
        assert ApiEnvelope(code=201).ok is False

    def test_code_must_be_integer(self):
        with pytest.raises(ValueError):
            ApiEnvelope.model_validate({"code": "200"})

    def test_extra_fields_ignored(self):
        env = ApiEnvelope.model_validate({"code": 200, "data": [1], "timestamp": 123})
        assert env.data == [1]
        assert env.message is None


class TestCatalog:
    """Tests for the static category and account catalogue."""

    def test_unknown_category_falls_back_to_other(self):
        assert catalog.get_category("nope").id == "other"

    def test_unknown_account_falls_back_to_first(self):
        assert catalog.get_account("nope").id == "alipay"

    def test_account_balance_formatting(self):
        assert catalog.get_account("bank").formatted_balance == "¥35300.45"

    def test_sample_transactions_span_two_days(self):
        now = datetime(2025, 3, 20, 18, 0)
        samples = catalog.sample_transactions(now)
        assert len(samples) == 4
        assert {tx.day for tx in samples} == {date(2025, 3, 20), date(2025, 3, 19)}
        assert all(catalog.has_category(tx.category_id) for tx in samples)
        assert all(catalog.has_account(tx.account_id) for tx in samples)


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            description="User logged in",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.is_user_action is False

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.transaction_added(
            transaction_id="99",
            type_="expense",
            category_id="food",
            amount="35.50",
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transaction_added"
        assert log_dict["entity_id"] == "99"
        assert log_dict["details"]["amount"] == "35.50"
        assert log_dict["correlation_id"] is None

    def test_login_failed_is_warning(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.login_failed("mm01", "密码错误", correlation_id)
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "密码错误"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    @pytest.mark.parametrize("build", [
        AuditEventBuilder.user_registered,
        AuditEventBuilder.login_succeeded,
        lambda user_id: AuditEventBuilder.login_failed(user_id, "密码错误"),
        lambda user_id: AuditEventBuilder.registration_failed(user_id, "用户已存在"),
    ])
    def test_long_user_id_is_clipped_in_description(self, build):
        user_id = "m" * 1000
        event = build(user_id)
        assert len(event.description) < 500
        assert event.entity_id == user_id

    def test_api_error_keeps_code_as_string(self):
        event = AuditEventBuilder.api_error("home-all", 500, "boom")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_code == "500"
        assert event.entity_id == "home-all"

    def test_api_error_without_code(self):
        event = AuditEventBuilder.api_error("home", None, "Network request failed")
        assert event.error_code is None


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        result = ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Please enter an amount",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.warnings == []

    def test_validation_result_warnings_only(self):
        result = ValidationResult(
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.warnings == ["Date in future"]

    def test_severity_is_constrained(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")
