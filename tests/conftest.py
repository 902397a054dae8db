"""
Shared fixtures.

No test talks to a real backend: HTTP goes through a mocked
requests.Session that returns canned envelopes.
"""

import json
from datetime import date, datetime, timedelta
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
import requests

from mengmeng_budget.config import ApiSettings
from mengmeng_budget.models.transaction import Transaction, TransactionType
from mengmeng_budget.services.api import BudgetApiClient


def make_response(
    payload: Any = None,
    status: int = 200,
    text: Optional[str] = None,
) -> requests.Response:
    """Build a real requests.Response with a JSON (or raw text) body."""
    response = requests.Response()
    response.status_code = status
    body = text if text is not None else json.dumps(payload, ensure_ascii=False)
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    response.headers["Content-Type"] = "application/json"
    return response


def envelope(data: Any = None, code: int = 200, message: Optional[str] = None) -> dict:
    body = {"code": code, "data": data}
    if message is not None:
        body["message"] = message
    return body


def transaction_json(
    id_: int = 1,
    amount: float = 35.5,
    type_: str = "expense",
    category: str = "food",
    when: str = "2025-03-06 12:30:00",
    note: str = "午餐",
) -> dict:
    return {
        "id": id_,
        "amount": amount,
        "type": type_,
        "categoryId": category,
        "accountId": "alipay",
        "date": when,
        "note": note,
    }


def make_transaction(
    amount: str = "10.00",
    type_: TransactionType = TransactionType.EXPENSE,
    when: Optional[datetime] = None,
    category_id: str = "food",
) -> Transaction:
    return Transaction(
        amount=amount,
        type=type_,
        category_id=category_id,
        account_id="alipay",
        date=when or datetime(2025, 3, 6, 12, 0),
    )


def make_page(count: int, day: date = date(2025, 3, 20)) -> list[Transaction]:
    start = datetime(day.year, day.month, day.day, 20, 0)
    return [
        make_transaction(amount=str(i + 1), when=start - timedelta(hours=i))
        for i in range(count)
    ]


@pytest.fixture
def api_settings() -> ApiSettings:
    return ApiSettings(
        base_url="http://budget.test/api/",
        timeout_seconds=5,
        max_retries=2,
        retry_backoff_seconds=0,
        page_size=10,
    )


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(api_settings, session) -> BudgetApiClient:
    return BudgetApiClient(settings=api_settings, session=session)


@pytest.fixture
def logged_in_client(client) -> BudgetApiClient:
    client.set_token("test-token")
    return client


@pytest.fixture
def mock_client() -> MagicMock:
    """A BudgetApiClient stand-in for flow and pager tests."""
    mock = MagicMock(spec=BudgetApiClient)
    mock.is_logged_in = True
    return mock
