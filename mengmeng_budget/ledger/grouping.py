"""
Day grouping for the transaction list.

Transactions are bucketed by calendar day, newest day first, and each
day carries its own income and expense totals. Transfers move money
between the user's own accounts, so they count toward neither total.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Union

from pydantic import BaseModel, Field

from mengmeng_budget.models.transaction import (
    Transaction,
    TransactionType,
    format_money,
)


DAY_KEY_FORMAT = "%Y-%m-%d"


class DailyGroup(BaseModel):
    """All transactions of one calendar day, with per-day totals."""

    day: date
    transactions: list[Transaction] = Field(default_factory=list)
    income: Decimal = Decimal("0.00")
    expense: Decimal = Decimal("0.00")

    @property
    def key(self) -> str:
        return self.day.strftime(DAY_KEY_FORMAT)

    @property
    def income_label(self) -> Optional[str]:
        """Label like 收入 ¥12.00, or None on a day without income."""
        if self.income > 0:
            return f"收入 {format_money(self.income)}"
        return None

    @property
    def expense_label(self) -> Optional[str]:
        if self.expense > 0:
            return f"支出 {format_money(self.expense)}"
        return None

    def header(self, today: Optional[date] = None) -> str:
        return format_date_header(self.day, today=today)


def group_by_day(transactions: Iterable[Transaction]) -> list[DailyGroup]:
    """
    Group transactions by day.

    Days are ordered newest first; within a day, transactions are
    ordered by time, newest first.
    """
    buckets: dict[date, list[Transaction]] = {}
    for transaction in transactions:
        buckets.setdefault(transaction.day, []).append(transaction)

    groups = []
    for day in sorted(buckets, reverse=True):
        daily = sorted(buckets[day], key=lambda t: t.date, reverse=True)
        income = sum(
            (t.amount for t in daily if t.type == TransactionType.INCOME),
            Decimal("0.00"),
        )
        expense = sum(
            (t.amount for t in daily if t.type == TransactionType.EXPENSE),
            Decimal("0.00"),
        )
        groups.append(DailyGroup(
            day=day,
            transactions=daily,
            income=income,
            expense=expense,
        ))
    return groups


def format_date_header(
    day: Union[date, str],
    today: Optional[date] = None,
) -> str:
    """
    Section header for a day: 今天, 昨天, or MM月dd日.

    A string that is not a yyyy-MM-dd date is returned unchanged.
    """
    if isinstance(day, str):
        try:
            day = datetime.strptime(day, DAY_KEY_FORMAT).date()
        except ValueError:
            return day
    elif isinstance(day, datetime):
        day = day.date()

    today = today or date.today()
    if day == today:
        return "今天"
    if day == today - timedelta(days=1):
        return "昨天"
    return day.strftime("%m月%d日")
