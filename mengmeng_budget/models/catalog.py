"""
Static category and account catalogue.

The backend only stores category and account IDs; names, icons and
colours live on the client. Lookups never fail: unknown category IDs
resolve to "other" and unknown account IDs to the first account.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from mengmeng_budget.models.transaction import (
    Account,
    Category,
    Transaction,
    TransactionType,
)


# App palette
PINK_PRIMARY = "#FF8FAB"
PINK_LIGHT = "#FFE5EC"
PURPLE_PRIMARY = "#B388EB"
PURPLE_LIGHT = "#F0E6FF"
YELLOW_PRIMARY = "#FFC857"
YELLOW_LIGHT = "#FFF4D6"
GREEN_PRIMARY = "#7BD389"
GREEN_LIGHT = "#E3F8E6"
TEXT_SECONDARY = "#8E8E93"


CATEGORIES: tuple[Category, ...] = (
    Category(id="food", name="餐饮", icon="fork.knife", color=PINK_PRIMARY, background_color=PINK_LIGHT),
    Category(id="shopping", name="购物", icon="bag", color=PURPLE_PRIMARY, background_color=PURPLE_LIGHT),
    Category(id="transport", name="交通", icon="car", color=YELLOW_PRIMARY, background_color=YELLOW_LIGHT),
    Category(id="entertainment", name="娱乐", icon="gamecontroller", color=PINK_PRIMARY, background_color=PINK_LIGHT),
    Category(id="housing", name="住房", icon="house", color=GREEN_PRIMARY, background_color=GREEN_LIGHT),
    Category(id="medical", name="医疗", icon="heart", color=PINK_PRIMARY, background_color=PINK_LIGHT),
    Category(id="education", name="教育", icon="book", color=PURPLE_PRIMARY, background_color=PURPLE_LIGHT),
    Category(id="gift", name="礼物", icon="gift", color=YELLOW_PRIMARY, background_color=YELLOW_LIGHT),
    Category(id="salary", name="工资", icon="dollarsign.circle", color=GREEN_PRIMARY, background_color=GREEN_LIGHT),
    Category(id="other", name="其他", icon="ellipsis", color=TEXT_SECONDARY, background_color=PINK_LIGHT),
)

ACCOUNTS: tuple[Account, ...] = (
    Account(id="alipay", name="支付宝", balance=Decimal("3856.75"), icon="creditcard"),
    Account(id="wechat", name="微信", balance=Decimal("2458.10"), icon="message"),
    Account(id="cash", name="现金", balance=Decimal("1250.00"), icon="banknote"),
    Account(id="bank", name="工商银行", balance=Decimal("35300.45"), icon="building.columns"),
)

# Categories that only make sense on the income side
INCOME_CATEGORY_IDS = frozenset({"salary"})

_CATEGORIES_BY_ID = {category.id: category for category in CATEGORIES}
_ACCOUNTS_BY_ID = {account.id: account for account in ACCOUNTS}


def get_category(category_id: str) -> Category:
    """Look up a category, falling back to "other"."""
    return _CATEGORIES_BY_ID.get(category_id, CATEGORIES[-1])


def get_account(account_id: str) -> Account:
    """Look up an account, falling back to the first account."""
    return _ACCOUNTS_BY_ID.get(account_id, ACCOUNTS[0])


def has_category(category_id: str) -> bool:
    return category_id in _CATEGORIES_BY_ID


def has_account(account_id: str) -> bool:
    return account_id in _ACCOUNTS_BY_ID


def sample_transactions(now: Optional[datetime] = None) -> list[Transaction]:
    """Demo transactions for today and yesterday, used before first login."""
    now = now or datetime.now()
    yesterday = now - timedelta(days=1)
    return [
        Transaction(amount="35.0", type=TransactionType.EXPENSE, category_id="food",
                    account_id="alipay", date=now, note="午餐"),
        Transaction(amount="128.5", type=TransactionType.EXPENSE, category_id="shopping",
                    account_id="wechat", date=now, note="超市购物"),
        Transaction(amount="8750.0", type=TransactionType.INCOME, category_id="salary",
                    account_id="bank", date=yesterday, note="工资"),
        Transaction(amount="45.5", type=TransactionType.EXPENSE, category_id="transport",
                    account_id="alipay", date=yesterday, note="打车"),
    ]
