"""
Core Data Models for MengMeng Budget

These models define the schemas of everything the client sends to or
receives from the backend. They are designed to:
1. Accept the backend's camelCase JSON as-is
2. Keep money in Decimal, rounded to cents
3. Produce the exact request bodies each endpoint expects

All entities are transient: they are rebuilt from every response.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


CENT = Decimal("0.01")

# Backend "queryType" for a month-scoped query
MONTHLY_QUERY = 2

_DATETIME_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y-%m-%d",
    "%Y/%m/%d",
]


def to_money(value: Any) -> Decimal:
    """Convert a JSON number or numeric string to a cent-rounded Decimal."""
    if isinstance(value, bool):
        raise ValueError("Boolean is not an amount")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            # str() first so floats keep their short repr (35.1, not 35.0999...)
            amount = Decimal(str(value).strip())
        except (InvalidOperation, TypeError, ValueError):
            raise ValueError(f"Not a valid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Not a valid amount: {value!r}")
    try:
        return amount.quantize(CENT)
    except InvalidOperation:
        raise ValueError(f"Amount out of range: {value!r}")


def _local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_datetime(value: Any) -> datetime:
    """
    Parse the date representations the backend is known to send.

    Accepts datetime/date objects, ISO-8601 strings, the common
    "yyyy-MM-dd HH:mm:ss" style, and epoch seconds or milliseconds.
    The result is always naive local time, so values from different
    forms compare and fall on the user's calendar day.
    """
    if isinstance(value, datetime):
        return _local_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if abs(value) > 1e11 else value
        return datetime.fromtimestamp(seconds)
    if isinstance(value, str):
        text = value.strip()
        try:
            return _local_naive(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError:
            pass
        for fmt in _DATETIME_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
    raise ValueError(f"Unrecognized date: {value!r}")


def format_money(amount: Decimal) -> str:
    return f"¥{amount:.2f}"


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Transaction direction."""
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"

    @property
    def title(self) -> str:
        return _TYPE_TITLES[self]


_TYPE_TITLES = {
    TransactionType.EXPENSE: "支出",
    TransactionType.INCOME: "收入",
    TransactionType.TRANSFER: "转账",
}


class TransactionFilter(str, Enum):
    """
    Filter chips on the transaction list.

    Each chip narrows the list by transaction type, category, or both.
    """
    ALL = "全部"
    EXPENSE = "支出"
    INCOME = "收入"
    FOOD = "餐饮"
    SHOPPING = "购物"
    TRANSPORT = "交通"
    ENTERTAINMENT = "娱乐"
    HOUSING = "住房"
    MEDICAL = "医疗"
    EDUCATION = "教育"
    GIFT = "礼物"
    SALARY = "工资"
    OTHER = "其他"

    def to_params(self) -> tuple[str, str]:
        """
        Map the chip to the backend's (type, category) pair.

        An empty string means "no constraint".
        """
        if self is TransactionFilter.ALL:
            return "", ""
        if self is TransactionFilter.EXPENSE:
            return TransactionType.EXPENSE.value, ""
        if self is TransactionFilter.INCOME:
            return TransactionType.INCOME.value, ""
        if self is TransactionFilter.SALARY:
            return TransactionType.INCOME.value, "salary"
        return TransactionType.EXPENSE.value, self.name.lower()


# =============================================================================
# CORE ENTITIES
# =============================================================================

class Transaction(BaseModel):
    """
    A single bookkeeping entry as returned by the backend.

    The backend speaks camelCase; both `categoryId` and the bare
    `category` spelling are accepted.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: str = Field(
        default_factory=lambda: uuid4().hex,
        description="Server-side transaction ID"
    )
    amount: Decimal = Field(
        ...,
        description="Amount in CNY, as entered (sign comes from type)"
    )
    type: TransactionType
    category_id: str = Field(
        ...,
        validation_alias=AliasChoices("category_id", "categoryId", "category"),
    )
    account_id: str = Field(
        default="",
        validation_alias=AliasChoices("account_id", "accountId", "account"),
    )
    date: datetime
    note: str = Field(
        default="",
        validation_alias=AliasChoices("note", "remark", "description"),
    )

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Numeric IDs from the backend become strings."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        return to_money(v)

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v: Any) -> datetime:
        return parse_datetime(v)

    @field_validator('note', mode='before')
    @classmethod
    def none_note_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def formatted_amount(self) -> str:
        """Display amount: -¥35.00 for expenses, +¥ for income, bare for transfers."""
        prefix = "-" if self.is_expense else ("+" if self.is_income else "")
        return f"{prefix}{format_money(abs(self.amount))}"

    @property
    def day(self) -> date:
        """Calendar day the transaction belongs to."""
        return self.date.date()


class Category(BaseModel):
    """A spending or income category (static catalogue entry)."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str
    color: str = Field(description="Foreground colour, hex")
    background_color: str = Field(description="Background colour, hex")


class Account(BaseModel):
    """A funding account, e.g. Alipay or a bank card."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    balance: Decimal
    icon: str

    @field_validator('balance', mode='before')
    @classmethod
    def coerce_balance(cls, v: Any) -> Decimal:
        return to_money(v)

    @property
    def formatted_balance(self) -> str:
        return format_money(self.balance)


class HomeSummary(BaseModel):
    """
    Income / balance / expense triple shown on the home and list screens.

    Missing or non-numeric fields fall back to zero instead of failing
    the whole summary.
    """

    income: Decimal = Decimal("0.00")
    balance: Decimal = Decimal("0.00")
    expense: Decimal = Decimal("0.00")

    @field_validator('income', 'balance', 'expense', mode='before')
    @classmethod
    def lenient_money(cls, v: Any) -> Decimal:
        if v is None:
            return Decimal("0.00")
        try:
            return to_money(v)
        except ValueError:
            return Decimal("0.00")


# =============================================================================
# REQUEST MODELS
# =============================================================================

class SummaryQuery(BaseModel):
    """Filter body for the monthly summary request."""

    type: str = Field(
        default="",
        pattern="^(|expense|income|transfer)$",
        description="Transaction type, empty for any"
    )
    category: str = Field(
        default="",
        description="Category ID, empty for any"
    )
    query_type: int = Field(
        default=MONTHLY_QUERY,
        description="Backend query mode (2 = by month)"
    )
    query_month: str = Field(
        ...,
        pattern=r"^\d{4}-(0[1-9]|1[0-2])$",
        description="Month in yyyy-MM form"
    )

    @classmethod
    def for_filter(
        cls,
        transaction_filter: TransactionFilter,
        month: date,
    ) -> "SummaryQuery":
        type_, category = transaction_filter.to_params()
        return cls(type=type_, category=category, query_month=month.strftime("%Y-%m"))

    def to_body(self) -> dict:
        return {
            "type": self.type,
            "category": self.category,
            "queryType": self.query_type,
            "queryMonth": self.query_month,
        }


class TransactionQuery(SummaryQuery):
    """Filter plus paging for the transaction list request."""

    page_num: int = Field(
        default=1,
        ge=1,
        description="1-based page number"
    )
    page_size: int = Field(
        default=10,
        ge=1,
        le=100
    )

    def to_body(self) -> dict:
        body = super().to_body()
        body["pageNum"] = self.page_num
        body["pageSize"] = self.page_size
        return body


class NewTransaction(BaseModel):
    """
    Payload of the add-transaction form.

    Built by the form validator only after all error checks pass.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(..., gt=0)
    type: TransactionType
    category_id: str = Field(..., min_length=1)
    account_id: str = Field(..., min_length=1)
    date: datetime = Field(default_factory=datetime.now)
    note: str = Field(default="", max_length=200)

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        return to_money(v)

    def to_body(self) -> dict:
        return {
            "amount": float(self.amount),
            "type": self.type.value,
            "categoryId": self.category_id,
            "accountId": self.account_id,
            "date": self.date.strftime("%Y-%m-%d %H:%M:%S"),
            "note": self.note,
        }
