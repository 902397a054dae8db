"""Transaction list paging and day grouping."""

from mengmeng_budget.ledger.grouping import (
    DailyGroup,
    format_date_header,
    group_by_day,
)
from mengmeng_budget.ledger.pager import (
    TransactionPager,
    first_of_month,
    month_label,
    shift_month,
)

__all__ = [
    "DailyGroup",
    "TransactionPager",
    "first_of_month",
    "format_date_header",
    "group_by_day",
    "month_label",
    "shift_month",
]
