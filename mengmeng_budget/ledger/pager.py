"""
Transaction List Pager

Accumulates pages of the filtered, month-scoped transaction list.

The backend reports no total count, so the end of the data is
inferred: a page shorter than the page size is the last one. The page
number only advances after a full page, and any failure stops paging
until the next refresh.
"""

from datetime import date
from typing import Iterator, Optional

import structlog

from mengmeng_budget.config import get_settings
from mengmeng_budget.ledger.grouping import DailyGroup, group_by_day
from mengmeng_budget.models.transaction import (
    Transaction,
    TransactionFilter,
    TransactionQuery,
)
from mengmeng_budget.services.api import ApiError, BudgetApiClient


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def shift_month(month: date, delta: int) -> date:
    """Move a month forward (delta > 0) or back, landing on the 1st."""
    index = month.year * 12 + (month.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def month_label(month: date) -> str:
    """Month picker title, e.g. 2025年03月."""
    return month.strftime("%Y年%m月")


class TransactionPager:
    """
    Paged loader for one (filter, month) selection.

    Changing the filter or month discards everything loaded so far.
    """

    def __init__(
        self,
        client: BudgetApiClient,
        transaction_filter: TransactionFilter = TransactionFilter.ALL,
        month: Optional[date] = None,
        page_size: Optional[int] = None,
    ):
        self._client = client
        self._filter = transaction_filter
        self._month = first_of_month(month or date.today())
        self._page_size = page_size or get_settings().api.page_size
        self._logger = structlog.get_logger(__name__)
        self.reset()

    def reset(self) -> None:
        """Forget loaded pages and start again from page 1."""
        self.transactions: list[Transaction] = []
        self.current_page = 1
        self.has_more = True
        self.is_loading = False
        self.error_message: Optional[str] = None

    @property
    def transaction_filter(self) -> TransactionFilter:
        return self._filter

    @property
    def month(self) -> date:
        return self._month

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def query_month(self) -> str:
        return self._month.strftime("%Y-%m")

    @property
    def month_label(self) -> str:
        return month_label(self._month)

    @property
    def groups(self) -> list[DailyGroup]:
        return group_by_day(self.transactions)

    def build_query(self) -> TransactionQuery:
        type_, category = self._filter.to_params()
        return TransactionQuery(
            type=type_,
            category=category,
            query_month=self.query_month,
            page_num=self.current_page,
            page_size=self._page_size,
        )

    def load_next(self) -> list[Transaction]:
        """
        Load the next page and append it.

        Returns the newly loaded transactions, or an empty list when a
        load is already running or the data is exhausted.

        Raises:
            ApiError: After recording it in `error_message`; paging stops
        """
        if self.is_loading or not self.has_more:
            return []

        self.is_loading = True
        self.error_message = None
        query = self.build_query()

        try:
            page = self._client.get_all_transactions(query)
        except ApiError as e:
            self.error_message = str(e)
            self.has_more = False
            self._logger.warning(
                "page_load_failed",
                page_num=query.page_num,
                query_month=query.query_month,
                error=str(e),
            )
            raise
        finally:
            self.is_loading = False

        self.transactions.extend(page)

        if len(page) < self._page_size:
            self.has_more = False
        else:
            self.current_page += 1

        self._logger.debug(
            "page_loaded",
            page_num=query.page_num,
            count=len(page),
            has_more=self.has_more,
        )
        return page

    def refresh(self) -> list[Transaction]:
        """Drop everything and load the first page again."""
        self.reset()
        return self.load_next()

    def iter_all(self) -> Iterator[Transaction]:
        """Yield the remaining transactions, fetching pages on demand."""
        while self.has_more:
            page = self.load_next()
            if not page:
                break
            yield from page

    def select_filter(self, transaction_filter: TransactionFilter) -> None:
        self._filter = transaction_filter
        self.reset()

    def select_month(self, month: date) -> None:
        self._month = first_of_month(month)
        self.reset()

    @property
    def can_go_next(self) -> bool:
        """False once the current calendar month is selected."""
        return shift_month(self._month, 1) <= first_of_month(date.today())

    def next_month(self) -> date:
        """Move forward one month; a no-op at the current month."""
        if self.can_go_next:
            self.select_month(shift_month(self._month, 1))
        return self._month

    def previous_month(self) -> date:
        self.select_month(shift_month(self._month, -1))
        return self._month
