"""Client-side state mirroring the server data for the single-page UI."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any, List, Optional, TypeVar

from .client import ExpenseClient
from .errors import ExpenseTrackerError
from .filters import ALL_CATEGORIES, filter_expenses
from .schemas import ExpenseRead, SummaryRow

LOG = logging.getLogger(__name__)

T = TypeVar("T")


class ExpenseBoard:
    """Holds the fetched expenses, categories and summary plus view filters.

    Local data is never patched in place: every successful mutation triggers a
    re-fetch of the expense list and of the summary. Failures of the expense
    list and of mutations are stored in :attr:`error` for the banner, while
    category and summary refreshes only log and keep the previous data.
    """

    def __init__(self, client: ExpenseClient) -> None:
        self.client = client
        self.expenses: List[ExpenseRead] = []
        self.categories: List[str] = []
        self.summary: List[SummaryRow] = []
        self.error: Optional[str] = None
        self.selected_category: str = ALL_CATEGORIES
        self.search_term: str = ""

    @property
    def visible_expenses(self) -> List[ExpenseRead]:
        return filter_expenses(self.expenses, self.selected_category, self.search_term)

    def load(self) -> None:
        self.refresh_expenses()
        self.refresh_categories()
        self.refresh_summary()

    def refresh_expenses(self) -> bool:
        expenses = self._attempt(self.client.list_expenses)
        if expenses is None:
            return False
        self.expenses = expenses
        return True

    def refresh_categories(self) -> None:
        try:
            self.categories = self.client.list_categories()
        except ExpenseTrackerError as exc:
            LOG.warning("Category refresh failed, keeping %d cached: %s", len(self.categories), exc)

    def refresh_summary(self) -> None:
        try:
            self.summary = self.client.summary()
        except ExpenseTrackerError as exc:
            LOG.warning("Summary refresh failed, keeping previous totals: %s", exc)

    def add_expense(self, expense: Mapping[str, Any]) -> bool:
        return self._mutate(lambda: self.client.create_expense(expense))

    def edit_expense(self, expense_id: int, expense: Mapping[str, Any]) -> bool:
        return self._mutate(lambda: self.client.update_expense(expense_id, expense))

    def remove_expense(self, expense_id: int) -> bool:
        return self._mutate(lambda: self.client.delete_expense(expense_id))

    def dismiss_error(self) -> None:
        self.error = None

    def select_category(self, category: Optional[str]) -> None:
        self.selected_category = category or ALL_CATEGORIES

    def search(self, term: Optional[str]) -> None:
        self.search_term = term or ""

    def chart_series(self) -> tuple[List[str], List[Decimal]]:
        """Return the summary as parallel label and value lists for a chart."""

        return [row.category for row in self.summary], [row.total for row in self.summary]

    def _mutate(self, action: Callable[[], object]) -> bool:
        if self._attempt(action) is None:
            return False
        self.refresh_expenses()
        self.refresh_summary()
        return True

    def _attempt(self, action: Callable[[], T]) -> Optional[T]:
        try:
            return action()
        except ExpenseTrackerError as exc:
            LOG.warning("Request failed: %s", exc)
            self.error = str(exc)
            return None


__all__ = ["ExpenseBoard"]
