"""View-side filtering of an already fetched expense list."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar

ALL_CATEGORIES = "all"


class _ExpenseLike(Protocol):
    category: str
    description: str


E = TypeVar("E", bound=_ExpenseLike)


def filter_expenses(
    expenses: Iterable[E],
    selected_category: str | None = ALL_CATEGORIES,
    search_term: str | None = "",
) -> list[E]:
    """Return the expenses matching both the category and the search term.

    ``selected_category`` is an exact, case-sensitive match; ``"all"`` or an
    empty value disables it. ``search_term`` matches anywhere in the
    description, ignoring case; an empty value disables it. Input order is
    preserved.
    """

    category = None if not selected_category or selected_category == ALL_CATEGORIES else selected_category
    needle = (search_term or "").casefold()
    return [
        expense
        for expense in expenses
        if (category is None or expense.category == category)
        and (not needle or needle in expense.description.casefold())
    ]


__all__ = ["ALL_CATEGORIES", "filter_expenses"]
