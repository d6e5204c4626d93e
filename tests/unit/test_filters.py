from __future__ import annotations

from dataclasses import dataclass

from expense_tracker.filters import ALL_CATEGORIES, filter_expenses


@dataclass
class Row:
    description: str
    category: str


ROWS = [
    Row("Lunch at cafe", "Food"),
    Row("Bus fare", "Transportation"),
    Row("LUNCH with team", "Entertainment"),
]


def test_search_is_case_insensitive_substring():
    assert filter_expenses(ROWS[:2], ALL_CATEGORIES, "lunch") == [ROWS[0]]


def test_category_and_search_combine():
    assert filter_expenses(ROWS, "Entertainment", "lunch") == [ROWS[2]]
    assert filter_expenses(ROWS, "Food", "bus") == []


def test_category_match_is_exact():
    assert filter_expenses(ROWS, "food", "") == []


def test_no_filters_returns_everything_in_order():
    assert filter_expenses(ROWS) == ROWS
    assert filter_expenses(ROWS, None, None) == ROWS
    assert filter_expenses(ROWS, "", "") == ROWS
