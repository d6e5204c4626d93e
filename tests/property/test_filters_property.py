from __future__ import annotations

from dataclasses import dataclass

import pytest

try:
    from hypothesis import HealthCheck, given, settings
    from hypothesis import strategies as st
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("hypothesis is required", allow_module_level=True)

from expense_tracker.filters import ALL_CATEGORIES, filter_expenses

CATEGORIES = ["Food", "Transportation", "Bills", "food"]


@dataclass(frozen=True)
class Row:
    description: str
    category: str


rows = st.lists(
    st.builds(Row, description=st.text(max_size=20), category=st.sampled_from(CATEGORIES)),
    max_size=30,
)


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(expenses=rows, category=st.sampled_from(CATEGORIES + [ALL_CATEGORIES]), term=st.text(max_size=5))
def test_filter_keeps_exactly_the_matching_rows(expenses, category, term) -> None:
    result = filter_expenses(expenses, category, term)

    expected = [
        row
        for row in expenses
        if (category == ALL_CATEGORIES or row.category == category)
        and term.casefold() in row.description.casefold()
    ]
    assert result == expected


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(expenses=rows)
def test_filter_without_criteria_is_identity(expenses) -> None:
    assert filter_expenses(expenses, ALL_CATEGORIES, "") == expenses
