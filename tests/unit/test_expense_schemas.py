from __future__ import annotations

from datetime import date
from decimal import Decimal

import pydantic
import pytest

from expense_tracker import schemas
from expense_tracker.errors import ValidationError

VALID = {"amount": "50.00", "description": "Lunch at cafe", "category": "Food", "date": "2024-03-01"}


def test_expense_in_parses_complete_payload():
    expense = schemas.ExpenseIn.model_validate(VALID)
    assert expense.amount == Decimal("50.00")
    assert expense.date == date(2024, 3, 1)


def test_unknown_category_is_accepted():
    expense = schemas.ExpenseIn.model_validate({**VALID, "category": "Hobbies"})
    assert expense.category == "Hobbies"


@pytest.mark.parametrize("field", ["amount", "description", "category", "date"])
def test_each_field_is_required(field):
    payload = {key: value for key, value in VALID.items() if key != field}
    with pytest.raises(pydantic.ValidationError):
        schemas.ExpenseIn.model_validate(payload)


@pytest.mark.parametrize(
    ("field", "value"),
    [("description", "   "), ("category", ""), ("amount", 0), ("amount", "abc"), ("date", "03/01/2024")],
)
def test_empty_or_malformed_values_are_rejected(field, value):
    with pytest.raises(pydantic.ValidationError):
        schemas.ExpenseIn.model_validate({**VALID, field: value})


def test_filter_from_query_treats_empty_values_as_absent():
    filters = schemas.ExpenseFilter.from_query(category="", date="")
    assert filters.category is None
    assert filters.date is None


def test_filter_from_query_parses_date():
    filters = schemas.ExpenseFilter.from_query(category="Food", date="2024-03-01")
    assert filters == schemas.ExpenseFilter(category="Food", date=date(2024, 3, 1))


def test_filter_from_query_rejects_malformed_date():
    with pytest.raises(ValidationError, match="YYYY-MM-DD") as excinfo:
        schemas.ExpenseFilter.from_query(date="yesterday")
    assert excinfo.value.fields == ("date",)
    assert excinfo.value.status_code == 400
