"""The client state layer driven against the real application."""

from __future__ import annotations

from decimal import Decimal

from expense_tracker.state import ExpenseBoard

LUNCH = {"amount": "50.00", "description": "Lunch at cafe", "category": "Food", "date": "2024-03-01"}
BUS = {"amount": "25.00", "description": "Bus fare", "category": "Transportation", "date": "2024-03-01"}


def test_board_mirrors_server_after_each_mutation(api_client):
    board = ExpenseBoard(api_client)
    board.load()
    assert board.expenses == []
    assert "Food" in board.categories
    assert board.summary == []

    assert board.add_expense(LUNCH)
    assert board.add_expense(BUS)
    assert {expense.description for expense in board.expenses} == {"Lunch at cafe", "Bus fare"}
    assert {row.category: row.total for row in board.summary} == {
        "Food": Decimal("50"),
        "Transportation": Decimal("25"),
    }

    bus = next(expense for expense in board.expenses if expense.category == "Transportation")
    assert board.edit_expense(bus.id, {**BUS, "amount": "30.00"})
    assert {row.category: row.total for row in board.summary}["Transportation"] == Decimal("30")

    assert board.remove_expense(bus.id)
    assert [expense.description for expense in board.expenses] == ["Lunch at cafe"]


def test_board_search_is_local(api_client):
    board = ExpenseBoard(api_client)
    board.add_expense(LUNCH)
    board.add_expense(BUS)

    board.search("lunch")
    assert [expense.description for expense in board.visible_expenses] == ["Lunch at cafe"]
    board.search("")
    board.select_category("Transportation")
    assert [expense.description for expense in board.visible_expenses] == ["Bus fare"]


def test_board_surfaces_server_errors(api_client):
    board = ExpenseBoard(api_client)

    assert not board.add_expense({**LUNCH, "description": ""})
    assert "description" in board.error
    board.dismiss_error()

    assert not board.remove_expense(12345)
    assert board.error == "Expense not found"


def test_client_filters_on_the_server(api_client):
    api_client.create_expense(LUNCH)
    api_client.create_expense(BUS)

    food = api_client.list_expenses(category="Food")
    assert [expense.description for expense in food] == ["Lunch at cafe"]
    assert api_client.list_expenses(on="2024-03-02") == []
