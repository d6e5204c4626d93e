"""CRUD helper functions for the expense tracker backend."""
from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import NotFoundError

SAMPLE_EXPENSES: tuple[tuple[Decimal, str, str], ...] = (
    (Decimal("50.00"), "Lunch at cafe", "Food"),
    (Decimal("120.00"), "Grocery shopping", "Food"),
    (Decimal("25.00"), "Bus fare", "Transportation"),
)


def list_category_names(session: Session) -> List[str]:
    stmt = select(models.Category.name).order_by(models.Category.name)
    return list(session.scalars(stmt))


def seed_categories(session: Session, names: Iterable[str]) -> int:
    """Insert ``names`` when the category table is empty; return how many were added."""

    existing = session.scalar(select(func.count()).select_from(models.Category))
    if existing:
        return 0
    unique_names = list(dict.fromkeys(names))
    session.add_all(models.Category(name=name) for name in unique_names)
    session.flush()
    return len(unique_names)


def seed_sample_expenses(session: Session, today: Optional[date] = None) -> int:
    """Insert the demo expenses when the expense table is empty."""

    existing = session.scalar(select(func.count()).select_from(models.Expense))
    if existing:
        return 0
    incurred_on = today or date.today()
    session.add_all(
        models.Expense(amount=amount, description=description, category=category, date=incurred_on)
        for amount, description, category in SAMPLE_EXPENSES
    )
    session.flush()
    return len(SAMPLE_EXPENSES)


def list_expenses(session: Session, filters: Optional[schemas.ExpenseFilter] = None) -> List[models.Expense]:
    stmt = select(models.Expense)
    if filters is not None:
        if filters.category is not None:
            stmt = stmt.where(models.Expense.category == filters.category)
        if filters.date is not None:
            stmt = stmt.where(models.Expense.date == filters.date)
    stmt = stmt.order_by(models.Expense.date.desc(), models.Expense.id.desc())
    return list(session.scalars(stmt))


def get_expense(session: Session, expense_id: int) -> models.Expense:
    expense = session.get(models.Expense, expense_id)
    if expense is None:
        raise NotFoundError("Expense not found")
    return expense


def create_expense(session: Session, expense_in: schemas.ExpenseIn) -> models.Expense:
    expense = models.Expense(**expense_in.model_dump())
    session.add(expense)
    session.flush()
    session.refresh(expense)
    return expense


def update_expense(session: Session, expense_id: int, expense_in: schemas.ExpenseIn) -> models.Expense:
    """Replace every mutable field of an existing expense."""

    expense = get_expense(session, expense_id)
    for field, value in expense_in.model_dump().items():
        setattr(expense, field, value)
    session.flush()
    session.refresh(expense)
    return expense


def delete_expense(session: Session, expense_id: int) -> None:
    expense = get_expense(session, expense_id)
    session.delete(expense)
    session.flush()


def summarize_by_category(session: Session) -> List[schemas.SummaryRow]:
    """Sum amounts per category; categories without expenses do not appear."""

    stmt = (
        select(
            models.Expense.category,
            func.sum(models.Expense.amount).label("total"),
        )
        .group_by(models.Expense.category)
        .order_by(models.Expense.category)
    )
    return [schemas.SummaryRow(category=row.category, total=row.total) for row in session.execute(stmt)]
