"""SQLAlchemy models for the expense tracker."""
from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(tz=UTC).replace(tzinfo=None)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(255), nullable=False)
    # Not a foreign key: any non-empty category string is stored as given.
    category = Column(String(100), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
