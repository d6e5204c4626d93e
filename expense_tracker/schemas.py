"""Pydantic schemas for serialising expense tracking data."""
from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from .errors import ValidationError

# Decimal in Python, plain number on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ExpenseIn(BaseModel):
    """Complete expense record as supplied on create and on update."""

    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(..., max_digits=12, decimal_places=2)
    description: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    date: date_type

    @field_validator("amount")
    @classmethod
    def _amount_not_empty(cls, value: Decimal) -> Decimal:
        if value == 0:
            raise ValueError("amount is required")
        return value


class ExpenseRead(ORMModel):
    id: int
    amount: Money
    description: str
    category: str
    date: date_type
    created_at: datetime


class ExpenseId(BaseModel):
    id: int


class Message(BaseModel):
    message: str


class SummaryRow(ORMModel):
    category: str
    total: Money


class ExpenseFilter(BaseModel):
    """Optional exact-match filters for the expense list."""

    category: Optional[str] = None
    date: Optional[date_type] = None

    @classmethod
    def from_query(cls, category: Optional[str] = None, date: Optional[str] = None) -> "ExpenseFilter":
        """Build filters from raw query values, treating empty strings as absent."""

        parsed_date: Optional[date_type] = None
        if date:
            try:
                parsed_date = date_type.fromisoformat(date.strip())
            except ValueError as exc:
                raise ValidationError(
                    f"Invalid date filter {date!r}: expected YYYY-MM-DD", fields=("date",)
                ) from exc
        return cls(category=category or None, date=parsed_date)
