from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from expense_tracker.services.money import CENT
from .constants import (
    EXPENSE_DESCRIPTION_MAX,
    EXPENSE_DESCRIPTION_MIN,
    FORBIDDEN_DESCRIPTION_CHARS,
    MAX_EXPENSE_AMOUNT,
)


def _check_amount(value: Decimal) -> Decimal:
    if value != value.quantize(CENT):
        raise ValueError("Amount must have at most 2 decimal places")
    return value


def _check_description(value: str) -> str:
    value = value.strip()
    if not EXPENSE_DESCRIPTION_MIN <= len(value) <= EXPENSE_DESCRIPTION_MAX:
        raise ValueError(
            f"Description must be between {EXPENSE_DESCRIPTION_MIN} and "
            f"{EXPENSE_DESCRIPTION_MAX} characters"
        )
    if any(ch in FORBIDDEN_DESCRIPTION_CHARS for ch in value):
        raise ValueError(
            "Description cannot contain special characters like <, >, {, }"
        )
    return value


def _check_not_future(value: date) -> date:
    if value > date.today():
        raise ValueError("Expense date cannot be in the future")
    return value


class Expense(BaseModel):
    """Ledger record. ``id`` and timestamps are assigned by the store."""

    id: Optional[int] = None
    amount: Decimal
    description: str
    category_id: int
    category_name: Optional[str] = None
    expense_date: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ExpenseIn(BaseModel):
    amount: Decimal = Field(..., gt=0, le=MAX_EXPENSE_AMOUNT)
    description: str
    category_id: int
    expense_date: date

    @field_validator("amount")
    @classmethod
    def valid_amount(cls, v: Decimal) -> Decimal:
        return _check_amount(v)

    @field_validator("description")
    @classmethod
    def valid_description(cls, v: str) -> str:
        return _check_description(v)

    @field_validator("expense_date")
    @classmethod
    def date_not_future(cls, v: date) -> date:
        return _check_not_future(v)

    def to_expense(self) -> Expense:
        return Expense(
            amount=self.amount,
            description=self.description,
            category_id=self.category_id,
            expense_date=self.expense_date,
        )


class ExpenseUpdateIn(BaseModel):
    """Partial update model.

    All fields optional; at least one must be provided. Fields left as None
    keep the stored value.
    """

    amount: Optional[Decimal] = Field(None, gt=0, le=MAX_EXPENSE_AMOUNT)
    description: Optional[str] = None
    category_id: Optional[int] = None
    expense_date: Optional[date] = None

    @field_validator("amount")
    @classmethod
    def valid_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return _check_amount(v) if v is not None else None

    @field_validator("description")
    @classmethod
    def valid_description(cls, v: Optional[str]) -> Optional[str]:
        return _check_description(v) if v is not None else None

    @field_validator("expense_date")
    @classmethod
    def date_not_future(cls, v: Optional[date]) -> Optional[date]:
        return _check_not_future(v) if v is not None else None

    @model_validator(mode="after")
    def at_least_one(self) -> "ExpenseUpdateIn":
        if all(
            getattr(self, f) is None
            for f in ("amount", "description", "category_id", "expense_date")
        ):
            raise ValueError("at least one field must be provided for update")
        return self

    def apply_to(self, current: Expense) -> Expense:
        return current.model_copy(
            update={
                field: value
                for field, value in (
                    ("amount", self.amount),
                    ("description", self.description),
                    ("category_id", self.category_id),
                    ("expense_date", self.expense_date),
                )
                if value is not None
            }
        )
