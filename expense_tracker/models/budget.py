from __future__ import annotations
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from expense_tracker.services.money import CENT
from expense_tracker.services.periods import YearMonth
from .constants import MAX_BUDGET_LIMIT


def check_limit_scale(value: Decimal) -> Decimal:
    if value != value.quantize(CENT):
        raise ValueError("Monthly limit must have at most 2 decimal places")
    return value


class Budget(BaseModel):
    category_id: int
    month: YearMonth
    monthly_limit: Decimal = Field(..., gt=0, le=MAX_BUDGET_LIMIT)

    @field_validator("monthly_limit")
    @classmethod
    def _two_decimals(cls, value: Decimal) -> Decimal:
        return check_limit_scale(value)


class BudgetIn(BaseModel):
    monthly_limit: Decimal = Field(
        ..., gt=0, le=MAX_BUDGET_LIMIT, description="Monthly spending ceiling"
    )

    @field_validator("monthly_limit")
    @classmethod
    def _two_decimals(cls, value: Decimal) -> Decimal:
        return check_limit_scale(value)
