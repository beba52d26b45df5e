"""Pydantic domain models for the Expense Tracker."""

from .constants import (
    DEFAULT_CATEGORY_COLOR,
    MAX_BUDGET_LIMIT,
    MAX_EXPENSE_AMOUNT,
    MAX_TREND_DAYS,
)  # re-export
from .category import Category, CategoryIn, CategoryUpdateIn
from .expense import Expense, ExpenseIn, ExpenseUpdateIn
from .budget import Budget, BudgetIn
from .filters import ExpenseFilter

__all__ = [
    "DEFAULT_CATEGORY_COLOR",
    "MAX_BUDGET_LIMIT",
    "MAX_EXPENSE_AMOUNT",
    "MAX_TREND_DAYS",
    "Category",
    "CategoryIn",
    "CategoryUpdateIn",
    "Expense",
    "ExpenseIn",
    "ExpenseUpdateIn",
    "Budget",
    "BudgetIn",
    "ExpenseFilter",
]
