"""Typed exceptions raised by the expense tracker core.

Every caller-facing error carries a machine-readable ``code`` and the HTTP
``status`` the boundary maps it to. Storage failures are not wrapped here;
they propagate as-is and end up in the generic 500 handler.

    ExpenseTrackerError
    +-- NotFoundError          (404)
    |   +-- CategoryNotFound
    |   +-- ExpenseNotFound
    +-- ConflictError          (409)
    |   +-- DuplicateCategory
    |   +-- CategoryInUse
    +-- InvalidInputError      (400)
    |   +-- InvalidRange
    |   +-- InvalidExpense
    +-- BudgetExceeded         (409)
    +-- BudgetNotFound         (404)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Optional


class ExpenseTrackerError(Exception):
    code: str = "ERROR"
    status: int = 500

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ExpenseTrackerError):
    code = "NOT_FOUND"
    status = 404


class ConflictError(ExpenseTrackerError):
    code = "CONFLICT"
    status = 409


class InvalidInputError(ExpenseTrackerError):
    code = "BAD_REQUEST"
    status = 400


class CategoryNotFound(NotFoundError):
    def __init__(self, key: Any):
        super().__init__(f"Category not found: {key}")
        self.key = key


class ExpenseNotFound(NotFoundError):
    def __init__(self, expense_id: int):
        super().__init__(f"Expense not found with id: {expense_id}")
        self.expense_id = expense_id


class DuplicateCategory(ConflictError):
    def __init__(self, name: str):
        super().__init__(f"Category with name '{name}' already exists")
        self.name = name


class CategoryInUse(ConflictError):
    def __init__(self, category_id: int, expense_count: int):
        super().__init__(
            f"Category {category_id} is referenced by {expense_count} expense(s) and cannot be deleted"
        )
        self.category_id = category_id
        self.expense_count = expense_count


class InvalidRange(InvalidInputError):
    def __init__(self, field: str, lower: Any, upper: Any):
        super().__init__(f"Invalid {field} range: {lower} is after {upper}")
        self.field = field
        self.lower = lower
        self.upper = upper


class InvalidExpense(InvalidInputError):
    pass


class BudgetExceeded(ExpenseTrackerError):
    code = "BUDGET_EXCEEDED"
    status = 409

    def __init__(
        self,
        message: str = "Adding this expense exceeds the monthly budget",
        limit: Optional[Decimal] = None,
        projected: Optional[Decimal] = None,
        scope: Optional[str] = None,
    ):
        super().__init__(message)
        self.limit = limit
        self.projected = projected
        self.scope = scope


class BudgetNotFound(ExpenseTrackerError):
    code = "BUDGET_NOT_FOUND"
    status = 404

    def __init__(self, category_id: int, month: Any):
        super().__init__(f"There is no budget for category {category_id} at {month}")
        self.category_id = category_id
        self.month = month


__all__ = [
    "ExpenseTrackerError",
    "NotFoundError",
    "ConflictError",
    "InvalidInputError",
    "CategoryNotFound",
    "ExpenseNotFound",
    "DuplicateCategory",
    "CategoryInUse",
    "InvalidRange",
    "InvalidExpense",
    "BudgetExceeded",
    "BudgetNotFound",
]
