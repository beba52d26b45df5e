"""Domain-level expense validation utilities.

Pydantic model validation already enforces field-level rules (amount range
and scale, description length and characters, no future date). This module
holds the rules that depend on configuration or on a reference "today",
so services and tests can pin the clock.

Usage: call `validate_expense_domain(expense, max_age_days)` before the
expense enters a store transaction.
"""

from __future__ import annotations
from datetime import date, timedelta
from typing import Optional, TYPE_CHECKING

from expense_tracker.core.exceptions import InvalidExpense

if TYPE_CHECKING:  # pragma: no cover
    from expense_tracker.models.expense import Expense


def validate_expense_domain(
    expense: "Expense",
    max_age_days: Optional[int],
    today: Optional[date] = None,
) -> "Expense":
    """Reject future dates and, when ``max_age_days`` is set, dates older than that."""
    today = today or date.today()
    if expense.expense_date > today:
        raise InvalidExpense(
            "Expense date cannot be in the future",
            details=["expense_date: cannot be in the future"],
        )
    if max_age_days is not None:
        oldest = today - timedelta(days=max_age_days)
        if expense.expense_date < oldest:
            raise InvalidExpense(
                f"Expense date cannot be more than {max_age_days} days in the past",
                details=[f"expense_date: must be on or after {oldest.isoformat()}"],
            )
    return expense
