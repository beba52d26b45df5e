"""Budget enforcement.

Two independent enforcement paths run on every expense write:

- a global monthly cap (``Settings.global_monthly_cap``) over all categories
  for the calendar month of the expense date, needing no Budget record;
- an optional per-category Budget for (category, month).

A write is refused when the projected month total reaches the limit
(``projected >= limit``). ``check_candidate`` only reads, so callers run it
inside the same store transaction as the write; a rejection then rolls the
whole unit back and leaves the ledger untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from expense_tracker.core.config import Settings, get_settings
from expense_tracker.core.exceptions import (
    BudgetExceeded,
    BudgetNotFound,
    CategoryNotFound,
    InvalidInputError,
)
from expense_tracker.db.base import LedgerStore
from expense_tracker.models import MAX_BUDGET_LIMIT, Budget, Expense
from expense_tracker.services import aggregation
from expense_tracker.services.filters import excluding, month_predicate
from expense_tracker.services.money import ZERO, round2
from expense_tracker.services.periods import YearMonth

logger = logging.getLogger("expense_tracker.budget")


@dataclass(frozen=True)
class BudgetStatus:
    category_id: int
    month: YearMonth
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal
    exceeded: bool


def _validate_limit(limit: Decimal) -> None:
    if not 0 < limit <= MAX_BUDGET_LIMIT:
        message = f"must be greater than 0 and at most {MAX_BUDGET_LIMIT}"
    elif limit != round2(limit):
        message = "must have at most 2 decimal places"
    else:
        return
    raise InvalidInputError(
        f"Invalid monthly limit {limit}", details=[f"monthly_limit: {message}"]
    )


class BudgetService:
    def __init__(self, store: LedgerStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Configuration
    def set_budget(self, category_id: int, month: YearMonth, limit: Decimal) -> Budget:
        _validate_limit(limit)
        if not self.store.category_exists(category_id):
            raise CategoryNotFound(category_id)
        budget = self.store.upsert_budget(
            Budget(category_id=category_id, month=month, monthly_limit=limit)
        )
        logger.info(
            "budget set",
            extra={"category_id": category_id, "month": month, "limit": limit},
        )
        return budget

    def get_budget(self, category_id: int, month: YearMonth) -> Budget:
        if not self.store.category_exists(category_id):
            raise CategoryNotFound(category_id)
        budget = self.store.find_budget(category_id, month)
        if budget is None:
            raise BudgetNotFound(category_id, month)
        return budget

    def list_budgets(self, month: Optional[YearMonth] = None) -> List[Budget]:
        return self.store.list_budgets(month)

    # ------------------------------------------------------------------
    # Queries
    def month_total(self, category_id: Optional[int], month: YearMonth) -> Decimal:
        """Spend in ``month``; ``category_id=None`` sums every category."""
        return aggregation.total(self.store.find_all(month_predicate(month, category_id)))

    def is_budget_exceeded(self, category_id: int, month: YearMonth) -> bool:
        budget = self.get_budget(category_id, month)
        return self.month_total(category_id, month) > budget.monthly_limit

    def remaining_budget(self, category_id: int, month: YearMonth) -> Decimal:
        """``limit - spent``; never negative, an exceeded budget raises instead."""
        budget = self.get_budget(category_id, month)
        spent = self.month_total(category_id, month)
        if spent > budget.monthly_limit:
            raise BudgetExceeded(
                f"Budget for category {category_id} at {month} is already exceeded",
                limit=budget.monthly_limit,
                projected=spent,
                scope="category",
            )
        return round2(budget.monthly_limit - spent)

    def budget_status(self, category_id: int, month: YearMonth) -> BudgetStatus:
        budget = self.get_budget(category_id, month)
        spent = self.month_total(category_id, month)
        limit = budget.monthly_limit
        return BudgetStatus(
            category_id=category_id,
            month=month,
            limit=round2(limit),
            spent=spent,
            remaining=max(round2(limit - spent), ZERO),
            percent_used=round2(spent / limit * 100),
            exceeded=spent > limit,
        )

    # ------------------------------------------------------------------
    # Enforcement
    def check_candidate(self, expense: Expense, exclude_id: Optional[int] = None) -> None:
        """Raise BudgetExceeded if ``expense`` would reach either monthly limit.

        ``exclude_id`` leaves one stored expense out of the current totals, so
        an update is checked against the month without its old version.
        """
        month = YearMonth.from_date(expense.expense_date)
        others = excluding(exclude_id)

        cap = self.settings.global_monthly_cap
        if cap is not None:
            current = aggregation.total(self.store.find_all(month_predicate(month) & others))
            self._enforce(
                current + expense.amount,
                cap,
                scope="global",
                month=month,
                category_id=expense.category_id,
                message=f"Adding this expense exceeds a monthly budget of ${cap}",
            )

        budget = self.store.find_budget(expense.category_id, month)
        if budget is not None:
            current = aggregation.total(
                self.store.find_all(month_predicate(month, expense.category_id) & others)
            )
            self._enforce(
                current + expense.amount,
                budget.monthly_limit,
                scope="category",
                month=month,
                category_id=expense.category_id,
                message=(
                    f"Adding this expense exceeds the {month} budget of "
                    f"{budget.monthly_limit} for category {expense.category_id}"
                ),
            )

    def _enforce(
        self,
        projected: Decimal,
        limit: Decimal,
        *,
        scope: str,
        month: YearMonth,
        category_id: int,
        message: str,
    ) -> None:
        if projected >= limit:
            logger.info(
                "expense rejected: budget exceeded",
                extra={
                    "scope": scope,
                    "month": month,
                    "category_id": category_id,
                    "limit": limit,
                    "projected": projected,
                },
            )
            raise BudgetExceeded(message, limit=limit, projected=projected, scope=scope)


__all__ = ["BudgetService", "BudgetStatus"]
