"""Expense operations: transactional writes plus filtered queries and reports.

Writes run inside one store transaction: category check, domain validation,
budget enforcement and the save either all happen or none of them leave a
trace. Queries build a predicate, let the store evaluate it and hand the
result to the aggregation helpers.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from expense_tracker.core.config import Settings, get_settings
from expense_tracker.core.exceptions import (
    CategoryNotFound,
    ExpenseNotFound,
    InvalidInputError,
)
from expense_tracker.db.base import LedgerStore
from expense_tracker.models import (
    MAX_TREND_DAYS,
    Expense,
    ExpenseFilter,
    ExpenseIn,
    ExpenseUpdateIn,
)
from expense_tracker.services import aggregation
from expense_tracker.services.budget_service import BudgetService
from expense_tracker.services.expense_validation import validate_expense_domain
from expense_tracker.services.filters import build_predicate, month_predicate
from expense_tracker.services.periods import YearMonth

logger = logging.getLogger("expense_tracker.expenses")


class ExpenseService:
    def __init__(
        self,
        store: LedgerStore,
        settings: Optional[Settings] = None,
        budgets: Optional[BudgetService] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.budgets = budgets or BudgetService(store, self.settings)

    # ------------------------------------------------------------------
    # Writes
    def create_expense(self, payload: ExpenseIn, today: Optional[date] = None) -> Expense:
        expense = payload.to_expense()
        validate_expense_domain(expense, self.settings.expense_max_age_days, today)
        with self.store.transaction():
            if not self.store.category_exists(expense.category_id):
                raise CategoryNotFound(expense.category_id)
            self.budgets.check_candidate(expense)
            saved = self.store.save(expense)
        logger.info("expense created", extra={"expense_id": saved.id})
        return saved

    def update_expense(
        self, expense_id: int, payload: ExpenseUpdateIn, today: Optional[date] = None
    ) -> Expense:
        with self.store.transaction():
            current = self.get_expense(expense_id)
            merged = payload.apply_to(current)
            validate_expense_domain(merged, self.settings.expense_max_age_days, today)
            if not self.store.category_exists(merged.category_id):
                raise CategoryNotFound(merged.category_id)
            self.budgets.check_candidate(merged, exclude_id=expense_id)
            saved = self.store.save(merged)
        logger.info("expense updated", extra={"expense_id": expense_id})
        return saved

    def delete_expense(self, expense_id: int) -> None:
        self.store.delete(expense_id)
        logger.info("expense deleted", extra={"expense_id": expense_id})

    # ------------------------------------------------------------------
    # Lookups
    def list_expenses(self) -> List[Expense]:
        return self.store.find_all()

    def get_expense(self, expense_id: int) -> Expense:
        expense = self.store.find_expense(expense_id)
        if expense is None:
            raise ExpenseNotFound(expense_id)
        return expense

    def filter_expenses(self, criteria: Optional[ExpenseFilter] = None) -> List[Expense]:
        return self.store.find_all(build_predicate(criteria))

    def expenses_by_category(self, category_id: int) -> List[Expense]:
        if not self.store.category_exists(category_id):
            raise CategoryNotFound(category_id)
        return self.filter_expenses(ExpenseFilter(category_id=category_id))

    def expenses_by_date_range(self, start_date: date, end_date: date) -> List[Expense]:
        return self.filter_expenses(ExpenseFilter(start_date=start_date, end_date=end_date))

    def search(self, keyword: str) -> List[Expense]:
        """Match ``keyword`` against description or category name."""
        return self.store.search(keyword)

    def current_month_expenses(self, today: Optional[date] = None) -> List[Expense]:
        return self.store.find_all(month_predicate(YearMonth.current(today)))

    # ------------------------------------------------------------------
    # Reports
    def summary(self, criteria: Optional[ExpenseFilter] = None) -> aggregation.ExpenseSummary:
        return aggregation.summary(self.filter_expenses(criteria))

    def total_by_category(self, category_id: int) -> Decimal:
        return aggregation.total(self.expenses_by_category(category_id))

    def category_statistics(self, category_id: int) -> aggregation.CategoryStatistics:
        return aggregation.category_statistics(self.expenses_by_category(category_id))

    def monthly_totals(
        self, criteria: Optional[ExpenseFilter] = None
    ) -> Dict[YearMonth, Decimal]:
        return aggregation.group_by_month(self.filter_expenses(criteria))

    def category_breakdown(
        self, criteria: Optional[ExpenseFilter] = None
    ) -> Dict[str, aggregation.CategoryBreakdownItem]:
        return aggregation.group_by_category(self.filter_expenses(criteria))

    def detailed_stats(
        self, start_date: date, end_date: date
    ) -> Dict[str, aggregation.CategoryStatistics]:
        return aggregation.detailed_category_stats(
            self.expenses_by_date_range(start_date, end_date)
        )

    def top_expenses(
        self, n: Optional[int] = None, criteria: Optional[ExpenseFilter] = None
    ) -> List[Expense]:
        if n is None:
            n = self.settings.top_expenses_default
        return aggregation.top_n(self.filter_expenses(criteria), n)

    def expenses_above_average(
        self, criteria: Optional[ExpenseFilter] = None
    ) -> List[Expense]:
        return aggregation.above_average(self.filter_expenses(criteria))

    def daily_trend(
        self, days: Optional[int] = None, today: Optional[date] = None
    ) -> List[aggregation.DailyTotal]:
        """Per-day totals from ``days`` days ago through today."""
        today = today or date.today()
        days = self.settings.trend_days if days is None else days
        if not 0 <= days <= MAX_TREND_DAYS:
            raise InvalidInputError(
                f"days must be between 0 and {MAX_TREND_DAYS}", details=[f"days: {days}"]
            )
        start = today - timedelta(days=days)
        return aggregation.daily_totals(self.expenses_by_date_range(start, today))

    def month_over_month(
        self, month: Optional[YearMonth] = None, today: Optional[date] = None
    ) -> aggregation.MonthOverMonth:
        month = month or YearMonth.current(today)
        window = ExpenseFilter(start_date=month.previous().first_day, end_date=month.last_day)
        return aggregation.month_over_month(self.filter_expenses(window), month)


__all__ = ["ExpenseService"]
