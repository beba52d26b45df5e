"""Aggregation helpers over lists of expenses.

Scopes implemented:
    - Totals, averages and overall summary
    - Monthly totals (chronological)
    - Category breakdown and per-category statistics
    - Rankings (top N, above average)
    - Daily trend and month-over-month growth

Design notes:
    Every function is pure and takes an already filtered list, so the same
    code serves API routes, budget enforcement and tests. Sums are exact
    Decimal arithmetic; rounding to cents (ROUND_HALF_UP) happens once, on
    the value handed back to the caller.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from expense_tracker.models import Expense
from expense_tracker.services.money import ZERO, round2
from expense_tracker.services.periods import YearMonth

UNCATEGORIZED = "Uncategorized"


def _sum(expenses: Iterable[Expense]) -> Decimal:
    return sum((e.amount for e in expenses), Decimal(0))


def _mean(expenses: Sequence[Expense]) -> Decimal:
    """Unrounded mean; callers round for presentation."""
    if not expenses:
        return Decimal(0)
    return _sum(expenses) / len(expenses)


def total(expenses: Sequence[Expense]) -> Decimal:
    return round2(_sum(expenses))


def average(expenses: Sequence[Expense]) -> Decimal:
    if not expenses:
        return ZERO
    return round2(_mean(expenses))


# ---------------- Summary -----------------
@dataclass(frozen=True)
class ExpenseSummary:
    count: int
    total: Decimal
    average: Decimal


def summary(expenses: Sequence[Expense]) -> ExpenseSummary:
    return ExpenseSummary(
        count=len(expenses), total=total(expenses), average=average(expenses)
    )


# ---------------- Monthly totals -----------------
def group_by_month(expenses: Iterable[Expense]) -> Dict[YearMonth, Decimal]:
    """Return per-month totals keyed by YearMonth in chronological order."""
    sums: Dict[YearMonth, Decimal] = defaultdict(Decimal)
    for e in expenses:
        sums[YearMonth.from_date(e.expense_date)] += e.amount
    return {month: round2(sums[month]) for month in sorted(sums)}


# ---------------- Category breakdown -----------------
@dataclass(frozen=True)
class CategoryBreakdownItem:
    count: int
    total: Decimal
    average: Decimal


@dataclass(frozen=True)
class CategoryStatistics:
    total: Decimal
    average: Decimal
    count: int
    max: Decimal
    min: Decimal


def _by_category_name(expenses: Iterable[Expense]) -> Dict[str, List[Expense]]:
    groups: Dict[str, List[Expense]] = defaultdict(list)
    for e in expenses:
        groups[e.category_name or UNCATEGORIZED].append(e)
    # Largest spend first, name as tie-breaker for a deterministic order
    return dict(sorted(groups.items(), key=lambda kv: (-_sum(kv[1]), kv[0])))


def group_by_category(expenses: Iterable[Expense]) -> Dict[str, CategoryBreakdownItem]:
    return {
        name: CategoryBreakdownItem(
            count=len(items), total=total(items), average=average(items)
        )
        for name, items in _by_category_name(expenses).items()
    }


def category_statistics(expenses: Sequence[Expense]) -> CategoryStatistics:
    """Statistics for one category's expenses; all zeros for an empty list."""
    if not expenses:
        return CategoryStatistics(total=ZERO, average=ZERO, count=0, max=ZERO, min=ZERO)
    amounts = [e.amount for e in expenses]
    return CategoryStatistics(
        total=total(expenses),
        average=average(expenses),
        count=len(expenses),
        max=round2(max(amounts)),
        min=round2(min(amounts)),
    )


def detailed_category_stats(
    expenses: Iterable[Expense],
) -> Dict[str, CategoryStatistics]:
    """Per-category statistics ordered by total spend descending."""
    return {
        name: category_statistics(items)
        for name, items in _by_category_name(expenses).items()
    }


# ---------------- Rankings -----------------
def top_n(expenses: Sequence[Expense], n: int) -> List[Expense]:
    """The ``n`` largest expenses; equal amounts keep their input order."""
    if n <= 0:
        return []
    # stable sort: equal amounts stay in input order
    return sorted(expenses, key=lambda e: -e.amount)[:n]


def above_average(expenses: Sequence[Expense]) -> List[Expense]:
    """Expenses strictly above the mean of this same list."""
    if not expenses:
        return []
    mean = _mean(expenses)
    return [e for e in expenses if e.amount > mean]


# ---------------- Trend data -----------------
@dataclass(frozen=True)
class DailyTotal:
    date: date
    total: Decimal


def daily_totals(expenses: Iterable[Expense]) -> List[DailyTotal]:
    """Chronological list of per-day totals; days without expenses are omitted."""
    sums: Dict[date, Decimal] = defaultdict(Decimal)
    for e in expenses:
        sums[e.expense_date] += e.amount
    return [DailyTotal(date=day, total=round2(sums[day])) for day in sorted(sums)]


@dataclass(frozen=True)
class MonthOverMonth:
    month: YearMonth
    current_total: Decimal
    previous_total: Decimal
    growth_percent: Decimal


def month_over_month(expenses: Iterable[Expense], month: YearMonth) -> MonthOverMonth:
    """Compare ``month`` with the month before it.

    growth_percent = (current - previous) / previous * 100, rounded to 2
    digits; 0 when the previous month has no spend.
    """
    previous = month.previous()
    current_sum = Decimal(0)
    previous_sum = Decimal(0)
    for e in expenses:
        if month.contains(e.expense_date):
            current_sum += e.amount
        elif previous.contains(e.expense_date):
            previous_sum += e.amount
    if previous_sum == 0:
        growth = ZERO
    else:
        growth = round2((current_sum - previous_sum) / previous_sum * 100)
    return MonthOverMonth(
        month=month,
        current_total=round2(current_sum),
        previous_total=round2(previous_sum),
        growth_percent=growth,
    )


__all__ = [
    "total",
    "average",
    "summary",
    "group_by_month",
    "group_by_category",
    "category_statistics",
    "detailed_category_stats",
    "top_n",
    "above_average",
    "daily_totals",
    "month_over_month",
    "ExpenseSummary",
    "CategoryBreakdownItem",
    "CategoryStatistics",
    "DailyTotal",
    "MonthOverMonth",
]
