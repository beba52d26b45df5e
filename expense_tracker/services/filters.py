"""Filter predicate builder.

Turns optional filter criteria into an ``ExpensePredicate``: an ordered tuple
of typed clauses combined with logical AND. Absent criteria add no clause, so
an empty predicate matches every expense. Each clause can be evaluated
in-memory against an ``Expense`` or rendered as a parameterized SQL fragment
for the store; the two forms agree.

SQL fragments reference the ``expenses`` table alias ``e`` and rely on the
``casefold`` function the SQLite store registers on its connections.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR
from typing import Any, Iterable, List, Optional, Tuple, Union

from expense_tracker.core.exceptions import InvalidRange
from expense_tracker.models import Expense, ExpenseFilter
from expense_tracker.services.money import to_decimal
from expense_tracker.services.periods import YearMonth

SqlFragment = Tuple[str, List[Any]]

# SQLite INTEGER range
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


def _bound_cents(amount: Decimal, rounding: str) -> int:
    """Whole cents for a bound, clamped so any Decimal can be bound as INTEGER."""
    # compare before scaling so huge exponents never overflow the Decimal context
    if amount >= Decimal(SQLITE_INT_MAX) / 100:
        return SQLITE_INT_MAX
    if amount <= Decimal(SQLITE_INT_MIN) / 100:
        return SQLITE_INT_MIN
    return int((amount * 100).to_integral_value(rounding=rounding))


@dataclass(frozen=True)
class CategoryClause:
    category_id: int

    def matches(self, expense: Expense) -> bool:
        return expense.category_id == self.category_id

    def sql(self) -> SqlFragment:
        return "e.category_id = ?", [self.category_id]


@dataclass(frozen=True)
class MinAmountClause:
    amount: Decimal

    def matches(self, expense: Expense) -> bool:
        return expense.amount >= self.amount

    def sql(self) -> SqlFragment:
        # Cents stay exact; a bound between two cents is rounded inward.
        return "e.amount_cents >= ?", [_bound_cents(self.amount, ROUND_CEILING)]


@dataclass(frozen=True)
class MaxAmountClause:
    amount: Decimal

    def matches(self, expense: Expense) -> bool:
        return expense.amount <= self.amount

    def sql(self) -> SqlFragment:
        return "e.amount_cents <= ?", [_bound_cents(self.amount, ROUND_FLOOR)]


@dataclass(frozen=True)
class StartDateClause:
    start: date

    def matches(self, expense: Expense) -> bool:
        return expense.expense_date >= self.start

    def sql(self) -> SqlFragment:
        return "e.expense_date >= ?", [self.start.isoformat()]


@dataclass(frozen=True)
class EndDateClause:
    end: date

    def matches(self, expense: Expense) -> bool:
        return expense.expense_date <= self.end

    def sql(self) -> SqlFragment:
        return "e.expense_date <= ?", [self.end.isoformat()]


@dataclass(frozen=True)
class KeywordClause:
    keyword: str

    def matches(self, expense: Expense) -> bool:
        return self.keyword.casefold() in expense.description.casefold()

    def sql(self) -> SqlFragment:
        return "instr(casefold(e.description), ?) > 0", [self.keyword.casefold()]


@dataclass(frozen=True)
class ExcludeIdClause:
    """Skips one expense; used when re-checking budgets for an update."""

    expense_id: int

    def matches(self, expense: Expense) -> bool:
        return expense.id != self.expense_id

    def sql(self) -> SqlFragment:
        return "e.id != ?", [self.expense_id]


Clause = Union[
    CategoryClause,
    MinAmountClause,
    MaxAmountClause,
    StartDateClause,
    EndDateClause,
    KeywordClause,
    ExcludeIdClause,
]


@dataclass(frozen=True)
class ExpensePredicate:
    clauses: Tuple[Clause, ...] = ()

    def __call__(self, expense: Expense) -> bool:
        return all(clause.matches(expense) for clause in self.clauses)

    def __and__(self, other: "ExpensePredicate") -> "ExpensePredicate":
        return ExpensePredicate(self.clauses + other.clauses)

    and_ = __and__

    def apply(self, expenses: Iterable[Expense]) -> List[Expense]:
        return [e for e in expenses if self(e)]

    def to_sql(self) -> SqlFragment:
        """Return ``(where_sql, params)``; ``where_sql`` is "1=1" when empty."""
        if not self.clauses:
            return "1=1", []
        parts: List[str] = []
        params: List[Any] = []
        for clause in self.clauses:
            fragment, clause_params = clause.sql()
            parts.append(fragment)
            params.extend(clause_params)
        return " AND ".join(parts), params

    def __bool__(self) -> bool:
        return bool(self.clauses)


MATCH_ALL = ExpensePredicate()


def _check_range(field: str, lower: Any, upper: Any) -> None:
    if lower is not None and upper is not None and lower > upper:
        raise InvalidRange(field, lower, upper)


def build_predicate(criteria: Optional[ExpenseFilter] = None) -> ExpensePredicate:
    """Compose the criteria into one conjunctive predicate.

    Raises InvalidRange when ``start_date > end_date`` or
    ``min_amount > max_amount``; an inverted range is a caller error, not an
    empty result.
    """
    if criteria is None:
        return MATCH_ALL
    _check_range("date", criteria.start_date, criteria.end_date)
    _check_range("amount", criteria.min_amount, criteria.max_amount)

    clauses: List[Clause] = []
    if criteria.category_id is not None:
        clauses.append(CategoryClause(criteria.category_id))
    if criteria.min_amount is not None:
        clauses.append(MinAmountClause(to_decimal(criteria.min_amount)))
    if criteria.max_amount is not None:
        clauses.append(MaxAmountClause(to_decimal(criteria.max_amount)))
    if criteria.start_date is not None:
        clauses.append(StartDateClause(criteria.start_date))
    if criteria.end_date is not None:
        clauses.append(EndDateClause(criteria.end_date))
    if criteria.keyword is not None:
        clauses.append(KeywordClause(criteria.keyword))
    return ExpensePredicate(tuple(clauses))


def month_predicate(
    month: YearMonth, category_id: Optional[int] = None
) -> ExpensePredicate:
    """Expenses dated inside ``month``, optionally limited to one category."""
    clauses: List[Clause] = [StartDateClause(month.first_day), EndDateClause(month.last_day)]
    if category_id is not None:
        clauses.insert(0, CategoryClause(category_id))
    return ExpensePredicate(tuple(clauses))


def excluding(expense_id: Optional[int]) -> ExpensePredicate:
    if expense_id is None:
        return MATCH_ALL
    return ExpensePredicate((ExcludeIdClause(expense_id),))


__all__ = [
    "ExpensePredicate",
    "MATCH_ALL",
    "build_predicate",
    "month_predicate",
    "excluding",
    "CategoryClause",
    "MinAmountClause",
    "MaxAmountClause",
    "StartDateClause",
    "EndDateClause",
    "KeywordClause",
    "ExcludeIdClause",
]
