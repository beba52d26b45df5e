"""Predicate builder and its agreement with the SQLite store."""

from __future__ import annotations

import functools
import itertools
import operator
from datetime import date
from decimal import Decimal

import pytest

from expense_tracker.core.exceptions import InvalidRange
from expense_tracker.models import Expense, ExpenseFilter
from expense_tracker.services.filters import (
    MATCH_ALL,
    build_predicate,
    excluding,
    month_predicate,
)
from expense_tracker.services.periods import YearMonth


def _expense(amount: str, day: date, description: str = "Lunch", category_id: int = 1, id: int = 1):
    return Expense(
        id=id,
        amount=Decimal(amount),
        description=description,
        category_id=category_id,
        expense_date=day,
    )


def test_empty_criteria_matches_everything(db, january_ledger):
    assert build_predicate(None) == MATCH_ALL
    assert build_predicate(ExpenseFilter()) == MATCH_ALL
    assert not MATCH_ALL
    assert db.find_all(build_predicate(ExpenseFilter())) == db.find_all()


def test_literal_january_window(expenses, january_ledger):
    result = expenses.filter_expenses(
        ExpenseFilter(
            min_amount=Decimal("10"),
            max_amount=Decimal("100"),
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
        )
    )
    assert [e.description for e in result] == [
        "Lunch at the deli",
        "Train ticket",
        "Weekly GROCERIES",
    ]


def test_bounds_are_inclusive(expenses, january_ledger):
    result = expenses.filter_expenses(
        ExpenseFilter(min_amount=Decimal("5.00"), max_amount=Decimal("5.00"))
    )
    assert [e.amount for e in result] == [Decimal("5.00")]

    result = expenses.filter_expenses(
        ExpenseFilter(start_date=date(2024, 1, 31), end_date=date(2024, 2, 1))
    )
    assert [e.expense_date for e in result] == [date(2024, 1, 31), date(2024, 2, 1)]


def test_sub_cent_amount_bounds(expenses, january_ledger):
    result = expenses.filter_expenses(
        ExpenseFilter(min_amount=Decimal("9.995"), max_amount=Decimal("10.001"))
    )
    assert [e.amount for e in result] == [Decimal("10.00")]


def test_keyword_is_case_insensitive(expenses, january_ledger):
    result = expenses.filter_expenses(ExpenseFilter(keyword="groceries"))
    assert [e.description for e in result] == ["Weekly GROCERIES", "Groceries refill"]


def test_empty_keyword_matches_every_description(expenses, january_ledger):
    assert len(expenses.filter_expenses(ExpenseFilter(keyword=""))) == len(january_ledger)


def test_category_criterion(expenses, january_ledger, travel):
    result = expenses.filter_expenses(ExpenseFilter(category_id=travel.id))
    assert {e.category_name for e in result} == {"Travel"}
    assert len(result) == 2


@pytest.mark.parametrize(
    "criteria",
    [
        ExpenseFilter(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1)),
        ExpenseFilter(min_amount=Decimal("50"), max_amount=Decimal("10")),
    ],
)
def test_inverted_range_is_rejected(criteria):
    with pytest.raises(InvalidRange):
        build_predicate(criteria)


CLAUSE_CRITERIA = [
    ExpenseFilter(min_amount=Decimal("10")),
    ExpenseFilter(max_amount=Decimal("120")),
    ExpenseFilter(end_date=date(2024, 1, 20)),
    ExpenseFilter(keyword="e"),
]


@pytest.mark.parametrize("order", list(itertools.permutations(range(len(CLAUSE_CRITERIA)))))
def test_conjunction_is_order_independent(db, january_ledger, order):
    predicates = [build_predicate(CLAUSE_CRITERIA[i]) for i in order]
    combined = functools.reduce(operator.and_, predicates)
    assert [e.amount for e in combined.apply(january_ledger)] == [
        Decimal("10.00"),
        Decimal("55.50"),
        Decimal("100.00"),
    ]
    assert db.find_all(combined) == combined.apply(db.find_all())


@pytest.mark.parametrize(
    "criteria",
    [
        ExpenseFilter(min_amount=Decimal("1e30")),
        ExpenseFilter(max_amount=Decimal("1e30")),
        ExpenseFilter(min_amount=Decimal("-1e30")),
        ExpenseFilter(max_amount=Decimal("-1e30")),
        ExpenseFilter(min_amount=Decimal("-1e30"), max_amount=Decimal("1e30")),
    ],
)
def test_out_of_range_amount_bounds(db, january_ledger, criteria):
    predicate = build_predicate(criteria)
    assert db.find_all(predicate) == predicate.apply(db.find_all())


def test_in_memory_and_sql_agree(db, january_ledger, food):
    criteria = [
        ExpenseFilter(category_id=food.id),
        ExpenseFilter(min_amount=Decimal("50")),
        ExpenseFilter(keyword="NIGHT"),
        ExpenseFilter(category_id=food.id, start_date=date(2024, 1, 4), keyword="e"),
    ]
    everything = db.find_all()
    for c in criteria:
        predicate = build_predicate(c)
        assert db.find_all(predicate) == predicate.apply(everything)


def test_month_predicate_covers_whole_month():
    predicate = month_predicate(YearMonth(2024, 2))
    assert predicate(_expense("1.00", date(2024, 2, 1)))
    assert predicate(_expense("1.00", date(2024, 2, 29)))
    assert not predicate(_expense("1.00", date(2024, 3, 1)))


def test_excluding_skips_one_expense():
    predicate = month_predicate(YearMonth(2024, 1)) & excluding(7)
    assert not predicate(_expense("1.00", date(2024, 1, 1), id=7))
    assert predicate(_expense("1.00", date(2024, 1, 1), id=8))
    assert excluding(None) == MATCH_ALL
