"""Pure aggregation helpers over in-memory expense lists."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from expense_tracker.models import Expense
from expense_tracker.services import aggregation
from expense_tracker.services.periods import YearMonth


def make(amount: str, day: date = date(2024, 1, 1), category: str = "Food", id: int = 0) -> Expense:
    return Expense(
        id=id,
        amount=Decimal(amount),
        description=f"expense {id}",
        category_id=1,
        category_name=category,
        expense_date=day,
    )


def test_total_and_average() -> None:
    items = [make("10.00"), make("20.00"), make("30.01")]
    assert aggregation.total(items) == Decimal("60.01")
    # 60.01 / 3 = 20.0033.. rounds half up to cents
    assert aggregation.average(items) == Decimal("20.00")
    assert aggregation.average([make("0.01"), make("0.02")]) == Decimal("0.02")


def test_empty_inputs_yield_zero() -> None:
    assert aggregation.total([]) == Decimal("0.00")
    assert aggregation.average([]) == Decimal("0.00")
    s = aggregation.summary([])
    assert (s.count, s.total, s.average) == (0, Decimal("0.00"), Decimal("0.00"))
    stats = aggregation.category_statistics([])
    assert stats == aggregation.CategoryStatistics(
        total=Decimal("0.00"),
        average=Decimal("0.00"),
        count=0,
        max=Decimal("0.00"),
        min=Decimal("0.00"),
    )


def test_group_by_month_is_chronological() -> None:
    items = [
        make("5.00", date(2024, 3, 2)),
        make("1.00", date(2023, 12, 31)),
        make("2.50", date(2024, 3, 30)),
        make("4.00", date(2024, 1, 15)),
    ]
    result = aggregation.group_by_month(items)
    assert list(result) == [YearMonth(2023, 12), YearMonth(2024, 1), YearMonth(2024, 3)]
    assert result[YearMonth(2024, 3)] == Decimal("7.50")
    assert [str(m) for m in result] == ["2023-12", "2024-01", "2024-03"]


def test_group_by_category_orders_by_total() -> None:
    items = [
        make("5.00", category="Food"),
        make("50.00", category="Travel"),
        make("7.00", category="Food"),
        make("12.00", category="Books"),
        make("3.00", category=None),
    ]
    result = aggregation.group_by_category(items)
    assert list(result) == ["Travel", "Books", "Food", "Uncategorized"]
    assert result["Food"] == aggregation.CategoryBreakdownItem(
        count=2, total=Decimal("12.00"), average=Decimal("6.00")
    )


def test_category_statistics() -> None:
    stats = aggregation.category_statistics([make("2.00"), make("8.50"), make("4.00")])
    assert stats.count == 3
    assert stats.total == Decimal("14.50")
    assert stats.average == Decimal("4.83")
    assert stats.max == Decimal("8.50")
    assert stats.min == Decimal("2.00")


def test_top_n_is_stable_and_bounded() -> None:
    a, b, c, d = make("10.00", id=1), make("30.00", id=2), make("10.00", id=3), make("20.00", id=4)
    items = [a, b, c, d]
    assert [e.id for e in aggregation.top_n(items, 3)] == [2, 4, 1]
    assert [e.id for e in aggregation.top_n(items, 10)] == [2, 4, 1, 3]
    assert aggregation.top_n(items, 0) == []
    assert aggregation.top_n(items, -2) == []
    assert aggregation.top_n([], 5) == []


def test_above_average_uses_unrounded_mean() -> None:
    # mean is 0.01666..; against the rounded 0.02 nothing would qualify
    items = [make("0.01", id=1), make("0.02", id=2), make("0.02", id=3)]
    assert [e.id for e in aggregation.above_average(items)] == [2, 3]
    assert aggregation.above_average([]) == []
    same = [make("5.00", id=1), make("5.00", id=2)]
    assert aggregation.above_average(same) == []


def test_daily_totals() -> None:
    items = [
        make("1.00", date(2024, 1, 2)),
        make("2.00", date(2024, 1, 1)),
        make("3.25", date(2024, 1, 2)),
    ]
    result = aggregation.daily_totals(items)
    assert [(d.date, d.total) for d in result] == [
        (date(2024, 1, 1), Decimal("2.00")),
        (date(2024, 1, 2), Decimal("4.25")),
    ]


def test_month_over_month() -> None:
    items = [
        make("100.00", date(2024, 1, 10)),
        make("150.00", date(2024, 2, 3)),
        make("999.00", date(2023, 12, 31)),
    ]
    result = aggregation.month_over_month(items, YearMonth(2024, 2))
    assert result.current_total == Decimal("150.00")
    assert result.previous_total == Decimal("100.00")
    assert result.growth_percent == Decimal("50.00")

    first = aggregation.month_over_month(items[:1], YearMonth(2024, 1))
    assert first.previous_total == Decimal("0.00")
    assert first.growth_percent == Decimal("0.00")
