from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from expense_tracker.models import MAX_TREND_DAYS, ExpenseFilter
from expense_tracker.services.aggregation import CategoryStatistics
from expense_tracker.services.expense_service import ExpenseService

from .deps import expense_filter_params, get_expense_service, parse_month
from .expenses import ExpenseOut, expenses_to_out

router = APIRouter(prefix="/analytics", tags=["analytics"])


class SummaryOut(BaseModel):
    total_expenses: int
    total_amount: Decimal
    average_amount: Decimal


class MonthlyTotal(BaseModel):
    month: str
    total: Decimal


class CategoryBreakdownItem(BaseModel):
    category: str
    count: int
    total: Decimal
    average: Decimal


class CategoryStatsOut(BaseModel):
    category: Optional[str] = None
    count: int
    total: Decimal
    average: Decimal
    minimum: Decimal
    maximum: Decimal


class DailyTotal(BaseModel):
    date: date
    total: Decimal


class MonthOverMonthOut(BaseModel):
    month: str
    current_total: Decimal
    previous_total: Decimal
    growth_percent: Decimal


def _stats_to_out(stats: CategoryStatistics, category: Optional[str] = None) -> CategoryStatsOut:
    return CategoryStatsOut(
        category=category,
        count=stats.count,
        total=stats.total,
        average=stats.average,
        minimum=stats.min,
        maximum=stats.max,
    )


@router.get(
    "/summary",
    response_model=SummaryOut,
    summary="Count, total and average of the (filtered) expenses",
)
async def summary_endpoint(
    criteria: ExpenseFilter = Depends(expense_filter_params),
    service: ExpenseService = Depends(get_expense_service),
):
    s = service.summary(criteria)
    return SummaryOut(
        total_expenses=s.count, total_amount=s.total, average_amount=s.average
    )


@router.get(
    "/monthly",
    response_model=List[MonthlyTotal],
    summary="Totals per calendar month in chronological order",
)
async def monthly_endpoint(
    criteria: ExpenseFilter = Depends(expense_filter_params),
    service: ExpenseService = Depends(get_expense_service),
):
    return [
        MonthlyTotal(month=str(month), total=amount)
        for month, amount in service.monthly_totals(criteria).items()
    ]


@router.get(
    "/category-breakdown",
    response_model=List[CategoryBreakdownItem],
    summary="Count, total and average per category (largest total first)",
)
async def category_breakdown_endpoint(
    criteria: ExpenseFilter = Depends(expense_filter_params),
    service: ExpenseService = Depends(get_expense_service),
):
    return [
        CategoryBreakdownItem(
            category=name, count=item.count, total=item.total, average=item.average
        )
        for name, item in service.category_breakdown(criteria).items()
    ]


@router.get(
    "/categories/{category_id}/statistics",
    response_model=CategoryStatsOut,
    summary="Total, average, count, min and max for one category",
)
async def category_statistics_endpoint(
    category_id: int,
    service: ExpenseService = Depends(get_expense_service),
):
    return _stats_to_out(service.category_statistics(category_id))


@router.get(
    "/detailed-stats",
    response_model=List[CategoryStatsOut],
    summary="Per-category statistics within a date range",
)
async def detailed_stats_endpoint(
    start_date: date = Query(..., description="Start date inclusive"),
    end_date: date = Query(..., description="End date inclusive"),
    service: ExpenseService = Depends(get_expense_service),
):
    return [
        _stats_to_out(stats, name)
        for name, stats in service.detailed_stats(start_date, end_date).items()
    ]


@router.get(
    "/top",
    response_model=List[ExpenseOut],
    summary="Largest expenses first",
)
async def top_endpoint(
    limit: Optional[int] = Query(None, description="How many (defaults to setting)"),
    criteria: ExpenseFilter = Depends(expense_filter_params),
    service: ExpenseService = Depends(get_expense_service),
):
    return expenses_to_out(service.top_expenses(limit, criteria))


@router.get(
    "/above-average",
    response_model=List[ExpenseOut],
    summary="Expenses strictly above the average of the same selection",
)
async def above_average_endpoint(
    criteria: ExpenseFilter = Depends(expense_filter_params),
    service: ExpenseService = Depends(get_expense_service),
):
    return expenses_to_out(service.expenses_above_average(criteria))


@router.get(
    "/daily-trend",
    response_model=List[DailyTotal],
    summary="Per-day totals over the last N days",
)
async def daily_trend_endpoint(
    days: Optional[int] = Query(
        None, ge=0, le=MAX_TREND_DAYS, description="Window size in days"
    ),
    service: ExpenseService = Depends(get_expense_service),
):
    return [DailyTotal(date=d.date, total=d.total) for d in service.daily_trend(days)]


@router.get(
    "/month-over-month",
    response_model=MonthOverMonthOut,
    summary="Month total compared with the previous month",
)
async def month_over_month_endpoint(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to current"),
    service: ExpenseService = Depends(get_expense_service),
):
    result = service.month_over_month(parse_month(month) if month else None)
    return MonthOverMonthOut(
        month=str(result.month),
        current_total=result.current_total,
        previous_total=result.previous_total,
        growth_percent=result.growth_percent,
    )
