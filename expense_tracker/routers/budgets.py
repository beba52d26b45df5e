from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from expense_tracker.models import Budget, BudgetIn
from expense_tracker.services.budget_service import BudgetService

from .deps import get_budget_service, parse_month

router = APIRouter(prefix="/budgets", tags=["budgets"])


class BudgetOut(BaseModel):
    category_id: int
    month: str
    monthly_limit: Decimal


class BudgetStatusOut(BaseModel):
    category_id: int
    month: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal
    exceeded: bool


class RemainingOut(BaseModel):
    category_id: int
    month: str
    remaining: Decimal


class ExceededOut(BaseModel):
    category_id: int
    month: str
    exceeded: bool


def budget_to_out(budget: Budget) -> BudgetOut:
    return BudgetOut(
        category_id=budget.category_id,
        month=str(budget.month),
        monthly_limit=budget.monthly_limit,
    )


@router.get("/", response_model=List[BudgetOut], summary="List configured budgets")
async def list_budgets(
    month: Optional[str] = Query(None, description="Only this month (YYYY-MM)"),
    service: BudgetService = Depends(get_budget_service),
):
    ym = parse_month(month) if month is not None else None
    return [budget_to_out(b) for b in service.list_budgets(ym)]


@router.put(
    "/{category_id}/{month}",
    response_model=BudgetOut,
    summary="Create or replace the monthly limit of a category",
)
async def upsert_budget(
    category_id: int,
    payload: BudgetIn,
    month: str,
    service: BudgetService = Depends(get_budget_service),
):
    budget = service.set_budget(category_id, parse_month(month), payload.monthly_limit)
    return budget_to_out(budget)


@router.get("/{category_id}/{month}", response_model=BudgetOut, summary="Get a budget")
async def get_budget(
    category_id: int,
    month: str,
    service: BudgetService = Depends(get_budget_service),
):
    return budget_to_out(service.get_budget(category_id, parse_month(month)))


@router.get(
    "/{category_id}/{month}/status",
    response_model=BudgetStatusOut,
    summary="Limit, spend and percent used",
)
async def budget_status(
    category_id: int,
    month: str,
    service: BudgetService = Depends(get_budget_service),
):
    st = service.budget_status(category_id, parse_month(month))
    return BudgetStatusOut(
        category_id=st.category_id,
        month=str(st.month),
        limit=st.limit,
        spent=st.spent,
        remaining=st.remaining,
        percent_used=st.percent_used,
        exceeded=st.exceeded,
    )


@router.get(
    "/{category_id}/{month}/remaining",
    response_model=RemainingOut,
    summary="Remaining budget (409 once exceeded)",
)
async def remaining_budget(
    category_id: int,
    month: str,
    service: BudgetService = Depends(get_budget_service),
):
    ym = parse_month(month)
    return RemainingOut(
        category_id=category_id,
        month=str(ym),
        remaining=service.remaining_budget(category_id, ym),
    )


@router.get(
    "/{category_id}/{month}/exceeded",
    response_model=ExceededOut,
    summary="Whether spend is above the limit",
)
async def budget_exceeded(
    category_id: int,
    month: str,
    service: BudgetService = Depends(get_budget_service),
):
    ym = parse_month(month)
    return ExceededOut(
        category_id=category_id,
        month=str(ym),
        exceeded=service.is_budget_exceeded(category_id, ym),
    )
