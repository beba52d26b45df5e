from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from expense_tracker.models import Expense, ExpenseFilter, ExpenseIn, ExpenseUpdateIn
from expense_tracker.services.expense_service import ExpenseService

from .deps import expense_filter_params, get_expense_service

router = APIRouter(prefix="/expenses", tags=["expenses"])


# Response Models --------------------------------------------------
class ExpenseOut(BaseModel):
    id: int
    amount: Decimal
    description: str
    category_id: int
    category_name: Optional[str] = None
    expense_date: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Helpers ----------------------------------------------------------


def expense_to_out(expense: Expense) -> ExpenseOut:
    return ExpenseOut(
        id=expense.id,
        amount=expense.amount,
        description=expense.description,
        category_id=expense.category_id,
        category_name=expense.category_name,
        expense_date=expense.expense_date,
        created_at=expense.created_at,
        updated_at=expense.updated_at,
    )


def expenses_to_out(expenses: List[Expense]) -> List[ExpenseOut]:
    return [expense_to_out(e) for e in expenses]


# Routes -----------------------------------------------------------
@router.post(
    "/", response_model=ExpenseOut, status_code=201, summary="Create an expense"
)
async def create_expense(
    payload: ExpenseIn,
    service: ExpenseService = Depends(get_expense_service),
):
    # Category check, budget enforcement and insert share one transaction
    return expense_to_out(service.create_expense(payload))


@router.get("/", response_model=List[ExpenseOut], summary="List all expenses")
async def list_expenses(service: ExpenseService = Depends(get_expense_service)):
    return expenses_to_out(service.list_expenses())


@router.get(
    "/filter",
    response_model=List[ExpenseOut],
    summary="Filter expenses by any combination of criteria",
)
async def filter_expenses(
    criteria: ExpenseFilter = Depends(expense_filter_params),
    service: ExpenseService = Depends(get_expense_service),
):
    return expenses_to_out(service.filter_expenses(criteria))


@router.get(
    "/search",
    response_model=List[ExpenseOut],
    summary="Search description or category name",
)
async def search_expenses(
    keyword: str = Query(..., description="Case-insensitive keyword"),
    service: ExpenseService = Depends(get_expense_service),
):
    return expenses_to_out(service.search(keyword))


@router.get(
    "/current-month",
    response_model=List[ExpenseOut],
    summary="Expenses dated in the current calendar month",
)
async def current_month_expenses(
    service: ExpenseService = Depends(get_expense_service),
):
    return expenses_to_out(service.current_month_expenses())


@router.get(
    "/by-category/{category_id}",
    response_model=List[ExpenseOut],
    summary="Expenses of one category",
)
async def expenses_by_category(
    category_id: int,
    service: ExpenseService = Depends(get_expense_service),
):
    return expenses_to_out(service.expenses_by_category(category_id))


@router.get("/{expense_id}", response_model=ExpenseOut, summary="Get one expense")
async def get_expense(
    expense_id: int,
    service: ExpenseService = Depends(get_expense_service),
):
    return expense_to_out(service.get_expense(expense_id))


@router.patch(
    "/{expense_id}", response_model=ExpenseOut, summary="Edit an expense (partial)"
)
async def patch_expense(
    expense_id: int,
    payload: ExpenseUpdateIn,
    service: ExpenseService = Depends(get_expense_service),
):
    return expense_to_out(service.update_expense(expense_id, payload))


@router.delete("/{expense_id}", status_code=204, summary="Delete an expense")
async def delete_expense(
    expense_id: int,
    service: ExpenseService = Depends(get_expense_service),
):
    service.delete_expense(expense_id)
    return None
