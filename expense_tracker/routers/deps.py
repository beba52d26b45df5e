"""FastAPI dependencies shared by the routers.

Each request gets its own ``Database`` built from the settings stored on the
application at startup, so an app created with ``settings_override`` never
touches the default database.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import Depends, Query, Request

from expense_tracker.core.config import Settings, get_settings
from expense_tracker.core.exceptions import InvalidInputError
from expense_tracker.db.dal import Database
from expense_tracker.models import ExpenseFilter
from expense_tracker.services.budget_service import BudgetService
from expense_tracker.services.category_service import CategoryService
from expense_tracker.services.expense_service import ExpenseService
from expense_tracker.services.periods import YearMonth


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_db(settings: Settings = Depends(get_app_settings)) -> Database:
    return Database(settings.db_path)


def get_expense_service(
    db: Database = Depends(get_db), settings: Settings = Depends(get_app_settings)
) -> ExpenseService:
    return ExpenseService(db, settings)


def get_budget_service(
    db: Database = Depends(get_db), settings: Settings = Depends(get_app_settings)
) -> BudgetService:
    return BudgetService(db, settings)


def get_category_service(db: Database = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def expense_filter_params(
    category_id: Optional[int] = Query(None, description="Filter by category id"),
    min_amount: Optional[Decimal] = Query(None, description="Minimum amount inclusive"),
    max_amount: Optional[Decimal] = Query(None, description="Maximum amount inclusive"),
    start_date: Optional[date] = Query(None, description="Filter: start date inclusive"),
    end_date: Optional[date] = Query(None, description="Filter: end date inclusive"),
    keyword: Optional[str] = Query(
        None, description="Case-insensitive substring of the description"
    ),
) -> ExpenseFilter:
    return ExpenseFilter(
        category_id=category_id,
        min_amount=min_amount,
        max_amount=max_amount,
        start_date=start_date,
        end_date=end_date,
        keyword=keyword,
    )


def parse_month(value: str) -> YearMonth:
    try:
        return YearMonth.parse(value)
    except ValueError as e:
        raise InvalidInputError(str(e), details=[f"month: {e}"]) from e
