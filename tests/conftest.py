"""Shared fixtures: a throwaway SQLite ledger per test plus services over it."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from expense_tracker.core.config import Settings
from expense_tracker.db.dal import Database
from expense_tracker.db.migrate import apply_migrations
from expense_tracker.main import create_app
from expense_tracker.models import CategoryIn, ExpenseIn
from expense_tracker.services.budget_service import BudgetService
from expense_tracker.services.category_service import CategoryService
from expense_tracker.services.expense_service import ExpenseService


@pytest.fixture
def settings(tmp_path) -> Settings:
    # Fixed 2024 dates are used throughout, so the lookback rule is off here.
    s = Settings(
        data_dir=tmp_path,
        db_path=tmp_path / "ledger.sqlite3",
        global_monthly_cap=Decimal("5000"),
        expense_max_age_days=None,
    )
    s.init_post_load()
    return s


@pytest.fixture
def db(settings) -> Database:
    apply_migrations(settings.db_path)
    return Database(settings.db_path)


@pytest.fixture
def categories(db) -> CategoryService:
    return CategoryService(db)


@pytest.fixture
def budgets(db, settings) -> BudgetService:
    return BudgetService(db, settings)


@pytest.fixture
def expenses(db, settings, budgets) -> ExpenseService:
    return ExpenseService(db, settings, budgets)


@pytest.fixture
def food(categories):
    return categories.create_category(CategoryIn(name="Food"))


@pytest.fixture
def travel(categories):
    return categories.create_category(CategoryIn(name="Travel", color="#00AAFF"))


@pytest.fixture
def add_expense(expenses):
    def _add(amount, category, day: date, description: str = "Some expense"):
        return expenses.create_expense(
            ExpenseIn(
                amount=Decimal(str(amount)),
                description=description,
                category_id=category.id,
                expense_date=day,
            )
        )

    return _add


@pytest.fixture
def january_ledger(add_expense, food, travel):
    """Five January 2024 expenses plus one in February."""
    return [
        add_expense("5.00", food, date(2024, 1, 3), "Coffee beans"),
        add_expense("10.00", food, date(2024, 1, 5), "Lunch at the deli"),
        add_expense("55.50", travel, date(2024, 1, 12), "Train ticket"),
        add_expense("100.00", food, date(2024, 1, 20), "Weekly GROCERIES"),
        add_expense("150.00", travel, date(2024, 1, 31), "Hotel night"),
        add_expense("42.00", food, date(2024, 2, 1), "Groceries refill"),
    ]


@pytest.fixture
def client(settings) -> TestClient:
    with TestClient(create_app(settings)) as c:
        yield c
