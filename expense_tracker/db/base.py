"""Ledger store abstraction.

The services only talk to this interface, never to SQLite directly. An
implementation must evaluate arbitrary conjunctive predicates in
``find_all`` and provide ``transaction()`` as one atomic unit: everything
done inside it is committed together or not at all, and nested calls join
the outer unit.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ContextManager, List, Optional

from expense_tracker.models import Budget, Category, Expense
from expense_tracker.services.filters import ExpensePredicate
from expense_tracker.services.periods import YearMonth


class LedgerStore(ABC):
    # ---------------- Unit of work -----------------
    @abstractmethod
    def transaction(self) -> ContextManager[object]:
        raise NotImplementedError

    # ---------------- Expenses -----------------
    @abstractmethod
    def find_all(self, predicate: Optional[ExpensePredicate] = None) -> List[Expense]:
        """Expenses matching ``predicate`` ordered by (expense_date, id)."""
        raise NotImplementedError

    @abstractmethod
    def search(self, keyword: str) -> List[Expense]:
        """Case-insensitive keyword match on description or category name."""
        raise NotImplementedError

    @abstractmethod
    def find_expense(self, expense_id: int) -> Optional[Expense]:
        raise NotImplementedError

    @abstractmethod
    def save(self, expense: Expense) -> Expense:
        """Insert when ``expense.id`` is None, update otherwise."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, expense_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def count_expenses(self) -> int:
        raise NotImplementedError

    # ---------------- Categories -----------------
    @abstractmethod
    def find_category(self, category_id: int) -> Optional[Category]:
        raise NotImplementedError

    @abstractmethod
    def find_category_by_name(self, name: str) -> Optional[Category]:
        raise NotImplementedError

    def category_exists(self, category_id: int) -> bool:
        return self.find_category(category_id) is not None

    def category_name_exists(self, name: str) -> bool:
        return self.find_category_by_name(name) is not None

    @abstractmethod
    def list_categories(self, order_by_name: bool = False) -> List[Category]:
        raise NotImplementedError

    @abstractmethod
    def search_categories(self, keyword: str) -> List[Category]:
        raise NotImplementedError

    @abstractmethod
    def unused_categories(self) -> List[Category]:
        raise NotImplementedError

    @abstractmethod
    def count_category_expenses(self, category_id: int) -> int:
        raise NotImplementedError

    @abstractmethod
    def save_category(self, category: Category) -> Category:
        raise NotImplementedError

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        raise NotImplementedError

    # ---------------- Budgets -----------------
    @abstractmethod
    def find_budget(self, category_id: int, month: YearMonth) -> Optional[Budget]:
        raise NotImplementedError

    @abstractmethod
    def upsert_budget(self, budget: Budget) -> Budget:
        raise NotImplementedError

    @abstractmethod
    def list_budgets(self, month: Optional[YearMonth] = None) -> List[Budget]:
        raise NotImplementedError
