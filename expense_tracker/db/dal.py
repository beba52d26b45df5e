"""Data Access Layer: SQLite implementation of the ledger store.

Responsibilities
----------------
- Provide CRUD helpers for categories, expenses and budgets.
- Push filter predicates down into SQL ``WHERE`` clauses.
- Offer ``transaction()`` so services can group a budget check and the
  expense write into one all-or-nothing unit.

Money is stored as integer cents and converted to ``Decimal`` at the edge,
so SQL comparisons and sums never touch binary floating point.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
import logging
import sqlite3
from typing import Any, Iterator, List, Optional

from expense_tracker.core.exceptions import (
    CategoryInUse,
    CategoryNotFound,
    DuplicateCategory,
    ExpenseNotFound,
)
from expense_tracker.models import Budget, Category, Expense
from expense_tracker.models.constants import DEFAULT_CATEGORY_COLOR
from expense_tracker.services.filters import ExpensePredicate
from expense_tracker.services.money import from_cents, to_cents
from expense_tracker.services.periods import YearMonth

from .base import LedgerStore
from .schema import BASIC_UTC_NOW

UTC_NOW_SQL = BASIC_UTC_NOW

EXPENSE_SELECT = """
    SELECT e.id, e.amount_cents, e.description, e.category_id, e.expense_date,
           e.created_at, e.updated_at, c.name AS category_name
    FROM expenses e
    JOIN categories c ON c.id = e.category_id
"""

logger = logging.getLogger("expense_tracker.db")


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def _ts(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    return datetime.fromisoformat(raw.replace("Z", ""))


def _row_to_expense(row: sqlite3.Row) -> Expense:
    return Expense(
        id=row["id"],
        amount=from_cents(row["amount_cents"]),
        description=row["description"],
        category_id=row["category_id"],
        category_name=row["category_name"],
        expense_date=date.fromisoformat(row["expense_date"]),
        created_at=_ts(row["created_at"]),
        updated_at=_ts(row["updated_at"]),
    )


def _row_to_category(row: sqlite3.Row) -> Category:
    return Category(
        id=row["id"],
        name=row["name"],
        color=row["color"],
        description=row["description"],
        created_at=_ts(row["created_at"]),
        updated_at=_ts(row["updated_at"]),
    )


def _row_to_budget(row: sqlite3.Row) -> Budget:
    return Budget(
        category_id=row["category_id"],
        month=YearMonth.parse(row["month"]),
        monthly_limit=from_cents(row["limit_cents"]),
    )


class Database(LedgerStore):
    """One instance per logical operation; not shared between threads."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    # ------------------------------------------------------------------
    # Connection helpers
    def _open(self) -> sqlite3.Connection:
        # isolation_level=None: transactions are opened explicitly in transaction()
        conn = sqlite3.connect(self.db_path, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Yield the active transaction's connection, or a short-lived one for reads."""
        if self._conn is not None:
            yield self._conn
            return
        conn = self._open()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        if self._conn is not None:
            # Nested unit joins the outer one; the outermost commits.
            yield self._conn
            return
        conn = self._open()
        conn.execute("BEGIN IMMEDIATE")
        self._conn = conn
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            logger.debug("transaction rolled back")
            raise
        finally:
            self._conn = None
            conn.close()

    # ------------------------------------------------------------------
    # Expenses
    def find_all(self, predicate: Optional[ExpensePredicate] = None) -> List[Expense]:
        where, params = (predicate or ExpensePredicate()).to_sql()
        with self._connect() as conn:
            cur = conn.execute(
                f"{EXPENSE_SELECT} WHERE {where} ORDER BY e.expense_date, e.id",
                params,
            )
            return [_row_to_expense(r) for r in cur.fetchall()]

    def search(self, keyword: str) -> List[Expense]:
        """Case-insensitive match on description or category name."""
        needle = keyword.casefold()
        with self._connect() as conn:
            cur = conn.execute(
                f"""{EXPENSE_SELECT}
                WHERE instr(casefold(e.description), ?) > 0
                   OR instr(casefold(c.name), ?) > 0
                ORDER BY e.expense_date, e.id""",
                (needle, needle),
            )
            return [_row_to_expense(r) for r in cur.fetchall()]

    def find_expense(self, expense_id: int) -> Optional[Expense]:
        with self._connect() as conn:
            cur = conn.execute(f"{EXPENSE_SELECT} WHERE e.id = ?", (expense_id,))
            row = cur.fetchone()
            return _row_to_expense(row) if row else None

    def count_expenses(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) FROM expenses").fetchone()
            return int(row[0] if row and row[0] is not None else 0)

    def save(self, expense: Expense) -> Expense:
        with self.transaction() as conn:
            if not self.category_exists(expense.category_id):
                raise CategoryNotFound(expense.category_id)
            params: List[Any] = [
                to_cents(expense.amount),
                expense.description,
                expense.category_id,
                expense.expense_date.isoformat(),
            ]
            if expense.id is None:
                cur = conn.execute(
                    f"""
                    INSERT INTO expenses (
                        amount_cents, description, category_id, expense_date,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                    """,
                    params,
                )
                expense_id = int(cur.lastrowid)
            else:
                cur = conn.execute(
                    f"""
                    UPDATE expenses
                    SET amount_cents = ?, description = ?, category_id = ?,
                        expense_date = ?, updated_at = ({UTC_NOW_SQL})
                    WHERE id = ?
                    """,
                    params + [expense.id],
                )
                if cur.rowcount == 0:
                    raise ExpenseNotFound(expense.id)
                expense_id = expense.id
            saved = self.find_expense(expense_id)
            if saved is None:  # pragma: no cover - same transaction
                raise RuntimeError("expense not found after save")
            return saved

    def delete(self, expense_id: int) -> None:
        with self.transaction() as conn:
            cur = conn.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
            if cur.rowcount == 0:
                raise ExpenseNotFound(expense_id)

    # ------------------------------------------------------------------
    # Categories
    def find_category(self, category_id: int) -> Optional[Category]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM categories WHERE id = ?", (category_id,)
            ).fetchone()
            return _row_to_category(row) if row else None

    def find_category_by_name(self, name: str) -> Optional[Category]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM categories WHERE name = ?", (name,)
            ).fetchone()
            return _row_to_category(row) if row else None

    def list_categories(self, order_by_name: bool = False) -> List[Category]:
        order = "name ASC, id ASC" if order_by_name else "id ASC"
        with self._connect() as conn:
            cur = conn.execute(f"SELECT * FROM categories ORDER BY {order}")
            return [_row_to_category(r) for r in cur.fetchall()]

    def search_categories(self, keyword: str) -> List[Category]:
        with self._connect() as conn:
            cur = conn.execute(
                "SELECT * FROM categories WHERE instr(casefold(name), ?) > 0 ORDER BY id",
                (keyword.casefold(),),
            )
            return [_row_to_category(r) for r in cur.fetchall()]

    def unused_categories(self) -> List[Category]:
        with self._connect() as conn:
            cur = conn.execute(
                """
                SELECT c.* FROM categories c
                WHERE NOT EXISTS (SELECT 1 FROM expenses e WHERE e.category_id = c.id)
                ORDER BY c.id
                """
            )
            return [_row_to_category(r) for r in cur.fetchall()]

    def count_category_expenses(self, category_id: int) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM expenses WHERE category_id = ?", (category_id,)
            ).fetchone()
            return int(row[0] or 0)

    def save_category(self, category: Category) -> Category:
        color = category.color or DEFAULT_CATEGORY_COLOR
        with self.transaction() as conn:
            try:
                if category.id is None:
                    cur = conn.execute(
                        f"""
                        INSERT INTO categories (name, color, description, created_at, updated_at)
                        VALUES (?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                        """,
                        (category.name, color, category.description),
                    )
                    category_id = int(cur.lastrowid)
                else:
                    cur = conn.execute(
                        f"""
                        UPDATE categories
                        SET name = ?, color = ?, description = ?, updated_at = ({UTC_NOW_SQL})
                        WHERE id = ?
                        """,
                        (category.name, color, category.description, category.id),
                    )
                    if cur.rowcount == 0:
                        raise CategoryNotFound(category.id)
                    category_id = category.id
            except sqlite3.IntegrityError as e:
                if "UNIQUE" in str(e):
                    raise DuplicateCategory(category.name) from e
                raise
            saved = self.find_category(category_id)
            if saved is None:  # pragma: no cover - same transaction
                raise RuntimeError("category not found after save")
            return saved

    def delete_category(self, category_id: int) -> None:
        with self.transaction() as conn:
            if not self.category_exists(category_id):
                raise CategoryNotFound(category_id)
            in_use = self.count_category_expenses(category_id)
            if in_use:
                raise CategoryInUse(category_id, in_use)
            conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))

    # ------------------------------------------------------------------
    # Budgets
    def find_budget(self, category_id: int, month: YearMonth) -> Optional[Budget]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM budgets WHERE category_id = ? AND month = ?",
                (category_id, str(month)),
            ).fetchone()
            return _row_to_budget(row) if row else None

    def upsert_budget(self, budget: Budget) -> Budget:
        with self.transaction() as conn:
            conn.execute(
                f"""
                INSERT INTO budgets (category_id, month, limit_cents, updated_at)
                VALUES (?, ?, ?, ({UTC_NOW_SQL}))
                ON CONFLICT(category_id, month) DO UPDATE SET
                    limit_cents = excluded.limit_cents,
                    updated_at = excluded.updated_at
                """,
                (budget.category_id, str(budget.month), to_cents(budget.monthly_limit)),
            )
            saved = self.find_budget(budget.category_id, budget.month)
            if saved is None:  # pragma: no cover - same transaction
                raise RuntimeError("budget not found after upsert")
            return saved

    def list_budgets(self, month: Optional[YearMonth] = None) -> List[Budget]:
        with self._connect() as conn:
            if month is None:
                cur = conn.execute("SELECT * FROM budgets ORDER BY month, category_id")
            else:
                cur = conn.execute(
                    "SELECT * FROM budgets WHERE month = ? ORDER BY category_id",
                    (str(month),),
                )
            return [_row_to_budget(r) for r in cur.fetchall()]
