"""Database schema DDL, applied by `migrate.py`.

Tables:
  - categories: named expense groupings (unique, case-sensitive name)
  - expenses: individual expense records, amounts stored as integer cents
  - budgets: monthly spending ceiling per (category, month)
  - metadata: key/value store (schema version)
"""

from __future__ import annotations
from typing import Sequence

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

CATEGORIES_DDL = f"""
CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE, -- BINARY collation: uniqueness is case-sensitive
    color TEXT NOT NULL DEFAULT '#808080',
    description TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXPENSES_DDL = f"""
CREATE TABLE IF NOT EXISTS expenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    amount_cents INTEGER NOT NULL CHECK (amount_cents > 0),
    description TEXT NOT NULL,
    category_id INTEGER NOT NULL,
    expense_date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE RESTRICT
);
"""

BUDGETS_DDL = f"""
CREATE TABLE IF NOT EXISTS budgets (
    category_id INTEGER NOT NULL,
    month TEXT NOT NULL, -- YYYY-MM
    limit_cents INTEGER NOT NULL CHECK (limit_cents > 0),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    PRIMARY KEY (category_id, month),
    FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE CASCADE
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXPENSES_DATE_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(expense_date);"
)
EXPENSES_CATEGORY_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_category_date "
    "ON expenses(category_id, expense_date);"
)

DDL_ORDER: Sequence[str] = (
    CATEGORIES_DDL,
    EXPENSES_DDL,
    BUDGETS_DDL,
    METADATA_DDL,
)

INDEX_DDL: Sequence[str] = (
    EXPENSES_DATE_INDEX_DDL,
    EXPENSES_CATEGORY_INDEX_DDL,
)

