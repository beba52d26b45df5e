"""Database migration utilities.

``schema_version`` in the metadata table records the last applied step.
``MIGRATIONS`` maps each version to the function that upgrades a database
from the previous version; steps run in order inside one transaction, so a
failed step leaves the file at its old version.
"""

from __future__ import annotations
from pathlib import Path
import logging
import sqlite3
from typing import Callable, Dict, Optional

from . import schema as schema_def

SCHEMA_VERSION_KEY = "schema_version"

logger = logging.getLogger("expense_tracker.db")


def _migrate_to_v1(conn: sqlite3.Connection) -> None:
    """Initial layout: categories, expenses, budgets, metadata + indexes."""
    for ddl in schema_def.DDL_ORDER:
        conn.execute(ddl)
    for ddl in schema_def.INDEX_DDL:
        conn.execute(ddl)


MIGRATIONS: Dict[int, Callable[[sqlite3.Connection], None]] = {
    1: _migrate_to_v1,
}
CURRENT_SCHEMA_VERSION = max(MIGRATIONS)


def _get_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    try:
        row = conn.execute(
            "SELECT value FROM metadata WHERE key=?", (SCHEMA_VERSION_KEY,)
        ).fetchone()
    except sqlite3.OperationalError:
        # metadata table does not exist on a fresh file
        return None
    return int(row[0]) if row else None


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    conn.execute(
        "INSERT INTO metadata (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
        f"updated_at=({schema_def.BASIC_UTC_NOW})",
        (SCHEMA_VERSION_KEY, str(version)),
    )


def apply_migrations(db_path: Path) -> int:
    """Bring ``db_path`` up to ``CURRENT_SCHEMA_VERSION`` and return it.

    Raises RuntimeError for a database written by a newer release.
    """
    conn = sqlite3.connect(db_path, isolation_level=None)
    try:
        version = _get_schema_version(conn) or 0
        if version > CURRENT_SCHEMA_VERSION:
            raise RuntimeError(
                f"database schema v{version} is newer than supported v{CURRENT_SCHEMA_VERSION}"
            )
        conn.execute("BEGIN IMMEDIATE")
        try:
            for target in range(version + 1, CURRENT_SCHEMA_VERSION + 1):
                MIGRATIONS[target](conn)
                logger.info("schema migrated", extra={"scope": f"v{target}"})
            _set_schema_version(conn, CURRENT_SCHEMA_VERSION)
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise
        return CURRENT_SCHEMA_VERSION
    finally:
        conn.close()
