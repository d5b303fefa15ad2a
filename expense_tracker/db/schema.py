"""Database schema DDL definitions and initialization utilities.

Tables:
  - users: registered accounts (email unique, bcrypt password hash)
  - expenses: per-user expense records, cascade-deleted with their owner
  - metadata: key/value store (schema version)

Amounts are stored as TEXT holding a 2-decimal string so values round-trip
through ``Decimal`` exactly (decimal(10,2) semantics).
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

from expense_tracker.models.constants import CATEGORIES

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

USERS_DDL = f"""
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    name TEXT NOT NULL,
    inserted_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

_CATEGORY_LIST = ",".join(f"'{c}'" for c in CATEGORIES)

EXPENSES_DDL = f"""
CREATE TABLE IF NOT EXISTS expenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    amount TEXT NOT NULL, -- decimal(10,2) as string
    description TEXT NOT NULL,
    category TEXT NOT NULL CHECK (category IN ({_CATEGORY_LIST})),
    date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    currency TEXT NOT NULL DEFAULT 'USD',
    user_id INTEGER NOT NULL,
    inserted_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXPENSES_USER_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_user_id ON expenses(user_id);"
)
EXPENSES_DATE_INDEX_DDL = "CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date);"
EXPENSES_CATEGORY_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_category ON expenses(category);"
)
EXPENSES_CURRENCY_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_expenses_currency ON expenses(currency);"
)

DDL_ORDER: Sequence[str] = (
    USERS_DDL,
    EXPENSES_DDL,
    METADATA_DDL,
)

INDEX_DDL: Sequence[str] = (
    EXPENSES_USER_INDEX_DDL,
    EXPENSES_DATE_INDEX_DDL,
    EXPENSES_CATEGORY_INDEX_DDL,
    EXPENSES_CURRENCY_INDEX_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        _ensure_indexes(cur)
        conn.commit()
    finally:
        conn.close()


def _ensure_indexes(cur: sqlite3.Cursor) -> None:
    """Create indexes, tolerating legacy schemas missing the currency column."""
    for ddl in INDEX_DDL:
        try:
            cur.execute(ddl)
        except sqlite3.OperationalError:
            # Legacy tables may lack columns; migration adds them and the index.
            continue
