"""Data Access Layer for users and their expenses.

Responsibilities
----------------
- Provide CRUD helpers for user accounts (email lookups, rename, delete).
- Scope every expense read and write to an owning ``user_id``: lookups filter
  on ``id AND user_id`` in a single statement, so a row owned by someone else
  is indistinguishable from a missing one.
- Run each mutation in one transaction; sqlite errors surface as
  ``StoreError`` after the transaction is rolled back.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
import logging
from pathlib import Path
import sqlite3
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"
EXPENSE_COLUMNS = ("amount", "description", "category", "date", "currency")

logger = logging.getLogger("expense_tracker.dal")


class StoreError(Exception):
    """The database could not complete an operation (I/O, lock timeout, ...)."""


class DuplicateEmail(ValueError):
    pass


class Database:
    def __init__(self, db_path: Path, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside one transaction; commit on success, roll back on error."""
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            logger.error("database connection failed: %s", exc)
            raise StoreError("database unavailable") from exc
        try:
            with conn:
                yield conn.cursor()
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as exc:
            logger.error("database operation failed: %s", exc)
            raise StoreError("database operation failed") from exc
        finally:
            conn.close()

    def ping(self) -> bool:
        with self._session() as cur:
            cur.execute("SELECT 1")
            return cur.fetchone() is not None

    # ------------------------------------------------------------------
    # Users
    def insert_user(self, email: str, password_hash: str, name: str) -> Dict[str, Any]:
        try:
            with self._session() as cur:
                cur.execute(
                    f"""
                    INSERT INTO users (email, password_hash, name, inserted_at, updated_at)
                    VALUES (?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                    """,
                    (email, password_hash, name),
                )
                cur.execute("SELECT * FROM users WHERE id = ?", (cur.lastrowid,))
                return dict(cur.fetchone())
        except sqlite3.IntegrityError as exc:
            raise DuplicateEmail(email) from exc

    def get_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute("SELECT * FROM users WHERE email = ?", (email,))
            row = cur.fetchone()
            return dict(row) if row else None

    def list_users_by_email(self, emails: Sequence[str]) -> List[Dict[str, Any]]:
        if not emails:
            return []
        placeholders = ",".join("?" for _ in emails)
        with self._session() as cur:
            cur.execute(
                f"SELECT * FROM users WHERE email IN ({placeholders}) ORDER BY id",
                tuple(emails),
            )
            return [dict(r) for r in cur.fetchall()]

    def update_user_name(self, user_id: int, name: str) -> Optional[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute(
                f"UPDATE users SET name = ?, updated_at = ({UTC_NOW_SQL}) WHERE id = ?",
                (name, user_id),
            )
            if cur.rowcount == 0:
                return None
            cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            return dict(cur.fetchone())

    def delete_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Delete a user (expenses cascade) and return the removed row."""
        with self._session() as cur:
            cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
            if not row:
                return None
            cur.execute("DELETE FROM users WHERE id = ?", (user_id,))
            return dict(row)

    # ------------------------------------------------------------------
    # Expenses (always owner scoped)
    def insert_expense(self, user_id: int, fields: Mapping[str, Any]) -> Dict[str, Any]:
        with self._session() as cur:
            cur.execute(
                f"""
                INSERT INTO expenses (
                    amount, description, category, date, currency, user_id,
                    inserted_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                """,
                (
                    fields["amount"],
                    fields["description"],
                    fields["category"],
                    fields["date"],
                    fields["currency"],
                    user_id,
                ),
            )
            cur.execute("SELECT * FROM expenses WHERE id = ?", (cur.lastrowid,))
            return dict(cur.fetchone())

    def get_expense(self, user_id: int, expense_id: int) -> Optional[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute(
                "SELECT * FROM expenses WHERE id = ? AND user_id = ?",
                (expense_id, user_id),
            )
            row = cur.fetchone()
            return dict(row) if row else None

    def update_expense(
        self, user_id: int, expense_id: int, fields: Mapping[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Overwrite the mutable columns; ``user_id`` is only used to scope the row."""
        assignments = ", ".join(f"{col} = ?" for col in EXPENSE_COLUMNS)
        params: List[Any] = [fields[col] for col in EXPENSE_COLUMNS]
        params.extend([expense_id, user_id])
        with self._session() as cur:
            cur.execute(
                f"""
                UPDATE expenses
                SET {assignments}, updated_at = ({UTC_NOW_SQL})
                WHERE id = ? AND user_id = ?
                """,
                params,
            )
            if cur.rowcount == 0:
                return None
            cur.execute("SELECT * FROM expenses WHERE id = ?", (expense_id,))
            return dict(cur.fetchone())

    def delete_expense(self, user_id: int, expense_id: int) -> Optional[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute(
                "SELECT * FROM expenses WHERE id = ? AND user_id = ?",
                (expense_id, user_id),
            )
            row = cur.fetchone()
            if not row:
                return None
            cur.execute(
                "DELETE FROM expenses WHERE id = ? AND user_id = ?",
                (expense_id, user_id),
            )
            return dict(row)

    def list_expenses(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        clauses = ["user_id = ?"]
        params: List[Any] = [user_id]
        if start_date:
            clauses.append("date >= ?")
            params.append(start_date.isoformat())
        if end_date:
            clauses.append("date <= ?")
            params.append(end_date.isoformat())
        where = " WHERE " + " AND ".join(clauses)
        # Newest first; same-day rows keep insertion order.
        sql = f"SELECT * FROM expenses{where} ORDER BY date DESC, id ASC"
        with self._session() as cur:
            cur.execute(sql, params)
            return [dict(r) for r in cur.fetchall()]

    def count_expenses(self, user_id: int) -> int:
        with self._session() as cur:
            cur.execute("SELECT COUNT(*) FROM expenses WHERE user_id = ?", (user_id,))
            row = cur.fetchone()
            return int(row[0] if row and row[0] is not None else 0)
