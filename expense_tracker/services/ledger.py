"""Expense ledger: owner-scoped CRUD and the date-filter query.

Every operation takes the owner id from the authenticated caller, never from
the payload (``ExpenseIn`` has no ``user_id`` field). Lookups for another
user's expense return the same ``NotFound`` as lookups for a missing id.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from expense_tracker.core.results import Err, Ok, Result
from expense_tracker.db.dal import Database
from expense_tracker.models.constants import PERIOD_OFFSETS
from expense_tracker.models.errors import NotFound, ValidationError
from expense_tracker.models.expense import Expense, ExpenseFilter, ExpenseIn
from expense_tracker.services.expense_validation import (
    drop_blank_defaults,
    validate_expense_fields,
)

logger = logging.getLogger("expense_tracker.ledger")

DateBounds = Tuple[Optional[date], Optional[date]]
SQLITE_MAX_INT = 2**63


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def resolve_date_bounds(expense_filter: ExpenseFilter, today: date) -> DateBounds:
    """Translate a filter into inclusive ``(start, end)`` date bounds.

    The first matching clause wins:

    1. a known ``period`` -> ``(today - offset, None)``; no upper bound, so
       future-dated expenses are still listed
    2. ``from_date`` and ``to_date`` -> ``(from_date, to_date)``
    3. only ``from_date`` -> ``(from_date, None)``
    4. only ``to_date`` -> ``(None, to_date)``
    5. otherwise -> ``(None, None)`` (no filtering)
    """
    offset = PERIOD_OFFSETS.get(expense_filter.period or "")
    if offset is not None:
        return today - timedelta(days=offset), None
    if expense_filter.from_date is not None and expense_filter.to_date is not None:
        return expense_filter.from_date, expense_filter.to_date
    if expense_filter.from_date is not None:
        return expense_filter.from_date, None
    if expense_filter.to_date is not None:
        return None, expense_filter.to_date
    return None, None


def _row_to_expense(row: Dict[str, Any]) -> Expense:
    return Expense(
        id=row["id"],
        amount=row["amount"],
        description=row["description"],
        category=row["category"],
        date=date.fromisoformat(row["date"]),
        currency=row["currency"],
        user_id=row["user_id"],
        inserted_at=datetime.fromisoformat(row["inserted_at"].replace("Z", "")),
        updated_at=datetime.fromisoformat(row["updated_at"].replace("Z", "")),
    )


def _payload_fields(payload: ExpenseIn) -> Dict[str, Any]:
    return {k: v for k, v in payload.model_dump().items() if v is not None}


class ExpenseLedger:
    def __init__(self, db: Database, today: Callable[[], date] = utc_today):
        self.db = db
        self._today = today

    def create(self, owner_id: int, payload: ExpenseIn) -> Result[Expense, ValidationError]:
        normalized, errors = validate_expense_fields(_payload_fields(payload), self._today())
        if errors:
            return Err(ValidationError(errors))
        row = self.db.insert_expense(owner_id, normalized)
        logger.info("expense %s created for user %s", row["id"], owner_id)
        return Ok(_row_to_expense(row))

    def get(self, owner_id: int, expense_id: int) -> Result[Expense, NotFound]:
        if not 0 < expense_id < SQLITE_MAX_INT:
            return Err(NotFound("expense"))
        row = self.db.get_expense(owner_id, expense_id)
        if not row:
            return Err(NotFound("expense"))
        return Ok(_row_to_expense(row))

    def update(
        self, expense: Expense, payload: ExpenseIn
    ) -> Result[Expense, Union[ValidationError, NotFound]]:
        """Merge supplied fields over the stored record and re-validate.

        Omitted fields keep their stored values, and so do blank date,
        category or currency values; the owner never changes.
        """
        merged: Dict[str, Any] = {
            "amount": expense.amount,
            "description": expense.description,
            "category": expense.category,
            "date": expense.date,
            "currency": expense.currency,
        }
        merged.update(drop_blank_defaults(_payload_fields(payload)))
        normalized, errors = validate_expense_fields(merged, self._today())
        if errors:
            return Err(ValidationError(errors))
        row = self.db.update_expense(expense.user_id, expense.id, normalized)
        if not row:
            return Err(NotFound("expense"))
        return Ok(_row_to_expense(row))

    def delete(self, expense: Expense) -> Result[Expense, NotFound]:
        row = self.db.delete_expense(expense.user_id, expense.id)
        if not row:
            return Err(NotFound("expense"))
        logger.info("expense %s deleted for user %s", expense.id, expense.user_id)
        return Ok(_row_to_expense(row))

    def list(
        self, owner_id: int, expense_filter: Optional[ExpenseFilter] = None
    ) -> List[Expense]:
        start, end = resolve_date_bounds(expense_filter or ExpenseFilter(), self._today())
        rows = self.db.list_expenses(owner_id, start_date=start, end_date=end)
        return [_row_to_expense(r) for r in rows]


__all__ = ["ExpenseLedger", "resolve_date_bounds", "utc_today"]
