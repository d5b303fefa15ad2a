from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from .constants import PERIOD_OFFSETS


class ExpenseIn(BaseModel):
    """Create / update payload.

    Types are loose: amounts and dates may arrive as strings and
    are checked by ``validate_expense_fields`` so that every problem is
    reported per field. Unknown keys (``user_id`` included) are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    amount: Optional[Union[Decimal, str]] = None
    description: Optional[str] = None
    category: Optional[str] = None
    date: Optional[Union[dt.date, str]] = None
    currency: Optional[str] = None


class Expense(BaseModel):
    id: int
    amount: Decimal
    description: str
    category: str
    date: dt.date
    currency: str
    user_id: int
    inserted_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class ExpenseOut(BaseModel):
    id: int
    amount: Decimal
    description: str
    category: str
    date: dt.date
    currency: str
    inserted_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_expense(cls, expense: Expense) -> "ExpenseOut":
        return cls(**expense.model_dump(exclude={"user_id"}))


def _parse_iso_date(value: Optional[str]) -> Optional[dt.date]:
    if value is None or value == "":
        return None
    try:
        return dt.date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class ExpenseFilter:
    """List filter. ``period`` wins over an explicit range when both are set."""

    period: Optional[str] = None
    from_date: Optional[dt.date] = None
    to_date: Optional[dt.date] = None

    @classmethod
    def from_query(
        cls,
        period: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> "ExpenseFilter":
        """Build a filter from raw query strings.

        Malformed values are ignored rather than rejected. When both dates
        are supplied and either one fails to parse, no range is applied.
        """
        if period not in PERIOD_OFFSETS:
            period = None
        if from_date is not None and to_date is not None:
            start, end = _parse_iso_date(from_date), _parse_iso_date(to_date)
            if start is None or end is None:
                start = end = None
        else:
            start, end = _parse_iso_date(from_date), _parse_iso_date(to_date)
        return cls(period=period, from_date=start, to_date=end)
