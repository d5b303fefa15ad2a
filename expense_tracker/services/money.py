"""Money / rounding helpers.

Centralized so validation, storage and rendering use identical decimal
semantics (two fractional digits, half-up).
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

CENTS = Decimal("0.01")


def quantize_amount(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(value: Any) -> Optional[Decimal]:
    """Parse a user-supplied amount; ``None`` when it is not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount
