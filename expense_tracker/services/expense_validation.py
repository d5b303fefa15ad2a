"""Field defaults and validation for expense payloads.

``validate_expense_fields`` is the single validation entry point used by both
create and update: it applies defaults (date = today, category = "others",
currency = "USD") and then checks every field, collecting all problems into
a ``{field: [messages]}`` map instead of stopping at the first one.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Mapping, Tuple

from expense_tracker.models.constants import (
    AMOUNT_MAX_EXCLUSIVE,
    CATEGORIES,
    CURRENCY_PATTERN,
    DEFAULT_CATEGORY,
    DEFAULT_CURRENCY,
    DESCRIPTION_MAX_LENGTH,
)
from expense_tracker.services.money import parse_amount, quantize_amount

BLANK = "can't be blank"
INVALID = "is invalid"

FieldErrors = Dict[str, List[str]]
DEFAULTED_FIELDS = ("date", "category", "currency")


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def drop_blank_defaults(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Remove blank values of defaulted fields, treating them as not supplied.

    Used on update so ``{"date": ""}`` keeps the stored date instead of
    resetting it to today.
    """
    return {
        k: v for k, v in fields.items() if not (k in DEFAULTED_FIELDS and _blank(v))
    }


def apply_defaults(fields: Mapping[str, Any], today: date) -> Dict[str, Any]:
    merged = dict(fields)
    if _blank(merged.get("date")):
        merged["date"] = today
    if _blank(merged.get("category")):
        merged["category"] = DEFAULT_CATEGORY
    if _blank(merged.get("currency")):
        merged["currency"] = DEFAULT_CURRENCY
    return merged


def _coerce_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def validate_expense_fields(
    fields: Mapping[str, Any], today: date
) -> Tuple[Dict[str, Any], FieldErrors]:
    """Return ``(normalized, errors)`` for a raw expense field mapping.

    ``normalized`` holds storage-ready values (amount as a 2-decimal string,
    ISO date) and is only meaningful when ``errors`` is empty.
    """
    values = apply_defaults(fields, today)
    errors: FieldErrors = {}
    normalized: Dict[str, Any] = {}

    raw_amount = values.get("amount")
    if _blank(raw_amount):
        errors.setdefault("amount", []).append(BLANK)
    else:
        amount = parse_amount(raw_amount)
        if amount is None:
            errors.setdefault("amount", []).append(INVALID)
        else:
            # quantize() overflows the context precision on huge magnitudes
            if -AMOUNT_MAX_EXCLUSIVE < amount < AMOUNT_MAX_EXCLUSIVE:
                amount = quantize_amount(amount)
            if amount <= 0:
                errors.setdefault("amount", []).append("must be greater than 0")
            elif amount >= AMOUNT_MAX_EXCLUSIVE:
                errors.setdefault("amount", []).append(
                    f"must be less than {AMOUNT_MAX_EXCLUSIVE}"
                )
            else:
                normalized["amount"] = str(amount)

    description = values.get("description")
    if _blank(description):
        errors.setdefault("description", []).append(BLANK)
    elif not isinstance(description, str):
        errors.setdefault("description", []).append(INVALID)
    elif len(description) > DESCRIPTION_MAX_LENGTH:
        errors.setdefault("description", []).append(
            f"should be at most {DESCRIPTION_MAX_LENGTH} character(s)"
        )
    else:
        normalized["description"] = description

    category = values["category"]
    if category not in CATEGORIES:
        errors.setdefault("category", []).append(INVALID)
    else:
        normalized["category"] = category

    currency = values["currency"]
    if not isinstance(currency, str) or not CURRENCY_PATTERN.fullmatch(currency):
        errors.setdefault("currency", []).append(
            "must be a valid 3-letter ISO currency code"
        )
    else:
        normalized["currency"] = currency

    expense_date = _coerce_date(values["date"])
    if expense_date is None:
        errors.setdefault("date", []).append(INVALID)
    else:
        normalized["date"] = expense_date.isoformat()

    return normalized, errors


__all__ = ["apply_defaults", "drop_blank_defaults", "validate_expense_fields", "FieldErrors"]
