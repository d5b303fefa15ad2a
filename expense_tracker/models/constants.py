"""Domain constants and enumerations for validation."""

import re
from typing import Dict, Tuple

CATEGORIES: Tuple[str, ...] = (
    "groceries",
    "leisure",
    "electronics",
    "utilities",
    "clothing",
    "health",
    "others",
)
DEFAULT_CATEGORY = "others"
DEFAULT_CURRENCY = "USD"
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")

# Lookback windows for the list period filter, in days.
PERIOD_OFFSETS: Dict[str, int] = {
    "last_week": 7,
    "last_month": 30,
    "last_3_months": 90,
}

# decimal(10,2)
AMOUNT_MAX_EXCLUSIVE = 10**8
DESCRIPTION_MAX_LENGTH = 255

EMAIL_MAX_LENGTH = 160
EMAIL_PATTERN = re.compile(r"^[^\s]+@[^\s]+$")
NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 72  # bcrypt only reads the first 72 bytes
