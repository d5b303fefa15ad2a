"""Demo data import.

Creates two demo users (password ``password123``) with ten expenses each,
spread across categories and the last six months so every list period filter
has something to return. The import is idempotent: existing demo users are
deleted first (their expenses cascade) and recreated.

Everything goes through ``AccountManager`` and ``ExpenseLedger``, so seeded
rows obey the same validation and ownership rules as API traffic. Store
errors (typically a locked database) are retried with exponential backoff.

Run with ``python -m expense_tracker.db.seed``.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
import logging
import random
import time
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from expense_tracker.core.results import Err
from expense_tracker.db.dal import Database, StoreError
from expense_tracker.models.expense import ExpenseIn
from expense_tracker.models.user import RegistrationIn, User
from expense_tracker.services.accounts import AccountManager
from expense_tracker.services.ledger import ExpenseLedger, utc_today

logger = logging.getLogger("expense_tracker.seed")

T = TypeVar("T")

SEED_PASSWORD = "password123"
SEED_USERS: Tuple[Dict[str, str], ...] = (
    {"name": "Juan Pérez", "email": "juan.perez@example.com"},
    {"name": "María García", "email": "maria.garcia@example.com"},
)

CATEGORY_MIX = (
    ["groceries"] * 3
    + ["utilities"] * 2
    + ["leisure"] * 2
    + ["health", "electronics", "clothing"]
)
WINDOW_MIX = (
    ["last_week"] * 2 + ["last_month"] * 2 + ["last_3_months"] * 3 + ["last_6_months"] * 3
)

# (days back from, days back to), inclusive
WINDOWS: Dict[str, Tuple[int, int]] = {
    "last_week": (7, 0),
    "last_month": (30, 8),
    "last_3_months": (90, 31),
    "last_6_months": (180, 91),
}

AMOUNT_RANGES: Dict[str, Tuple[int, int]] = {
    "groceries": (20, 150),
    "utilities": (50, 300),
    "leisure": (15, 200),
    "electronics": (100, 800),
    "clothing": (25, 250),
    "health": (30, 400),
    "others": (10, 100),
}

DESCRIPTIONS: Dict[str, List[str]] = {
    "groceries": [
        "Weekly supermarket run",
        "Fruit and vegetables from the market",
        "Monthly pantry restock",
    ],
    "utilities": ["Electricity bill", "Water bill", "Internet and phone"],
    "leisure": ["Dinner out", "Cinema tickets", "Concert"],
    "health": ["Doctor visit", "Prescription", "Dental treatment"],
    "electronics": ["Wireless headphones", "Laptop charger", "Phone repair"],
    "clothing": ["Winter jacket", "New shoes", "Sportswear"],
    "others": ["Household items", "Miscellaneous purchase"],
}


def with_retry(
    fn: Callable[[], T], *, retries: int = 3, backoff: float = 0.5
) -> T:
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            return fn()
        except StoreError as e:
            last_err = e
            if attempt == retries:
                break
            logger.warning("store error (attempt %s), retrying: %s", attempt + 1, e)
            time.sleep(backoff * (2**attempt))
    raise StoreError(f"seed step failed after {retries + 1} attempts: {last_err}")


def expense_payloads(today: date, rng: random.Random) -> List[ExpenseIn]:
    """Ten expenses with the fixed category / time-window distribution."""
    categories = list(CATEGORY_MIX)
    windows = list(WINDOW_MIX)
    rng.shuffle(categories)
    rng.shuffle(windows)
    payloads = []
    for category, window in zip(categories, windows):
        oldest, newest = WINDOWS[window]
        low, high = AMOUNT_RANGES[category]
        amount = Decimal(rng.randint(low, high)) + Decimal(rng.randint(0, 99)) / 100
        payloads.append(
            ExpenseIn(
                amount=amount,
                description=rng.choice(DESCRIPTIONS[category]),
                category=category,
                date=today - timedelta(days=rng.randint(newest, oldest)),
            )
        )
    return payloads


def cleanup_seed_users(db: Database, accounts: AccountManager) -> int:
    existing = with_retry(
        lambda: db.list_users_by_email([u["email"] for u in SEED_USERS])
    )
    for row in existing:
        with_retry(lambda: accounts.delete(row["id"]))
    if existing:
        logger.info("removed %s existing seed users", len(existing))
    return len(existing)


def create_seed_users(accounts: AccountManager) -> List[User]:
    users = []
    for data in SEED_USERS:
        payload = RegistrationIn(password=SEED_PASSWORD, **data)
        result = with_retry(lambda: accounts.register(payload))
        if isinstance(result, Err):
            raise ValueError(f"invalid seed user {data['email']}: {result.error.errors}")
        users.append(result.value)
    return users


def run(
    db: Database,
    accounts: AccountManager,
    ledger: ExpenseLedger,
    today: Optional[date] = None,
    seed: Optional[int] = None,
) -> Dict[str, int]:
    today = today or utc_today()
    rng = random.Random(seed)
    logger.info("seeding database %s", db.db_path)
    with_retry(db.ping)
    removed = cleanup_seed_users(db, accounts)
    users = create_seed_users(accounts)

    created = failed = 0
    for user in users:
        for payload in expense_payloads(today, rng):
            result = with_retry(lambda: ledger.create(user.id, payload))
            if isinstance(result, Err):
                failed += 1
                logger.warning("seed expense rejected: %s", result.error.errors)
            else:
                created += 1
    logger.info("seeded %s users and %s expenses", len(users), created)
    return {"users": len(users), "expenses": created, "failed": failed, "removed": removed}


def main() -> None:
    from expense_tracker.core.config import get_settings
    from expense_tracker.core.logging import init_logging
    from expense_tracker.db.migrate import apply_migrations
    from expense_tracker.services.credentials import CredentialStore

    settings = get_settings()
    init_logging(debug=settings.debug)
    apply_migrations(settings.db_path)  # type: ignore[arg-type]
    db = Database(settings.db_path, timeout=settings.db_timeout_seconds)  # type: ignore[arg-type]
    accounts = AccountManager(db, CredentialStore(rounds=settings.bcrypt_rounds))
    summary = run(db, accounts, ExpenseLedger(db))
    logger.info("seed summary: %s", summary)


if __name__ == "__main__":
    main()
