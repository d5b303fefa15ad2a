"""Account registration, authentication and lookup."""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Union

from expense_tracker.core.results import Err, Ok, Result
from expense_tracker.db.dal import Database, DuplicateEmail
from expense_tracker.models.constants import (
    EMAIL_MAX_LENGTH,
    EMAIL_PATTERN,
    NAME_MAX_LENGTH,
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
)
from expense_tracker.models.errors import InvalidCredentials, NotFound, ValidationError
from expense_tracker.models.user import RegistrationIn, User
from expense_tracker.services.credentials import CredentialStore

logger = logging.getLogger("expense_tracker.accounts")

BLANK = "can't be blank"
EMAIL_TAKEN = "already in use"


def _row_to_user(row: Dict[str, Any]) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        password_hash=row["password_hash"],
        inserted_at=datetime.fromisoformat(row["inserted_at"].replace("Z", "")),
        updated_at=datetime.fromisoformat(row["updated_at"].replace("Z", "")),
    )


def _validate_name(name: Optional[str], errors: Dict[str, List[str]]) -> None:
    if name is None or not name.strip():
        errors.setdefault("name", []).append(BLANK)
    elif len(name) > NAME_MAX_LENGTH:
        errors.setdefault("name", []).append(
            f"should be at most {NAME_MAX_LENGTH} character(s)"
        )


def validate_registration(payload: RegistrationIn) -> Dict[str, List[str]]:
    """Check every registration field and return all violations at once."""
    errors: Dict[str, List[str]] = {}

    email = payload.email
    if email is None or not email.strip():
        errors.setdefault("email", []).append(BLANK)
    else:
        if not EMAIL_PATTERN.fullmatch(email):
            errors.setdefault("email", []).append("must have the @ sign and no spaces")
        if len(email) > EMAIL_MAX_LENGTH:
            errors.setdefault("email", []).append(
                f"should be at most {EMAIL_MAX_LENGTH} character(s)"
            )

    password = payload.password
    if password is None or password == "":
        errors.setdefault("password", []).append(BLANK)
    else:
        if len(password) < PASSWORD_MIN_LENGTH:
            errors.setdefault("password", []).append(
                f"should be at least {PASSWORD_MIN_LENGTH} character(s)"
            )
        # bcrypt limit is in bytes; multi-byte characters count for more
        if len(password.encode("utf-8")) > PASSWORD_MAX_LENGTH:
            errors.setdefault("password", []).append(
                f"should be at most {PASSWORD_MAX_LENGTH} character(s)"
            )

    _validate_name(payload.name, errors)
    return errors


class AccountManager:
    def __init__(self, db: Database, credentials: CredentialStore):
        self.db = db
        self.credentials = credentials

    def register(self, payload: RegistrationIn) -> Result[User, ValidationError]:
        errors = validate_registration(payload)
        if "email" not in errors and self.db.get_user_by_email(payload.email):
            errors.setdefault("email", []).append(EMAIL_TAKEN)
        if errors:
            return Err(ValidationError(errors))

        password_hash = self.credentials.hash(payload.password)
        try:
            row = self.db.insert_user(payload.email, password_hash, payload.name)
        except DuplicateEmail:
            # Lost a race with a concurrent registration for the same email.
            return Err(ValidationError({"email": [EMAIL_TAKEN]}))
        logger.info("user %s registered", row["id"])
        return Ok(_row_to_user(row))

    def authenticate(self, email: str, password: str) -> Result[User, InvalidCredentials]:
        """Verify credentials.

        An unknown email still pays for a full hash comparison and yields the
        same error as a wrong password.
        """
        row = self.db.get_user_by_email(email) if email else None
        if row is None:
            self.credentials.no_user_verify()
            logger.info("login failed")
            return Err(InvalidCredentials())
        if not self.credentials.verify(password, row["password_hash"]):
            logger.info("login failed")
            return Err(InvalidCredentials())
        return Ok(_row_to_user(row))

    def find_by_id(self, user_id: int) -> Optional[User]:
        row = self.db.get_user(user_id)
        return _row_to_user(row) if row else None

    def rename(
        self, user_id: int, name: Optional[str]
    ) -> Result[User, Union[ValidationError, NotFound]]:
        errors: Dict[str, List[str]] = {}
        _validate_name(name, errors)
        if errors:
            return Err(ValidationError(errors))
        row = self.db.update_user_name(user_id, name)
        if not row:
            return Err(NotFound("user"))
        return Ok(_row_to_user(row))

    def delete(self, user_id: int) -> Result[User, NotFound]:
        """Delete the account; its expenses are removed by cascade."""
        expense_count = self.db.count_expenses(user_id)
        row = self.db.delete_user(user_id)
        if not row:
            return Err(NotFound("user"))
        logger.info(
            "user %s deleted with %s expenses",
            user_id,
            expense_count,
            extra={"user_id": user_id, "expense_count": expense_count},
        )
        return Ok(_row_to_user(row))


__all__ = ["AccountManager", "validate_registration"]
