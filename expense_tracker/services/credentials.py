"""Password hashing and verification (bcrypt).

Hashes are salted per call, so hashing the same password twice yields two
different strings. ``verify`` relies on ``bcrypt.checkpw`` which compares in
constant time. When a login names an unknown account, ``no_user_verify``
burns the same amount of work against a dummy hash so response timing does
not reveal whether the email exists.
"""

from __future__ import annotations

import logging

import bcrypt

from expense_tracker.models.constants import PASSWORD_MAX_LENGTH

logger = logging.getLogger("expense_tracker.credentials")

_DUMMY_PASSWORD = b"no-such-user-dummy-password"


class CredentialStore:
    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash = bcrypt.hashpw(_DUMMY_PASSWORD, bcrypt.gensalt(rounds))

    def hash(self, password: str) -> str:
        encoded = password.encode("utf-8")
        if len(encoded) > PASSWORD_MAX_LENGTH:
            raise ValueError("password exceeds bcrypt input limit")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(self.rounds)).decode("ascii")

    def verify(self, password: str, password_hash: str) -> bool:
        encoded = password.encode("utf-8")
        if len(encoded) > PASSWORD_MAX_LENGTH:
            return self.no_user_verify()
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("ascii"))
        except ValueError:
            logger.warning("stored password hash could not be parsed")
            return self.no_user_verify()

    def no_user_verify(self) -> bool:
        bcrypt.checkpw(_DUMMY_PASSWORD + b"x", self._dummy_hash)
        return False


__all__ = ["CredentialStore"]
