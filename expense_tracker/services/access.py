"""Resolve bearer tokens into live users.

``AccessMediator.authorize`` is the gate in front of the expense ledger: the
user it returns is the only legitimate source of an ``owner_id``. Failure
reasons are kept for logging; callers collapse them to one generic message.
"""

from __future__ import annotations

import logging
from typing import Optional

from expense_tracker.core.results import Err, Ok, Result
from expense_tracker.models.errors import AuthError, AuthErrorKind
from expense_tracker.models.user import User
from expense_tracker.services.accounts import AccountManager
from expense_tracker.services.tokens import TokenService

logger = logging.getLogger("expense_tracker.access")


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


class AccessMediator:
    def __init__(self, tokens: TokenService, accounts: AccountManager):
        self.tokens = tokens
        self.accounts = accounts

    def authorize(self, raw_token: Optional[str]) -> Result[User, AuthError]:
        if not raw_token:
            return Err(AuthError(AuthErrorKind.UNAUTHENTICATED, "missing token"))

        verified = self.tokens.verify(raw_token)
        if isinstance(verified, Err):
            reason = verified.error.kind.value
            logger.info("token rejected: %s", reason)
            return Err(AuthError(AuthErrorKind.UNAUTHENTICATED, reason))

        user = self.accounts.find_by_id(verified.value)
        if user is None:
            logger.info("token subject %s no longer exists", verified.value)
            return Err(AuthError(AuthErrorKind.RESOURCE_GONE, "no_resource_found"))
        return Ok(user)


__all__ = ["AccessMediator", "bearer_token"]
