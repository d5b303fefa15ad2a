"""Stateless bearer tokens (signed JWT, HS256 by default).

The signing secret lives in an immutable ``TokenConfig`` built once at
startup and handed to ``TokenService``. Nothing is stored server side, so a
token stays valid until it expires.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import logging
from typing import Callable

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from expense_tracker.core.results import Err, Ok, Result
from expense_tracker.models.errors import TokenError, TokenErrorKind

logger = logging.getLogger("expense_tracker.tokens")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenConfig:
    secret_key: str = field(repr=False)
    issuer: str = "expense_tracker_api"
    ttl_hours: int = 24
    algorithm: str = "HS256"


class TokenService:
    def __init__(self, config: TokenConfig, clock: Callable[[], datetime] = _utc_now):
        self.config = config
        self._clock = clock

    def issue(self, user_id: int) -> str:
        now = self._clock()
        claims = {
            "sub": str(user_id),
            "iss": self.config.issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=self.config.ttl_hours)).timestamp()),
        }
        return jwt.encode(claims, self.config.secret_key, algorithm=self.config.algorithm)

    def verify(self, token: str) -> Result[int, TokenError]:
        """Return the subject user id, or the reason the token is unusable."""
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError:
            return Err(TokenError(TokenErrorKind.MALFORMED))

        try:
            claims = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                issuer=self.config.issuer,
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError:
            return Err(TokenError(TokenErrorKind.EXPIRED))
        except JWTError as exc:
            logger.debug("token rejected: %s", exc)
            return Err(TokenError(TokenErrorKind.INVALID_TOKEN))

        try:
            return Ok(int(claims["sub"]))
        except (KeyError, TypeError, ValueError):
            return Err(TokenError(TokenErrorKind.MALFORMED))


__all__ = ["TokenConfig", "TokenService"]
