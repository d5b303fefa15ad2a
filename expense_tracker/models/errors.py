"""Error values carried by ``Err`` results.

These are plain values, not exceptions: services return them and the HTTP
layer maps them onto status codes. Only storage failures are raised
(``expense_tracker.db.dal.StoreError``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


@dataclass(frozen=True)
class ValidationError:
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def fields(self) -> List[str]:
        return sorted(self.errors)


@dataclass(frozen=True)
class InvalidCredentials:
    message: str = "Invalid credentials"


@dataclass(frozen=True)
class NotFound:
    resource: str = "resource"


class TokenErrorKind(str, Enum):
    INVALID_TOKEN = "invalid_token"
    EXPIRED = "token_expired"
    MALFORMED = "malformed_token"


@dataclass(frozen=True)
class TokenError:
    kind: TokenErrorKind


class AuthErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    RESOURCE_GONE = "resource_gone"


@dataclass(frozen=True)
class AuthError:
    kind: AuthErrorKind
    reason: str = ""
