"""FastAPI dependencies shared by the routers.

Services are built once in ``create_app`` and stored on ``app.state``.
"""

from typing import Optional

from fastapi import Header, HTTPException, Request
from starlette import status

from expense_tracker.core.results import Err
from expense_tracker.models.user import User
from expense_tracker.services.access import AccessMediator, bearer_token
from expense_tracker.services.accounts import AccountManager
from expense_tracker.services.ledger import ExpenseLedger
from expense_tracker.services.tokens import TokenService


def get_accounts(request: Request) -> AccountManager:
    return request.app.state.accounts


def get_ledger(request: Request) -> ExpenseLedger:
    return request.app.state.ledger


def get_tokens(request: Request) -> TokenService:
    return request.app.state.tokens


def get_access(request: Request) -> AccessMediator:
    return request.app.state.access


def current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> User:
    """Resolve the bearer token; every failure is the same 401."""
    result = get_access(request).authorize(bearer_token(authorization))
    if isinstance(result, Err):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result.value
