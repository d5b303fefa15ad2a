from fastapi import APIRouter, Depends
from pydantic import BaseModel
from starlette import status

from expense_tracker.core.errors import error_response
from expense_tracker.core.results import Err
from expense_tracker.models.user import LoginIn, RegistrationIn, UserOut
from expense_tracker.routers.deps import get_accounts, get_tokens
from expense_tracker.services.accounts import AccountManager
from expense_tracker.services.tokens import TokenService

router = APIRouter(prefix="/api/auth", tags=["auth"])


# Request / Response Models ----------------------------------------
class RegisterRequest(BaseModel):
    user: RegistrationIn


class UserResponse(BaseModel):
    data: UserOut


class AuthData(BaseModel):
    token: str
    user: UserOut


class AuthResponse(BaseModel):
    data: AuthData


# Routes -----------------------------------------------------------
@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def register(
    payload: RegisterRequest,
    accounts: AccountManager = Depends(get_accounts),
):
    result = accounts.register(payload.user)
    if isinstance(result, Err):
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation failed",
            result.error.errors,
        )
    return UserResponse(data=UserOut.from_user(result.value))


@router.post("/login", response_model=AuthResponse, summary="Log in and obtain a token")
def login(
    payload: LoginIn,
    accounts: AccountManager = Depends(get_accounts),
    tokens: TokenService = Depends(get_tokens),
):
    if payload.email is None or payload.password is None:
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Email and password are required"
        )
    result = accounts.authenticate(payload.email, payload.password)
    if isinstance(result, Err):
        return error_response(status.HTTP_401_UNAUTHORIZED, result.error.message)
    user = result.value
    return AuthResponse(
        data=AuthData(token=tokens.issue(user.id), user=UserOut.from_user(user))
    )
