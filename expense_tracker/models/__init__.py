"""Pydantic domain models for the Expense Tracker API."""

from .constants import CATEGORIES, PERIOD_OFFSETS  # re-export
from .errors import (
    AuthError,
    AuthErrorKind,
    InvalidCredentials,
    NotFound,
    TokenError,
    TokenErrorKind,
    ValidationError,
)
from .expense import Expense, ExpenseFilter, ExpenseIn, ExpenseOut
from .user import LoginIn, RegistrationIn, User, UserOut

__all__ = [
    "CATEGORIES",
    "PERIOD_OFFSETS",
    "AuthError",
    "AuthErrorKind",
    "InvalidCredentials",
    "NotFound",
    "TokenError",
    "TokenErrorKind",
    "ValidationError",
    "Expense",
    "ExpenseFilter",
    "ExpenseIn",
    "ExpenseOut",
    "LoginIn",
    "RegistrationIn",
    "User",
    "UserOut",
]
