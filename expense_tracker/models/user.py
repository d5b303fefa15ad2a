from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RegistrationIn(BaseModel):
    """Registration payload. Fields are optional so that every missing or
    invalid value is reported together by the account validator."""

    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    password: Optional[str] = Field(None, repr=False)
    name: Optional[str] = None


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = Field(None, repr=False)


class User(BaseModel):
    id: int
    email: str
    name: str
    password_hash: str = Field(..., repr=False, exclude=True)
    inserted_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserOut(BaseModel):
    id: int
    email: str
    name: str

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(id=user.id, email=user.email, name=user.name)
