from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

import pydantic
from pydantic import AliasChoices, EmailStr, Field

from models.base import WireModel


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(WireModel):
    """A shop account as returned by ``/api/auth/users`` and ``/api/auth/me``."""

    id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("_id", "id", "userId"),
        serialization_alias="id",
    )
    username: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    role: Role = Role.USER
    debt_amount: Decimal = Field(Decimal("0"), ge=0)
    last_debt_update: Optional[datetime] = None

    @pydantic.field_validator("debt_amount", mode="before")
    def null_debt_is_zero(cls, v):
        return Decimal("0") if v is None else v

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class LoginRequest(WireModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(WireModel):
    token: str = Field(..., min_length=1)
    role: Role = Role.USER
    username: str


class RegisterRequest(WireModel):
    """Model for creating new accounts, by self-registration or by an admin."""

    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Optional[Role] = None

    @pydantic.field_validator("username")
    def username_must_not_be_blank(cls, v):
        if not v.strip():
            raise ValueError("Username must not be blank")
        return v.strip()
