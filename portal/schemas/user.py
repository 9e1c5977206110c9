"""
schemas/user.py
---------------
Pydantic models for registration, login, and user responses.

Security note:
  - hashed_password is NEVER included in any response schema.
  - Passwords require min 8 chars at registration; login only requires
    a non-empty value so old accounts are not locked out.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from portal.core.redirects import safe_redirect


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    redirect_to: str = "/"
    remember: bool = False

    @field_validator("redirect_to", mode="before")
    @classmethod
    def sanitize_redirect(cls, v) -> str:
        return safe_redirect(v)


class UserRegister(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)
    mobile: str = Field(..., min_length=6, max_length=32)
    redirect_to: str = "/"

    @field_validator("first_name", "last_name", "mobile", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("redirect_to", mode="before")
    @classmethod
    def sanitize_redirect(cls, v) -> str:
        return safe_redirect(v)


class UserRead(BaseModel):
    id: str
    email: str
    name: str
    mobile: Optional[str]
    role_id: str
    created_at: datetime

    model_config = {"from_attributes": True}


class MeResponse(BaseModel):
    user: UserRead
    role: str
    permissions: list[str]
