"""Authentication request/response contracts."""

from __future__ import annotations

from pydantic import EmailStr, Field

from .common import WireModel


class LoginRequest(WireModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(WireModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str | None = None


class AuthUser(WireModel):
    id: str
    email: str
    name: str | None = None


class AuthResponse(WireModel):
    """Bearer token plus the user it was issued for."""

    token: str
    user: AuthUser
