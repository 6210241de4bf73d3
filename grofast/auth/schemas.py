"""Auth Pydantic schemas for request / response validation."""


import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from grofast.employees.schemas import EmployeeOut


# ── Requests ────────────────────────────────────────────────────────

class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str


class PasswordUpdateRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=128)


# ── Embedded / Shared ──────────────────────────────────────────────

class AuthUserOut(BaseModel):
    id: uuid.UUID
    email: str
    last_sign_in_at: Optional[datetime] = None


# ── Responses ───────────────────────────────────────────────────────

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    expires_at: datetime
    user: AuthUserOut


class SessionResponse(BaseModel):
    """The identity behind a live access token, plus its profile if one exists."""

    user: AuthUserOut
    expires_at: datetime
    employee: Optional[EmployeeOut] = None
