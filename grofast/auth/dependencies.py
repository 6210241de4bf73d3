"""Auth dependencies — API key, JWT validation, profile resolution, admin gate."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth.models import AuthUser, UserSession
from grofast.auth.service import decode_access_token, hash_token
from grofast.common.exceptions import ForbiddenException, UnauthorizedException
from grofast.common.timeutil import as_utc, utcnow
from grofast.config import settings
from grofast.database import get_db
from grofast.employees.models import Employee


@dataclass
class Identity:
    """An authenticated caller: the auth user and the session it presented."""

    user: AuthUser
    session: UserSession


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedException(detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Public API key ──────────────────────────────────────────────────

async def verify_api_key(apikey: Optional[str] = Header(None)) -> None:
    """Reject requests without the configured ``apikey`` header.

    Disabled while ``ANON_KEY`` is empty.
    """
    if settings.ANON_KEY and apikey != settings.ANON_KEY:
        raise UnauthorizedException(detail="Invalid API key.")


# ── Core dependencies ───────────────────────────────────────────────

async def find_active_session(db: AsyncSession, token: str) -> Optional[UserSession]:
    """The unrevoked, unexpired session row issued with ``token``."""
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == hash_token(token),
            UserSession.is_revoked.is_(False),
        ),
    )
    session = result.scalars().first()
    if session is None or as_utc(session.expires_at) <= utcnow():
        return None
    return session


async def get_current_identity(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """Validate JWT and its session row; no profile required."""
    token = _extract_bearer(request)
    payload = decode_access_token(token)

    session = await find_active_session(db, token)
    if session is None:
        raise UnauthorizedException(detail="Session invalid or expired.")

    user = await db.get(AuthUser, uuid.UUID(payload["sub"]))
    if user is None:
        raise UnauthorizedException(detail="User no longer exists.")
    return Identity(user=user, session=session)


async def get_current_user(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Employee:
    """Return the Employee behind the token.

    Authenticated callers without an active profile get 403: role checks
    fail closed.
    """
    employee = await db.get(Employee, identity.user.id)
    if employee is None or not employee.is_active:
        raise ForbiddenException(detail="Employee profile is missing or inactive.")
    return employee


async def require_admin(
    employee: Employee = Depends(get_current_user),
) -> Employee:
    if not employee.is_admin:
        raise ForbiddenException(
            detail=f"Role '{employee.role.value}' is not permitted. Required: ['admin'].",
        )
    return employee


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None
