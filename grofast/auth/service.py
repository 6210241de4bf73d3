"""Auth service — password sign-in, JWT pairs, session lifecycle."""

from __future__ import annotations

import hashlib
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth.models import AuthUser, UserSession
from grofast.auth.passwords import hash_password, verify_password
from grofast.common.audit import create_audit_entry
from grofast.common.exceptions import UnauthorizedException, ValidationException
from grofast.common.timeutil import utcnow
from grofast.config import settings
from grofast.employees.models import Employee

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"


# ── JWT helpers ─────────────────────────────────────────────────────

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _create_access_token(user: AuthUser, session_id: uuid.UUID) -> tuple[str, datetime]:
    """Return (encoded_jwt, expires_at)."""
    expires_at = utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRY_MINUTES)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "sid": str(session_id),
        "type": "access",
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_at


def _create_refresh_token(user: AuthUser) -> str:
    payload = {
        "sub": str(user.id),
        "type": "refresh",
        "jti": uuid.uuid4().hex,
        "exp": utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRY_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and type-check an access token or raise 401."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise UnauthorizedException(detail="Token has expired.")
    except JWTError:
        raise UnauthorizedException(detail="Invalid token.")

    if payload.get("type") != "access":
        raise UnauthorizedException(detail="Invalid token type.")
    return payload


# ── Sign-in ─────────────────────────────────────────────────────────

async def authenticate(db: AsyncSession, email: str, password: str) -> AuthUser:
    """Return the AuthUser for valid credentials, or raise 401.

    Unknown email and wrong password produce the same message.
    """
    result = await db.execute(
        select(AuthUser).where(AuthUser.email == email.strip().lower()),
    )
    user = result.scalars().first()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed sign-in for %s", email)
        raise UnauthorizedException(detail=INVALID_CREDENTIALS)
    return user


async def create_session(
    db: AsyncSession,
    user: AuthUser,
    *,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[str, str, datetime]:
    """Create a JWT pair and persist the session.

    Returns (access_token, refresh_token, expires_at).
    """
    session = UserSession(
        id=uuid.uuid4(),
        user_id=user.id,
        token_hash="",
        ip_address=ip,
        user_agent=user_agent,
        expires_at=utcnow(),
    )
    access_token, expires_at = _create_access_token(user, session.id)
    refresh_token = _create_refresh_token(user)
    session.token_hash = hash_token(access_token)
    session.refresh_token_hash = hash_token(refresh_token)
    session.expires_at = expires_at
    db.add(session)
    await db.flush()
    return access_token, refresh_token, expires_at


async def sign_in(
    db: AsyncSession,
    email: str,
    password: str,
    *,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[AuthUser, str, str, datetime]:
    user = await authenticate(db, email, password)
    access_token, refresh_token, expires_at = await create_session(
        db, user, ip=ip, user_agent=user_agent,
    )
    user.last_sign_in_at = utcnow()
    await create_audit_entry(
        db,
        action="sign_in",
        entity_type="auth_user",
        entity_id=user.id,
        actor_id=user.id,
        ip_address=ip,
    )
    await db.flush()
    logger.info("User %s signed in", user.email)
    return user, access_token, refresh_token, expires_at


# ── Refresh (with token rotation + reuse detection) ─────────────────

async def refresh_session(
    db: AsyncSession,
    refresh_token_str: str,
) -> tuple[AuthUser, str, str, datetime]:
    """Validate a refresh token, rotate it, and issue a new token pair.

    Each refresh token works once. Presenting an already-consumed one
    revokes every session of that user.
    """
    try:
        payload = jwt.decode(
            refresh_token_str,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        raise UnauthorizedException(detail="Invalid or expired refresh token.")

    if payload.get("type") != "refresh":
        raise UnauthorizedException(detail="Invalid token type.")

    result = await db.execute(
        select(UserSession).where(
            UserSession.refresh_token_hash == hash_token(refresh_token_str),
        ),
    )
    session = result.scalars().first()
    if session is None:
        raise UnauthorizedException(detail="Invalid refresh token.")

    if session.is_revoked:
        logger.warning("Refresh token reuse for user %s; revoking all sessions", session.user_id)
        await revoke_all_sessions(db, session.user_id)
        await db.commit()  # revocations persist even though we raise
        raise UnauthorizedException(
            detail="Refresh token reuse detected. All sessions revoked.",
        )

    session.is_revoked = True
    await db.flush()

    user = await db.get(AuthUser, session.user_id)
    if user is None:
        raise UnauthorizedException(detail="User no longer exists.")

    access_token, new_refresh_token, expires_at = await create_session(
        db, user, ip=session.ip_address, user_agent=session.user_agent,
    )
    return user, access_token, new_refresh_token, expires_at


# ── Revoke ──────────────────────────────────────────────────────────

async def revoke_all_sessions(db: AsyncSession, user_id: uuid.UUID) -> None:
    await db.execute(
        update(UserSession)
        .where(UserSession.user_id == user_id, UserSession.is_revoked.is_(False))
        .values(is_revoked=True)
    )
    await db.flush()


async def revoke_session(db: AsyncSession, session_id: uuid.UUID) -> None:
    """Mark a session as revoked."""
    session = await db.get(UserSession, session_id)
    if session:
        session.is_revoked = True
        await db.flush()


# ── Password ────────────────────────────────────────────────────────

async def update_password(db: AsyncSession, user_id: uuid.UUID, password: str) -> AuthUser:
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationException(
            {"password": [
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters."
            ]}
        )
    user = await db.get(AuthUser, user_id)
    if user is None:
        raise UnauthorizedException(detail="User no longer exists.")
    user.password_hash = hash_password(password)
    await db.flush()
    logger.info("Password updated for %s", user.email)
    return user


# ── Profile lookup ──────────────────────────────────────────────────

async def get_employee_profile(db: AsyncSession, user_id: uuid.UUID) -> Optional[Employee]:
    """The Employee row for an auth user, or None when the profile is missing."""
    return await db.get(Employee, user_id)


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
) -> AuthUser:
    user = AuthUser(
        id=uuid.uuid4(),
        email=email.strip().lower(),
        password_hash=hash_password(password),
    )
    db.add(user)
    await db.flush()
    return user
