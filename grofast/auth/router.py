"""Auth router — password sign-in, token refresh, sign-out, session, password."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth import service
from grofast.auth.dependencies import Identity, client_ip, get_current_identity
from grofast.auth.models import AuthUser
from grofast.auth.schemas import (
    AuthUserOut,
    PasswordUpdateRequest,
    RefreshRequest,
    SessionResponse,
    SignInRequest,
    TokenResponse,
)
from grofast.common.rate_limit import SIGN_IN_LIMIT, limiter
from grofast.common.timeutil import as_utc, utcnow
from grofast.config import settings
from grofast.database import get_db
from grofast.employees.schemas import EmployeeOut

router = APIRouter(prefix="", tags=["auth"])


def _user_out(user: AuthUser) -> AuthUserOut:
    return AuthUserOut(id=user.id, email=user.email, last_sign_in_at=user.last_sign_in_at)


def _token_response(user: AuthUser, access: str, refresh: str, expires_at) -> TokenResponse:
    return TokenResponse(
        access_token=access,
        refresh_token=refresh,
        expires_in=settings.ACCESS_TOKEN_EXPIRY_MINUTES * 60,
        expires_at=expires_at,
        user=_user_out(user),
    )


# ── POST /sign-in ───────────────────────────────────────────────────

@router.post("/sign-in", response_model=TokenResponse)
@limiter.limit(SIGN_IN_LIMIT)
async def sign_in(
    request: Request,
    body: SignInRequest,
    db: AsyncSession = Depends(get_db),
):
    user, access, refresh, expires_at = await service.sign_in(
        db,
        body.email,
        body.password,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return _token_response(user, access, refresh, expires_at)


# ── POST /refresh ───────────────────────────────────────────────────

@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    user, access, new_refresh, expires_at = await service.refresh_session(db, body.refresh_token)
    return _token_response(user, access, new_refresh, expires_at)


# ── POST /sign-out ──────────────────────────────────────────────────

@router.post("/sign-out")
async def sign_out(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    await service.revoke_session(db, identity.session.id)
    return {"message": "Signed out successfully"}


# ── GET /session ────────────────────────────────────────────────────

@router.get("/session", response_model=SessionResponse)
async def get_session(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """The live session and, when one exists, the caller's Employee profile."""
    employee = await service.get_employee_profile(db, identity.user.id)
    return SessionResponse(
        user=_user_out(identity.user),
        expires_at=as_utc(identity.session.expires_at) or utcnow(),
        employee=EmployeeOut.model_validate(employee) if employee else None,
    )


# ── PUT /password ───────────────────────────────────────────────────

@router.put("/password")
async def update_password(
    body: PasswordUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    await service.update_password(db, identity.user.id, body.password)
    return {"message": "Password updated successfully"}
