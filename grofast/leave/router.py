"""Leave router — apply, my leaves, cancel, admin approval queue.

Approve and reject require the **admin** role.
"""

import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth.dependencies import client_ip, get_current_user, require_admin
from grofast.common.filters import ListParams
from grofast.database import get_db
from grofast.employees.models import Employee
from grofast.leave.schemas import (
    LeaveCancelResult,
    LeaveRejectRequest,
    LeaveRequestCreate,
    LeaveRequestOut,
    LeaveRequestUpdate,
)
from grofast.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])


@router.get("", response_model=list[LeaveRequestOut])
async def list_leave_requests(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.list_requests(db, params, actor=current_user)


@router.get("/{request_id}", response_model=LeaveRequestOut)
async def get_leave_request(
    request_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_request(db, request_id, actor=current_user)


# ── POST / — apply ──────────────────────────────────────────────────

@router.post("", response_model=LeaveRequestOut, status_code=201)
async def apply_leave(
    body: LeaveRequestCreate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit a request for the caller; it starts as ``pending``."""
    return await LeaveService.apply(db, body, actor=current_user)


@router.patch("/{request_id}", response_model=LeaveRequestOut)
async def update_leave_request(
    request_id: uuid.UUID,
    body: LeaveRequestUpdate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.update_pending(db, request_id, body, actor=current_user)


# ── DELETE /{id} — cancel ───────────────────────────────────────────

@router.delete("/{request_id}", response_model=LeaveCancelResult)
async def cancel_leave_request(
    request_id: uuid.UUID,
    request: Request,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Withdraw a pending request. Decided requests report ``cancelled: false``."""
    cancelled = await LeaveService.cancel(
        db, request_id, actor=current_user, ip_address=client_ip(request),
    )
    return LeaveCancelResult(id=request_id, cancelled=cancelled)


# ── POST /{id}/approve, /{id}/reject ────────────────────────────────

@router.post("/{request_id}/approve", response_model=LeaveRequestOut)
async def approve_leave(
    request_id: uuid.UUID,
    request: Request,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.approve(
        db, request_id, approver_id=current_user.id, ip_address=client_ip(request),
    )


@router.post("/{request_id}/reject", response_model=LeaveRequestOut)
async def reject_leave(
    request_id: uuid.UUID,
    body: LeaveRejectRequest,
    request: Request,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.reject(
        db,
        request_id,
        approver_id=current_user.id,
        rejection_reason=body.rejection_reason,
        ip_address=client_ip(request),
    )
