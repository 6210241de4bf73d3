"""Attendance router — check-in/out, today's status, history."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.attendance.schemas import (
    AttendanceOut,
    AttendanceUpdate,
    CheckInRequest,
    TodayAttendance,
)
from grofast.attendance.service import AttendanceService
from grofast.auth.dependencies import get_current_user, require_admin
from grofast.common.filters import ListParams
from grofast.database import get_db
from grofast.employees.models import Employee

router = APIRouter(prefix="", tags=["attendance"])


@router.get("", response_model=list[AttendanceOut])
async def list_attendance(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.list_records(db, params, actor=current_user)


@router.get("/today", response_model=TodayAttendance)
async def today_attendance(
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.today_status(db, actor=current_user)


# ── POST /check-in ──────────────────────────────────────────────────

@router.post("/check-in", response_model=AttendanceOut, status_code=201)
async def check_in(
    body: CheckInRequest,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Open today's record. 409 if one already exists."""
    return await AttendanceService.check_in(db, actor=current_user, image_url=body.image_url)


# ── POST /check-out ─────────────────────────────────────────────────

@router.post("/check-out", response_model=AttendanceOut)
async def check_out(
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Close today's open record. 422 without one."""
    return await AttendanceService.check_out(db, actor=current_user)


@router.post("", response_model=AttendanceOut, status_code=201)
async def create_attendance(
    body: CheckInRequest,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Same as ``/check-in``: a record can only be opened for the caller, today."""
    return await AttendanceService.check_in(db, actor=current_user, image_url=body.image_url)


@router.patch("/{record_id}", response_model=AttendanceOut)
async def update_attendance(
    record_id: uuid.UUID,
    body: AttendanceUpdate,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.update_record(db, record_id, body)


@router.delete("/{record_id}", status_code=204)
async def delete_attendance(
    record_id: uuid.UUID,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await AttendanceService.delete_record(db, record_id)
