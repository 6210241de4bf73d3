"""Meetings router — calendar listing and admin scheduling."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth.dependencies import get_current_user, require_admin
from grofast.common.filters import ListParams
from grofast.database import get_db
from grofast.employees.models import Employee
from grofast.meetings.schemas import MeetingCreate, MeetingOut, MeetingUpdate
from grofast.meetings.service import MeetingService

router = APIRouter(prefix="", tags=["meetings"])


@router.get("", response_model=list[MeetingOut])
async def list_meetings(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await MeetingService.list_meetings(db, params)


@router.get("/{meeting_id}", response_model=MeetingOut)
async def get_meeting(
    meeting_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await MeetingService.get_meeting(db, meeting_id)


@router.post("", response_model=MeetingOut, status_code=201)
async def create_meeting(
    body: MeetingCreate,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Schedule a meeting. A meet link is generated when none is given."""
    return await MeetingService.create_meeting(db, body, actor_id=current_user.id)


@router.patch("/{meeting_id}", response_model=MeetingOut)
async def update_meeting(
    meeting_id: uuid.UUID,
    body: MeetingUpdate,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await MeetingService.update_meeting(db, meeting_id, body)


@router.delete("/{meeting_id}", status_code=204)
async def delete_meeting(
    meeting_id: uuid.UUID,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await MeetingService.delete_meeting(db, meeting_id)
