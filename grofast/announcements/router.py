"""Announcements router — banner reads for everyone, writes for admins."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.announcements.schemas import (
    AnnouncementCreate,
    AnnouncementOut,
    AnnouncementUpdate,
)
from grofast.announcements.service import AnnouncementService
from grofast.auth.dependencies import get_current_user, require_admin
from grofast.common.filters import ListParams
from grofast.database import get_db
from grofast.employees.models import Employee
from grofast.realtime.hub import EVENT_INSERT, RealtimeHub, get_realtime

router = APIRouter(prefix="", tags=["announcements"])


@router.get("", response_model=list[AnnouncementOut])
async def list_announcements(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AnnouncementService.list_announcements(db, params)


@router.get("/latest", response_model=Optional[AnnouncementOut])
async def latest_announcement(
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AnnouncementService.latest_active(db)


@router.get("/{announcement_id}", response_model=AnnouncementOut)
async def get_announcement(
    announcement_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AnnouncementService.get_announcement(db, announcement_id)


@router.post("", response_model=AnnouncementOut, status_code=201)
async def create_announcement(
    body: AnnouncementCreate,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_realtime),
):
    announcement = await AnnouncementService.create_announcement(
        db, body, actor_id=current_user.id,
    )
    out = AnnouncementOut.model_validate(announcement)
    await db.commit()
    await hub.publish("announcements", EVENT_INSERT, out.model_dump(mode="json"))
    return out


@router.patch("/{announcement_id}", response_model=AnnouncementOut)
async def update_announcement(
    announcement_id: uuid.UUID,
    body: AnnouncementUpdate,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AnnouncementService.update_announcement(db, announcement_id, body)


@router.delete("/{announcement_id}", status_code=204)
async def delete_announcement(
    announcement_id: uuid.UUID,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await AnnouncementService.delete_announcement(db, announcement_id)
