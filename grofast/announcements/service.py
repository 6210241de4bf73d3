"""Announcement service layer — the dashboard banner."""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.announcements.models import Announcement
from grofast.announcements.schemas import AnnouncementCreate, AnnouncementUpdate
from grofast.common.exceptions import NotFoundException
from grofast.common.filters import ListParams, build_list_query


class AnnouncementService:

    @staticmethod
    async def list_announcements(
        db: AsyncSession,
        params: ListParams,
    ) -> Sequence[Announcement]:
        result = await db.execute(
            build_list_query(Announcement, params, default_order="-created_at")
        )
        return result.scalars().all()

    @staticmethod
    async def latest_active(db: AsyncSession) -> Optional[Announcement]:
        """The banner shown on every dashboard: newest active announcement."""
        result = await db.execute(
            select(Announcement)
            .where(Announcement.is_active.is_(True))
            .order_by(Announcement.created_at.desc(), Announcement.id.asc())
            .limit(1)
        )
        return result.scalars().first()

    @staticmethod
    async def get_announcement(db: AsyncSession, announcement_id: uuid.UUID) -> Announcement:
        announcement = await db.get(Announcement, announcement_id)
        if announcement is None:
            raise NotFoundException("Announcement", str(announcement_id))
        return announcement

    @staticmethod
    async def create_announcement(
        db: AsyncSession,
        data: AnnouncementCreate,
        *,
        actor_id: uuid.UUID,
    ) -> Announcement:
        announcement = Announcement(**data.model_dump(), created_by=actor_id)
        db.add(announcement)
        await db.flush()
        return announcement

    @staticmethod
    async def update_announcement(
        db: AsyncSession,
        announcement_id: uuid.UUID,
        data: AnnouncementUpdate,
    ) -> Announcement:
        announcement = await AnnouncementService.get_announcement(db, announcement_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(announcement, field, value)
        await db.flush()
        return announcement

    @staticmethod
    async def delete_announcement(db: AsyncSession, announcement_id: uuid.UUID) -> None:
        announcement = await AnnouncementService.get_announcement(db, announcement_id)
        await db.delete(announcement)
        await db.flush()
