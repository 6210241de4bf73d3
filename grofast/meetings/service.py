"""Meeting service layer — scheduling with generated meet links."""

from __future__ import annotations

import secrets
import string
import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from grofast.common.exceptions import NotFoundException, ValidationException
from grofast.common.filters import ListParams, build_list_query
from grofast.config import settings
from grofast.employees.models import Employee
from grofast.meetings.models import Meeting
from grofast.meetings.schemas import MeetingCreate, MeetingUpdate


def generate_meet_link(base: Optional[str] = None) -> str:
    """``<base>/abc-def-ghi`` with three random lowercase triplets."""
    groups = (
        "".join(secrets.choice(string.ascii_lowercase) for _ in range(3))
        for _ in range(3)
    )
    return f"{(base or settings.MEET_LINK_BASE).rstrip('/')}/{'-'.join(groups)}"


class MeetingService:
    """Async meeting operations. Writes are admin-only at the router."""

    @staticmethod
    async def _load(db: AsyncSession, meeting_id: uuid.UUID) -> Meeting:
        result = await db.execute(
            select(Meeting)
            .where(Meeting.id == meeting_id)
            .options(selectinload(Meeting.creator))
            .execution_options(populate_existing=True)
        )
        meeting = result.scalars().first()
        if meeting is None:
            raise NotFoundException("Meeting", str(meeting_id))
        return meeting

    @staticmethod
    async def _check_attendees(db: AsyncSession, attendees: list[uuid.UUID]) -> list[str]:
        unique = list(dict.fromkeys(attendees))
        if unique:
            found = await db.execute(
                select(func.count()).select_from(Employee).where(Employee.id.in_(unique))
            )
            if found.scalar() != len(unique):
                raise ValidationException({"attendees": ["Unknown employee in attendees."]})
        return [str(a) for a in unique]

    @staticmethod
    async def list_meetings(db: AsyncSession, params: ListParams) -> Sequence[Meeting]:
        """Ordered by start time; pass ``datetime__from`` for upcoming only."""
        query = build_list_query(
            Meeting, params, default_order="datetime",
        ).options(selectinload(Meeting.creator))
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_meeting(db: AsyncSession, meeting_id: uuid.UUID) -> Meeting:
        return await MeetingService._load(db, meeting_id)

    @staticmethod
    async def create_meeting(
        db: AsyncSession,
        data: MeetingCreate,
        *,
        actor_id: uuid.UUID,
    ) -> Meeting:
        meeting = Meeting(
            title=data.title,
            description=data.description,
            datetime=data.datetime,
            meet_link=data.meet_link or generate_meet_link(),
            attendees=await MeetingService._check_attendees(db, data.attendees),
            created_by=actor_id,
        )
        db.add(meeting)
        await db.flush()
        return await MeetingService._load(db, meeting.id)

    @staticmethod
    async def update_meeting(
        db: AsyncSession,
        meeting_id: uuid.UUID,
        data: MeetingUpdate,
    ) -> Meeting:
        meeting = await MeetingService._load(db, meeting_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)
        if "attendees" in changes:
            changes["attendees"] = await MeetingService._check_attendees(
                db, changes["attendees"] or [],
            )
        if "meet_link" in changes and not changes["meet_link"]:
            changes["meet_link"] = generate_meet_link()
        for field, value in changes.items():
            setattr(meeting, field, value)
        await db.flush()
        return await MeetingService._load(db, meeting_id)

    @staticmethod
    async def delete_meeting(db: AsyncSession, meeting_id: uuid.UUID) -> None:
        meeting = await db.get(Meeting, meeting_id)
        if meeting is None:
            raise NotFoundException("Meeting", str(meeting_id))
        await db.delete(meeting)
        await db.flush()
