"""Attendance service layer — daily check-in / check-out.

Rules:
  - one record per employee per day (unique constraint backs the check)
  - check-out only closes an open record for today; it never creates one
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from grofast.attendance.models import Attendance
from grofast.attendance.schemas import AttendanceUpdate, TodayAttendance
from grofast.common.constants import CheckInState
from grofast.common.exceptions import ConflictError, NotFoundException, ValidationException
from grofast.common.filters import ListParams, build_list_query
from grofast.common.timeutil import as_utc, today, utcnow
from grofast.employees.models import Employee

logger = logging.getLogger(__name__)


class AttendanceService:
    """Async attendance operations."""

    @staticmethod
    async def _load(db: AsyncSession, record_id: uuid.UUID) -> Attendance:
        result = await db.execute(
            select(Attendance)
            .where(Attendance.id == record_id)
            .options(selectinload(Attendance.employee))
            .execution_options(populate_existing=True)
        )
        record = result.scalars().first()
        if record is None:
            raise NotFoundException("Attendance", str(record_id))
        return record

    @staticmethod
    async def _todays_record(db: AsyncSession, employee_id: uuid.UUID) -> Optional[Attendance]:
        result = await db.execute(
            select(Attendance)
            .where(Attendance.employee_id == employee_id, Attendance.date == today())
            .options(selectinload(Attendance.employee))
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    # ── Queries ─────────────────────────────────────────────────────

    @staticmethod
    async def list_records(
        db: AsyncSession,
        params: ListParams,
        *,
        actor: Employee,
    ) -> Sequence[Attendance]:
        """Members get their own history; admins everyone's."""
        conditions = [] if actor.is_admin else [Attendance.employee_id == actor.id]
        query = build_list_query(
            Attendance, params, *conditions, default_order="-date",
        ).options(selectinload(Attendance.employee))
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def today_status(db: AsyncSession, *, actor: Employee) -> TodayAttendance:
        record = await AttendanceService._todays_record(db, actor.id)
        if record is None:
            state = CheckInState.not_checked_in
        elif record.check_out is None:
            state = CheckInState.checked_in
        else:
            state = CheckInState.checked_out
        return TodayAttendance.model_validate({"state": state, "record": record}, from_attributes=True)

    # ── Check-in / check-out ────────────────────────────────────────

    @staticmethod
    async def check_in(
        db: AsyncSession,
        *,
        actor: Employee,
        image_url: Optional[str] = None,
    ) -> Attendance:
        if await AttendanceService._todays_record(db, actor.id) is not None:
            raise ConflictError("date", "Already checked in today.")

        record = Attendance(
            employee_id=actor.id,
            date=today(),
            check_in=utcnow(),
            image_url=image_url,
        )
        db.add(record)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("date", "Already checked in today.")
        logger.info("Employee %s checked in", actor.id)
        return await AttendanceService._load(db, record.id)

    @staticmethod
    async def check_out(db: AsyncSession, *, actor: Employee) -> Attendance:
        """Set ``check_out`` on today's open record; 422 when there is none."""
        result = await db.execute(
            update(Attendance)
            .where(
                Attendance.employee_id == actor.id,
                Attendance.date == today(),
                Attendance.check_out.is_(None),
            )
            .values(check_out=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ValidationException(
                {"check_out": ["No open check-in for today. Check in first."]}
            )
        record = await AttendanceService._todays_record(db, actor.id)
        logger.info("Employee %s checked out", actor.id)
        return record

    # ── Admin corrections ───────────────────────────────────────────

    @staticmethod
    async def update_record(
        db: AsyncSession,
        record_id: uuid.UUID,
        data: AttendanceUpdate,
    ) -> Attendance:
        record = await AttendanceService._load(db, record_id)
        changes = data.model_dump(exclude_unset=True)
        if "check_in" in changes and changes["check_in"] is None:
            raise ValidationException({"check_in": ["check_in cannot be cleared"]})
        check_in = changes.get("check_in", record.check_in)
        check_out = changes.get("check_out", record.check_out)
        if check_out is not None and as_utc(check_out) < as_utc(check_in):
            raise ValidationException({"check_out": ["check_out must not precede check_in"]})
        for field, value in changes.items():
            setattr(record, field, value)
        await db.flush()
        return await AttendanceService._load(db, record_id)

    @staticmethod
    async def delete_record(db: AsyncSession, record_id: uuid.UUID) -> None:
        record = await db.get(Attendance, record_id)
        if record is None:
            raise NotFoundException("Attendance", str(record_id))
        await db.delete(record)
        await db.flush()
