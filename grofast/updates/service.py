"""Hourly log service — work and learning updates share one set of rules.

  - members read and change only their own rows; admins read everyone's
  - one entry per employee, hour slot and day
"""

from __future__ import annotations

import uuid
from typing import Any, Optional, Sequence, Type, Union

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.common.exceptions import ConflictError, ForbiddenException, NotFoundException
from grofast.common.filters import ListParams, build_list_query
from grofast.common.timeutil import as_utc, day_bounds, utcnow
from grofast.employees.models import Employee
from grofast.updates.models import LearningUpdate, WorkUpdate

HourlyLog = Union[WorkUpdate, LearningUpdate]

_NOT_NULL = frozenset({"hour", "description", "topic"})


class HourlyLogService:
    """Async CRUD for ``WorkUpdate`` and ``LearningUpdate``."""

    @staticmethod
    async def _check_slot_free(
        db: AsyncSession,
        model: Type[HourlyLog],
        *,
        employee_id: uuid.UUID,
        hour: str,
        day_of: Any,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        start, end = day_bounds(as_utc(day_of).date())
        query = select(func.count()).select_from(model).where(
            model.employee_id == employee_id,
            model.hour == hour,
            model.created_at >= start,
            model.created_at <= end,
        )
        if exclude_id is not None:
            query = query.where(model.id != exclude_id)
        taken = await db.execute(query)
        if taken.scalar():
            raise ConflictError("hour", f"The {hour} slot is already logged for that day.")

    @staticmethod
    async def _get_owned(
        db: AsyncSession,
        model: Type[HourlyLog],
        row_id: uuid.UUID,
        actor: Employee,
    ) -> HourlyLog:
        row = await db.get(model, row_id)
        if row is None or (row.employee_id != actor.id and not actor.is_admin):
            raise NotFoundException(model.__name__, str(row_id))
        return row

    # ── Queries ─────────────────────────────────────────────────────

    @staticmethod
    async def list_updates(
        db: AsyncSession,
        model: Type[HourlyLog],
        params: ListParams,
        *,
        actor: Employee,
    ) -> Sequence[HourlyLog]:
        """Newest first; filter ``created_at__from`` / ``created_at__to`` for a day."""
        conditions = [] if actor.is_admin else [model.employee_id == actor.id]
        query = build_list_query(model, params, *conditions, default_order="-created_at")
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_update(
        db: AsyncSession,
        model: Type[HourlyLog],
        row_id: uuid.UUID,
        *,
        actor: Employee,
    ) -> HourlyLog:
        return await HourlyLogService._get_owned(db, model, row_id, actor)

    # ── Writes ──────────────────────────────────────────────────────

    @staticmethod
    async def create_update(
        db: AsyncSession,
        model: Type[HourlyLog],
        data: BaseModel,
        *,
        actor: Employee,
    ) -> HourlyLog:
        values = data.model_dump()
        await HourlyLogService._check_slot_free(
            db, model, employee_id=actor.id, hour=values["hour"], day_of=utcnow(),
        )
        row = model(employee_id=actor.id, **values)
        db.add(row)
        await db.flush()
        return row

    @staticmethod
    async def edit_update(
        db: AsyncSession,
        model: Type[HourlyLog],
        row_id: uuid.UUID,
        data: BaseModel,
        *,
        actor: Employee,
    ) -> HourlyLog:
        row = await HourlyLogService._get_owned(db, model, row_id, actor)
        if row.employee_id != actor.id:
            raise ForbiddenException(detail="You can only edit your own updates.")
        changes = data.model_dump(exclude_unset=True)
        if changes.get("hour") and changes["hour"] != row.hour:
            await HourlyLogService._check_slot_free(
                db,
                model,
                employee_id=actor.id,
                hour=changes["hour"],
                day_of=row.created_at,
                exclude_id=row.id,
            )
        for field, value in changes.items():
            if value is not None or field not in _NOT_NULL:
                setattr(row, field, value)
        await db.flush()
        return row

    @staticmethod
    async def delete_update(
        db: AsyncSession,
        model: Type[HourlyLog],
        row_id: uuid.UUID,
        *,
        actor: Employee,
    ) -> None:
        row = await HourlyLogService._get_owned(db, model, row_id, actor)
        await db.delete(row)
        await db.flush()
