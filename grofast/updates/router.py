"""Work-update and learning-update routers."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth.dependencies import get_current_user
from grofast.common.filters import ListParams
from grofast.database import get_db
from grofast.employees.models import Employee
from grofast.updates.models import LearningUpdate, WorkUpdate
from grofast.updates.schemas import (
    LearningUpdateCreate,
    LearningUpdateEdit,
    LearningUpdateOut,
    WorkUpdateCreate,
    WorkUpdateEdit,
    WorkUpdateOut,
)
from grofast.updates.service import HourlyLogService

work_updates_router = APIRouter(prefix="", tags=["updates"])
learning_updates_router = APIRouter(prefix="", tags=["updates"])


# ═════════════════════════════════════════════════════════════════════
# /work-updates
# ═════════════════════════════════════════════════════════════════════


@work_updates_router.get("", response_model=list[WorkUpdateOut])
async def list_work_updates(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HourlyLogService.list_updates(db, WorkUpdate, params, actor=current_user)


@work_updates_router.get("/{update_id}", response_model=WorkUpdateOut)
async def get_work_update(
    update_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HourlyLogService.get_update(db, WorkUpdate, update_id, actor=current_user)


@work_updates_router.post("", response_model=WorkUpdateOut, status_code=201)
async def create_work_update(
    body: WorkUpdateCreate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Log one hour slot of work for today. 409 if the slot is taken."""
    return await HourlyLogService.create_update(db, WorkUpdate, body, actor=current_user)


@work_updates_router.patch("/{update_id}", response_model=WorkUpdateOut)
async def edit_work_update(
    update_id: uuid.UUID,
    body: WorkUpdateEdit,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HourlyLogService.edit_update(db, WorkUpdate, update_id, body, actor=current_user)


@work_updates_router.delete("/{update_id}", status_code=204)
async def delete_work_update(
    update_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await HourlyLogService.delete_update(db, WorkUpdate, update_id, actor=current_user)


# ═════════════════════════════════════════════════════════════════════
# /learning-updates
# ═════════════════════════════════════════════════════════════════════


@learning_updates_router.get("", response_model=list[LearningUpdateOut])
async def list_learning_updates(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HourlyLogService.list_updates(db, LearningUpdate, params, actor=current_user)


@learning_updates_router.get("/{update_id}", response_model=LearningUpdateOut)
async def get_learning_update(
    update_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HourlyLogService.get_update(db, LearningUpdate, update_id, actor=current_user)


@learning_updates_router.post("", response_model=LearningUpdateOut, status_code=201)
async def create_learning_update(
    body: LearningUpdateCreate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HourlyLogService.create_update(db, LearningUpdate, body, actor=current_user)


@learning_updates_router.patch("/{update_id}", response_model=LearningUpdateOut)
async def edit_learning_update(
    update_id: uuid.UUID,
    body: LearningUpdateEdit,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HourlyLogService.edit_update(
        db, LearningUpdate, update_id, body, actor=current_user,
    )


@learning_updates_router.delete("/{update_id}", status_code=204)
async def delete_learning_update(
    update_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await HourlyLogService.delete_update(db, LearningUpdate, update_id, actor=current_user)
