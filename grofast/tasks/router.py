"""Tasks router — Kanban board, CRUD and status moves."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth.dependencies import get_current_user, require_admin
from grofast.common.filters import ListParams
from grofast.database import get_db
from grofast.employees.models import Employee
from grofast.tasks.schemas import TaskBoard, TaskCreate, TaskOut, TaskStatusUpdate, TaskUpdate
from grofast.tasks.service import TaskService

router = APIRouter(prefix="", tags=["tasks"])


@router.get("", response_model=list[TaskOut])
async def list_tasks(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Admins see every task; members only their own."""
    return await TaskService.list_tasks(db, params, actor=current_user)


@router.get("/board", response_model=TaskBoard)
async def task_board(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TaskService.board(db, params, actor=current_user)


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TaskService.get_task(db, task_id, actor=current_user)


@router.post("", response_model=TaskOut, status_code=201)
async def create_task(
    body: TaskCreate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TaskService.create_task(db, body, actor=current_user)


@router.patch("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: uuid.UUID,
    body: TaskUpdate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TaskService.update_task(db, task_id, body, actor=current_user)


@router.patch("/{task_id}/status", response_model=TaskOut)
async def update_task_status(
    task_id: uuid.UUID,
    body: TaskStatusUpdate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TaskService.update_status(db, task_id, body.status, actor=current_user)


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: uuid.UUID,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await TaskService.delete_task(db, task_id)
