"""Task service layer — Kanban board operations.

Members see and edit only the tasks assigned to them; admins see all.
Assigning work to someone else and deleting tasks are admin-only.
"""

from __future__ import annotations

import uuid
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from grofast.common.constants import TaskStatus
from grofast.common.exceptions import ForbiddenException, NotFoundException
from grofast.common.filters import ListParams, build_list_query
from grofast.employees.models import Employee
from grofast.tasks.models import Task
from grofast.tasks.schemas import TaskBoard, TaskCreate, TaskOut, TaskUpdate


class TaskService:
    """Async task CRUD with per-role visibility."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _visibility(actor: Employee) -> list:
        if actor.is_admin:
            return []
        return [Task.assigned_to == actor.id]

    @staticmethod
    async def _load(db: AsyncSession, task_id: uuid.UUID, actor: Employee) -> Task:
        """Fetch one visible task with its assignee; invisible rows are 404."""
        result = await db.execute(
            select(Task)
            .where(Task.id == task_id, *TaskService._visibility(actor))
            .options(selectinload(Task.assigned_employee))
            .execution_options(populate_existing=True)
        )
        task = result.scalars().first()
        if task is None:
            raise NotFoundException("Task", str(task_id))
        return task

    @staticmethod
    def _check_assignee(actor: Employee, assigned_to: uuid.UUID | None) -> None:
        if not actor.is_admin and assigned_to is not None and assigned_to != actor.id:
            raise ForbiddenException(detail="Only admins can assign tasks to other employees.")

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_tasks(
        db: AsyncSession,
        params: ListParams,
        *,
        actor: Employee,
    ) -> Sequence[Task]:
        query = build_list_query(
            Task, params, *TaskService._visibility(actor), default_order="-created_at",
        ).options(selectinload(Task.assigned_employee))
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_task(db: AsyncSession, task_id: uuid.UUID, *, actor: Employee) -> Task:
        return await TaskService._load(db, task_id, actor)

    @staticmethod
    async def board(db: AsyncSession, params: ListParams, *, actor: Employee) -> TaskBoard:
        """Group the visible list by status; columns carry no state of their own."""
        tasks = await TaskService.list_tasks(db, params, actor=actor)
        columns: dict[str, list[TaskOut]] = {status.value: [] for status in TaskStatus}
        for task in tasks:
            columns[task.status.value].append(TaskOut.model_validate(task))
        return TaskBoard(**columns)

    # ─────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_task(db: AsyncSession, data: TaskCreate, *, actor: Employee) -> Task:
        TaskService._check_assignee(actor, data.assigned_to)
        values = data.model_dump()
        if not actor.is_admin:
            values["assigned_to"] = actor.id
        task = Task(**values, created_by=actor.id)
        db.add(task)
        await db.flush()
        return await TaskService._load(db, task.id, actor)

    @staticmethod
    async def update_task(
        db: AsyncSession,
        task_id: uuid.UUID,
        data: TaskUpdate,
        *,
        actor: Employee,
    ) -> Task:
        task = await TaskService._load(db, task_id, actor)
        changes = data.model_dump(exclude_unset=True)
        if "assigned_to" in changes:
            TaskService._check_assignee(actor, changes["assigned_to"])
            if not actor.is_admin and changes["assigned_to"] is None:
                raise ForbiddenException(detail="Only admins can unassign tasks.")
        for field, value in changes.items():
            setattr(task, field, value)
        await db.flush()
        return await TaskService._load(db, task.id, actor)

    @staticmethod
    async def update_status(
        db: AsyncSession,
        task_id: uuid.UUID,
        status: TaskStatus,
        *,
        actor: Employee,
    ) -> Task:
        """Single-field update used by the board's drag and drop."""
        task = await TaskService._load(db, task_id, actor)
        task.status = status
        await db.flush()
        return await TaskService._load(db, task.id, actor)

    @staticmethod
    async def delete_task(db: AsyncSession, task_id: uuid.UUID) -> None:
        task = await db.get(Task, task_id)
        if task is None:
            raise NotFoundException("Task", str(task_id))
        await db.delete(task)
        await db.flush()
