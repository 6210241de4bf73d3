"""Task Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from grofast.common.constants import TaskPriority, TaskStatus
from grofast.employees.schemas import EmployeeBrief


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_to: Optional[uuid.UUID] = None
    priority: TaskPriority = TaskPriority.medium
    status: TaskStatus = TaskStatus.pending
    due_date: Optional[date] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_to: Optional[uuid.UUID] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    assigned_to: Optional[uuid.UUID] = None
    assigned_employee: Optional[EmployeeBrief] = None
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[date] = None
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class TaskBoard(BaseModel):
    """Kanban view: the visible task list grouped by status."""

    pending: list[TaskOut] = []
    in_progress: list[TaskOut] = []
    completed: list[TaskOut] = []
