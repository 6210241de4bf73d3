"""Attendance Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from grofast.common.constants import CheckInState
from grofast.employees.schemas import EmployeeBrief


class CheckInRequest(BaseModel):
    """``image_url`` references a selfie stored elsewhere."""

    image_url: Optional[str] = Field(None, max_length=2048)


class AttendanceUpdate(BaseModel):
    """Admin correction of a day's record."""

    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    image_url: Optional[str] = Field(None, max_length=2048)


class AttendanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    employee: Optional[EmployeeBrief] = None
    date: date
    check_in: datetime
    check_out: Optional[datetime] = None
    image_url: Optional[str] = None
    duration_minutes: Optional[int] = None
    created_at: datetime


class TodayAttendance(BaseModel):
    state: CheckInState
    record: Optional[AttendanceOut] = None
