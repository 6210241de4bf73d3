"""Leave Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from grofast.common.constants import LeaveStatus, LeaveType
from grofast.employees.schemas import EmployeeBrief


class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def _check_dates(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class LeaveRequestUpdate(BaseModel):
    """Owner edit of a request that is still pending."""

    leave_type: Optional[LeaveType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = Field(None, max_length=2000)


class LeaveRejectRequest(BaseModel):
    rejection_reason: str = Field(..., min_length=1, max_length=2000)


class LeaveCancelResult(BaseModel):
    id: uuid.UUID
    cancelled: bool


class LeaveRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    employee: Optional[EmployeeBrief] = None
    leave_type: LeaveType
    start_date: date
    end_date: date
    days: int
    reason: Optional[str] = None
    status: LeaveStatus
    rejection_reason: Optional[str] = None
    approved_by: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
