"""Report response schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from grofast.common.constants import ReportRange


class EmployeeReport(BaseModel):
    employee_id: uuid.UUID
    name: str
    department: Optional[str] = None
    work_updates: int = 0
    learning_updates: int = 0
    attendance_days: int = 0
    total_hours: float = 0.0
    productivity: float = 0.0


class ReportTotals(BaseModel):
    total_employees: int
    total_work_updates: int
    total_learning_updates: int
    total_attendance: int
    avg_productivity: float


class ReportResponse(BaseModel):
    range: ReportRange
    start: datetime
    end: datetime
    employees: list[EmployeeReport]
    totals: ReportTotals
