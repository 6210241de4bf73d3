"""Dashboard response schemas."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

from grofast.announcements.schemas import AnnouncementOut
from grofast.attendance.schemas import TodayAttendance
from grofast.clients.schemas import ClientOut
from grofast.leave.schemas import LeaveRequestOut
from grofast.tasks.schemas import TaskOut


# ── Admin view ──────────────────────────────────────────────────────

class TeamAttendance(BaseModel):
    total_employees: int
    present: int
    absent: int


class ClientsSummary(BaseModel):
    active: int
    recent: list[ClientOut] = []


class OpenTasksSummary(BaseModel):
    open: int
    recent: list[TaskOut] = []


class PendingLeaveSummary(BaseModel):
    pending: int
    recent: list[LeaveRequestOut] = []


class AdminDashboard(BaseModel):
    view: Literal["admin"] = "admin"
    attendance: Optional[TeamAttendance] = None
    clients: Optional[ClientsSummary] = None
    tasks: Optional[OpenTasksSummary] = None
    leave: Optional[PendingLeaveSummary] = None
    announcement: Optional[AnnouncementOut] = None
    unavailable: list[str] = []


# ── Member view ─────────────────────────────────────────────────────

class MyTasksSummary(BaseModel):
    open: int
    completed: int
    recent: list[TaskOut] = []


class MyLeaveSummary(BaseModel):
    pending: int


class MemberDashboard(BaseModel):
    view: Literal["member"] = "member"
    tasks: Optional[MyTasksSummary] = None
    attendance: Optional[TodayAttendance] = None
    leave: Optional[MyLeaveSummary] = None
    announcement: Optional[AnnouncementOut] = None
    unavailable: list[str] = []
