"""Dashboard service — read-only aggregation across the team modules.

All methods are static async, following the project convention. Each
section is an independent read; ``build`` runs them concurrently and
lists any section that failed under ``unavailable``.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from grofast.announcements.schemas import AnnouncementOut
from grofast.announcements.service import AnnouncementService
from grofast.attendance.models import Attendance
from grofast.attendance.schemas import TodayAttendance
from grofast.attendance.service import AttendanceService
from grofast.clients.models import Client
from grofast.clients.schemas import ClientOut
from grofast.common.constants import LeaveStatus, TaskStatus
from grofast.common.sections import gather_sections
from grofast.common.timeutil import today
from grofast.dashboard.schemas import (
    AdminDashboard,
    ClientsSummary,
    MemberDashboard,
    MyLeaveSummary,
    MyTasksSummary,
    OpenTasksSummary,
    PendingLeaveSummary,
    TeamAttendance,
)
from grofast.employees.models import Employee
from grofast.leave.models import LeaveRequest
from grofast.leave.schemas import LeaveRequestOut
from grofast.tasks.models import Task
from grofast.tasks.schemas import TaskOut

RECENT_CLIENTS = 5
RECENT_TASKS = 5
RECENT_LEAVES = 3


class DashboardService:
    """Async dashboard aggregation queries."""

    # ═════════════════════════════════════════════════════════════════
    # Shared
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def announcement(db: AsyncSession) -> Optional[AnnouncementOut]:
        latest = await AnnouncementService.latest_active(db)
        return AnnouncementOut.model_validate(latest) if latest is not None else None

    # ═════════════════════════════════════════════════════════════════
    # Admin sections
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def team_attendance(db: AsyncSession) -> TeamAttendance:
        """Present = active employees with a record for today."""
        total_q = select(func.count(Employee.id)).where(Employee.is_active.is_(True))
        present_q = (
            select(func.count(distinct(Attendance.employee_id)))
            .join(Employee, Employee.id == Attendance.employee_id)
            .where(Attendance.date == today(), Employee.is_active.is_(True))
        )
        total = (await db.execute(total_q)).scalar() or 0
        present = (await db.execute(present_q)).scalar() or 0
        return TeamAttendance(
            total_employees=total,
            present=present,
            absent=max(total - present, 0),
        )

    @staticmethod
    async def clients(db: AsyncSession) -> ClientsSummary:
        active = (
            await db.execute(
                select(func.count(Client.id)).where(Client.is_active.is_(True))
            )
        ).scalar() or 0
        recent = await db.execute(
            select(Client)
            .where(Client.is_active.is_(True))
            .order_by(Client.created_at.desc(), Client.id.asc())
            .limit(RECENT_CLIENTS)
        )
        return ClientsSummary(
            active=active,
            recent=[ClientOut.model_validate(c) for c in recent.scalars().all()],
        )

    @staticmethod
    async def open_tasks(db: AsyncSession) -> OpenTasksSummary:
        open_count = (
            await db.execute(
                select(func.count(Task.id)).where(Task.status != TaskStatus.completed)
            )
        ).scalar() or 0
        recent = await db.execute(
            select(Task)
            .where(Task.status != TaskStatus.completed)
            .options(selectinload(Task.assigned_employee))
            .order_by(Task.created_at.desc(), Task.id.asc())
            .limit(RECENT_TASKS)
        )
        return OpenTasksSummary(
            open=open_count,
            recent=[TaskOut.model_validate(t) for t in recent.scalars().all()],
        )

    @staticmethod
    async def pending_leaves(db: AsyncSession) -> PendingLeaveSummary:
        pending = (
            await db.execute(
                select(func.count(LeaveRequest.id)).where(
                    LeaveRequest.status == LeaveStatus.pending
                )
            )
        ).scalar() or 0
        recent = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.status == LeaveStatus.pending)
            .options(selectinload(LeaveRequest.employee))
            .order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.asc())
            .limit(RECENT_LEAVES)
        )
        return PendingLeaveSummary(
            pending=pending,
            recent=[LeaveRequestOut.model_validate(r) for r in recent.scalars().all()],
        )

    # ═════════════════════════════════════════════════════════════════
    # Member sections
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def my_tasks(db: AsyncSession, employee: Employee) -> MyTasksSummary:
        counts = await db.execute(
            select(Task.status, func.count(Task.id))
            .where(Task.assigned_to == employee.id)
            .group_by(Task.status)
        )
        by_status = {status: count for status, count in counts.all()}
        completed = by_status.get(TaskStatus.completed, 0)
        recent = await db.execute(
            select(Task)
            .where(Task.assigned_to == employee.id)
            .options(selectinload(Task.assigned_employee))
            .order_by(Task.created_at.desc(), Task.id.asc())
            .limit(RECENT_TASKS)
        )
        return MyTasksSummary(
            open=sum(by_status.values()) - completed,
            completed=completed,
            recent=[TaskOut.model_validate(t) for t in recent.scalars().all()],
        )

    @staticmethod
    async def my_attendance(db: AsyncSession, employee: Employee) -> TodayAttendance:
        return await AttendanceService.today_status(db, actor=employee)

    @staticmethod
    async def my_leaves(db: AsyncSession, employee: Employee) -> MyLeaveSummary:
        pending = (
            await db.execute(
                select(func.count(LeaveRequest.id)).where(
                    LeaveRequest.employee_id == employee.id,
                    LeaveRequest.status == LeaveStatus.pending,
                )
            )
        ).scalar() or 0
        return MyLeaveSummary(pending=pending)

    # ═════════════════════════════════════════════════════════════════
    # GET /dashboard
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def build(
        factory: async_sessionmaker,
        employee: Employee,
    ) -> AdminDashboard | MemberDashboard:
        """Admin or member view, depending on the caller's role."""
        if employee.is_admin:
            results, failed = await gather_sections(factory, {
                "attendance": DashboardService.team_attendance,
                "clients": DashboardService.clients,
                "tasks": DashboardService.open_tasks,
                "leave": DashboardService.pending_leaves,
                "announcement": DashboardService.announcement,
            })
            return AdminDashboard(**results, unavailable=failed)

        results, failed = await gather_sections(factory, {
            "tasks": lambda db: DashboardService.my_tasks(db, employee),
            "attendance": lambda db: DashboardService.my_attendance(db, employee),
            "leave": lambda db: DashboardService.my_leaves(db, employee),
            "announcement": DashboardService.announcement,
        })
        return MemberDashboard(**results, unavailable=failed)
