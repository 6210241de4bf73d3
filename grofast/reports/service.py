"""Report service — per-employee activity over today, the last week or this month.

Productivity is ``(work updates + learning updates) / max(attendance days, 1)``
rounded to two places; total hours sum closed attendance records and are
rounded to one place.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from grofast.attendance.models import Attendance
from grofast.common.constants import ReportRange
from grofast.common.exceptions import AppException, NotFoundException
from grofast.common.sections import gather_sections
from grofast.common.timeutil import day_bounds, minutes_between, utcnow
from grofast.employees.models import Employee
from grofast.reports.schemas import EmployeeReport, ReportResponse, ReportTotals
from grofast.updates.models import LearningUpdate, WorkUpdate


def range_bounds(
    report_range: ReportRange,
    now: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """``today``: the current UTC day. ``week``: the last seven days up to
    now. ``month``: the first of the month up to now."""
    now = now or utcnow()
    if report_range == ReportRange.today:
        return day_bounds(now.date())
    if report_range == ReportRange.week:
        return now - timedelta(days=7), now
    month_start, _ = day_bounds(now.date().replace(day=1))
    return month_start, now


def productivity(work: int, learning: int, attendance_days: int) -> float:
    return round((work + learning) / max(attendance_days, 1), 2)


class ReportService:
    """Async report aggregation."""

    @staticmethod
    async def _employees(
        db: AsyncSession,
        employee_id: Optional[uuid.UUID],
    ) -> list[tuple[uuid.UUID, str, Optional[str]]]:
        query = select(Employee.id, Employee.name, Employee.department).order_by(
            Employee.name.asc(), Employee.id.asc()
        )
        if employee_id is not None:
            query = query.where(Employee.id == employee_id)
        result = await db.execute(query)
        return [tuple(row) for row in result.all()]

    @staticmethod
    async def _count_by_employee(
        db: AsyncSession,
        model,
        start: datetime,
        end: datetime,
        employee_id: Optional[uuid.UUID],
    ) -> dict[uuid.UUID, int]:
        query = (
            select(model.employee_id, func.count(model.id))
            .where(model.created_at >= start, model.created_at <= end)
            .group_by(model.employee_id)
        )
        if employee_id is not None:
            query = query.where(model.employee_id == employee_id)
        result = await db.execute(query)
        return {emp_id: count for emp_id, count in result.all()}

    @staticmethod
    async def _attendance(
        db: AsyncSession,
        start: datetime,
        end: datetime,
        employee_id: Optional[uuid.UUID],
    ) -> dict[uuid.UUID, tuple[int, int]]:
        """``employee_id -> (attendance days, worked minutes)``."""
        query = select(
            Attendance.employee_id, Attendance.check_in, Attendance.check_out
        ).where(Attendance.created_at >= start, Attendance.created_at <= end)
        if employee_id is not None:
            query = query.where(Attendance.employee_id == employee_id)
        result = await db.execute(query)

        days: dict[uuid.UUID, int] = defaultdict(int)
        minutes: dict[uuid.UUID, int] = defaultdict(int)
        for emp_id, check_in, check_out in result.all():
            days[emp_id] += 1
            minutes[emp_id] += minutes_between(check_in, check_out) or 0
        return {emp_id: (days[emp_id], minutes[emp_id]) for emp_id in days}

    # ═════════════════════════════════════════════════════════════════
    # GET /reports
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def build(
        factory: async_sessionmaker,
        report_range: ReportRange,
        employee_id: Optional[uuid.UUID] = None,
    ) -> ReportResponse:
        start, end = range_bounds(report_range)

        results, failed = await gather_sections(factory, {
            "employees": lambda db: ReportService._employees(db, employee_id),
            "work": lambda db: ReportService._count_by_employee(
                db, WorkUpdate, start, end, employee_id
            ),
            "learning": lambda db: ReportService._count_by_employee(
                db, LearningUpdate, start, end, employee_id
            ),
            "attendance": lambda db: ReportService._attendance(db, start, end, employee_id),
        })
        if failed:
            raise AppException(
                status_code=503,
                error_type="report-unavailable",
                title="Report Unavailable",
                detail=f"Could not read: {', '.join(failed)}.",
            )

        employees = results["employees"]
        if employee_id is not None and not employees:
            raise NotFoundException("Employee", str(employee_id))

        work, learning, attendance = results["work"], results["learning"], results["attendance"]
        rows: list[EmployeeReport] = []
        for emp_id, name, department in employees:
            days, minutes = attendance.get(emp_id, (0, 0))
            emp_work = work.get(emp_id, 0)
            emp_learning = learning.get(emp_id, 0)
            rows.append(
                EmployeeReport(
                    employee_id=emp_id,
                    name=name,
                    department=department,
                    work_updates=emp_work,
                    learning_updates=emp_learning,
                    attendance_days=days,
                    total_hours=round(minutes / 60, 1),
                    productivity=productivity(emp_work, emp_learning, days),
                )
            )

        totals = ReportTotals(
            total_employees=len(rows),
            total_work_updates=sum(work.values()),
            total_learning_updates=sum(learning.values()),
            total_attendance=sum(days for days, _ in attendance.values()),
            avg_productivity=round(
                sum(r.productivity for r in rows) / max(len(rows), 1), 2
            ),
        )
        return ReportResponse(
            range=report_range,
            start=start,
            end=end,
            employees=rows,
            totals=totals,
        )
