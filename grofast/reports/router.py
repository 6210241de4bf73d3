"""Reports router — admin-only activity report."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import async_sessionmaker

from grofast.auth.dependencies import require_admin
from grofast.common.constants import ReportRange
from grofast.database import get_session_factory
from grofast.employees.models import Employee
from grofast.reports.schemas import ReportResponse
from grofast.reports.service import ReportService

router = APIRouter(prefix="", tags=["reports"])


@router.get("", response_model=ReportResponse)
async def activity_report(
    report_range: ReportRange = Query(
        ReportRange.today, alias="range", description="today, week or month"
    ),
    employee_id: Optional[uuid.UUID] = Query(None, description="Limit to one employee"),
    current_user: Employee = Depends(require_admin),
    factory: async_sessionmaker = Depends(get_session_factory),
):
    """Work updates, learning updates, attendance days, hours and
    productivity per employee, plus totals."""
    return await ReportService.build(factory, report_range, employee_id)
