"""Dashboard router — one read-only endpoint, shaped by the caller's role."""

from typing import Union

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import async_sessionmaker

from grofast.auth.dependencies import get_current_user
from grofast.dashboard.schemas import AdminDashboard, MemberDashboard
from grofast.dashboard.service import DashboardService
from grofast.database import get_session_factory
from grofast.employees.models import Employee

router = APIRouter(prefix="", tags=["dashboard"])


# ── GET /dashboard ──────────────────────────────────────────────────

@router.get("", response_model=Union[AdminDashboard, MemberDashboard])
async def dashboard(
    employee: Employee = Depends(get_current_user),
    factory: async_sessionmaker = Depends(get_session_factory),
):
    """Admin: team attendance, clients, open tasks, pending leaves.
    Member: own tasks, today's check-in, pending leaves.
    Both carry the latest announcement."""
    return await DashboardService.build(factory, employee)
