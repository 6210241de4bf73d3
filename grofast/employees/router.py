"""Employees router — team directory and profile management."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth.dependencies import get_current_user, require_admin
from grofast.common.filters import ListParams
from grofast.database import get_db
from grofast.employees.models import Employee
from grofast.employees.schemas import EmployeeCreate, EmployeeOut, EmployeeUpdate
from grofast.employees.service import EmployeeService

router = APIRouter(prefix="", tags=["employees"])


@router.get("", response_model=list[EmployeeOut])
async def list_employees(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.list_employees(db, params)


@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee(
    employee_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.get_employee(db, employee_id)


@router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Onboard a team member. Requires **admin**."""
    return await EmployeeService.create_employee(db, body, actor_id=current_user.id)


@router.patch("/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeUpdate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Own profile for members; any profile, including role, for admins."""
    return await EmployeeService.update_employee(db, employee_id, body, actor=current_user)


@router.delete("/{employee_id}", response_model=EmployeeOut)
async def deactivate_employee(
    employee_id: uuid.UUID,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.deactivate_employee(db, employee_id, actor_id=current_user.id)
