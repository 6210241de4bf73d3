"""Employee service layer — directory listing, onboarding, profile edits.

An employee is created together with its login: the ``auth_users`` row and
the ``employees`` row share one id.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth.models import AuthUser
from grofast.auth.service import create_user
from grofast.common.audit import create_audit_entry
from grofast.common.exceptions import ConflictError, ForbiddenException, NotFoundException
from grofast.common.filters import ListParams, build_list_query
from grofast.employees.models import Employee
from grofast.employees.schemas import ADMIN_ONLY_FIELDS, EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)


class EmployeeService:
    """Async CRUD operations for employees."""

    # ── List ────────────────────────────────────────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        params: ListParams,
    ) -> Sequence[Employee]:
        """Active employees by name unless the caller filters on ``is_active``."""
        conditions = []
        if "is_active" not in params.filters:
            conditions.append(Employee.is_active.is_(True))
        query = build_list_query(Employee, params, *conditions, default_order="name")
        result = await db.execute(query)
        return result.scalars().all()

    # ── Get ─────────────────────────────────────────────────────────

    @staticmethod
    async def get_employee(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        data: EmployeeCreate,
        *,
        actor_id: Optional[uuid.UUID],
    ) -> Employee:
        """Create the login and the profile in one transaction."""
        email = data.email.strip().lower()
        existing = await db.execute(select(AuthUser.id).where(AuthUser.email == email))
        if existing.scalar() is not None:
            raise ConflictError("email", f"An account with email '{email}' already exists.")

        user = await create_user(db, email=email, password=data.password)
        employee = Employee(
            id=user.id,
            email=email,
            **data.model_dump(exclude={"email", "password"}),
        )
        db.add(employee)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("email", f"An account with email '{email}' already exists.")

        await create_audit_entry(
            db,
            action="create",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json", exclude={"password"}),
        )
        logger.info("Employee %s created by %s", email, actor_id)
        return employee

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: EmployeeUpdate,
        *,
        actor: Employee,
    ) -> Employee:
        """Partial update.

        Members may edit their own name, phone, department and designation;
        role and active flag are admin-only.
        """
        changes = data.model_dump(exclude_unset=True)

        if not actor.is_admin:
            if actor.id != employee_id:
                raise ForbiddenException(detail="You can only update your own profile.")
            disallowed = ADMIN_ONLY_FIELDS.intersection(changes)
            if disallowed:
                raise ForbiddenException(
                    detail=f"You are not allowed to update: {', '.join(sorted(disallowed))}.",
                )

        employee = await EmployeeService.get_employee(db, employee_id)
        if not changes:
            return employee

        old_values: dict[str, Any] = {}
        for field, value in changes.items():
            old_val = getattr(employee, field, None)
            if hasattr(old_val, "value"):
                old_val = old_val.value
            old_values[field] = old_val
            setattr(employee, field, value)

        await db.flush()
        if ADMIN_ONLY_FIELDS.intersection(changes):
            await create_audit_entry(
                db,
                action="update",
                entity_type="employee",
                entity_id=employee.id,
                actor_id=actor.id,
                old_values=old_values,
                new_values=data.model_dump(mode="json", exclude_unset=True),
            )
        return employee

    # ── Deactivate ──────────────────────────────────────────────────

    @staticmethod
    async def deactivate_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        *,
        actor_id: uuid.UUID,
    ) -> Employee:
        """Soft delete: the row stays, ``is_active`` becomes false."""
        employee = await EmployeeService.get_employee(db, employee_id)
        employee.is_active = False
        await db.flush()
        await create_audit_entry(
            db,
            action="deactivate",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            old_values={"is_active": True},
            new_values={"is_active": False},
        )
        return employee
